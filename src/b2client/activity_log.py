"""Activity log for B2 client operations.

Appends timestamped records to a plain-text log file and, at the highest
level, echoes them to the console in yellow.

Record format (one per log() call):
    <locale-formatted timestamp>
    <message>
    -------------------------------------

Design requirements:
- Append-only: never truncate/overwrite
- Fail closed: any IO failure raises ActivityLogError
- Serialized: concurrent callers produce whole, non-interleaved records

Environment Variables:
    B2_ACTIVITY_LOG_LEVEL: "none", "medium" or "high" (default: "none")
    B2_ACTIVITY_LOG_PATH: Log file path (default: ./BackblazeLogs.txt)
"""

from __future__ import annotations

import logging
import os
import sys
import threading
from collections.abc import Callable
from datetime import datetime
from enum import IntEnum
from pathlib import Path
from typing import Final, TextIO

from colorama import Fore, Style, just_fix_windows_console

from b2client.errors import ActivityLogError, InvalidLogLevel

ACTIVITY_LOG_LEVEL_ENV: Final[str] = "B2_ACTIVITY_LOG_LEVEL"
ACTIVITY_LOG_PATH_ENV: Final[str] = "B2_ACTIVITY_LOG_PATH"
DEFAULT_LOG_FILE_NAME: Final[str] = "BackblazeLogs.txt"
RECORD_SEPARATOR: Final[str] = "-------------------------------------"


class LogLevel(IntEnum):
    """Activity log verbosity, fixed at construction."""

    NONE = 0
    MEDIUM = 1
    HIGH = 2


Sink = Callable[["ActivityLog", str, str], None]


def _write_file(log: ActivityLog, timestamp: str, message: str) -> None:
    log._append_record(timestamp, message)


def _write_console(log: ActivityLog, timestamp: str, message: str) -> None:
    log._echo(message)


_SINKS_BY_LEVEL: Final[dict[LogLevel, tuple[Sink, ...]]] = {
    LogLevel.NONE: (),
    LogLevel.MEDIUM: (_write_file,),
    LogLevel.HIGH: (_write_file, _write_console),
}


class ActivityLog:
    """Append-only activity log with level-selected sinks.

    The level picks, once, an ordered tuple of sinks: nothing for NONE, the
    log file for MEDIUM, the log file then the console for HIGH.
    """

    def __init__(
        self,
        level: LogLevel | int,
        file_path: str | Path = DEFAULT_LOG_FILE_NAME,
        console: TextIO | None = None,
    ) -> None:
        """Initialize the activity log.

        Args:
            level: LogLevel member or its integer value.
            file_path: Log file, created on first write. Prior content is kept.
            console: Stream for HIGH-level echoes (default: sys.stdout at write time).

        Raises:
            InvalidLogLevel: If level is not a defined LogLevel.
        """
        if isinstance(level, bool):
            raise InvalidLogLevel(level)
        try:
            self._level = LogLevel(level)
        except (ValueError, TypeError) as e:
            raise InvalidLogLevel(level) from e

        self._file_path = Path(file_path)
        self._console = console
        self._sinks = _SINKS_BY_LEVEL[self._level]
        self._lock = threading.Lock()
        if _write_console in self._sinks:
            just_fix_windows_console()

    @property
    def level(self) -> LogLevel:
        return self._level

    @property
    def file_path(self) -> Path:
        """Return the configured file path."""
        return self._file_path

    def log(self, message: str) -> None:
        """Write one record to every sink selected by the level.

        Raises:
            ActivityLogError: If the log file cannot be written.
        """
        if not self._sinks:
            return

        timestamp = datetime.now().strftime("%c")
        with self._lock:
            for sink in self._sinks:
                sink(self, timestamp, message)

    def _append_record(self, timestamp: str, message: str) -> None:
        record = f"{timestamp}\n{message}\n{RECORD_SEPARATOR}\n"
        try:
            parent = self._file_path.parent
            if not parent.exists():
                parent.mkdir(parents=True, exist_ok=True)
            with open(self._file_path, mode="a", encoding="utf-8") as f:
                f.write(record)
        except OSError as e:
            raise ActivityLogError(
                f"Failed to write activity log record to {self._file_path}: {e}"
            ) from e

    def _echo(self, message: str) -> None:
        stream = self._console if self._console is not None else sys.stdout
        stream.write(f"{Fore.YELLOW}{message}{Style.RESET_ALL}\n")
        stream.write(f"{Fore.YELLOW}{RECORD_SEPARATOR}{Style.RESET_ALL}\n")
        stream.flush()


class ActivityLogHandler(logging.Handler):
    """logging.Handler that forwards formatted records to an ActivityLog.

    Attach it to the "b2client" logger to capture the client's request and
    response summaries in the activity log.
    """

    def __init__(self, activity_log: ActivityLog, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.activity_log = activity_log

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.activity_log.log(self.format(record))
        except Exception:
            self.handleError(record)


def _parse_level(raw: str) -> LogLevel:
    value = raw.strip()
    if not value:
        return LogLevel.NONE
    if value.isdigit():
        try:
            return LogLevel(int(value))
        except ValueError as e:
            raise InvalidLogLevel(raw) from e
    try:
        return LogLevel[value.upper()]
    except KeyError as e:
        raise InvalidLogLevel(raw) from e


def load_activity_log(console: TextIO | None = None) -> ActivityLog:
    """Factory for the activity log configured by environment variables.

    Returns:
        ActivityLog at B2_ACTIVITY_LOG_LEVEL writing to B2_ACTIVITY_LOG_PATH.

    Raises:
        InvalidLogLevel: If B2_ACTIVITY_LOG_LEVEL names no defined level.
    """
    level = _parse_level(os.environ.get(ACTIVITY_LOG_LEVEL_ENV, ""))
    file_path = os.environ.get(ACTIVITY_LOG_PATH_ENV, "").strip() or DEFAULT_LOG_FILE_NAME
    return ActivityLog(level, file_path=file_path, console=console)
