"""OpenTelemetry tracing for B2 client operations.

Spans are emitted only when B2_OTEL_ENABLED is set to "1"/"true"/"yes".
A tracer provider may be installed with configure_tracing(); otherwise the
global OpenTelemetry provider is used.

Security:
    - Never export tokens, application keys or Authorization headers
    - File names are exported as SHA256 hashes only
"""

from __future__ import annotations

import functools
import hashlib
import inspect
import logging
import os
from collections.abc import Callable
from typing import Any, TypeVar, cast

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

TRACER_NAME = "b2client"

_tracer_provider: Any = None


def _get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    val = os.environ.get(key, "").strip().lower()
    if val in ("1", "true", "yes"):
        return True
    if val in ("0", "false", "no", ""):
        return default
    return default


def is_tracing_enabled() -> bool:
    """Check if OpenTelemetry tracing is enabled."""
    return _get_env_bool("B2_OTEL_ENABLED", False)


def configure_tracing(tracer_provider: Any = None) -> None:
    """Install the tracer provider used for client spans.

    Args:
        tracer_provider: An opentelemetry TracerProvider, or None to fall
            back to the global provider.
    """
    global _tracer_provider
    _tracer_provider = tracer_provider


def _get_tracer() -> Any:
    from opentelemetry import trace

    return trace.get_tracer(TRACER_NAME, tracer_provider=_tracer_provider)


def _safe_attributes(operation: str, arguments: dict[str, Any]) -> dict[str, Any]:
    attrs: dict[str, Any] = {"b2.operation": operation}
    file_id = arguments.get("file_id")
    if file_id:
        attrs["b2.file_id"] = file_id
    file_name = arguments.get("file_name")
    if file_name:
        # SECURITY: file names may carry user data; export a hash only.
        attrs["b2.file_name_sha256"] = hashlib.sha256(file_name.encode("utf-8")).hexdigest()
    file_content = arguments.get("file_content")
    if file_content is not None:
        attrs["b2.content_length"] = len(file_content)
    return attrs


def _bind_arguments(
    func: Callable[..., Any],
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
) -> dict[str, Any]:
    try:
        bound = inspect.signature(func).bind(*args, **kwargs)
    except TypeError:
        return {}
    return dict(bound.arguments)


def _record_error(span: Any, error: Exception) -> None:
    span.set_attribute("error", True)
    span.set_attribute("error.type", type(error).__name__)
    status_code = getattr(error, "status_code", None)
    if status_code is not None:
        span.set_attribute("http.status_code", status_code)


def traced_b2_operation(operation: str) -> Callable[[F], F]:
    """Decorator to trace a client operation with OpenTelemetry.

    Works on both plain methods and coroutine methods. Emits a span named
    ``b2client.<operation>`` with safe attributes only.

    Args:
        operation: Operation name (e.g. "authorize", "upload", "delete").

    Returns:
        Decorated function that emits spans when tracing is enabled.
    """
    span_name = f"{TRACER_NAME}.{operation}"

    def decorator(func: F) -> F:
        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                if not is_tracing_enabled():
                    return await func(*args, **kwargs)

                attrs = _safe_attributes(operation, _bind_arguments(func, args, kwargs))
                with _get_tracer().start_as_current_span(span_name, attributes=attrs) as span:
                    try:
                        return await func(*args, **kwargs)
                    except Exception as e:
                        _record_error(span, e)
                        raise

            return cast(F, async_wrapper)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            if not is_tracing_enabled():
                return func(*args, **kwargs)

            attrs = _safe_attributes(operation, _bind_arguments(func, args, kwargs))
            with _get_tracer().start_as_current_span(span_name, attributes=attrs) as span:
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    _record_error(span, e)
                    raise

        return cast(F, wrapper)

    return decorator
