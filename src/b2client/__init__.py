"""Backblaze B2 native API client.

Provides account authorization, upload, download, file info lookup and file
version deletion over an injected httpx transport, plus an append-only
activity log.

Clients:
- B2Client: synchronous, over httpx.Client
- AsyncB2Client: asynchronous, over httpx.AsyncClient

Environment Variables:
    B2_KEY_ID, B2_APPLICATION_KEY, B2_BUCKET_ID: Credentials and target bucket
    B2_API_BASE_URL: Authorization base URL (default: https://api.backblazeb2.com/b2api/v2/)
    B2_TIMEOUT_SECONDS: Default request timeout (default: 30)
    B2_ACTIVITY_LOG_LEVEL, B2_ACTIVITY_LOG_PATH: Activity log settings
    B2_OTEL_ENABLED: Set to "1" to emit OpenTelemetry spans
"""

from b2client.activity_log import ActivityLog, ActivityLogHandler, LogLevel, load_activity_log
from b2client.async_client import AsyncB2Client
from b2client.client import B2Client
from b2client.config import B2Config, load_b2_config
from b2client.errors import (
    ActivityLogError,
    AuthorizationError,
    B2ConfigError,
    B2Error,
    B2TransportError,
    DeleteError,
    InvalidLogLevel,
    MetadataError,
    NotAuthorizedError,
    UploadAuthorizationError,
    UploadError,
)
from b2client.models import (
    DeletedFileVersion,
    DownloadStream,
    FileInfo,
    SessionState,
    UploadAuthorization,
    UploadedFile,
)

__version__ = "1.0.0"
__all__ = [
    "B2Client",
    "AsyncB2Client",
    "B2Config",
    "load_b2_config",
    "ActivityLog",
    "ActivityLogHandler",
    "LogLevel",
    "load_activity_log",
    "SessionState",
    "UploadAuthorization",
    "UploadedFile",
    "FileInfo",
    "DeletedFileVersion",
    "DownloadStream",
    "B2Error",
    "NotAuthorizedError",
    "B2TransportError",
    "AuthorizationError",
    "UploadAuthorizationError",
    "UploadError",
    "MetadataError",
    "DeleteError",
    "B2ConfigError",
    "InvalidLogLevel",
    "ActivityLogError",
]
