"""Synchronous B2 native API client.

Usage:
    >>> config = load_b2_config()
    >>> with B2Client(config) as client:
    ...     client.authorize()
    ...     file_id = client.upload("photo.png", data, content_type="image/png")
    ...     body = client.download(file_id).read()

authorize() must succeed before any other call. The session it captures is
reused until the process ends or authorize() runs again.
"""

from __future__ import annotations

import logging
import threading
from types import TracebackType

import httpx

from b2client import protocol
from b2client.config import B2Config
from b2client.errors import B2TransportError, NotAuthorizedError
from b2client.models import (
    DownloadStream,
    FileInfo,
    SessionState,
    UploadAuthorization,
    UploadedFile,
)
from b2client.tracing import traced_b2_operation


class B2Client:
    """Client for the B2 native API.

    The HTTP transport is injected. When no ``http_client`` is given the
    client creates one and closes it in close(); an injected client is left
    open for its owner.

    Session state is swapped as one record under a lock, so a client shared
    between threads never exposes a partially updated session.
    """

    def __init__(
        self,
        config: B2Config,
        http_client: httpx.Client | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Credentials, endpoints and default timeout.
            http_client: Optional httpx.Client for dependency injection (testing).
            logger: Logger for request summaries (default: module logger).
        """
        self._config = config
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.Client(timeout=config.timeout_seconds)
        self._logger = logger or logging.getLogger(__name__)
        self._session: SessionState | None = None
        self._session_lock = threading.Lock()

    @property
    def config(self) -> B2Config:
        return self._config

    @property
    def session(self) -> SessionState | None:
        """Current session, or None before the first successful authorize()."""
        with self._session_lock:
            return self._session

    @property
    def is_authorized(self) -> bool:
        return self.session is not None

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http_client:
            self._http_client.close()

    def __enter__(self) -> B2Client:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _require_session(self) -> SessionState:
        session = self.session
        if session is None:
            raise NotAuthorizedError()
        return session

    def _send(self, spec: protocol.RequestSpec, timeout: float | None) -> httpx.Response:
        """Send one request, mapping transport failures to B2TransportError."""
        effective_timeout = timeout if timeout is not None else self._config.timeout_seconds
        self._logger.debug("B2 request: %s %s", spec.method, spec.url)
        try:
            response = self._http_client.request(
                spec.method, spec.url, timeout=effective_timeout, **spec.send_kwargs()
            )
        except httpx.TimeoutException as e:
            raise B2TransportError(
                f"{spec.method} {spec.url} timed out after {effective_timeout}s",
                timed_out=True,
                cause=e,
            ) from e
        except httpx.RequestError as e:
            raise B2TransportError(f"{spec.method} {spec.url} failed: {e}", cause=e) from e
        self._logger.debug("B2 response: %s %s -> %s", spec.method, spec.url, response.status_code)
        return response

    @traced_b2_operation("authorize")
    def authorize(self, timeout: float | None = None) -> None:
        """Authorize the account and capture the session.

        Raises:
            AuthorizationError: On a non-2xx status or an incomplete response.
                The previous session, if any, is left in place.
            B2TransportError: If the request could not be completed.
        """
        response = self._send(protocol.authorize_request(self._config), timeout)
        session = protocol.parse_authorize_response(response)
        with self._session_lock:
            self._session = session
        self._logger.debug(
            "Account authorized: apiUrl=%s downloadUrl=%s", session.api_url, session.download_url
        )

    @traced_b2_operation("get_upload_authorization")
    def get_upload_authorization(self, timeout: float | None = None) -> UploadAuthorization:
        """Request a single-use upload URL and token for the configured bucket.

        Raises:
            UploadAuthorizationError: If uploadUrl or its token is absent.
        """
        session = self._require_session()
        self._logger.debug("Requesting upload authorization for bucket %s", self._config.bucket_id)
        response = self._send(protocol.upload_url_request(session, self._config.bucket_id), timeout)
        return protocol.parse_upload_url_response(response)

    @traced_b2_operation("upload")
    def upload_file(
        self,
        file_name: str,
        file_content: bytes,
        content_type: str | None = None,
        timeout: float | None = None,
    ) -> UploadedFile:
        """Upload bytes under file_name and return the full upload response.

        Args:
            file_name: Name the file is stored under.
            file_content: File bytes.
            content_type: MIME type. Derived from the extension when omitted.
            timeout: Per-request timeout override in seconds.

        Raises:
            UploadAuthorizationError: If no upload URL could be obtained.
            UploadError: On a non-2xx status or a response without fileId.
        """
        self._logger.info("Uploading the file %s, %d bytes", file_name, len(file_content))
        upload_auth = self.get_upload_authorization(timeout=timeout)
        spec = protocol.upload_request(upload_auth, file_name, file_content, content_type)
        uploaded = protocol.parse_upload_response(self._send(spec, timeout))
        self._logger.info("Uploaded %s as fileId %s", file_name, uploaded.file_id)
        return uploaded

    def upload(
        self,
        file_name: str,
        file_content: bytes,
        content_type: str | None = None,
        timeout: float | None = None,
    ) -> str:
        """Upload bytes under file_name.

        Returns:
            The fileId assigned by B2.
        """
        return self.upload_file(file_name, file_content, content_type, timeout).file_id

    @traced_b2_operation("download")
    def download(self, file_id: str, timeout: float | None = None) -> DownloadStream:
        """Download a file by id.

        No existence check is made: the body is returned whatever the status.
        Check ``DownloadStream.ok`` before trusting the content.
        """
        session = self._require_session()
        self._logger.info("Downloading file with Id %s", file_id)
        response = self._send(protocol.download_request(session, file_id), timeout)
        if not response.is_success:
            self._logger.warning(
                "Download of %s returned HTTP %d", file_id, response.status_code
            )
        return protocol.to_download_stream(response)

    @traced_b2_operation("get_file_info")
    def get_file_info(self, file_id: str, timeout: float | None = None) -> FileInfo:
        """Fetch file metadata.

        Raises:
            MetadataError: On a non-2xx status or a response without fileName.
        """
        session = self._require_session()
        self._logger.info("Get file name for file with id %s", file_id)
        response = self._send(protocol.file_info_request(session, file_id), timeout)
        return protocol.parse_file_info_response(response)

    def get_file_name(self, file_id: str, timeout: float | None = None) -> str:
        return self.get_file_info(file_id, timeout=timeout).file_name

    @traced_b2_operation("delete")
    def delete(self, file_id: str, file_name: str, timeout: float | None = None) -> None:
        """Delete one file version.

        Raises:
            DeleteError: On any non-2xx status, including a repeat delete.
        """
        session = self._require_session()
        self._logger.info("Deleting file %s with name %s", file_id, file_name)
        response = self._send(protocol.delete_request(session, file_id, file_name), timeout)
        protocol.parse_delete_response(response)
        self._logger.info(
            "File %s deleted successfully with Http status %d", file_name, response.status_code
        )
