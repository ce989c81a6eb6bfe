"""Asynchronous B2 native API client.

Same operations as B2Client, as coroutines over httpx.AsyncClient. Each call
suspends the calling task until the response arrives; cancelling the task
cancels the in-flight request.

Usage:
    >>> async with AsyncB2Client(load_b2_config()) as client:
    ...     await client.authorize()
    ...     file_id = await client.upload("report.pdf", data, content_type="application/pdf")
"""

from __future__ import annotations

import asyncio
import logging
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


class AsyncB2Client:
    """Async client for the B2 native API.

    The session is replaced as one record under an asyncio.Lock, so
    concurrent authorize() calls never leave a mixed session behind. Uploads
    and downloads may run concurrently: each upload fetches its own upload
    authorization.
    """

    def __init__(
        self,
        config: B2Config,
        http_client: httpx.AsyncClient | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Credentials, endpoints and default timeout.
            http_client: Optional httpx.AsyncClient for dependency injection (testing).
            logger: Logger for request summaries (default: module logger).
        """
        self._config = config
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=config.timeout_seconds)
        self._logger = logger or logging.getLogger(__name__)
        self._session: SessionState | None = None
        self._session_lock = asyncio.Lock()

    @property
    def config(self) -> B2Config:
        return self._config

    @property
    def session(self) -> SessionState | None:
        """Current session, or None before the first successful authorize()."""
        return self._session

    @property
    def is_authorized(self) -> bool:
        return self._session is not None

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http_client:
            await self._http_client.aclose()

    async def __aenter__(self) -> AsyncB2Client:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    def _require_session(self) -> SessionState:
        session = self._session
        if session is None:
            raise NotAuthorizedError()
        return session

    async def _send(self, spec: protocol.RequestSpec, timeout: float | None) -> httpx.Response:
        """Send one request, mapping transport failures to B2TransportError."""
        effective_timeout = timeout if timeout is not None else self._config.timeout_seconds
        self._logger.debug("B2 request: %s %s", spec.method, spec.url)
        try:
            response = await self._http_client.request(
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
        self._logger.debug(
            "B2 response: %s %s -> %s", spec.method, spec.url, response.status_code
        )
        return response

    @traced_b2_operation("authorize")
    async def authorize(self, timeout: float | None = None) -> None:
        """Authorize the account and capture the session.

        Raises:
            AuthorizationError: On a non-2xx status or an incomplete response.
                The previous session, if any, is left in place.
            B2TransportError: If the request could not be completed.
        """
        async with self._session_lock:
            response = await self._send(protocol.authorize_request(self._config), timeout)
            session = protocol.parse_authorize_response(response)
            self._session = session
        self._logger.debug(
            "Account authorized: apiUrl=%s downloadUrl=%s",
            session.api_url,
            session.download_url,
        )

    @traced_b2_operation("get_upload_authorization")
    async def get_upload_authorization(self, timeout: float | None = None) -> UploadAuthorization:
        """Request a single-use upload URL and token for the configured bucket.

        Raises:
            UploadAuthorizationError: If uploadUrl or its token is absent.
        """
        session = self._require_session()
        spec = protocol.upload_url_request(session, self._config.bucket_id)
        return protocol.parse_upload_url_response(await self._send(spec, timeout))

    @traced_b2_operation("upload")
    async def upload_file(
        self,
        file_name: str,
        file_content: bytes,
        content_type: str | None = None,
        timeout: float | None = None,
    ) -> UploadedFile:
        """Upload bytes under file_name and return the full upload response.

        Raises:
            UploadAuthorizationError: If no upload URL could be obtained.
            UploadError: On a non-2xx status or a response without fileId.
        """
        self._logger.info("Uploading the file %s, %d bytes", file_name, len(file_content))
        upload_auth = await self.get_upload_authorization(timeout=timeout)
        spec = protocol.upload_request(upload_auth, file_name, file_content, content_type)
        uploaded = protocol.parse_upload_response(await self._send(spec, timeout))
        self._logger.info("Uploaded %s as fileId %s", file_name, uploaded.file_id)
        return uploaded

    async def upload(
        self,
        file_name: str,
        file_content: bytes,
        content_type: str | None = None,
        timeout: float | None = None,
    ) -> str:
        """Upload bytes under file_name and return the fileId."""
        uploaded = await self.upload_file(file_name, file_content, content_type, timeout)
        return uploaded.file_id

    @traced_b2_operation("download")
    async def download(self, file_id: str, timeout: float | None = None) -> DownloadStream:
        """Download a file by id; the body is returned whatever the status."""
        session = self._require_session()
        self._logger.info("Downloading file with Id %s", file_id)
        response = await self._send(protocol.download_request(session, file_id), timeout)
        if not response.is_success:
            self._logger.warning(
                "Download of %s returned HTTP %d", file_id, response.status_code
            )
        return protocol.to_download_stream(response)

    @traced_b2_operation("get_file_info")
    async def get_file_info(self, file_id: str, timeout: float | None = None) -> FileInfo:
        """Fetch file metadata.

        Raises:
            MetadataError: On a non-2xx status or a response without fileName.
        """
        session = self._require_session()
        self._logger.info("Get file name for file with id %s", file_id)
        response = await self._send(protocol.file_info_request(session, file_id), timeout)
        return protocol.parse_file_info_response(response)

    async def get_file_name(self, file_id: str, timeout: float | None = None) -> str:
        info = await self.get_file_info(file_id, timeout=timeout)
        return info.file_name

    @traced_b2_operation("delete")
    async def delete(self, file_id: str, file_name: str, timeout: float | None = None) -> None:
        """Delete one file version.

        Raises:
            DeleteError: On any non-2xx status, including a repeat delete.
        """
        session = self._require_session()
        self._logger.info("Deleting file %s with name %s", file_id, file_name)
        spec = protocol.delete_request(session, file_id, file_name)
        response = await self._send(spec, timeout)
        protocol.parse_delete_response(response)
        self._logger.info(
            "File %s deleted successfully with Http status %d",
            file_name,
            response.status_code,
        )
