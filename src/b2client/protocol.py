"""B2 native API v2 request construction and response parsing.

This module performs no I/O. Each operation is described as a RequestSpec
and each response is parsed into a typed model, so the sync and async
clients share one definition of the wire protocol.

Endpoints:
    GET  {apiBase}b2_authorize_account
    POST {apiUrl}/b2api/v2/b2_get_upload_url
    POST {uploadUrl}
    GET  {downloadUrl}/b2api/v2/b2_download_file_by_id?fileId=
    GET  {apiUrl}/b2api/v2/b2_get_file_info?fileId=
    POST {apiUrl}/b2api/v2/b2_delete_file_version
"""

from __future__ import annotations

import base64
import json
from dataclasses import dataclass, field
from typing import Any, Final, TypeVar
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from b2client.config import B2Config
from b2client.errors import (
    AuthorizationError,
    B2Error,
    DeleteError,
    MetadataError,
    UploadAuthorizationError,
    UploadError,
)
from b2client.models import (
    AccountAuthorization,
    B2Response,
    DeletedFileVersion,
    DownloadStream,
    FileInfo,
    SessionState,
    UploadAuthorization,
    UploadedFile,
)

API_PATH: Final[str] = "/b2api/v2"
AUTHORIZE_ACCOUNT: Final[str] = "b2_authorize_account"

CONTENT_SHA1_DO_NOT_VERIFY: Final[str] = "do_not_verify"
DEFAULT_AUTHOR: Final[str] = "unknown"
AUTO_CONTENT_TYPE: Final[str] = "b2/x-auto"
JSON_ACCEPT: Final[str] = "application/json"

M = TypeVar("M", bound=B2Response)


@dataclass(frozen=True)
class RequestSpec:
    """A fully described HTTP request, ready for any httpx client.

    Attributes:
        method: HTTP method.
        url: Absolute request URL without query string.
        headers: Per-request headers. Transport default headers are never used.
        params: Query parameters.
        content: Raw request body.
        json_body: JSON request body.
    """

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    params: dict[str, str] | None = None
    content: bytes | None = None
    json_body: dict[str, Any] | None = None

    def send_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for httpx.Client.request / AsyncClient.request."""
        kwargs: dict[str, Any] = {"headers": self.headers}
        if self.params is not None:
            kwargs["params"] = self.params
        if self.content is not None:
            kwargs["content"] = self.content
        if self.json_body is not None:
            kwargs["json"] = self.json_body
        return kwargs


def basic_auth_header(key_id: str, application_key: str) -> str:
    """Return the HTTP Basic Authorization value for a key id/secret pair."""
    token = base64.b64encode(f"{key_id}:{application_key}".encode()).decode("ascii")
    return f"Basic {token}"


def resolve_content_type(file_name: str, content_type: str | None = None) -> str:
    """Pick the Content-Type for an upload.

    An explicit MIME type always wins. Otherwise the type is derived from the
    extension of the last path segment as ``image/<ext>``. Names without a
    plain ASCII alphanumeric extension let B2 detect the type.
    """
    if content_type:
        return content_type
    base_name = file_name.rsplit("/", 1)[-1]
    _, dot, extension = base_name.rpartition(".")
    if not dot or not (extension.isascii() and extension.isalnum()):
        return AUTO_CONTENT_TYPE
    return f"image/{extension}"


def _api_endpoint(session: SessionState, name: str) -> str:
    return f"{session.api_url}{API_PATH}/{name}"


def authorize_request(config: B2Config) -> RequestSpec:
    base = config.api_base_url.rstrip("/")
    return RequestSpec(
        method="GET",
        url=f"{base}/{AUTHORIZE_ACCOUNT}",
        headers={
            "Accept": JSON_ACCEPT,
            "Authorization": basic_auth_header(config.key_id, config.application_key),
        },
    )


def upload_url_request(session: SessionState, bucket_id: str) -> RequestSpec:
    return RequestSpec(
        method="POST",
        url=_api_endpoint(session, "b2_get_upload_url"),
        headers={
            "Accept": JSON_ACCEPT,
            "Authorization": session.account_authorization_token,
        },
        json_body={"bucketId": bucket_id},
    )


def upload_request(
    upload_auth: UploadAuthorization,
    file_name: str,
    file_content: bytes,
    content_type: str | None = None,
) -> RequestSpec:
    """Describe the upload POST.

    The file name is percent-encoded as B2 requires for X-Bz-File-Name;
    "/" is kept so folder-style names survive.
    """
    return RequestSpec(
        method="POST",
        url=upload_auth.upload_url,
        headers={
            "Accept": JSON_ACCEPT,
            "Authorization": upload_auth.authorization_token,
            "X-Bz-File-Name": quote(file_name, safe="/"),
            "X-Bz-Content-Sha1": CONTENT_SHA1_DO_NOT_VERIFY,
            "X-Bz-Info-Author": DEFAULT_AUTHOR,
            "Content-Type": resolve_content_type(file_name, content_type),
        },
        content=file_content,
    )


def download_request(session: SessionState, file_id: str) -> RequestSpec:
    return RequestSpec(
        method="GET",
        url=f"{session.download_url}{API_PATH}/b2_download_file_by_id",
        headers={"Authorization": session.account_authorization_token},
        params={"fileId": file_id},
    )


def file_info_request(session: SessionState, file_id: str) -> RequestSpec:
    return RequestSpec(
        method="GET",
        url=_api_endpoint(session, "b2_get_file_info"),
        headers={
            "Accept": JSON_ACCEPT,
            "Authorization": session.account_authorization_token,
        },
        params={"fileId": file_id},
    )


def delete_request(session: SessionState, file_id: str, file_name: str) -> RequestSpec:
    return RequestSpec(
        method="POST",
        url=_api_endpoint(session, "b2_delete_file_version"),
        headers={
            "Accept": JSON_ACCEPT,
            "Authorization": session.account_authorization_token,
        },
        json_body={"fileId": file_id, "fileName": file_name},
    )


def _decode_body(response: httpx.Response) -> dict[str, Any] | str | None:
    """Decode a response body for error reporting.

    Returns the JSON object when the body is one, the raw text otherwise.
    """
    if not response.content:
        return None
    try:
        data = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text
    if isinstance(data, dict):
        return data
    return response.text


def _raise_for_status(
    response: httpx.Response,
    error_cls: type[B2Error],
    operation: str,
) -> None:
    """Raise error_cls with B2 error details when the status is not 2xx."""
    if response.is_success:
        return

    body = _decode_body(response)
    code: str | None = None
    detail: str | None = None
    if isinstance(body, dict):
        code = body.get("code")
        detail = body.get("message")

    message = f"{operation} failed with HTTP {response.status_code}"
    if detail:
        message = f"{message}: {detail}"
    raise error_cls(message, status_code=response.status_code, code=code, response=body)


def _parse_model(
    response: httpx.Response,
    model: type[M],
    error_cls: type[B2Error],
    operation: str,
) -> M:
    """Check the status, then validate the JSON body against model.

    Raises:
        error_cls: On a non-2xx status, a non-JSON body, or a missing field.
    """
    _raise_for_status(response, error_cls, operation)

    try:
        data = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise error_cls(
            f"{operation} returned a non-JSON body",
            status_code=response.status_code,
            response=response.text,
        ) from e

    try:
        return model.model_validate(data)
    except ValidationError as e:
        missing = ", ".join(
            str(err["loc"][0]) for err in e.errors() if err.get("loc")
        )
        raise error_cls(
            f"{operation} response is missing or has invalid fields: {missing}",
            status_code=response.status_code,
            response=data if isinstance(data, dict) else response.text,
        ) from e


def parse_authorize_response(response: httpx.Response) -> SessionState:
    """Parse b2_authorize_account into a complete SessionState.

    Raises:
        AuthorizationError: On a non-2xx status or an incomplete response.
    """
    auth = _parse_model(response, AccountAuthorization, AuthorizationError, "authorize")
    return SessionState.from_authorization(auth)


def parse_upload_url_response(response: httpx.Response) -> UploadAuthorization:
    """Raises UploadAuthorizationError when uploadUrl or the token is absent."""
    return _parse_model(
        response, UploadAuthorization, UploadAuthorizationError, "get_upload_url"
    )


def parse_upload_response(response: httpx.Response) -> UploadedFile:
    """Raises UploadError when the response carries no fileId."""
    return _parse_model(response, UploadedFile, UploadError, "upload")


def parse_file_info_response(response: httpx.Response) -> FileInfo:
    """Raises MetadataError when the response carries no fileName."""
    return _parse_model(response, FileInfo, MetadataError, "get_file_info")


def parse_delete_response(response: httpx.Response) -> DeletedFileVersion:
    """Check a delete response.

    Any non-2xx status is fatal. A 2xx body that is empty or not JSON still
    counts as a successful delete, as does a body whose fields do not match
    the expected types.
    """
    _raise_for_status(response, DeleteError, "delete_file_version")
    body = _decode_body(response)
    if isinstance(body, dict):
        try:
            return DeletedFileVersion.model_validate(body)
        except ValidationError:
            return DeletedFileVersion()
    return DeletedFileVersion()


def to_download_stream(response: httpx.Response) -> DownloadStream:
    """Wrap a download response body in a DownloadStream, whatever its status."""
    return DownloadStream(
        response.content,
        status_code=response.status_code,
        content_type=response.headers.get("Content-Type"),
    )
