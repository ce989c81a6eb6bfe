"""Typed B2 response models and session records.

Responses are parsed into frozen Pydantic models. A response that lacks a
required field fails validation instead of yielding a half-populated object;
the protocol layer turns that failure into the operation's typed error.
"""

from __future__ import annotations

import io
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class B2Response(BaseModel):
    """Base for B2 JSON responses: camelCase aliases, unknown keys ignored."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class AccountAuthorization(B2Response):
    """Response of b2_authorize_account."""

    authorization_token: str = Field(..., alias="authorizationToken", min_length=1)
    api_url: str = Field(..., alias="apiUrl", min_length=1)
    download_url: str = Field(..., alias="downloadUrl", min_length=1)
    account_id: str | None = Field(default=None, alias="accountId")
    recommended_part_size: int | None = Field(default=None, alias="recommendedPartSize")


class UploadAuthorization(B2Response):
    """Response of b2_get_upload_url.

    Valid for a single upload; a fresh one is requested for every upload call.
    """

    upload_url: str = Field(..., alias="uploadUrl", min_length=1)
    authorization_token: str = Field(..., alias="authorizationToken", min_length=1)
    bucket_id: str | None = Field(default=None, alias="bucketId")


class UploadedFile(B2Response):
    """Response of an upload POST to the upload URL."""

    file_id: str = Field(..., alias="fileId", min_length=1)
    file_name: str | None = Field(default=None, alias="fileName")
    bucket_id: str | None = Field(default=None, alias="bucketId")
    content_length: int | None = Field(default=None, alias="contentLength")
    content_type: str | None = Field(default=None, alias="contentType")
    upload_timestamp: int | None = Field(default=None, alias="uploadTimestamp")


class FileInfo(B2Response):
    """Response of b2_get_file_info."""

    file_name: str = Field(..., alias="fileName", min_length=1)
    file_id: str | None = Field(default=None, alias="fileId")
    content_type: str | None = Field(default=None, alias="contentType")
    content_length: int | None = Field(default=None, alias="contentLength")
    file_info: dict[str, Any] = Field(default_factory=dict, alias="fileInfo")

    @field_validator("file_info", mode="before")
    @classmethod
    def null_file_info_is_empty(cls, v: Any) -> Any:
        return {} if v is None else v


class DeletedFileVersion(B2Response):
    """Response of b2_delete_file_version."""

    file_id: str | None = Field(default=None, alias="fileId")
    file_name: str | None = Field(default=None, alias="fileName")


class SessionState(BaseModel):
    """Account session captured by a successful authorize().

    A client holds either no session or one complete SessionState; the record
    is replaced as a whole on re-authorization.
    """

    model_config = ConfigDict(frozen=True)

    api_url: str
    download_url: str
    account_authorization_token: str = Field(repr=False)
    account_id: str | None = None
    recommended_part_size: int | None = None

    @classmethod
    def from_authorization(cls, auth: AccountAuthorization) -> SessionState:
        return cls(
            api_url=auth.api_url.rstrip("/"),
            download_url=auth.download_url.rstrip("/"),
            account_authorization_token=auth.authorization_token,
            account_id=auth.account_id,
            recommended_part_size=auth.recommended_part_size,
        )


class DownloadStream(io.BytesIO):
    """Readable byte stream holding a downloaded body.

    The body is returned whatever the HTTP status; an unknown fileId yields
    B2's JSON error body as content. Check ``ok`` or ``status_code`` before
    trusting the bytes.

    Attributes:
        status_code: HTTP status of the download response.
        content_type: Content-Type header of the response, if any.
    """

    def __init__(
        self,
        content: bytes,
        *,
        status_code: int,
        content_type: str | None = None,
    ) -> None:
        super().__init__(content)
        self.status_code = status_code
        self.content_type = content_type

    @property
    def ok(self) -> bool:
        """True when the download returned a 2xx status."""
        return 200 <= self.status_code < 300
