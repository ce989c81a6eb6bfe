"""Tests for B2 request construction and response parsing (no I/O)."""

from __future__ import annotations

import base64

import httpx
import pytest

from b2client import protocol
from b2client.config import B2Config
from b2client.errors import (
    AuthorizationError,
    DeleteError,
    MetadataError,
    UploadAuthorizationError,
    UploadError,
)
from b2client.models import SessionState, UploadAuthorization


@pytest.fixture
def session() -> SessionState:
    return SessionState(
        api_url="https://api1",
        download_url="https://dl1",
        account_authorization_token="T",
    )


class TestContentType:
    @pytest.mark.parametrize(
        ("file_name", "expected"),
        [
            ("photo.png", "image/png"),
            ("scan.jpeg", "image/jpeg"),
            ("archive.tar.gz", "image/gz"),
            ("README", "b2/x-auto"),
            ("trailing.", "b2/x-auto"),
            ("photos.v2/README", "b2/x-auto"),
            ("albums.2024/cover.jpg", "image/jpg"),
            ("фото.пнг", "b2/x-auto"),
            ("notes.tar-gz", "b2/x-auto"),
        ],
    )
    def test_derived_from_extension(self, file_name: str, expected: str) -> None:
        assert protocol.resolve_content_type(file_name) == expected

    def test_explicit_type_wins(self) -> None:
        assert protocol.resolve_content_type("report.pdf", "application/pdf") == "application/pdf"


class TestRequests:
    def test_basic_auth_header(self) -> None:
        expected = "Basic " + base64.b64encode(b"key:secret").decode()
        assert protocol.basic_auth_header("key", "secret") == expected

    @pytest.mark.parametrize(
        "base_url",
        ["https://api.backblazeb2.com/b2api/v2/", "https://api.backblazeb2.com/b2api/v2"],
    )
    def test_authorize_url_joins_base(self, base_url: str) -> None:
        config = B2Config(key_id="k", application_key="a", api_base_url=base_url, bucket_id="b1")

        spec = protocol.authorize_request(config)

        assert spec.method == "GET"
        assert spec.url == "https://api.backblazeb2.com/b2api/v2/b2_authorize_account"
        assert spec.headers["Authorization"].startswith("Basic ")

    def test_upload_url_request(self, session: SessionState) -> None:
        spec = protocol.upload_url_request(session, "b1")

        assert spec.url == "https://api1/b2api/v2/b2_get_upload_url"
        assert spec.json_body == {"bucketId": "b1"}
        assert spec.headers["Authorization"] == "T"

    def test_upload_request_headers(self) -> None:
        upload_auth = UploadAuthorization(uploadUrl="https://pod/upload", authorizationToken="u1")

        spec = protocol.upload_request(upload_auth, "dir/my photo.png", b"data")

        assert spec.url == "https://pod/upload"
        assert spec.content == b"data"
        assert spec.headers == {
            "Accept": "application/json",
            "Authorization": "u1",
            "X-Bz-File-Name": "dir/my%20photo.png",
            "X-Bz-Content-Sha1": "do_not_verify",
            "X-Bz-Info-Author": "unknown",
            "Content-Type": "image/png",
        }

    def test_download_uses_download_url(self, session: SessionState) -> None:
        spec = protocol.download_request(session, "4_zabc")

        assert spec.url == "https://dl1/b2api/v2/b2_download_file_by_id"
        assert spec.params == {"fileId": "4_zabc"}
        assert "Accept" not in spec.headers

    def test_file_info_and_delete_use_api_url(self, session: SessionState) -> None:
        info = protocol.file_info_request(session, "4_zabc")
        delete = protocol.delete_request(session, "4_zabc", "photo.png")

        assert info.url == "https://api1/b2api/v2/b2_get_file_info"
        assert info.params == {"fileId": "4_zabc"}
        assert delete.method == "POST"
        assert delete.url == "https://api1/b2api/v2/b2_delete_file_version"
        assert delete.json_body == {"fileId": "4_zabc", "fileName": "photo.png"}

    def test_send_kwargs_omits_unset_parts(self, session: SessionState) -> None:
        kwargs = protocol.download_request(session, "4_zabc").send_kwargs()

        assert set(kwargs) == {"headers", "params"}


class TestParsing:
    def test_authorize_strips_trailing_slashes(self) -> None:
        response = httpx.Response(
            200,
            json={
                "authorizationToken": "T",
                "apiUrl": "https://api1/",
                "downloadUrl": "https://dl1/",
                "accountId": "acct",
                "allowed": {"capabilities": ["writeFiles"]},
            },
        )

        session = protocol.parse_authorize_response(response)

        assert session.api_url == "https://api1"
        assert session.download_url == "https://dl1"
        assert session.account_id == "acct"

    def test_authorize_empty_token_rejected(self) -> None:
        response = httpx.Response(
            200, json={"authorizationToken": "", "apiUrl": "https://a", "downloadUrl": "https://d"}
        )

        with pytest.raises(AuthorizationError, match="authorizationToken"):
            protocol.parse_authorize_response(response)

    def test_error_message_includes_b2_details(self) -> None:
        response = httpx.Response(
            401, json={"status": 401, "code": "bad_auth_token", "message": "Token expired"}
        )

        with pytest.raises(UploadAuthorizationError) as exc_info:
            protocol.parse_upload_url_response(response)

        error = exc_info.value
        assert error.status_code == 401
        assert error.code == "bad_auth_token"
        assert str(error) == (
            "get_upload_url failed with HTTP 401: Token expired status=401 code=bad_auth_token"
        )

    def test_json_array_body_reported_as_text(self) -> None:
        response = httpx.Response(502, content=b"[1, 2]")

        with pytest.raises(UploadError) as exc_info:
            protocol.parse_upload_response(response)

        assert exc_info.value.response == "[1, 2]"
        assert exc_info.value.code is None

    def test_file_info_extra_fields_ignored(self) -> None:
        response = httpx.Response(
            200,
            json={"fileName": "photo.png", "fileId": "4_z", "action": "upload", "fileInfo": {}},
        )

        info = protocol.parse_file_info_response(response)

        assert info.file_name == "photo.png"

    def test_file_info_missing_name(self) -> None:
        with pytest.raises(MetadataError):
            protocol.parse_file_info_response(httpx.Response(200, json={"fileId": "4_z"}))

    def test_delete_accepts_non_json_success(self) -> None:
        deleted = protocol.parse_delete_response(httpx.Response(204))

        assert deleted.file_id is None

    def test_delete_success_with_unexpected_field_types(self) -> None:
        deleted = protocol.parse_delete_response(httpx.Response(200, json={"fileId": 5}))

        assert deleted.file_id is None

    def test_file_info_null_optional_fields(self) -> None:
        response = httpx.Response(
            200,
            json={
                "fileName": "a.png",
                "fileId": None,
                "contentType": None,
                "contentLength": None,
                "fileInfo": None,
            },
        )

        info = protocol.parse_file_info_response(response)

        assert info.file_name == "a.png"
        assert info.file_info == {}

    def test_upload_null_optional_fields(self) -> None:
        response = httpx.Response(
            200, json={"fileId": "4_z1", "fileName": None, "uploadTimestamp": None}
        )

        uploaded = protocol.parse_upload_response(response)

        assert uploaded.file_id == "4_z1"
        assert uploaded.file_name is None

    def test_delete_rejects_any_non_success(self) -> None:
        with pytest.raises(DeleteError) as exc_info:
            protocol.parse_delete_response(httpx.Response(302))

        assert exc_info.value.status_code == 302
        assert exc_info.value.response is None

    def test_download_stream_keeps_status(self) -> None:
        response = httpx.Response(
            200, content=b"bytes", headers={"Content-Type": "image/png"}
        )

        stream = protocol.to_download_stream(response)

        assert stream.ok
        assert stream.content_type == "image/png"
        assert stream.read() == b"bytes"
