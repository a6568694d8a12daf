import logging

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from tests.consts import AUTH_HEADERS
from tests.fixtures.app_client import upload
from uploads_api.errors import STATUS_CODES, ErrorKind, FilesApiError


@pytest.mark.parametrize(
    "kind, expected",
    [
        (ErrorKind.UNAUTHORIZED, 401),
        (ErrorKind.INVALID_CREDENTIAL, 401),
        (ErrorKind.MISSING_PARAMETER, 400),
        (ErrorKind.INVALID_PARAMETER, 400),
        (ErrorKind.NO_FILE_UPLOADED, 400),
        (ErrorKind.UNSUPPORTED_FILE_TYPE, 400),
        (ErrorKind.UPLOAD_TOO_LARGE, 413),
        (ErrorKind.TOO_MANY_FILES, 413),
        (ErrorKind.UNEXPECTED_FIELD, 400),
        (ErrorKind.FILE_NOT_FOUND, 404),
        (ErrorKind.PERMISSION_DENIED, 403),
        (ErrorKind.INTERNAL, 500),
    ],
)
def test_status_codes(kind, expected):
    assert STATUS_CODES[kind] == expected
    assert FilesApiError(kind, "x").status_code == expected


def test_every_kind_has_a_status_code():
    assert set(STATUS_CODES) == set(ErrorKind)


def test_failure_is_logged_with_request_context(client: TestClient, caplog: pytest.LogCaptureFixture):
    with caplog.at_level(logging.WARNING, logger="uploads_api.errors"):
        response = client.delete("/delete", headers=AUTH_HEADERS)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    records = [r for r in caplog.records if r.name == "uploads_api.errors"]
    assert len(records) == 1
    message = records[0].getMessage()
    assert "MissingParameter" in message
    assert "path=/delete" in message
    assert "method=DELETE" in message
    assert "ip=testclient" in message


def test_rejected_upload_is_logged_once(client: TestClient, caplog: pytest.LogCaptureFixture):
    with caplog.at_level(logging.WARNING):
        response = upload(client, filename="tool.exe", content_type="application/x-msdownload")

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    warnings = [r for r in caplog.records if r.name.startswith("uploads_api") and r.levelno >= logging.WARNING]
    assert len(warnings) == 1
    assert "UnsupportedFileType" in warnings[0].getMessage()


def test_method_not_allowed(client: TestClient):
    response = client.put("/upload")

    assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED
    assert response.json()["error"] == "MethodNotAllowed"


def test_malformed_multipart_body(client: TestClient):
    response = client.post(
        "/upload",
        content=b"--boundary\r\nContent-Disposition: form-data; name=\"file\"; filename=\"a.txt\"\r\n",
        headers={**AUTH_HEADERS, "Content-Type": "multipart/form-data"},
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"] == "InvalidParameter"
