"""Application fixtures: a fresh app and storage root per test."""
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from tests.consts import (
    AUTH_HEADERS,
    TEST_AUTH_TOKEN,
    TEST_BASE_URL,
    TEST_FILE_CONTENT,
    TEST_FILE_CONTENT_TYPE,
    TEST_FILE_NAME,
)
from uploads_api.main import create_app
from uploads_api.settings import Settings


@pytest.fixture
def storage_root(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture
def settings(storage_root: Path) -> Settings:
    return Settings(
        auth_token=TEST_AUTH_TOKEN,
        base_url=TEST_BASE_URL,
        volume_path=str(storage_root),
    )


@pytest.fixture
def client(settings: Settings):
    app = create_app(settings)
    with TestClient(app) as client:
        yield client


def upload(
    client: TestClient,
    content: bytes = TEST_FILE_CONTENT,
    filename: str = TEST_FILE_NAME,
    content_type: str = TEST_FILE_CONTENT_TYPE,
    headers: dict = AUTH_HEADERS,
):
    """POST a single file under the `file` field."""
    return client.post(
        "/upload",
        files={"file": (filename, content, content_type)},
        headers=headers,
    )
