# tests/conftest.py

from __future__ import annotations

import pytest
import pytest_asyncio
import respx

from utils.config import Settings
from utils.http import ApiClient

BASE_URL = "https://labeling.example.test"


@pytest.fixture
def settings() -> Settings:
    """Settings built explicitly so tests never read the environment's .env."""
    return Settings(
        _env_file=None,
        BASE_URL=BASE_URL,
        API_USERNAME="exporter",
        API_PASSWORD="s3cret",
        SPREADSHEET_ID="sheet-123",
        GAUTH_KEY_FILE_PATH="/run/secrets/gauth.json",
        GSHEET_TO_JOB_MAPPING={"Batch A": ["101"], "Missing": ["202"]},
        TQ_QUESTIONTITLE_NAME="Name",
        TQ_QUESTIONTITLE_CLASS="Class",
        RETRY_DELAY_SECONDS=0,
        PAGE_LIMIT=10,
    )


@pytest.fixture
def api_mock():
    with respx.mock(base_url=BASE_URL, assert_all_called=False) as mock:
        yield mock


@pytest_asyncio.fixture
async def client(api_mock):
    api_client = ApiClient(BASE_URL)
    yield api_client
    await api_client.close()
