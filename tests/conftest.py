"""Shared pytest fixtures for Gemini Image Relay tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from imagerelay.api.main import create_app
from imagerelay.core.config import RelayConfig

TEST_API_KEY = "test-api-key"
TEST_BASE_URL = "https://upstream.test"
TEST_MODEL = "gemini-2.5-flash-image-preview"
UPSTREAM_URL = f"{TEST_BASE_URL}/v1beta/models/{TEST_MODEL}:generateContent"

INDEX_HTML = "<!DOCTYPE html><html><body><h1>Relay test page</h1></body></html>"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def static_dir(temp_dir: Path) -> Path:
    """Create a static asset directory holding a minimal ``index.html``."""
    site = temp_dir / "docs"
    site.mkdir()
    (site / "index.html").write_text(INDEX_HTML)
    return site


@pytest.fixture
def test_config(static_dir: Path) -> RelayConfig:
    """Create a test configuration pointing at a fake upstream.

    Args:
        static_dir: Static site directory from fixture

    Returns:
        RelayConfig instance for testing
    """
    return RelayConfig(
        _env_file=None,
        gemini_api_key=TEST_API_KEY,
        gemini_base_url=TEST_BASE_URL,
        gemini_model=TEST_MODEL,
        static_dir=static_dir,
        max_body_bytes=4096,
    )


@pytest.fixture
def test_client(test_config: RelayConfig) -> Generator[TestClient, None, None]:
    """TestClient for an app built from ``test_config``, with lifespan running."""
    app = create_app(test_config)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def upstream_url() -> str:
    """Upstream ``generateContent`` URL that ``test_config`` forwards to."""
    return UPSTREAM_URL
