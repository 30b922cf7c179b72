"""Shared pytest fixtures."""

from __future__ import annotations

import os

# Force settings to use test-safe defaults before any import
os.environ.setdefault("AKAVE_CLI_BINARY", "akavecli")
os.environ.setdefault("AKAVE_NODE_ADDRESS", "connect.akave.ai:5500")
os.environ.setdefault("AKAVE_PRIVATE_KEY", "deadbeef")
os.environ.setdefault("AKAVE_ACCOUNT_ADDRESS", "0x1111111111111111111111111111111111111111")
os.environ.setdefault("AKAVE_API_KEY", "")
os.environ.setdefault("CORRELATION_RETRY_DELAY_SECONDS", "0")

import pytest
from httpx import ASGITransport, AsyncClient

from akave_api.config import Settings
from akave_api.services.storage import AkaveStorageService
from tests.mock_akave import FakeCorrelator, FakeExecutor


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        akave_cli_binary="akavecli",
        akave_node_address="connect.akave.ai:5500",
        akave_private_key="deadbeef",
        akave_account_address="0x1111111111111111111111111111111111111111",
        correlation_retry_delay_seconds=0,
        download_dir=str(tmp_path / "downloads"),
    )


@pytest.fixture
def fake_executor():
    """Provide a fresh FakeExecutor with no canned outputs."""
    return FakeExecutor()


@pytest.fixture
def fake_correlator():
    return FakeCorrelator()


@pytest.fixture
def service(test_settings, fake_executor, fake_correlator):
    return AkaveStorageService(
        test_settings,
        executor=fake_executor,
        correlator=fake_correlator,
    )


@pytest.fixture
async def client(service, test_settings, monkeypatch):
    """Async test client with the fake-backed storage service injected."""
    import akave_api.routers.files as files_mod
    import akave_api.services.storage as storage_mod

    monkeypatch.setattr(storage_mod, "storage_service", service)
    monkeypatch.setattr(files_mod.settings, "download_dir", test_settings.download_dir)

    from akave_api.main import app as fastapi_app

    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
