"""Integration tests exercising the HTTP API with the fake executor."""

from __future__ import annotations

from pathlib import Path

import pytest

from akave_api.config import settings
from tests.mock_akave import (
    BUCKET_CREATED,
    BUCKET_LIST,
    ERROR_JSON,
    FILE_INFO,
    FILE_UPLOADED,
    TX_HASH,
    writes_download,
)


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_create_bucket(client, fake_executor):
    fake_executor.outputs[("bucket", "create")] = BUCKET_CREATED
    resp = await client.post("/buckets", json={"bucketName": "mybucket"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert data["data"]["Name"] == "mybucket"
    assert data["transactionHash"] == TX_HASH
    assert fake_executor.calls[0].args[3] == "mybucket"


@pytest.mark.asyncio
async def test_create_bucket_requires_name(client):
    resp = await client.post("/buckets", json={})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_list_buckets(client, fake_executor):
    fake_executor.outputs[("bucket", "list")] = BUCKET_LIST
    resp = await client.get("/buckets")
    assert resp.status_code == 200
    names = [b["Name"] for b in resp.json()["data"]]
    assert names == ["alpha", "beta", "gamma"]
    assert resp.json()["transactionHash"] is None


@pytest.mark.asyncio
async def test_file_info(client, fake_executor):
    fake_executor.outputs[("file", "info")] = FILE_INFO
    resp = await client.get("/buckets/bkt/files/a.bin")
    assert resp.status_code == 200
    assert resp.json()["data"]["RootCID"] == "bafyA"


@pytest.mark.asyncio
async def test_tool_error_payload(client, fake_executor):
    fake_executor.outputs[("bucket", "view")] = ERROR_JSON
    resp = await client.get("/buckets/missing")
    assert resp.status_code == 502
    body = resp.json()
    assert body["success"] is False
    assert body["error"] == {"error": "bucket not found"}


@pytest.mark.asyncio
async def test_parse_error(client, fake_executor):
    fake_executor.outputs[("bucket", "view")] = "garbled"
    resp = await client.get("/buckets/mybucket")
    assert resp.status_code == 502
    body = resp.json()
    assert body["error_type"] == "ParseError"
    assert "garbled" in body["error"]


@pytest.mark.asyncio
async def test_launch_error(client, fake_executor):
    fake_executor.launch_error = True
    resp = await client.get("/buckets")
    assert resp.status_code == 503
    assert resp.json()["error_type"] == "LaunchError"


@pytest.mark.asyncio
async def test_upload_multipart(client, fake_executor):
    staged: list[str] = []

    def respond(spec):
        staged.append(spec.args[4])
        return FILE_UPLOADED

    fake_executor.outputs[("file", "upload")] = respond
    resp = await client.post(
        "/buckets/bkt/files",
        files={"file": ("my report.bin", b"0123456789", "application/octet-stream")},
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["Name"] == "a.bin"
    assert resp.json()["transactionHash"] == TX_HASH
    assert staged[0].endswith("my_report.bin")


@pytest.mark.asyncio
async def test_upload_alternate_field(client, fake_executor):
    fake_executor.outputs[("file", "upload")] = FILE_UPLOADED
    resp = await client.post(
        "/buckets/bkt/files",
        files={"file1": ("a.bin", b"x", "application/octet-stream")},
    )
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_upload_by_path(client, fake_executor):
    fake_executor.outputs[("file", "upload")] = FILE_UPLOADED
    resp = await client.post("/buckets/bkt/files", json={"filePath": "/data/a.bin"})
    assert resp.status_code == 200
    assert fake_executor.calls[0].args[4] == "/data/a.bin"


@pytest.mark.asyncio
async def test_upload_without_body(client):
    resp = await client.post("/buckets/bkt/files", json={})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_download_streams_file(client, fake_executor):
    fake_executor.outputs[("file", "download")] = writes_download(b"payload-bytes")
    resp = await client.get("/buckets/bkt/files/a.bin/download")
    assert resp.status_code == 200
    assert resp.content == b"payload-bytes"
    assert resp.headers["content-type"] == "application/octet-stream"
    assert "attachment" in resp.headers["content-disposition"]


@pytest.mark.asyncio
async def test_download_error(client, fake_executor):
    fake_executor.outputs[("file", "download")] = ERROR_JSON
    resp = await client.get("/buckets/bkt/files/a.bin/download")
    assert resp.status_code == 502


@pytest.mark.asyncio
async def test_download_directory_removed_after_response(client, fake_executor, test_settings):
    fake_executor.outputs[("file", "download")] = writes_download(b"payload-bytes")
    resp = await client.get("/buckets/bkt/files/a.bin/download")
    assert resp.status_code == 200
    assert list(Path(test_settings.download_dir).iterdir()) == []


@pytest.mark.asyncio
async def test_api_key_enforced_when_configured(client, fake_executor, monkeypatch):
    monkeypatch.setattr(settings, "akave_api_key", "s3cret")
    fake_executor.outputs[("bucket", "list")] = BUCKET_LIST

    resp = await client.get("/buckets")
    assert resp.status_code == 401
    assert fake_executor.calls == []

    resp = await client.get("/buckets", headers={"X-API-Key": "wrong"})
    assert resp.status_code == 401

    resp = await client.get("/buckets", headers={"X-API-Key": "s3cret"})
    assert resp.status_code == 200
    assert len(resp.json()["data"]) == 3


@pytest.mark.asyncio
async def test_oversized_upload_rejected_and_cleaned_up(client, fake_executor, monkeypatch):
    import akave_api.routers.files as files_mod

    created: list[Path] = []
    real_mkdtemp = files_mod.tempfile.mkdtemp

    def recording_mkdtemp(*args, **kwargs):
        path = real_mkdtemp(*args, **kwargs)
        created.append(Path(path))
        return path

    monkeypatch.setattr(files_mod.settings, "upload_max_bytes", 4)
    monkeypatch.setattr(files_mod.tempfile, "mkdtemp", recording_mkdtemp)
    fake_executor.outputs[("file", "upload")] = FILE_UPLOADED

    resp = await client.post(
        "/buckets/bkt/files",
        files={"file": ("big.bin", b"0123456789", "application/octet-stream")},
    )
    assert resp.status_code == 413
    assert fake_executor.calls == []
    assert len(created) == 1
    assert not created[0].exists()
