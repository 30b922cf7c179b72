"""File endpoints: list, info, upload and download."""

from __future__ import annotations

import re
import shutil
import tempfile
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import FileResponse
from pydantic import ValidationError
from starlette.background import BackgroundTask
from starlette.datastructures import UploadFile

from akave_api.auth import require_api_key
from akave_api.config import settings
from akave_api.models.responses import OperationResponse, UploadPathRequest
from akave_api.models.storage import RawPassthrough
from akave_api.routers.common import respond
from akave_api.services import storage
from akave_api.utils.logging import get_logger

log = get_logger(__name__)

router = APIRouter(
    prefix="/buckets/{bucket_name}/files",
    tags=["files"],
    dependencies=[Depends(require_api_key)],
)

# Multipart field names accepted for the uploaded body
UPLOAD_FIELDS: tuple[str, ...] = ("file", "file1")

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.]")


def sanitize_filename(name: str) -> str:
    """Replace anything but letters, digits and dots with ``_``."""
    cleaned = _UNSAFE_CHARS.sub("_", Path(name).name)
    return cleaned or "upload.bin"


async def _stage_upload(upload: UploadFile, directory: Path) -> Path:
    """Copy the uploaded body to *directory*, enforcing the size limit."""
    target = directory / sanitize_filename(upload.filename or "")
    written = 0
    with target.open("wb") as fh:
        while True:
            chunk = await upload.read(1024 * 1024)
            if not chunk:
                break
            written += len(chunk)
            if written > settings.upload_max_bytes:
                raise HTTPException(
                    status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    detail=f"File exceeds {settings.upload_max_bytes} bytes",
                )
            fh.write(chunk)
    log.debug("upload.staged", path=str(target), size=written)
    return target


@router.get("", response_model=OperationResponse)
async def list_files(bucket_name: str):
    return respond(await storage.storage_service.list_files(bucket_name))


@router.get("/{file_name}", response_model=OperationResponse)
async def file_info(bucket_name: str, file_name: str):
    return respond(await storage.storage_service.file_info(bucket_name, file_name))


@router.post("", response_model=OperationResponse)
async def upload_file(bucket_name: str, request: Request):
    """Upload a multipart body (``file`` or ``file1``) or a host-local path.

    Multipart bodies are staged in a private temporary directory that is
    removed once the tool has finished.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("multipart/form-data"):
        form = await request.form()
        upload = next(
            (
                form[field]
                for field in UPLOAD_FIELDS
                if isinstance(form.get(field), UploadFile)
            ),
            None,
        )
        if upload is None:
            raise HTTPException(status_code=400, detail="No file or filePath provided")
        tmp_dir = Path(tempfile.mkdtemp(prefix="akave-"))
        try:
            staged = await _stage_upload(upload, tmp_dir)
            result = await storage.storage_service.upload_file(bucket_name, str(staged))
        finally:
            shutil.rmtree(tmp_dir, ignore_errors=True)
        return respond(result)

    try:
        req = UploadPathRequest.model_validate(await request.json())
    except (ValueError, ValidationError):
        raise HTTPException(status_code=400, detail="No file or filePath provided")
    return respond(await storage.storage_service.upload_file(bucket_name, req.file_path))


@router.get("/{file_name}/download")
async def download_file(bucket_name: str, file_name: str):
    """Download into the configured directory and stream the body back."""
    download_dir = Path(settings.download_dir)
    download_dir.mkdir(parents=True, exist_ok=True)

    result = await storage.storage_service.download_file(
        bucket_name, file_name, str(download_dir),
    )
    if isinstance(result.data, RawPassthrough):
        # The per-call directory goes once the body has been sent
        call_dir = Path(result.data.path).parent
        return FileResponse(
            result.data.path,
            media_type="application/octet-stream",
            filename=file_name,
            background=BackgroundTask(shutil.rmtree, call_dir, ignore_errors=True),
        )
    return respond(result)
