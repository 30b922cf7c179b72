"""Bucket endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from akave_api.auth import require_api_key
from akave_api.models.responses import CreateBucketRequest, OperationResponse
from akave_api.routers.common import respond
from akave_api.services import storage

router = APIRouter(
    prefix="/buckets",
    tags=["buckets"],
    dependencies=[Depends(require_api_key)],
)


@router.post("", response_model=OperationResponse)
async def create_bucket(req: CreateBucketRequest):
    """Create a bucket; the response carries the tx hash when one is found."""
    return respond(await storage.storage_service.create_bucket(req.bucket_name))


@router.get("", response_model=OperationResponse)
async def list_buckets():
    return respond(await storage.storage_service.list_buckets())


@router.get("/{bucket_name}", response_model=OperationResponse)
async def view_bucket(bucket_name: str):
    return respond(await storage.storage_service.view_bucket(bucket_name))


@router.delete("/{bucket_name}", response_model=OperationResponse)
async def delete_bucket(bucket_name: str):
    return respond(await storage.storage_service.delete_bucket(bucket_name))
