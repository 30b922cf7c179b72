"""Common API request and response models."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from akave_api.models.storage import (
    BucketList,
    ErrorPayload,
    FileList,
    OperationResult,
    RawPassthrough,
)


class HealthResponse(BaseModel):
    status: str
    version: str


class CreateBucketRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    bucket_name: str = Field(alias="bucketName", min_length=1)


class UploadPathRequest(BaseModel):
    """Upload a file that already exists on the gateway host."""

    model_config = ConfigDict(populate_by_name=True)

    file_path: str = Field(alias="filePath", min_length=1)


class OperationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    data: Any = None
    transaction_hash: Optional[str] = Field(default=None, alias="transactionHash")

    @classmethod
    def from_result(cls, result: OperationResult) -> "OperationResponse":
        return cls(
            success=True,
            data=result_payload(result.data),
            transaction_hash=result.transaction_hash,
        )


class ErrorResponse(BaseModel):
    success: bool = False
    error: Any
    error_type: Optional[str] = None


def result_payload(data) -> Any:
    """Plain JSON shape of a parsed result: records become their key/values."""
    if isinstance(data, BucketList):
        return [b.fields for b in data.buckets]
    if isinstance(data, FileList):
        return [f.fields for f in data.files]
    if isinstance(data, ErrorPayload):
        return data.payload
    if isinstance(data, RawPassthrough):
        return {"path": data.path, "size": data.size}
    return dict(data.fields)
