"""Typed results for bucket and file operations."""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Annotated, Any, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class OperationKind(str, Enum):
    create_bucket = "createBucket"
    delete_bucket = "deleteBucket"
    view_bucket = "viewBucket"
    list_buckets = "listBuckets"
    list_files = "listFiles"
    file_info = "fileInfo"
    upload_file = "uploadFile"
    download_file = "downloadFile"


# Operations that submit a ledger transaction worth correlating
TRACKABLE_OPERATIONS: frozenset[OperationKind] = frozenset({
    OperationKind.create_bucket,
    OperationKind.delete_bucket,
    OperationKind.upload_file,
})


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class _KeyValueRecord(_Frozen):
    """One parsed ``Key=Value, ...`` line; every key is kept in order.

    Freezing is shallow: ``fields`` itself is a plain dict.  Callers that
    hand the mapping on should pass ``view``, which cannot be written to.
    """

    fields: dict[str, str]

    @property
    def view(self) -> Mapping[str, str]:
        return MappingProxyType(self.fields)

    @property
    def name(self) -> Optional[str]:
        return self.fields.get("Name")

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.fields.get(key, default)


class BucketRecord(_KeyValueRecord):
    kind: Literal["bucket"] = "bucket"


class FileRecord(_KeyValueRecord):
    kind: Literal["file"] = "file"


class UploadAck(_KeyValueRecord):
    kind: Literal["upload"] = "upload"


class DeletionAck(_KeyValueRecord):
    kind: Literal["deletion"] = "deletion"


class BucketList(_Frozen):
    kind: Literal["bucket_list"] = "bucket_list"
    buckets: list[BucketRecord] = []


class FileList(_Frozen):
    kind: Literal["file_list"] = "file_list"
    files: list[FileRecord] = []


class RawPassthrough(_Frozen):
    """Download result: the body lives on disk and is never text-parsed."""

    kind: Literal["raw"] = "raw"
    path: str
    size: int = 0


class ErrorPayload(_Frozen):
    """JSON object the tool printed instead of its success text."""

    kind: Literal["error"] = "error"
    payload: dict[str, Any]


ParsedResult = Annotated[
    Union[
        BucketRecord,
        BucketList,
        FileRecord,
        FileList,
        DeletionAck,
        UploadAck,
        RawPassthrough,
        ErrorPayload,
    ],
    Field(discriminator="kind"),
]


class OperationResult(_Frozen):
    """What the storage service hands back for every operation."""

    operation: OperationKind
    data: ParsedResult
    transaction_hash: Optional[str] = Field(
        default=None,
        pattern=r"^0x[0-9a-fA-F]{64}$",
        description="Advisory: latest ledger tx from the account, best effort",
    )
    exit_code: int = 0

    @property
    def is_error(self) -> bool:
        return isinstance(self.data, ErrorPayload)
