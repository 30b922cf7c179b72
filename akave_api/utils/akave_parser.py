"""Utilities for parsing akavecli text output into typed results."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional

from akave_api.errors import ParseError
from akave_api.models.storage import (
    BucketList,
    BucketRecord,
    DeletionAck,
    ErrorPayload,
    FileList,
    FileRecord,
    OperationKind,
    UploadAck,
)


# ---------------------------------------------------------------------------
# Grammar table
# ---------------------------------------------------------------------------

# Match modes
WHOLE = "whole"  # the entire trimmed text must start with the prefix
SCAN = "scan"    # first line that contains the marker anywhere
LINES = "lines"  # every line that starts with the prefix is one record


@dataclass(frozen=True)
class Grammar:
    """Line format the tool prints for one operation kind.

    ``offset`` is where the key/value payload starts, counted from the
    beginning of the prefix.  It is stated per row rather than derived from
    ``prefix`` so a vendor change to a message has to be made here.
    """

    prefix: str
    offset: int
    mode: str
    record: type
    pair_separator: str = ", "
    kv_separator: str = "="
    required_keys: tuple[str, ...] = ()


GRAMMARS: dict[OperationKind, Grammar] = {
    OperationKind.create_bucket: Grammar("Bucket created:", 15, WHOLE, BucketRecord),
    OperationKind.view_bucket: Grammar("Bucket:", 8, WHOLE, BucketRecord),
    OperationKind.delete_bucket: Grammar(
        "Bucket deleted:", 15, WHOLE, DeletionAck, required_keys=("Name",),
    ),
    OperationKind.file_info: Grammar("File:", 6, WHOLE, FileRecord),
    OperationKind.upload_file: Grammar(
        "File uploaded successfully:", 27, SCAN, UploadAck,
    ),
    OperationKind.list_buckets: Grammar("Bucket:", 8, LINES, BucketRecord),
    OperationKind.list_files: Grammar("File:", 6, LINES, FileRecord),
}

_LIST_TYPES: dict[OperationKind, tuple[type, str]] = {
    OperationKind.list_buckets: (BucketList, "buckets"),
    OperationKind.list_files: (FileList, "files"),
}


# ---------------------------------------------------------------------------
# JSON error detection
# ---------------------------------------------------------------------------

def decode_error_payload(output: str) -> Optional[dict[str, Any]]:
    """Return the decoded mapping if *output* is a JSON object, else None."""
    try:
        decoded = json.loads(output)
    except ValueError:
        return None
    if isinstance(decoded, dict):
        return decoded
    return None


# ---------------------------------------------------------------------------
# Key/value payloads
# ---------------------------------------------------------------------------

def parse_pairs(
    payload: str,
    *,
    pair_separator: str = ", ",
    kv_separator: str = "=",
) -> dict[str, str]:
    """Split ``Name=a, Size=10`` into an ordered mapping.

    Raises ValueError on a segment without a separator or with an empty key.
    """
    fields: dict[str, str] = {}
    for segment in payload.strip().split(pair_separator):
        key, sep, value = segment.partition(kv_separator)
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"malformed segment {segment!r}")
        fields[key] = value.strip()
    return fields


def _record(grammar: Grammar, payload: str, kind: OperationKind, output: str):
    try:
        fields = parse_pairs(
            payload,
            pair_separator=grammar.pair_separator,
            kv_separator=grammar.kv_separator,
        )
    except ValueError as exc:
        raise ParseError(
            f"Invalid {kind.value} record: {exc}",
            operation=kind.value,
            output=output,
        ) from exc
    missing = [k for k in grammar.required_keys if k not in fields]
    if missing:
        raise ParseError(
            f"Missing {', '.join(missing)} in {kind.value} output",
            operation=kind.value,
            output=output,
        )
    return grammar.record(fields=fields)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

def parse_output(output: str, kind: OperationKind):
    """Turn combined tool output into exactly one ParsedResult.

    A JSON object anywhere in place of the success text wins over the
    grammar and comes back as ErrorPayload.
    """
    text = output.strip()
    if not text:
        raise ParseError("Empty output", operation=kind.value, output=output)

    payload = decode_error_payload(text)
    if payload is not None:
        return ErrorPayload(payload=payload)

    grammar = GRAMMARS.get(kind)
    if grammar is None:
        # Downloads only reach the parser when no file was produced
        raise ParseError(
            f"No parseable result for {kind.value}",
            operation=kind.value,
            output=text,
        )

    if grammar.mode == WHOLE:
        if not text.startswith(grammar.prefix):
            raise ParseError(
                f"Unexpected output format for {kind.value}",
                operation=kind.value,
                output=text,
            )
        return _record(grammar, text[grammar.offset:], kind, text)

    if grammar.mode == SCAN:
        for line in text.splitlines():
            pos = line.find(grammar.prefix)
            if pos != -1:
                return _record(grammar, line[pos + grammar.offset:], kind, text)
        raise ParseError(
            f"Marker {grammar.prefix!r} not found",
            operation=kind.value,
            output=text,
        )

    list_type, attr = _LIST_TYPES[kind]
    records = [
        _record(grammar, line[grammar.offset:], kind, text)
        for line in text.splitlines()
        if line.startswith(grammar.prefix)
    ]
    return list_type(**{attr: records})
