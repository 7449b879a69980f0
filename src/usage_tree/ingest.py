"""Load invocation records exported by collectors.

Supported formats, chosen by file extension:

    .json            array of objects
    .jsonl / .ndjson one object per line
    .csv             header row with signature, methodName, invokedAtMillis

Both the collector's camelCase keys and snake_case keys are accepted.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Mapping, Optional

from .exceptions import RecordFormatError
from .logging_config import get_logger
from .models import InvocationRecord

logger = get_logger(__name__)

_KEYS = {
    "signature": ("signature",),
    "method_name": ("methodName", "method_name"),
    "invoked_at_millis": ("invokedAtMillis", "invoked_at_millis"),
}


def _lookup(data: Mapping[str, Any], field: str) -> Any:
    for key in _KEYS[field]:
        if key in data and data[key] not in (None, ""):
            return data[key]
    return None


def record_from_mapping(data: Any, source: str, location: str) -> InvocationRecord:
    """Build one record, reporting ``source``/``location`` on bad input."""
    if not isinstance(data, Mapping):
        raise RecordFormatError(source, "expected an object", location)

    signature = _lookup(data, "signature")
    if not isinstance(signature, str):
        raise RecordFormatError(source, "missing 'signature'", location)

    method_name = _lookup(data, "method_name") or ""

    raw_millis = _lookup(data, "invoked_at_millis")
    try:
        invoked_at_millis = int(raw_millis) if raw_millis is not None else 0
    except (TypeError, ValueError):
        raise RecordFormatError(source, f"invokedAtMillis is not an integer: {raw_millis!r}", location)

    return InvocationRecord(
        signature=signature,
        method_name=str(method_name),
        invoked_at_millis=invoked_at_millis,
    )


def load_records(path: Path, fmt: Optional[str] = None) -> list[InvocationRecord]:
    """Read every record from ``path``.

    Args:
        path: Record file.
        fmt: ``json``, ``jsonl`` or ``csv``; inferred from the suffix if omitted.

    Raises:
        RecordFormatError: unreadable file, unknown format or a bad record.
    """
    source = str(path)
    fmt = (fmt or path.suffix.lstrip(".")).lower()
    if fmt == "ndjson":
        fmt = "jsonl"

    try:
        if fmt == "json":
            records = _load_json(path, source)
        elif fmt == "jsonl":
            records = _load_jsonl(path, source)
        elif fmt == "csv":
            records = _load_csv(path, source)
        else:
            raise RecordFormatError(source, f"unsupported format {fmt!r}")
    except OSError as e:
        raise RecordFormatError(source, str(e)) from e

    logger.debug("Loaded %d record(s) from %s", len(records), source)
    return records


def _load_json(path: Path, source: str) -> list[InvocationRecord]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise RecordFormatError(source, f"invalid JSON: {e.msg}", f"line {e.lineno}") from e
    if not isinstance(data, list):
        raise RecordFormatError(source, "expected a JSON array of records")
    return [record_from_mapping(item, source, f"index {i}") for i, item in enumerate(data)]


def _load_jsonl(path: Path, source: str) -> list[InvocationRecord]:
    records: list[InvocationRecord] = []
    with open(path, encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                data = json.loads(line)
            except json.JSONDecodeError as e:
                raise RecordFormatError(source, f"invalid JSON: {e.msg}", f"line {lineno}") from e
            records.append(record_from_mapping(data, source, f"line {lineno}"))
    return records


def _load_csv(path: Path, source: str) -> list[InvocationRecord]:
    with open(path, encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        # header is line 1
        return [record_from_mapping(row, source, f"line {i}") for i, row in enumerate(reader, start=2)]
