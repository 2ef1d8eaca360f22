"""
Payload normalization for Aer.

Turns whatever a capture produced into the payload shape the upload API
expects: one of `content`, `plaintext` or `encryptedContent`, plus a fixed
set of passthrough fields. Normalization never fails.
"""

import json
import math
from collections.abc import Callable, Mapping, Sequence
from enum import Enum
from typing import Any

# Fields copied verbatim from a record artifact when present
PASSTHROUGH_KEYS = (
    "metadata",
    "timestamp",
    "summaryOnly",
    "tags",
    "encryptedTitle",
    "encryptedSummary",
    "url",
    "fileName",
    "fileType",
    "title",
)

# Fields that already satisfy the upload API
PAYLOAD_KEYS = ("content", "plaintext", "encryptedContent")

# Common content field names, checked in order
CONTENT_FIELDS = ("text", "message", "body", "data", "value", "html")

# Browsers switch to exponent notation from here on
JS_EXPONENT_THRESHOLD = 1e21


class ArtifactKind(str, Enum):
    """Closed set of shapes a captured artifact can take."""

    EMPTY = "empty"
    TEXT = "text"
    SEQUENCE = "sequence"
    RECORD = "record"
    SCALAR = "scalar"


def _format_float(value: float) -> str:
    """Number formatting as browsers print it: 1.0 -> "1", nan -> "NaN"."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < JS_EXPONENT_THRESHOLD:
        return str(int(value))
    return repr(value)


def _json_safe(value: Any) -> Any:
    """Replace floats JSON cannot carry: non-finite become null, integral become ints."""
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        if value.is_integer() and abs(value) < JS_EXPONENT_THRESHOLD:
            return int(value)
        return value
    if isinstance(value, Mapping):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    return value


def to_json(value: Any) -> str:
    """Serialize compactly, the way a browser's JSON.stringify would."""
    return json.dumps(
        _json_safe(value),
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
        default=str,
    )


def stringify(value: Any) -> str:
    """Stringify a scalar artifact."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _format_float(value)
    return str(value)


def classify_artifact(artifact: Any) -> ArtifactKind:
    """Map an untyped artifact onto the closed ArtifactKind variant."""
    if artifact is None:
        return ArtifactKind.EMPTY
    if isinstance(artifact, str):
        return ArtifactKind.TEXT
    if isinstance(artifact, Mapping):
        return ArtifactKind.RECORD
    if isinstance(artifact, Sequence) and not isinstance(artifact, (bytes, bytearray)):
        return ArtifactKind.SEQUENCE
    return ArtifactKind.SCALAR


def _passthrough(record: Mapping[str, Any]) -> dict[str, Any]:
    return {key: record[key] for key in PASSTHROUGH_KEYS if key in record}


def _has_payload(record: Mapping[str, Any]) -> bool:
    return any(record.get(key) for key in PAYLOAD_KEYS)


def _keep_payload(record: Mapping[str, Any]) -> dict[str, Any]:
    return {**record, **_passthrough(record)}


def _has_encrypted(record: Mapping[str, Any]) -> bool:
    return bool(record.get("encrypted"))


def _map_encrypted(record: Mapping[str, Any]) -> dict[str, Any]:
    return {"encryptedContent": record["encrypted"], **_passthrough(record)}


def _content_field(record: Mapping[str, Any]) -> str | None:
    for field in CONTENT_FIELDS:
        if field in record:
            return field
    return None


def _has_content_field(record: Mapping[str, Any]) -> bool:
    return _content_field(record) is not None


def _map_content_field(record: Mapping[str, Any]) -> dict[str, Any]:
    value = record[_content_field(record)]
    content = value if isinstance(value, str) else to_json(value)
    return {"content": content, **_passthrough(record)}


def _serialize_record(record: Mapping[str, Any]) -> dict[str, Any]:
    return {"content": to_json(dict(record)), **_passthrough(record)}


Rule = tuple[Callable[[Mapping[str, Any]], bool], Callable[[Mapping[str, Any]], dict[str, Any]]]

# Record rules in priority order; the last one always matches
RECORD_RULES: tuple[Rule, ...] = (
    (_has_payload, _keep_payload),
    (_has_encrypted, _map_encrypted),
    (_has_content_field, _map_content_field),
    (lambda record: True, _serialize_record),
)


def normalize_record(record: Mapping[str, Any]) -> dict[str, Any]:
    """Normalize a record artifact by the first matching rule."""
    for matches, extract in RECORD_RULES:
        if matches(record):
            return extract(record)
    raise AssertionError("unreachable: the last record rule always matches")


def normalize(artifact: Any) -> dict[str, Any]:
    """
    Normalize a captured artifact into an upload payload.

    Args:
        artifact: None, a string, a list/tuple, a dict, or any scalar

    Returns:
        A new dict carrying `content`, `plaintext` or `encryptedContent`
        plus any passthrough fields. The artifact is never mutated.
    """
    kind = classify_artifact(artifact)

    if kind is ArtifactKind.EMPTY:
        return {"content": ""}
    if kind is ArtifactKind.TEXT:
        return {"content": artifact}
    if kind is ArtifactKind.SEQUENCE:
        return {"content": to_json(list(artifact))}
    if kind is ArtifactKind.RECORD:
        return normalize_record(artifact)
    return {"content": stringify(artifact)}


def has_content(payload: Mapping[str, Any]) -> bool:
    """Check the payload carries at least one field the upload API accepts."""
    return _has_payload(payload)
