# pushstream_exporter/decoder.py
"""
Date: 2026-10-18
Description:

Turn one raw channels-stats response into a PushStreamStatus.

The public surface is decode_status(raw).
Internally we follow single-responsibility:
decode ➜ load ➜ pick schema ➜ cast ➜ assemble.

Two wire schemas exist for the same document. Newer push stream modules send
counts as JSON numbers, older ones send the same counts as decimal strings.
The schema is picked from the type of the top-level ``channels`` field.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

from pushstream_exporter.exceptions import CastError, DecodeError

logger = logging.getLogger(__name__)

NUMERIC_SCHEMA = "numeric"
STRING_SCHEMA = "string"

COUNT_FIELDS = ("published_messages", "stored_messages", "subscribers")

# int64 range, as the module reports counts
MAX_COUNT = 2 ** 63 - 1

# at most 19 digits keeps int() clear of the str-to-int digit limit
_DIGITS = re.compile(r"[0-9]{1,19}")


@dataclass(frozen=True)
class ChannelRecord:
    """
    Counters of a single channel.

    In the string schema a count that was not an in-range decimal string is kept as
    ``None`` so the extraction step can skip it; it is never a raw string.
    """
    name: str
    published_messages: Optional[int]
    stored_messages: Optional[int]
    subscribers: Optional[int]


@dataclass(frozen=True)
class PushStreamStatus:
    """Normalized form of one scrape response."""
    total_channels: int
    channels: Tuple[ChannelRecord, ...]
    schema: str = NUMERIC_SCHEMA


def _to_str(raw: Union[str, bytes]) -> str:
    """
    Return *raw* as UTF-8 text or raise DecodeError.
    Args:
        raw (Union[str, bytes]): The raw response body.
    Returns:
        str: The body as text.
    Raises:
        DecodeError: If the body is not valid UTF-8.
    """
    if isinstance(raw, bytes):
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError("Response body is not valid UTF-8") from e
    return raw


def _load_object(text: str) -> Dict[str, Any]:
    try:
        data = json.loads(text)
    except (ValueError, RecursionError) as e:
        raise DecodeError(f"Unexpected error while reading JSON: {e!r}") from e
    if not isinstance(data, dict):
        raise DecodeError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def detect_schema(data: Dict[str, Any]) -> str:
    """Pick the wire schema from the shape of the top-level channel count."""
    if isinstance(data.get("channels"), str):
        return STRING_SCHEMA
    return NUMERIC_SCHEMA


def _cast_number(value: Any, field: str) -> int:
    # bool is an int subclass; true/false are not counts
    if isinstance(value, bool) or not isinstance(value, int):
        raise CastError(f"Field '{field}' must be an integer, got {value!r}")
    if value < 0:
        raise CastError(f"Field '{field}' must not be negative, got {value}")
    if value > MAX_COUNT:
        raise CastError(f"Field '{field}' is out of range (max {MAX_COUNT})")
    return value


def _cast_string(value: Any, field: str) -> int:
    if isinstance(value, str):
        if not _DIGITS.fullmatch(value):
            raise CastError(f"Field '{field}' is not a decimal count: {value!r}")
        return _cast_number(int(value), field)
    # older modules still send some counts as numbers
    return _cast_number(value, field)


# lookup table → cleaner than an if/elif ladder
_CASTERS = {
    NUMERIC_SCHEMA: _cast_number,
    STRING_SCHEMA: _cast_string,
}


def _cast_channel_count(value: Any, field: str, schema: str) -> Optional[int]:
    """
    Cast a per-channel count.

    The string schema tolerates a non-numeric string here and returns None.
    Every other mismatch raises CastError.
    """
    try:
        return _CASTERS[schema](value, field)
    except CastError:
        if schema == STRING_SCHEMA and isinstance(value, str):
            logger.debug("Keeping uncoercible %s=%r as unknown", field, value)
            return None
        raise


def _decode_channel(info: Any, schema: str) -> ChannelRecord:
    if not isinstance(info, dict):
        raise DecodeError(f"Channel entry must be an object, got {type(info).__name__}")
    name = info.get("channel")
    if not isinstance(name, str) or not name:
        raise DecodeError(f"Channel entry has no usable name: {name!r}")
    counts = {
        field: _cast_channel_count(info.get(field, 0), f"{name}.{field}", schema)
        for field in COUNT_FIELDS
    }
    return ChannelRecord(name=name, **counts)


def decode_status(raw: Union[str, bytes]) -> PushStreamStatus:
    """
    Decode a raw channels-stats document into a PushStreamStatus.
    Args:
        raw (Union[str, bytes]): The response body.
    Returns:
        PushStreamStatus: The normalized record.
    Raises:
        DecodeError: If the body is malformed, or a count does not match the
            schema. CastError is raised for a single bad count.
    """
    data = _load_object(_to_str(raw))
    schema = detect_schema(data)

    total = _CASTERS[schema](data.get("channels", 0), "channels")

    infos = data.get("infos")
    if infos is None:
        infos = []
    if not isinstance(infos, list):
        raise DecodeError(f"Field 'infos' must be a list, got {type(infos).__name__}")

    channels = tuple(_decode_channel(info, schema) for info in infos)
    logger.debug("Decoded %s-schema status with %d channel entries", schema, len(channels))
    return PushStreamStatus(total_channels=total, channels=channels, schema=schema)
