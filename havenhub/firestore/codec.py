"""Typed value codec for the document store's REST wire format.

Every field on the wire is a single-key mapping whose key names the value
kind, e.g. {"integerValue": "42"} or {"mapValue": {"fields": {...}}}.
decode_value turns that into plain Python values; encode_value goes the
other way for write paths.
"""

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping


class ValueKind(str, Enum):
    INTEGER = "integerValue"
    DOUBLE = "doubleValue"
    BOOLEAN = "booleanValue"
    STRING = "stringValue"
    TIMESTAMP = "timestampValue"
    NULL = "nullValue"
    ARRAY = "arrayValue"
    MAP = "mapValue"
    GEO_POINT = "geoPointValue"


def _decode_integer(payload: Any) -> Any:
    try:
        return int(payload)
    except (TypeError, ValueError):
        return payload


def _decode_double(payload: Any) -> Any:
    try:
        number = float(payload)
    except (TypeError, ValueError):
        return payload
    # NaN and Infinity have no JSON form
    return number if math.isfinite(number) else None


def _decode_array(payload: Any) -> List[Any]:
    values = (payload or {}).get("values") or []
    return [decode_value(v) for v in values]


def _decode_map(payload: Any) -> Dict[str, Any]:
    return decode_fields((payload or {}).get("fields") or {})


def _decode_geo_point(payload: Any) -> Dict[str, Any]:
    payload = payload or {}
    return {"lat": payload.get("latitude"), "lng": payload.get("longitude")}


_DECODERS: Dict[ValueKind, Callable[[Any], Any]] = {
    ValueKind.INTEGER: _decode_integer,
    ValueKind.DOUBLE: _decode_double,
    ValueKind.BOOLEAN: lambda p: p,
    ValueKind.STRING: lambda p: p,
    ValueKind.TIMESTAMP: lambda p: p,
    ValueKind.NULL: lambda p: None,
    ValueKind.ARRAY: _decode_array,
    ValueKind.MAP: _decode_map,
    ValueKind.GEO_POINT: _decode_geo_point,
}


def decode_value(value: Any) -> Any:
    """Decode one wire value.

    The first key of the mapping is the kind tag. Unknown tags (bytesValue,
    referenceValue, anything added later) hand back their payload untouched;
    a mapping with no tag at all decodes to None. Never raises.
    """
    if not isinstance(value, Mapping):
        return value
    if not value:
        return None
    tag = next(iter(value))
    payload = value[tag]
    try:
        kind = ValueKind(tag)
    except ValueError:
        return payload
    return _DECODERS[kind](payload)


def decode_fields(fields: Mapping[str, Any]) -> Dict[str, Any]:
    return {name: decode_value(v) for name, v in (fields or {}).items()}


def timestamp_now() -> str:
    return format_timestamp(datetime.now(timezone.utc))


def format_timestamp(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def encode_value(value: Any) -> Dict[str, Any]:
    """Wrap a plain JSON-ish value into its wire form.

    bool is checked before numbers (bool is an int subclass). All numbers are
    written as doubles.
    """
    if value is None:
        return {ValueKind.NULL.value: None}
    if isinstance(value, bool):
        return {ValueKind.BOOLEAN.value: value}
    if isinstance(value, (int, float)):
        return {ValueKind.DOUBLE.value: float(value)}
    if isinstance(value, str):
        return {ValueKind.STRING.value: value}
    if isinstance(value, datetime):
        return {ValueKind.TIMESTAMP.value: format_timestamp(value)}
    if isinstance(value, Mapping):
        return {ValueKind.MAP.value: {"fields": encode_fields(value)}}
    if isinstance(value, (list, tuple)):
        return {ValueKind.ARRAY.value: {"values": [encode_value(v) for v in value]}}
    return {ValueKind.STRING.value: str(value)}


def encode_fields(data: Mapping[str, Any]) -> Dict[str, Dict[str, Any]]:
    return {str(k): encode_value(v) for k, v in data.items()}
