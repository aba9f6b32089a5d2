"""Normalization layer converting raw store documents -> plain API payloads.

Why separate module?:
    Every read path (listings, favorites, reviews, profiles) shares the same
    steps: decode fields, attach the document id, fill defaults. Keeping them
    here, away from both the HTTP client and the routes, makes the rules easy
    to unit test and to extend with another defaults table.

Defaults tables map field name -> default value, or -> a callable that
synthesises the value from the already-decoded fields. Entries are applied in
table order and only ever fill absent fields (missing or null).
"""

import copy
from typing import Any, Callable, Dict, Mapping, Optional, Union

from havenhub.firestore.codec import decode_fields

DefaultRule = Union[Any, Callable[[Dict[str, Any]], Any]]


def _coordinates(data: Dict[str, Any]) -> Dict[str, Any]:
    lat, lng = data.get("latitude"), data.get("longitude")
    if lat is not None and lng is not None:
        return {"lat": lat, "lng": lng}
    return {"lat": 0, "lng": 0}


LISTING_DEFAULTS: Dict[str, DefaultRule] = {
    # arrays
    "images": [],
    "amenities": [],
    "aiInsights": [],
    # strings
    "roomType": "single",
    "title": "Untitled Property",
    "location": "Unknown Location",
    "description": "",
    # geo
    "coordinates": _coordinates,
}

FAVORITE_DEFAULTS: Dict[str, DefaultRule] = {
    "images": [],
    "amenities": [],
    "aiInsights": [],
    "roomType": "single",
    "title": "Untitled Property",
    "location": "Unknown Location",
}

REVIEW_DEFAULTS: Dict[str, DefaultRule] = {
    "comment": "",
    "rating": 0,
    "helpful": 0,
}

PROFILE_DEFAULTS: Dict[str, DefaultRule] = {
    "displayName": "",
    "college": "",
    "bio": "",
    "photoURL": "",
    "major": "",
    "year": "",
    "interests": [],
}

PUBLIC_PROFILE_DEFAULTS: Dict[str, DefaultRule] = {
    **PROFILE_DEFAULTS,
    "displayName": "Anonymous Student",
}


def document_id(name: Optional[str]) -> Optional[str]:
    """Last segment of "projects/.../documents/properties/ID"."""
    if not name:
        return None
    return name.rstrip("/").split("/")[-1] or None


def apply_defaults(data: Dict[str, Any], defaults: Mapping[str, DefaultRule]) -> Dict[str, Any]:
    for field, rule in defaults.items():
        if data.get(field) is not None:
            continue
        data[field] = rule(data) if callable(rule) else copy.deepcopy(rule)
    return data


def normalize_document(doc: Mapping[str, Any], defaults: Mapping[str, DefaultRule] = LISTING_DEFAULTS) -> Dict[str, Any]:
    """Return the decoded, defaulted form of one raw store document.

    The id comes first so a stored `id` field (if any) takes precedence, the
    same way the decoded data is layered over it on the store side.
    """
    data: Dict[str, Any] = {"id": document_id(doc.get("name"))}
    data.update(decode_fields(doc.get("fields") or {}))
    if data.get("id") is None:
        data["id"] = document_id(doc.get("name"))
    return apply_defaults(data, defaults)
