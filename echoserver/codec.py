"""
Echo Server Codec

Parses request bodies by content type and renders payloads as JSON or XML.
"""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import parse_qs

from reqchain.serializer import dict_to_xml, xml_to_dict

JSON_MEDIA_TYPE = "application/json"
XML_MEDIA_TYPE = "application/xml"
FORM_MEDIA_TYPE = "application/x-www-form-urlencoded"

SUPPORTED_MEDIA_TYPES = (JSON_MEDIA_TYPE, XML_MEDIA_TYPE)


def _sorted(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: _sorted(value[key]) for key in sorted(value)}
    if isinstance(value, list):
        return [_sorted(item) for item in value]
    return value


def parse_body(content_type: str | None, raw: bytes) -> Any:
    """
    Parse a request body.

    - JSON: any JSON value
    - XML: mapping keyed by the root element name
    - form: flat mapping, first value per field
    - anything else: None

    Raises:
        ValueError: If the body does not match its content type
    """
    media_type = (content_type or "").split(";", 1)[0].strip().lower()

    if media_type == JSON_MEDIA_TYPE:
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"parse json body: {e}") from e
    if media_type == XML_MEDIA_TYPE:
        try:
            return xml_to_dict(raw, keep_root=True)
        except ValueError as e:
            raise ValueError(f"parse xml: {e}") from e
    if media_type == FORM_MEDIA_TYPE:
        try:
            fields = parse_qs(raw.decode("utf-8"), keep_blank_values=True, strict_parsing=bool(raw))
        except (UnicodeDecodeError, ValueError) as e:
            raise ValueError(f"parse form: {e}") from e
        return {key: values[0] for key, values in fields.items()}
    return None


def encode_payload(data: Any, media_type: str) -> str:
    """Render ``data`` as compact JSON (map keys sorted) or XML."""
    if media_type == XML_MEDIA_TYPE:
        return dict_to_xml(data, "response")
    return json.dumps(_sorted_payload(data), separators=(",", ":"), ensure_ascii=False) + "\n"


def _sorted_payload(data: Any) -> Any:
    # Top-level fields keep their declared order, nested maps are sorted
    if isinstance(data, dict):
        return {key: _sorted(value) for key, value in data.items()}
    if isinstance(data, list):
        return [_sorted_payload(item) for item in data]
    return data
