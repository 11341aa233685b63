"""JSON encoder and decoder."""

from __future__ import annotations

import json
from typing import Any, Optional

from reqchain.errors import DecodingError, SerializationError

from .base import Encoder

JSON_INDENT = "json_indent"

# Compact separators - no whitespace
JSON_SEPARATORS: tuple[str, str] = (",", ":")


class JsonEncoder(Encoder):
    """Handles the ``json`` format in both directions."""

    format = "json"

    def supports_encoding(self, format: str) -> bool:
        return format == self.format

    def supports_decoding(self, format: str) -> bool:
        return format == self.format

    def encode(self, data: Any, format: str, context: Optional[dict[str, Any]] = None) -> str:
        context = context or {}
        indent = context.get(JSON_INDENT)
        try:
            return json.dumps(
                data,
                ensure_ascii=False,
                indent=indent,
                separators=None if indent is not None else JSON_SEPARATORS,
            )
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Cannot encode value as JSON: {e}") from e

    def decode(self, data: str, format: str, context: Optional[dict[str, Any]] = None) -> Any:
        try:
            return json.loads(data)
        except json.JSONDecodeError as e:
            raise DecodingError(
                f"Invalid JSON data: {e.msg}",
                details={"line": e.lineno, "column": e.colno},
            ) from e
