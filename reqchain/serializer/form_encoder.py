"""Encodes flat mappings as ``application/x-www-form-urlencoded``."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional
from urllib.parse import urlencode

from reqchain.errors import SerializationError

from .base import Encoder


class FormEncoder(Encoder):
    """
    Adds the ``form`` format to a serializer.

    Values must already be scalars: nested mappings or lists are rejected
    rather than guessed at.
    """

    format = "form"

    def supports_encoding(self, format: str) -> bool:
        return format == self.format

    def encode(self, data: Any, format: str, context: Optional[dict[str, Any]] = None) -> str:
        if not isinstance(data, Mapping):
            raise SerializationError(
                f"Form encoding expects a mapping, got {type(data).__name__}",
            )

        pairs: list[tuple[str, str]] = []
        for key, value in data.items():
            if value is None:
                continue
            if isinstance(value, (Mapping, list, tuple)):
                raise SerializationError(
                    f'Form field "{key}" must be a scalar, got {type(value).__name__}',
                    details={"field": key},
                )
            if isinstance(value, bool):
                value = int(value)
            pairs.append((str(key), str(value)))

        return urlencode(pairs)
