"""
Encoder base class.

An encoder turns normalized data (mappings, lists and scalars) into a wire
string for one or more format tokens, and optionally back.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional


class Encoder(ABC):
    """Base class for format handlers registered on a ``Serializer``."""

    @abstractmethod
    def supports_encoding(self, format: str) -> bool:
        """Whether this encoder can produce ``format``."""

    @abstractmethod
    def encode(self, data: Any, format: str, context: Optional[dict[str, Any]] = None) -> str:
        """Encode normalized ``data`` into ``format``."""

    def supports_decoding(self, format: str) -> bool:
        """Whether this encoder can parse ``format``. Encode-only by default."""
        return False

    def decode(self, data: str, format: str, context: Optional[dict[str, Any]] = None) -> Any:
        """Decode ``data`` into normalized data."""
        raise NotImplementedError(f"{type(self).__name__} does not decode {format!r}")
