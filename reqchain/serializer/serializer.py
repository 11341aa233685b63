"""
Serializer

Converts between Python values and wire strings in two steps: pydantic
normalizes values to plain data (and validates plain data back into typed
values), and the first registered encoder that supports the format handles
the string side.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Optional, Sequence

from pydantic import TypeAdapter

from reqchain.errors import UnsupportedFormatError

from .base import Encoder
from .form_encoder import FormEncoder
from .json_encoder import JsonEncoder
from .xml_encoder import XmlEncoder

SKIP_NONE_VALUES = "skip_none_values"
STRICT = "strict"


@lru_cache(maxsize=256)
def _adapter(type_: Any) -> TypeAdapter:
    return TypeAdapter(type_)


class Serializer:
    """
    Pydantic-backed serializer with a pluggable encoder registry.

    Usage:
        serializer = Serializer.default()

        payload = serializer.serialize(user, "json")
        users = serializer.deserialize(data, list[User], "json")
    """

    def __init__(self, encoders: Sequence[Encoder] = ()) -> None:
        self.encoders: list[Encoder] = list(encoders)

    @classmethod
    def default(cls) -> "Serializer":
        """Serializer with JSON, XML and form encoders registered."""
        return cls([JsonEncoder(), XmlEncoder(), FormEncoder()])

    def supports_encoding(self, format: str) -> bool:
        return any(encoder.supports_encoding(format) for encoder in self.encoders)

    def supports_decoding(self, format: str) -> bool:
        return any(encoder.supports_decoding(format) for encoder in self.encoders)

    def normalize(self, value: Any, context: Optional[dict[str, Any]] = None) -> Any:
        """Reduce ``value`` to JSON-compatible plain data."""
        context = context or {}
        return _adapter(type(value)).dump_python(
            value,
            mode="json",
            by_alias=True,
            exclude_none=bool(context.get(SKIP_NONE_VALUES, False)),
        )

    def denormalize(self, data: Any, type_: Any, context: Optional[dict[str, Any]] = None) -> Any:
        """Validate plain ``data`` into ``type_`` (``C`` or ``list[C]``)."""
        context = context or {}
        return _adapter(type_).validate_python(data, strict=context.get(STRICT))

    def serialize(self, value: Any, format: str, context: Optional[dict[str, Any]] = None) -> str:
        """
        Serialize a value into a wire string.

        Args:
            value: Model instance, dataclass, mapping, list or scalar
            format: Format token (``json``, ``xml``, ``form``, ...)
            context: Options passed to normalizer and encoder

        Returns:
            Encoded string
        """
        encoder = self._get_encoder(format)
        return encoder.encode(self.normalize(value, context), format, context)

    def deserialize(
        self,
        data: str,
        type_: Any,
        format: str,
        context: Optional[dict[str, Any]] = None,
    ) -> Any:
        """
        Deserialize a wire string into ``type_``.

        Raises:
            UnsupportedFormatError: If no decoder handles ``format``
            DecodingError: If ``data`` is malformed
            pydantic.ValidationError: If decoded data does not fit ``type_``
        """
        decoder = self._get_decoder(format)
        return self.denormalize(decoder.decode(data, format, context), type_, context)

    def _get_encoder(self, format: str) -> Encoder:
        for encoder in self.encoders:
            if encoder.supports_encoding(format):
                return encoder
        raise UnsupportedFormatError(format, "encoding")

    def _get_decoder(self, format: str) -> Encoder:
        for encoder in self.encoders:
            if encoder.supports_decoding(format):
                return encoder
        raise UnsupportedFormatError(format, "decoding")
