"""
XML encoder and decoder.

Normalized data maps onto elements as follows:
- mapping keys become child elements, ``@name`` keys become attributes and
  the ``#`` key becomes the element text
- lists become repeated elements with the same name
- keys that are not valid element names are written as
  ``<item key="...">``
- booleans are written as ``1``/``0``, ``None`` as an empty element

Decoding reverses the mapping. All text stays a string; type coercion is
left to the denormalizer.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from collections.abc import Mapping
from typing import Any, Optional

from reqchain.errors import DecodingError

from .base import Encoder

XML_ROOT_NODE_NAME = "xml_root_node_name"
XML_ENCODING = "xml_encoding"
XML_VERSION = "xml_version"
XML_FORMAT_OUTPUT = "xml_format_output"

DEFAULT_ROOT_NODE_NAME = "response"

_NAME_RE = re.compile(r"^[A-Za-z_][\w.\-]*$")


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def _append(parent: ET.Element, name: str, value: Any) -> None:
    if _NAME_RE.match(name):
        child = ET.SubElement(parent, name)
    else:
        child = ET.SubElement(parent, "item", {"key": name})
    _build(child, value)


def _build(element: ET.Element, data: Any) -> None:
    if isinstance(data, Mapping):
        for key, value in data.items():
            key = str(key)
            if key.startswith("@"):
                element.set(key[1:], _scalar(value))
            elif key == "#":
                element.text = _scalar(value)
            elif isinstance(value, (list, tuple)):
                for item in value:
                    _append(element, key, item)
            else:
                _append(element, key, value)
    elif isinstance(data, (list, tuple)):
        for item in data:
            _append(element, "item", item)
    elif data is not None:
        element.text = _scalar(data)


def _element_to_value(element: ET.Element) -> Any:
    attributes = {f"@{k}": v for k, v in element.attrib.items()}
    children = list(element)
    text = (element.text or "").strip()

    if not children:
        if attributes:
            if text:
                attributes["#"] = text
            return attributes
        return text

    result: dict[str, Any] = attributes
    repeated: set[str] = set()
    for child in children:
        name = child.tag
        if name == "item" and "key" in child.attrib:
            name = child.attrib["key"]
            del child.attrib["key"]
        value = _element_to_value(child)
        if name not in result:
            result[name] = value
        elif name in repeated:
            result[name].append(value)
        else:
            result[name] = [result[name], value]
            repeated.add(name)
    return result


def dict_to_xml(
    data: Any,
    root: str = DEFAULT_ROOT_NODE_NAME,
    *,
    version: str = "1.0",
    encoding: Optional[str] = None,
    format_output: bool = False,
) -> str:
    """Render normalized data as an XML document with the given root element."""
    element = ET.Element(root)
    _build(element, data)
    if format_output:
        ET.indent(element)

    declaration = f'<?xml version="{version}"'
    if encoding:
        declaration += f' encoding="{encoding}"'
    declaration += "?>"

    return f"{declaration}\n{ET.tostring(element, encoding='unicode')}\n"


def xml_to_dict(data: str | bytes, keep_root: bool = False) -> Any:
    """
    Parse an XML document into normalized data.

    With ``keep_root`` the result is ``{root_tag: value}``, otherwise the
    root element is stripped.
    """
    if not data or not data.strip():
        raise DecodingError("Invalid XML data, it cannot be empty")
    if isinstance(data, str):
        data = data.encode("utf-8")

    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise DecodingError(f"Invalid XML data: {e}") from e

    value = _element_to_value(root)
    if keep_root:
        return {root.tag: value}
    return value


class XmlEncoder(Encoder):
    """Handles the ``xml`` format in both directions."""

    format = "xml"

    def supports_encoding(self, format: str) -> bool:
        return format == self.format

    def supports_decoding(self, format: str) -> bool:
        return format == self.format

    def encode(self, data: Any, format: str, context: Optional[dict[str, Any]] = None) -> str:
        context = context or {}
        return dict_to_xml(
            data,
            context.get(XML_ROOT_NODE_NAME, DEFAULT_ROOT_NODE_NAME),
            version=context.get(XML_VERSION, "1.0"),
            encoding=context.get(XML_ENCODING),
            format_output=bool(context.get(XML_FORMAT_OUTPUT, False)),
        )

    def decode(self, data: str, format: str, context: Optional[dict[str, Any]] = None) -> Any:
        return xml_to_dict(data)
