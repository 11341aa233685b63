"""
Serializer Module

Value normalization (pydantic) plus JSON, XML and form encoders.
"""

from .base import Encoder
from .form_encoder import FormEncoder
from .json_encoder import JSON_INDENT, JsonEncoder
from .serializer import SKIP_NONE_VALUES, STRICT, Serializer
from .xml_encoder import (
    XML_ENCODING,
    XML_FORMAT_OUTPUT,
    XML_ROOT_NODE_NAME,
    XML_VERSION,
    XmlEncoder,
    dict_to_xml,
    xml_to_dict,
)

__all__ = [
    "Encoder",
    "FormEncoder",
    "JsonEncoder",
    "Serializer",
    "XmlEncoder",
    "dict_to_xml",
    "xml_to_dict",
    "JSON_INDENT",
    "SKIP_NONE_VALUES",
    "STRICT",
    "XML_ENCODING",
    "XML_FORMAT_OUTPUT",
    "XML_ROOT_NODE_NAME",
    "XML_VERSION",
]
