"""
Client factory.

Wires configuration, transport and serializer into a ready ``Request``.
"""

from __future__ import annotations

import logging
from typing import Optional

from reqchain.config.runtime import ClientConfig, get_default_config
from reqchain.request import Request
from reqchain.serializer import Serializer
from reqchain.transport import SUPPORTED_OPTIONS, HttpTransport, RequestsTransport

logger = logging.getLogger(__name__)


def create_request(
    config: Optional[ClientConfig] = None,
    *,
    transport: Optional[HttpTransport] = None,
    serializer: Optional[Serializer] = None,
) -> Request:
    """
    Create a base ``Request`` from configuration.

    Args:
        config: Client configuration, defaults to ``get_default_config()``
        transport: Transport to use instead of a ``RequestsTransport``
        serializer: Serializer to use instead of ``Serializer.default()``

    Returns:
        Request carrying the configured base options, base URI and headers

    Raises:
        ValueError: If the configured options name an unsupported option
    """
    config = config or get_default_config()

    unsupported = sorted(set(config.options) - SUPPORTED_OPTIONS)
    if unsupported:
        raise ValueError(f"Unsupported option \"{unsupported[0]}\" in client configuration")

    options: dict = dict(config.options)
    if config.base_uri:
        options["base_uri"] = config.base_uri
    if config.headers:
        options["headers"] = dict(config.headers)

    logger.debug(
        "Creating request builder (base_uri=%s, formats=%s/%s)",
        config.base_uri, config.formats.request, config.formats.response,
    )

    return Request.create(
        transport or RequestsTransport(config.http),
        serializer or Serializer.default(),
        request_format=config.formats.request,
        response_format=config.formats.response,
        options=options,
    )
