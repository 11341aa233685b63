"""Echo server route handlers."""

from echoserver.routes import echo

__all__ = ["echo"]
