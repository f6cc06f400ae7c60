"""Exception hierarchy shared by gateways, the tool loop and the request handler."""

from __future__ import annotations

from typing import Optional


class EconChatError(Exception):
    """Base class for all econchat errors."""


class GatewayError(EconChatError):
    """A model provider call failed and should not be retried at this layer."""

    def __init__(self, message: str, provider: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class TransientGatewayError(GatewayError):
    """The provider signalled temporary overload (HTTP 503/529); eligible for backoff retry."""


class UnknownToolError(EconChatError):
    """The model asked for a tool that is not registered."""

    def __init__(self, name: str):
        super().__init__(f"unknown tool '{name}'")
        self.name = name


class AnswerError(EconChatError):
    """A request could not be answered. ``str(err)`` is the user-visible message."""
