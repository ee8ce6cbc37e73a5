"""Errors raised by integrations with third-party services."""

from __future__ import annotations


class ExternalServiceError(Exception):
    """A call to an external service (AI provider, email provider) failed.

    ``public_message`` is what the client sees; the exception text (logged)
    may carry provider details that must not leak into responses.
    """

    def __init__(self, public_message: str, *, detail: str | None = None, status_code: int = 500) -> None:
        super().__init__(detail or public_message)
        self.public_message = public_message
        self.status_code = status_code


class AIServiceError(ExternalServiceError):
    """The AI completion provider is unconfigured, unreachable or returned garbage."""


class EmailDeliveryError(ExternalServiceError):
    """The email provider refused or failed to deliver a message."""
