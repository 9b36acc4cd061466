"""Typed exceptions for the explanation request layer.

The formatting pipeline never raises; everything that *can* go wrong
around it (a missing API key, a provider outage, a bad request body)
is raised as an :class:`ExplainError` subclass.  The API layer maps each
one to an HTTP status and an ``{"error": ...}`` body, so the public
``error`` string is part of the wire contract.
"""

from __future__ import annotations


class ExplainError(RuntimeError):
    """Base exception for explanation request failures.

    Args:
        error:       Public error string returned to the client.
        status_code: HTTP status the API layer responds with.
    """

    status_code: int = 500

    def __init__(self, error: str, *, status_code: int | None = None) -> None:
        super().__init__(error)
        self.error = error
        if status_code is not None:
            self.status_code = status_code


class InvalidRequestError(ExplainError):
    """Required request fields are missing or blank."""

    status_code = 400


class MissingCredentialsError(ExplainError):
    """No model provider API key is configured."""

    def __init__(self) -> None:
        super().__init__("SERVER_MISCONFIG")


class UpstreamError(ExplainError):
    """The model provider failed or returned a non-2xx response.

    Args:
        detail: Provider response body or transport error message.
    """

    def __init__(self, detail: str) -> None:
        super().__init__(f"OpenAI error: {detail}")
        self.detail = detail
