"""
Pydantic models for API requests and responses.

This module defines the data models used between the browser client and
the FastAPI backend. The field names match what the client already sends
(``reference``, ``verse``, ``model``) and what it reads back
(``explanation`` on success, ``error`` on failure).
"""

from pydantic import BaseModel, ConfigDict, Field

# ============================================================================
# REQUEST MODELS (Client → Server)
# ============================================================================


class ExplainRequest(BaseModel):
    """
    Request for a formatted explanation of a passage.

    Fields are optional at the schema level so that a missing field is
    reported by the service as a 400 ``{"error": ...}`` body rather than a
    framework validation payload.

    Attributes:
        reference: Short label for the passage (e.g. a chapter and verse).
        verse: The passage text.
        model: Optional model name overriding the configured default.
        length_limit: Optional character budget for the formatted output.
    """

    model_config = ConfigDict(protected_namespaces=())

    reference: str | None = None
    verse: str | None = None
    model: str | None = None
    length_limit: int | None = Field(default=None, ge=0)


# ============================================================================
# RESPONSE MODELS (Server → Client)
# ============================================================================


class ExplainResponse(BaseModel):
    """
    Formatted explanation.

    Attributes:
        explanation: Up to three blocks separated by a blank line.
    """

    explanation: str


class ErrorResponse(BaseModel):
    """
    Error body returned for every failed request.

    Attributes:
        error: Public error string (e.g. ``"SERVER_MISCONFIG"``).
    """

    error: str


class ExplainHealthResponse(BaseModel):
    """
    Health probe for the explain route, handy for opening in a browser.

    Attributes:
        ok: Always True when the route is reachable.
        route: The route path.
        runtime: Server runtime identifier.
    """

    ok: bool = True
    route: str = "/api/explain"
    runtime: str = "python"
