"""Explain endpoints.

Endpoints
---------
GET  /api/explain
    Health probe for the route; returns ``{"ok": true, ...}``.

POST /api/explain
    Ask the model for a three-paragraph explanation of ``reference`` /
    ``verse`` and return the formatted text as ``{"explanation": ...}``.
    Failures are raised as ``ExplainError`` subclasses and turned into
    ``{"error": ...}`` bodies by the handlers in ``api/server.py``.

Any other method receives 405 from FastAPI's router; CORS preflight
(``OPTIONS``) is answered by the CORS middleware.
"""

from __future__ import annotations

from fastapi import APIRouter

from explain_server.api.models import (
    ErrorResponse,
    ExplainHealthResponse,
    ExplainRequest,
    ExplainResponse,
)
from explain_server.explain.service import ExplanationService

ROUTE_PATH = "/api/explain"


def router(service: ExplanationService) -> APIRouter:
    """Build the explain router around a shared service instance."""
    api = APIRouter(tags=["explain"])

    @api.get(ROUTE_PATH, response_model=ExplainHealthResponse)
    async def explain_health() -> ExplainHealthResponse:
        """Report that the explain route is up."""
        return ExplainHealthResponse(route=ROUTE_PATH)

    # Sync handler: FastAPI runs it in the thread pool, so the blocking
    # provider call does not hold the event loop.
    @api.post(
        ROUTE_PATH,
        response_model=ExplainResponse,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    def explain(request: ExplainRequest) -> ExplainResponse:
        """Return a formatted explanation for a reference/passage pair."""
        result = service.explain(
            request.reference or "",
            request.verse or "",
            model=request.model,
            length_limit=request.length_limit,
        )
        return ExplainResponse(explanation=result.explanation)

    return api
