"""Health and root endpoints.

Provides the root ``/`` endpoint (API identity and version) and the
``/health`` endpoint (liveness check plus whether a provider key is
configured).

The version string is read from ``explain_server.__version__`` which is
resolved at import time via ``importlib.metadata``.
"""

from fastapi import APIRouter

from explain_server import __version__
from explain_server.explain.service import ExplanationService


def router(service: ExplanationService) -> APIRouter:
    """Build the health router."""
    api = APIRouter()

    @api.get("/")
    async def root():
        """Root endpoint showing API identity and current version."""
        return {"message": "Explain Server API", "version": __version__}

    @api.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "ok",
            "api_key_configured": service.has_credentials,
            "length_limit": service.formatter.policy.length_limit,
        }

    return api
