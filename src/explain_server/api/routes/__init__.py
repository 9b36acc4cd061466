"""
Route registration entry point for the FastAPI application.

Exposes `register_routes(app, service)` and keeps each endpoint group in
its own router module.
"""

from fastapi import FastAPI

from explain_server.api.routes import explain, health
from explain_server.explain.service import ExplanationService


def register_routes(app: FastAPI, service: ExplanationService) -> None:
    """Register all API routes with the FastAPI app."""
    app.include_router(health.router(service))
    app.include_router(explain.router(service))


__all__ = ["register_routes"]
