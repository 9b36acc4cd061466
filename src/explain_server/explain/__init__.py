"""Explanation request layer for explain_server.

Wraps the formatting pipeline with the I/O it needs: building the prompt,
calling the model provider, and mapping failures to typed errors.

Package structure
-----------------
errors.py    ExplainError hierarchy — each carries an HTTP status and a
             public error string.
prompt.py    build_messages — system and user turns for one request.
renderer.py  ChatCompletionRenderer — synchronous HTTP client for an
             OpenAI-compatible ``/chat/completions`` endpoint, plus the
             reply-shape adapter.
service.py   ExplanationService — validates, renders, formats; the single
             entry point used by the API.
"""

from explain_server.explain.service import ExplainResult, ExplanationService

__all__ = ["ExplainResult", "ExplanationService"]
