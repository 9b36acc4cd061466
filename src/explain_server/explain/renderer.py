"""Chat-completion renderer — the only network call in the service.

``ChatCompletionRenderer`` is a thin, synchronous wrapper around an
OpenAI-compatible ``/chat/completions`` endpoint.  It returns the model's
reply as one plain string (RawText) and leaves every formatting decision
to :mod:`explain_server.formatting`.

Sync vs async
-------------
The renderer uses the synchronous ``requests`` library.  FastAPI runs sync
route handlers in its thread pool, so a blocking call here does not stall
the event loop.

Reply shapes
------------
Providers return ``message.content`` either as a plain string or as a list
of content parts (``[{"type": "text", "text": "..."}]``).
:func:`extract_message_text` normalises both into a single string so the
formatter only ever sees text.
"""

from __future__ import annotations

import logging

import requests

logger = logging.getLogger(__name__)

_DEFAULT_TEMPERATURE = 0.7

# Three short paragraphs fit comfortably.
_DEFAULT_MAX_TOKENS = 600

# Provider error bodies are echoed to the client; keep them bounded.
_MAX_ERROR_DETAIL_CHARS = 500


class RenderError(RuntimeError):
    """Network-level or HTTP-level failure talking to the provider."""


def extract_message_text(data: dict) -> str:
    """Pull the first choice's text out of a chat-completion payload.

    Args:
        data: Decoded JSON response body.

    Returns:
        The reply text, stripped; ``""`` when the payload has none.
    """
    if not isinstance(data, dict):
        return ""
    choices = data.get("choices") or []
    if not choices or not isinstance(choices[0], dict):
        return ""
    message = choices[0].get("message") or {}
    content = message.get("content") if isinstance(message, dict) else None

    if isinstance(content, str):
        return content.strip()
    if isinstance(content, list):
        parts: list[str] = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and isinstance(part.get("text"), str):
                parts.append(part["text"])
        return "".join(parts).strip()
    return ""


class ChatCompletionRenderer:
    """Synchronous client for an OpenAI-compatible chat-completion endpoint.

    Attributes:
        _api_endpoint: Full ``/chat/completions`` URL.
        _api_key:      Bearer token.
        _model:        Default model name; overridable per call.
        _timeout:      HTTP request timeout in seconds.
        _temperature:  Sampling temperature.
        _max_tokens:   Completion token ceiling.
    """

    def __init__(
        self,
        *,
        api_endpoint: str,
        api_key: str,
        model: str,
        timeout_seconds: float,
        temperature: float = _DEFAULT_TEMPERATURE,
        max_tokens: int = _DEFAULT_MAX_TOKENS,
    ) -> None:
        self._api_endpoint = api_endpoint
        self._api_key = api_key
        self._model = model
        self._timeout = timeout_seconds
        self._temperature = temperature
        self._max_tokens = max_tokens

    def render(self, messages: list[dict[str, str]], *, model: str | None = None) -> str:
        """Call the provider and return the raw reply text.

        Args:
            messages: Chat messages (system + user).
            model:    Per-request model override; ``None`` uses the default.

        Returns:
            The reply text, possibly ``""``.

        Raises:
            RenderError: On timeout, connection failure, or a non-2xx status.
                         The message carries the provider's response body
                         where one exists.
        """
        payload = self._build_payload(messages, model)

        try:
            response = requests.post(
                self._api_endpoint,
                json=payload,
                headers={
                    "Authorization": f"Bearer {self._api_key}",
                    "Content-Type": "application/json",
                },
                timeout=self._timeout,
            )
        except requests.exceptions.Timeout as exc:
            logger.warning(
                "ChatCompletionRenderer: request timed out after %.1fs (endpoint=%s)",
                self._timeout,
                self._api_endpoint,
            )
            raise RenderError(f"request timed out after {self._timeout:.1f}s") from exc
        except requests.exceptions.ConnectionError as exc:
            logger.warning(
                "ChatCompletionRenderer: cannot connect to %s",
                self._api_endpoint,
            )
            raise RenderError(f"cannot connect to {self._api_endpoint}") from exc
        except requests.exceptions.RequestException as exc:
            logger.error("ChatCompletionRenderer: request failed: %s", exc)
            raise RenderError(str(exc)) from exc

        if not response.ok:
            body = (response.text or "").strip()[:_MAX_ERROR_DETAIL_CHARS]
            logger.warning(
                "ChatCompletionRenderer: provider returned HTTP %d",
                response.status_code,
            )
            raise RenderError(body or f"HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as exc:
            logger.error("ChatCompletionRenderer: provider returned non-JSON body")
            raise RenderError("provider returned a non-JSON body") from exc

        return extract_message_text(data)

    def _build_payload(self, messages: list[dict[str, str]], model: str | None) -> dict:
        return {
            "model": model or self._model,
            "messages": messages,
            "temperature": self._temperature,
            "max_tokens": self._max_tokens,
        }
