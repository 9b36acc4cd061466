"""Explanation service — request validation, model call, formatting.

``ExplanationService.explain`` is the single entry point behind the
``POST /api/explain`` route.  It validates the two inputs, checks that a provider
key is configured, asks the model for a tagged three-paragraph reply, and
runs that reply through the formatting pipeline.

Caller contract
---------------
``explain()`` returns an :class:`ExplainResult` on success and raises an
:class:`~explain_server.explain.errors.ExplainError` subclass otherwise:

- ``InvalidRequestError``      — ``reference`` or ``verse`` blank.
- ``MissingCredentialsError``  — no API key configured.
- ``UpstreamError``            — the provider call failed.

A reply the model mangled is *not* an error: the formatter always returns
its best-effort reconstruction, which may be ``""``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from explain_server.config import ModelSettings, ServerConfig
from explain_server.explain.errors import (
    InvalidRequestError,
    MissingCredentialsError,
    UpstreamError,
)
from explain_server.explain.prompt import build_messages
from explain_server.explain.renderer import ChatCompletionRenderer, RenderError
from explain_server.formatting import ExplanationFormatter

logger = logging.getLogger(__name__)


@dataclass
class ExplainResult:
    """Outcome of one explanation request.

    Attributes:
        explanation: Formatted display text.
        raw_text:    The model's unformatted reply, kept for diagnostics.
        model:       Model name the request was sent to.
    """

    explanation: str
    raw_text: str
    model: str


class ExplanationService:
    """Orchestrates prompt building, the model call, and formatting.

    One instance is created per application and shared across requests; it
    holds no per-request state.

    Attributes:
        _settings:  Model provider settings.
        _formatter: Formatting pipeline.
        _renderer:  Provider client, or ``None`` when no API key is set.
    """

    def __init__(
        self,
        *,
        settings: ModelSettings,
        formatter: ExplanationFormatter | None = None,
    ) -> None:
        self._settings = settings
        self._formatter = formatter or ExplanationFormatter()
        self._renderer: ChatCompletionRenderer | None = None
        if settings.api_key:
            self._renderer = ChatCompletionRenderer(
                api_endpoint=settings.api_endpoint,
                api_key=settings.api_key,
                model=settings.model,
                timeout_seconds=settings.timeout_seconds,
                temperature=settings.temperature,
                max_tokens=settings.max_tokens,
            )
        else:
            logger.warning(
                "ExplanationService: OPENAI_API_KEY is not set; explain requests will fail."
            )

        logger.info(
            "ExplanationService initialised (model=%s, length_limit=%d)",
            settings.model,
            self._formatter.policy.length_limit,
        )

    @classmethod
    def from_config(cls, cfg: ServerConfig) -> ExplanationService:
        """Build a service from the process configuration."""
        formatter = ExplanationFormatter(cfg.formatting.load_policy())
        return cls(settings=cfg.model, formatter=formatter)

    @property
    def formatter(self) -> ExplanationFormatter:
        return self._formatter

    @property
    def has_credentials(self) -> bool:
        return self._renderer is not None

    def explain(
        self,
        reference: str,
        verse: str,
        *,
        model: str | None = None,
        length_limit: int | None = None,
    ) -> ExplainResult:
        """Produce a formatted explanation for a reference/passage pair.

        Args:
            reference:    Short label for the passage.
            verse:        The passage text.
            model:        Per-request model override.
            length_limit: Per-request character budget; ``None`` uses the
                          configured limit.

        Returns:
            :class:`ExplainResult` with the formatted and raw text.

        Raises:
            InvalidRequestError:     If either input is blank.
            MissingCredentialsError: If no API key is configured.
            UpstreamError:           If the provider call fails.
        """
        if not (reference or "").strip() or not (verse or "").strip():
            raise InvalidRequestError("reference and verse are required")
        if self._renderer is None:
            raise MissingCredentialsError()

        model_name = (model or "").strip() or self._settings.model
        messages = build_messages(reference, verse)

        try:
            raw_text = self._renderer.render(messages, model=model_name)
        except RenderError as exc:
            raise UpstreamError(str(exc)) from exc

        explanation = self._formatter.format(raw_text, length_limit)
        if not explanation:
            logger.warning(
                "ExplanationService: model %s returned no usable text for %r",
                model_name,
                reference[:40],
            )
        return ExplainResult(explanation=explanation, raw_text=raw_text, model=model_name)
