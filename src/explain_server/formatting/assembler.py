"""Assembler — the public entry point of the formatting pipeline.

``ExplanationFormatter.format`` turns one raw model reply into the display
string::

    raw text
      → sanitize
      → extract_segments ── None ──→ segment_heuristically
      → format_narrative / format_state
      → assemble_blocks
      → clamp_length

Degradation ladder
------------------
1. All three tags present → every block comes from the model's own layout.
2. Some tags present → the missing blocks are simply left out.
3. No tags → the heuristic segmenter rebuilds three paragraphs.
4. Empty input → ``""``.

``format`` never raises on bad input; the worst case is a best-effort
reconstruction.  The length budget is a hard character cut applied once,
last, after all structural formatting.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable

from explain_server.formatting.config import FormattingConfig
from explain_server.formatting.markers import extract_segments, strip_tags
from explain_server.formatting.paragraphs import format_narrative, format_state
from explain_server.formatting.sanitizer import sanitize
from explain_server.formatting.segmenter import segment_heuristically
from explain_server.formatting.symbols import pick_decoration
from explain_server.formatting.types import DecorationPair, ParsedSegments

logger = logging.getLogger(__name__)

BLOCK_SEPARATOR = "\n\n"


def assemble_blocks(blocks: Iterable[str]) -> str:
    """Join the non-empty blocks with a blank line between each."""
    return BLOCK_SEPARATOR.join(block for block in blocks if block)


def clamp_length(text: str, limit: int) -> str:
    """Cut ``text`` to at most ``limit`` characters.

    The cut is not sentence-aware.  Trailing whitespace left by the cut is
    trimmed, so the result may be shorter than ``limit``.  A negative limit
    behaves like ``0``.
    """
    limit = max(int(limit), 0)
    if len(text) <= limit:
        return text
    return text[:limit].rstrip()


def parse_segments(text: str, policy: FormattingConfig | None = None) -> ParsedSegments:
    """Run the marker extractor, falling back to the heuristic segmenter.

    Args:
        text:   Sanitized model reply.
        policy: Formatting policy for the heuristic path.

    Returns:
        Segments from exactly one of the two paths.
    """
    segments = extract_segments(text)
    if segments is not None:
        logger.debug("parse_segments: using marker path")
        return segments
    logger.debug("parse_segments: no tags found, using heuristic path")
    return segment_heuristically(strip_tags(text), policy)


def render_blocks(
    segments: ParsedSegments,
    decoration: DecorationPair,
    policy: FormattingConfig | None = None,
) -> list[str]:
    """Format the three blocks in display order; empty blocks stay empty."""
    return [
        format_narrative(segments.context, policy),
        format_state(segments.state_current, segments.state_future, decoration, policy),
        format_narrative(segments.action, policy),
    ]


class ExplanationFormatter:
    """Reshapes a free-form model reply into the three-block display format.

    Instances hold only the immutable policy and an optional random source,
    so one formatter can serve concurrent requests.

    Attributes:
        _policy: Frozen formatting policy.
        _rng:    Random source for glyph selection; ``None`` uses the
                 ``random`` module's shared generator.
    """

    def __init__(
        self,
        policy: FormattingConfig | None = None,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self._policy = policy or FormattingConfig.default()
        self._rng = rng

    @property
    def policy(self) -> FormattingConfig:
        return self._policy

    def format(self, raw_text: str | None, length_limit: int | None = None) -> str:
        """Format one raw model reply.

        Args:
            raw_text:     The model's reply.  ``None`` and non-string values
                          are tolerated.
            length_limit: Character budget; defaults to the policy's
                          ``length_limit``.

        Returns:
            At most three blocks joined by ``"\\n\\n"``, no longer than the
            budget.  ``""`` for empty input.
        """
        limit = self._policy.length_limit if length_limit is None else length_limit

        text = sanitize("" if raw_text is None else str(raw_text), self._policy)
        if not text:
            return ""

        segments = parse_segments(text, self._policy)
        decoration = pick_decoration(self._rng, self._policy.palette)
        output = assemble_blocks(render_blocks(segments, decoration, self._policy))

        clamped = clamp_length(output, limit)
        if len(clamped) < len(output):
            logger.debug(
                "ExplanationFormatter: truncated output from %d to %d chars",
                len(output),
                len(clamped),
            )
        return clamped


def format_explanation(
    raw_text: str | None,
    length_limit: int | None = None,
    *,
    rng: random.Random | None = None,
    policy: FormattingConfig | None = None,
) -> str:
    """Format a raw model reply with a one-off :class:`ExplanationFormatter`."""
    return ExplanationFormatter(policy, rng=rng).format(raw_text, length_limit)
