"""Heuristic segmenter — the fallback when the model ignored the tags.

Used only when :func:`~explain_server.formatting.markers.extract_segments`
finds no tag at all.  The reply is cut on blank lines and forced into
exactly three paragraphs:

1. Blank-line runs mark paragraph boundaries; single line breaks inside a
   paragraph are accidental wrapping and become spaces.
2. The paragraphs are trimmed and empty ones dropped.
3. More than three → the first two stay, the rest are joined with a space
   into the third.  Fewer than three → padded with empty strings.
4. The second paragraph is the STATE candidate.  It is split into
   ``current``/``future`` just before a temporal connector that opens a
   clause ("..., from now on ..."); failing that, after the first sentence
   that is followed by more text; failing that, not at all.

The segmenter cannot fail: any input, including an empty string, yields a
:class:`~explain_server.formatting.types.ParsedSegments`.
"""

from __future__ import annotations

import re
from functools import lru_cache

from explain_server.formatting.config import FormattingConfig
from explain_server.formatting.types import ExtractionPath, ParsedSegments

_DEFAULT_POLICY = FormattingConfig.default()

_PARAGRAPH_BREAK_RE = re.compile(r"\n[ \t]*(?:\n[ \t]*)+")
_LINE_BREAK_RE = re.compile(r"[ \t]*\n[ \t]*")
_PARAGRAPH_SEPARATOR = "\n\n"

# Sentence end followed by whitespace and more text.
_SENTENCE_END_RE = re.compile(r"[.!?…。！？]+[\"'”’)]?(?=\s+\S)")

# A connector only counts at a clause start: after sentence or clause
# punctuation and optional whitespace.
_CLAUSE_START = r"(?<=[.!?…。！？,，;；:])\s*"

EXPECTED_PARAGRAPHS = 3


@lru_cache(maxsize=8)
def _connector_pattern(connectors: tuple[str, ...]) -> re.Pattern | None:
    if not connectors:
        return None
    # Longest first so "from now on" wins over a shorter prefix.
    ordered = sorted(connectors, key=len, reverse=True)
    alternatives = "|".join(r"\s+".join(map(re.escape, c.split())) for c in ordered)
    return re.compile(rf"{_CLAUSE_START}(?=(?:{alternatives})(?![A-Za-z0-9]))", re.IGNORECASE)


def split_paragraphs(text: str) -> list[str]:
    """Cut text on blank lines, flattening single line breaks to spaces."""
    if not text:
        return []
    marked = _PARAGRAPH_BREAK_RE.sub(_PARAGRAPH_SEPARATOR, text.strip())
    chunks = marked.split(_PARAGRAPH_SEPARATOR)
    flattened = (_LINE_BREAK_RE.sub(" ", chunk).strip() for chunk in chunks)
    return [chunk for chunk in flattened if chunk]


def normalize_paragraph_count(chunks: list[str], count: int = EXPECTED_PARAGRAPHS) -> list[str]:
    """Force ``chunks`` to exactly ``count`` entries.

    Surplus chunks are merged (space-joined) into the last slot; missing
    ones are padded with empty strings.
    """
    if len(chunks) > count:
        head = chunks[: count - 1]
        tail = " ".join(chunks[count - 1 :])
        return [*head, tail]
    return chunks + [""] * (count - len(chunks))


def split_state_paragraph(
    paragraph: str, connectors: tuple[str, ...] = ()
) -> tuple[str, str]:
    """Split a STATE paragraph into ``(current, future)``.

    Args:
        paragraph:  The candidate STATE paragraph.
        connectors: Temporal connectors, tried before the punctuation
                    fallback.

    Returns:
        ``(current, future)``; ``future`` is ``""`` when no split point
        exists.
    """
    text = paragraph.strip()
    if not text:
        return "", ""

    pattern = _connector_pattern(tuple(connectors))
    if pattern is not None:
        for match in pattern.finditer(text):
            current, future = text[: match.start()].strip(), text[match.end() :].strip()
            if current and future:
                return current, future

    match = _SENTENCE_END_RE.search(text)
    if match is not None:
        current, future = text[: match.end()].strip(), text[match.end() :].strip()
        if current and future:
            return current, future

    return text, ""


def segment_heuristically(text: str, policy: FormattingConfig | None = None) -> ParsedSegments:
    """Partition untagged text into context, STATE halves, and action.

    Args:
        text:   Sanitized model reply without any segment tags.
        policy: Supplies the temporal connectors; defaults to the built-in
                policy.

    Returns:
        :class:`ParsedSegments` on the heuristic path.
    """
    policy = policy or _DEFAULT_POLICY
    context, state, action = normalize_paragraph_count(split_paragraphs(text))
    current, future = split_state_paragraph(state, policy.temporal_connectors)
    return ParsedSegments(
        context=context,
        state_current=current,
        state_future=future,
        action=action,
        path=ExtractionPath.HEURISTIC,
    )
