"""Marker grammar and the strict extractor.

The prompt asks the model to wrap each paragraph in a pair of tags::

    ::P1:: context ::/P1::
    ::P2:: current ::BR2:: future ::/P2::
    ::P3:: action ::/P3::

Matching is case-insensitive and tolerates whitespace inside the colons
(``:: p2 ::``).  For each tag the first open delimiter is paired with the
first close delimiter after it.  A tag with no close delimiter is absent,
and so is a span whose interior holds another segment tag.  A stray
``::BR2::`` inside the CONTEXT or ACTION span is blanked.

``extract_segments`` returns ``None`` only when *no* tag is found, which is
the signal to fall back to the heuristic segmenter.  A reply with some
tags missing is still a marker reply; the missing segments are empty.
"""

from __future__ import annotations

import logging
import re

from explain_server.formatting.types import ExtractionPath, ParsedSegments, SegmentTag

logger = logging.getLogger(__name__)

#: Any open or close delimiter of any segment tag.
ANY_TAG_RE = re.compile(r"::\s*/?\s*P[123]\s*::", re.IGNORECASE)

#: STATE sub-separator, e.g. ``::BR2::``.
STATE_SEPARATOR_RE = re.compile(r"::\s*BR2\s*::", re.IGNORECASE)


def _span_pattern(tag: SegmentTag) -> re.Pattern:
    name = re.escape(tag.value)
    return re.compile(
        rf"::\s*{name}\s*::(?P<body>.*?)::\s*/\s*{name}\s*::",
        re.IGNORECASE | re.DOTALL,
    )


_SPAN_PATTERNS: dict[SegmentTag, re.Pattern] = {tag: _span_pattern(tag) for tag in SegmentTag}


def find_segment(text: str, tag: SegmentTag) -> str | None:
    """Return the trimmed interior of the first ``tag`` span, or ``None``.

    ``None`` means the tag is absent: never opened, never closed, or its
    interior contains another segment tag.  An empty span returns ``""``.
    """
    match = _SPAN_PATTERNS[tag].search(text)
    if match is None:
        return None
    body = match.group("body")
    if ANY_TAG_RE.search(body):
        logger.debug("find_segment: %s span contains a nested tag; ignoring it", tag.name)
        return None
    return body.strip()


def split_state(body: str) -> tuple[str, str]:
    """Split a STATE body on the ``::BR2::`` separator.

    Text before the first separator is ``current``; every later piece is
    joined with a single space into ``future``.  Without a separator the
    whole body is ``current`` and ``future`` is empty.
    """
    parts = [part.strip() for part in STATE_SEPARATOR_RE.split(body)]
    current = parts[0]
    future = " ".join(part for part in parts[1:] if part)
    return current, future


def strip_tags(text: str) -> str:
    """Blank out every segment tag and STATE separator left in ``text``.

    Used before the heuristic fallback so unmatched delimiters never reach
    the display.
    """
    return STATE_SEPARATOR_RE.sub(" ", ANY_TAG_RE.sub(" ", text))


def extract_segments(text: str) -> ParsedSegments | None:
    """Extract tagged segments from sanitized model text.

    Args:
        text: Sanitized model reply.

    Returns:
        :class:`ParsedSegments` on the marker path, or ``None`` when none of
        the three tags is present.
    """
    if not text:
        return None

    found = {tag: find_segment(text, tag) for tag in SegmentTag}
    if all(body is None for body in found.values()):
        return None

    missing = [tag.name for tag, body in found.items() if body is None]
    if missing:
        logger.debug("extract_segments: partial marker reply, missing %s", ", ".join(missing))

    current, future = split_state(found[SegmentTag.STATE] or "")
    return ParsedSegments(
        context=strip_tags(found[SegmentTag.CONTEXT] or "").strip(),
        state_current=current,
        state_future=future,
        action=strip_tags(found[SegmentTag.ACTION] or "").strip(),
        path=ExtractionPath.MARKER,
    )
