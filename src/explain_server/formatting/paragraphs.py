"""Paragraph formatter — presentation rules for each output block.

Narrative blocks (CONTEXT and ACTION) are rendered one sentence per line,
with every decorative glyph the model added removed.  The STATE block is
always one or two lines, each carrying a glyph chosen by the symbol picker::

    ✦ <current>
    ❋ <future>

The same rules apply whichever extraction path produced the segments.
"""

from __future__ import annotations

import re
from functools import lru_cache

from explain_server.formatting.config import FormattingConfig
from explain_server.formatting.sanitizer import remove_spans
from explain_server.formatting.symbols import strip_all_glyphs, strip_leading_glyphs
from explain_server.formatting.types import DecorationPair

_DEFAULT_POLICY = FormattingConfig.default()

_WHITESPACE_RE = re.compile(r"\s+")

# ASCII terminals need whitespace before the next sentence ("3.5" stays
# intact); full-width terminals do not, since CJK text rarely has a space.
_ASCII_SENTENCE_END_RE = re.compile(r"([.!?…]+[\"'”’)\]]?)[ \t]+(?=\S)")
_WIDE_SENTENCE_END_RE = re.compile(r"([。！？]+[\"'”’」』)）]?)[ \t]*(?=\S)")
_BREAK_RUN_RE = re.compile(r"[ \t]*\n[\s]*")

_SQUARE_HINT_RE = re.compile(r"[ \t]*(?:\[[^\[\]]*\]|【[^【】]*】)")


@lru_cache(maxsize=8)
def _paren_hint_pattern(vocabulary: tuple[str, ...]) -> re.Pattern | None:
    if not vocabulary:
        return None
    vocab = "|".join(re.escape(word) for word in vocabulary)
    return re.compile(rf"[ \t]*[(（][^()（）]*\b(?:{vocab})\b[^()（）]*[)）]", re.IGNORECASE)


def flatten(text: str) -> str:
    """Collapse all whitespace, line breaks included, to single spaces."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def break_sentences(text: str) -> str:
    """Put each sentence of ``text`` on its own line."""
    text = _ASCII_SENTENCE_END_RE.sub("\\1\n", text)
    text = _WIDE_SENTENCE_END_RE.sub("\\1\n", text)
    return _BREAK_RUN_RE.sub("\n", text).strip()


def format_narrative(text: str, policy: FormattingConfig | None = None) -> str:
    """Format a CONTEXT or ACTION block.

    Glyphs are removed wherever they appear, the paragraph is flattened so
    that accidental wrapping disappears, and a line break is inserted after
    every sentence that is followed by more text.

    Returns:
        Sentence-per-line text with no blank lines, or ``""``.
    """
    if not text:
        return ""
    palette = (policy or _DEFAULT_POLICY).palette
    return break_sentences(flatten(strip_all_glyphs(text, palette)))


def clean_state_part(text: str, policy: FormattingConfig | None = None) -> str:
    """Prepare one half of the STATE block for its decorated line.

    Drops bracketed category hints (``[current]``, ``(future forecast)``),
    a leading glyph the model inserted, and internal line breaks.
    """
    if not text:
        return ""
    policy = policy or _DEFAULT_POLICY
    text = remove_spans(_SQUARE_HINT_RE, flatten(text))
    paren = _paren_hint_pattern(policy.label_vocabulary)
    if paren is not None:
        text = remove_spans(paren, text)
    return flatten(strip_leading_glyphs(flatten(text), policy.palette))


def format_state(
    current: str,
    future: str,
    decoration: DecorationPair,
    policy: FormattingConfig | None = None,
) -> str:
    """Format the STATE block as one or two decorated lines.

    Args:
        current:    The "current" half.
        future:     The "future" half; may be empty.
        decoration: Glyphs for the two lines.
        policy:     Supplies the label vocabulary for hint removal.

    Returns:
        ``"{a} {current}\\n{b} {future}"``; a single ``"{a} ..."`` line when
        only one half has text; ``""`` when both are empty.
    """
    current = clean_state_part(current, policy)
    future = clean_state_part(future, policy)

    if current and future:
        return f"{decoration.current} {current}\n{decoration.future} {future}"
    if current or future:
        return f"{decoration.current} {current or future}"
    return ""
