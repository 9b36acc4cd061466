"""Sanitizer — strips the formatting the model was told not to produce.

Models asked for three plain paragraphs still number them, bullet them,
add markdown headings, echo the prompt's section names back ("Future
forecast:"), or emit line breaks as the two characters ``\\n``.  The
sanitizer removes all of that before extraction.

Rules
-----
Each rule is a pure string rewrite:

1. **Escapes** — literal ``\\r\\n`` / ``\\n`` and a stray ``/n`` typo become
   real line breaks; ``\\r\\n`` and lone ``\\r`` become ``\\n``.
2. **Enumeration/bullets** at line starts — ``1.``, ``2)``, ``-``, ``*``, ``•``.
3. **Markdown headings** at line starts — ``#`` through ``######``.
4. **Emphasis** — ``**x**`` and ``__x__`` are unwrapped.
5. **Bracketed labels** anywhere — any single-line ``[...]`` or ``【...】``
   span, and ``(...)`` spans mentioning the label vocabulary.  The space
   in front of a removed span goes with it when punctuation follows.
6. **Label phrases** at line starts (or right after an open tag or ::BR2::).
   A label colon never takes the first colon of a following tag.
7. **Whitespace** — runs of spaces collapse, lines are trimmed, three or
   more line breaks collapse to two.

``sanitize`` applies the full rule set repeatedly until the text stops
changing.  Every rule either leaves its input alone or strictly shrinks it
(or, for ``\\r`` → ``\\n``, removes a carriage return), so the loop always
terminates, and its output is by construction a fixed point:
``sanitize(sanitize(x)) == sanitize(x)``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import lru_cache

from explain_server.formatting.config import FormattingConfig

logger = logging.getLogger(__name__)

_DEFAULT_POLICY = FormattingConfig.default()

# ── Policy-independent rules ────────────────────────────────────────────────

_ESCAPED_BREAK_RE = re.compile(r"\\r\\n|\\n")
_SLASH_N_TYPO_RE = re.compile(r"(?<![A-Za-z0-9/:])/n")
_CRLF_RE = re.compile(r"\r\n?")

# "1." / "12)" (not "1.5"), "-" or "*" followed by space, "•" etc.
_ENUMERATION_RE = re.compile(
    r"^[ \t]*(?:\d{1,3}[.)](?!\d)[ \t]*|[-*][ \t]+|[•·▪‣◦][ \t]*)",
    re.MULTILINE,
)
_HEADING_RE = re.compile(r"^[ \t]*#{1,6}[ \t]*", re.MULTILINE)
_BOLD_RE = re.compile(r"\*\*(.+?)\*\*|__(.+?)__")
_SQUARE_LABEL_RE = re.compile(r"[ \t]*(?:\[[^\[\]\n]*\]|【[^【】\n]*】)")

_SPACE_RUN_RE = re.compile(r"[ \t\xa0]{2,}")
_LINE_EDGE_SPACE_RE = re.compile(r"^[ \t\xa0]+|[ \t\xa0]+$", re.MULTILINE)
_EXCESS_BREAKS_RE = re.compile(r"\n{3,}")

# Label phrases may also sit directly after an open tag or the STATE separator.
_LABEL_ANCHOR = r"(^|::\s*(?:P[123]|BR2)\s*::)"

# A label's colon is never the first half of a following "::P1::" delimiter.
_LABEL_COLON = r"[:：](?!:)"

# Removing a hint right before these keeps no space in front of them.
_CLOSING_PUNCTUATION = frozenset(".,!?;:…。，、！？；：)）]】")


@dataclass(frozen=True)
class _PolicyRules:
    """Regexes compiled from one :class:`FormattingConfig`."""

    paren_label: re.Pattern
    label_phrase: re.Pattern | None
    colon_label: re.Pattern | None


def _words_pattern(phrase: str) -> str:
    # "current + empathy" matches "current+empathy" and "current  +  empathy"
    return r"[ \t]*".join(re.escape(token) for token in phrase.split())


@lru_cache(maxsize=8)
def _compile_policy(policy: FormattingConfig) -> _PolicyRules:
    vocab = "|".join(re.escape(word) for word in policy.label_vocabulary)
    paren_label = re.compile(
        rf"[ \t]*[(（][^()（）\n]*\b(?:{vocab})\b[^()（）\n]*[)）]",
        re.IGNORECASE,
    )

    label_phrase = None
    if policy.label_phrases:
        phrases = "|".join(_words_pattern(p) for p in policy.label_phrases)
        label_phrase = re.compile(
            rf"{_LABEL_ANCHOR}[ \t]*(?:{phrases})\b[ \t]*(?:{_LABEL_COLON})?[ \t]*",
            re.IGNORECASE | re.MULTILINE,
        )

    colon_label = None
    if policy.colon_labels:
        words = "|".join(re.escape(w) for w in policy.colon_labels)
        colon_label = re.compile(
            rf"{_LABEL_ANCHOR}[ \t]*(?:{words})[ \t]*{_LABEL_COLON}[ \t]*",
            re.IGNORECASE | re.MULTILINE,
        )

    return _PolicyRules(paren_label=paren_label, label_phrase=label_phrase, colon_label=colon_label)


def normalize_escapes(text: str) -> str:
    """Turn escaped or mistyped line breaks into real ``\\n`` characters."""
    text = _ESCAPED_BREAK_RE.sub("\n", text)
    text = _SLASH_N_TYPO_RE.sub("\n", text)
    return _CRLF_RE.sub("\n", text)


def remove_spans(pattern: re.Pattern, text: str) -> str:
    """Delete every match of ``pattern`` without gluing words together.

    ``pattern`` should take the whitespace in front of the span with it.
    That whitespace becomes one space again unless the span sat at the end
    of a line or right before punctuation, so ``"Rest now (current)."``
    becomes ``"Rest now."`` and ``"a [x]b"`` becomes ``"a b"``.
    """

    def _replace(match: re.Match) -> str:
        following = text[match.end() : match.end() + 1]
        if (
            match.group(0)[:1].isspace()
            and following
            and not following.isspace()
            and following not in _CLOSING_PUNCTUATION
        ):
            return " "
        return ""

    return pattern.sub(_replace, text)


def _apply_rules(text: str, rules: _PolicyRules) -> str:
    text = normalize_escapes(text)
    text = _ENUMERATION_RE.sub("", text)
    text = _HEADING_RE.sub("", text)
    text = _BOLD_RE.sub(lambda m: m.group(1) if m.group(1) is not None else m.group(2), text)
    text = remove_spans(_SQUARE_LABEL_RE, text)
    text = remove_spans(rules.paren_label, text)
    if rules.label_phrase is not None:
        text = rules.label_phrase.sub(r"\1", text)
    if rules.colon_label is not None:
        text = rules.colon_label.sub(r"\1", text)
    text = _SPACE_RUN_RE.sub(" ", text)
    text = _LINE_EDGE_SPACE_RE.sub("", text)
    text = _EXCESS_BREAKS_RE.sub("\n\n", text)
    return text.strip()


def sanitize(text: str, policy: FormattingConfig | None = None) -> str:
    """Strip presentation artifacts from raw model text.

    Args:
        text:   Raw model reply.  ``None`` is treated as empty.
        policy: Vocabulary for the label rules; defaults to the built-in
                policy.

    Returns:
        The cleaned text, which is a fixed point of this function.
    """
    if not text:
        return ""

    rules = _compile_policy(policy or _DEFAULT_POLICY)
    current = str(text)
    passes = 0
    while True:
        cleaned = _apply_rules(current, rules)
        passes += 1
        if cleaned == current:
            break
        current = cleaned

    if passes > 2:
        logger.debug("sanitize: converged after %d passes", passes)
    return current
