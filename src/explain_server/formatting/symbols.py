"""Decorative glyphs for the STATE paragraph.

``pick_decoration`` draws two glyphs from the palette for the two STATE
lines.  The first is uniform over the palette; the second is uniform over
the *other* positions: it is drawn from ``n - 1`` slots and advanced past
the first glyph's index, so the pair can never repeat.

The randomness is cosmetic.  Callers that need reproducible output (tests,
the ``format --seed`` CLI command) inject a seeded :class:`random.Random`.

This module also owns the character class used to *strip* glyphs the model
added itself, since those are drawn from the same symbol blocks.
"""

from __future__ import annotations

import random
import re
from collections.abc import Sequence
from dataclasses import dataclass
from functools import lru_cache

from explain_server.formatting.config import DEFAULT_PALETTE
from explain_server.formatting.types import DecorationPair

# Symbol blocks models reach for when "decorating" text: arrows, geometric
# shapes, misc symbols, dingbats, stars, and the emoji planes.  Variation
# selectors and zero-width joiners ride along with emoji sequences.
_GLYPH_RANGES = (
    "\u2190-\u21ff"
    "\u2300-\u23ff"
    "\u25a0-\u27bf"
    "\u2b00-\u2bff"
    "\U0001f000-\U0001faff"
)
_GLYPH_JOINERS = "\ufe0e\ufe0f\u200d"


@dataclass(frozen=True)
class _GlyphPatterns:
    """Strip patterns for the symbol blocks plus one palette's glyphs."""

    leading: re.Pattern
    anywhere: re.Pattern


@lru_cache(maxsize=8)
def _glyph_patterns(palette: tuple[str, ...]) -> _GlyphPatterns:
    glyph = f"[{_GLYPH_RANGES}{re.escape(''.join(palette))}][{_GLYPH_JOINERS}]*"
    return _GlyphPatterns(
        leading=re.compile(rf"^\s*(?:{glyph}\s*)+"),
        anywhere=re.compile(rf"{glyph}[ \t]*"),
    )


def pick_decoration(
    rng: random.Random | None = None,
    palette: Sequence[str] = DEFAULT_PALETTE,
) -> DecorationPair:
    """Pick two distinct glyphs for the STATE paragraph.

    Args:
        rng:     Random source.  ``None`` uses the ``random`` module's shared
                 generator.
        palette: Glyphs to draw from.  Duplicates are ignored.

    Returns:
        A :class:`DecorationPair` whose glyphs differ.

    Raises:
        ValueError: If the palette has fewer than two distinct glyphs.
    """
    glyphs = list(dict.fromkeys(palette))
    if len(glyphs) < 2:
        raise ValueError("Decoration palette needs at least two distinct glyphs.")

    source = rng if rng is not None else random
    first = source.randrange(len(glyphs))
    second = source.randrange(len(glyphs) - 1)
    if second >= first:
        second += 1
    return DecorationPair(current=glyphs[first], future=glyphs[second])


def strip_leading_glyphs(text: str, palette: Sequence[str] = DEFAULT_PALETTE) -> str:
    """Remove glyphs (and the spacing after them) from the start of ``text``.

    Besides the common symbol blocks, any glyph of ``palette`` counts, so a
    configured palette is stripped when the model echoes it back.
    """
    return _glyph_patterns(tuple(palette)).leading.sub("", text, count=1)


def strip_all_glyphs(text: str, palette: Sequence[str] = DEFAULT_PALETTE) -> str:
    """Remove every glyph from ``text``, leading or embedded."""
    return _glyph_patterns(tuple(palette)).anywhere.sub("", text)
