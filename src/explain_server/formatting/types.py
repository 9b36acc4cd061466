"""Value types shared by the explanation formatting pipeline.

Every object here is created and discarded within a single call to
:meth:`~explain_server.formatting.assembler.ExplanationFormatter.format`;
nothing is cached or shared between requests.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SegmentTag(Enum):
    """The three tagged segments a model reply is expected to contain.

    The enum value is the wire name used inside the delimiters, so
    ``SegmentTag.CONTEXT`` is written by the model as ``::P1:: ... ::/P1::``.
    """

    CONTEXT = "P1"
    STATE = "P2"
    ACTION = "P3"

    @property
    def open_token(self) -> str:
        return f"::{self.value}::"

    @property
    def close_token(self) -> str:
        return f"::/{self.value}::"


#: Splits the STATE segment into its ``current`` and ``future`` halves.
STATE_SEPARATOR = "::BR2::"


class ExtractionPath(Enum):
    """Which extractor produced a :class:`ParsedSegments` instance."""

    MARKER = "marker"
    HEURISTIC = "heuristic"


@dataclass(frozen=True)
class ParsedSegments:
    """Segment bodies recovered from one model reply.

    Missing segments are empty strings rather than ``None`` so the paragraph
    formatter never has to special-case absence.  All four fields always
    come from the same extraction path, recorded in ``path``.

    Attributes:
        context:       Free narrative paragraph (2–3 sentences).
        state_current: First half of the STATE paragraph.
        state_future:  Second half of the STATE paragraph; empty when the
                       model (or the heuristic) gave no split point.
        action:        Single recommended action.
        path:          Marker or heuristic origin.
    """

    context: str = ""
    state_current: str = ""
    state_future: str = ""
    action: str = ""
    path: ExtractionPath = ExtractionPath.MARKER

    def is_empty(self) -> bool:
        return not (self.context or self.state_current or self.state_future or self.action)


@dataclass(frozen=True)
class DecorationPair:
    """Two distinct glyphs prefixed to the STATE paragraph's lines.

    Attributes:
        current: Glyph for the ``current`` line.
        future:  Glyph for the ``future`` line.

    Raises:
        ValueError: If both glyphs are identical.
    """

    current: str
    future: str

    def __post_init__(self) -> None:
        if self.current == self.future:
            raise ValueError(f"DecorationPair glyphs must differ, got {self.current!r} twice.")
