"""Formatting pipeline for model-written explanations.

This package turns a language model's free-form reply into the strict
three-block layout the client displays: a CONTEXT paragraph, a two-line
decorated STATE paragraph, and an ACTION paragraph.

Package structure
-----------------
types.py        SegmentTag, ParsedSegments, DecorationPair, ExtractionPath.
config.py       FormattingConfig — frozen palette/vocabulary/limit policy,
                optionally loaded from YAML.
symbols.py      pick_decoration — two distinct glyphs per request.
sanitizer.py    sanitize — idempotent removal of numbering, bullets,
                headings, bracketed labels and echoed section names.
markers.py      extract_segments — strict ``::P1::``/``::P2::``/``::P3::``
                tag extraction.
segmenter.py    segment_heuristically — blank-line fallback when no tag
                is present.
paragraphs.py   format_narrative / format_state — per-block line rules.
assembler.py    ExplanationFormatter — the single public operation.

The pipeline performs no I/O and keeps no state between calls.
"""

from explain_server.formatting.assembler import ExplanationFormatter, format_explanation
from explain_server.formatting.config import FormattingConfig, load_formatting_policy

__all__ = [
    "ExplanationFormatter",
    "FormattingConfig",
    "format_explanation",
    "load_formatting_policy",
]
