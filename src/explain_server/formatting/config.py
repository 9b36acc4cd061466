"""Formatting policy — the vocabulary and limits behind the pipeline.

``FormattingConfig`` is a frozen dataclass holding everything the
sanitizer, segmenter, symbol picker and assembler treat as tunable:

- the decorative glyph palette,
- the temporal connectors used to split a STATE paragraph heuristically,
- the label phrases the model sometimes echoes back from the prompt,
- the default output length limit.

It is built once at startup (from built-in defaults, a settings dict, or a
YAML policy file) and never mutated.  None of the trigger words are load
bearing: a deployment serving a different language swaps them through
``policies/formatting.yaml`` without touching code.

Policy file layout
------------------
::

    length_limit: 1000
    palette: ["✦", "✧", "❖", ...]          # at least 10 distinct glyphs
    temporal_connectors: ["from now on", "앞으로", ...]
    label_phrases: ["context explanation", "future forecast", ...]
    colon_labels: ["context", "current", "future", ...]
    label_vocabulary: ["context", "current", "future", "forecast", "briefing"]

Every key is optional; missing keys keep their defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path

import yaml

#: Output character budget applied when the caller does not pass one.
DEFAULT_LENGTH_LIMIT = 1000

#: Smallest palette accepted from configuration.
MIN_PALETTE_SIZE = 10

DEFAULT_PALETTE: tuple[str, ...] = (
    "✦",
    "✧",
    "❖",
    "✷",
    "✸",
    "✹",
    "✺",
    "❋",
    "✿",
    "❀",
    "❁",
    "✾",
)

# Forward-looking words that tend to open the "future" half of a STATE
# paragraph.  English plus the Korean connectors the service was first
# written for.
DEFAULT_TEMPORAL_CONNECTORS: tuple[str, ...] = (
    "from now on",
    "going forward",
    "in the coming days",
    "in the days ahead",
    "before long",
    "soon",
    "tomorrow",
    "eventually",
    "앞으로",
    "머지않아",
    "장차",
    "이제",
    "곧",
)

# Section names the prompt uses; the model occasionally prints them as
# headings.  A trailing colon is optional for these.
DEFAULT_LABEL_PHRASES: tuple[str, ...] = (
    "context explanation",
    "current + empathy",
    "future forecast",
    "one action",
)

# Single words that are only treated as labels when followed by a colon,
# so sentences that merely start with them survive.
DEFAULT_COLON_LABELS: tuple[str, ...] = (
    "context",
    "current",
    "future",
    "forecast",
    "action",
    "briefing",
    "state",
)

# Parenthesised spans containing one of these words are category hints,
# e.g. "(current)" or "(future forecast)".
DEFAULT_LABEL_VOCABULARY: tuple[str, ...] = (
    "context",
    "current",
    "future",
    "forecast",
    "briefing",
)

_LIST_KEYS = (
    "palette",
    "temporal_connectors",
    "label_phrases",
    "colon_labels",
    "label_vocabulary",
)


@dataclass(frozen=True)
class FormattingConfig:
    """Immutable formatting policy.

    Attributes:
        length_limit:        Default character budget for the final output.
        palette:             Decorative glyphs for the STATE paragraph.
        temporal_connectors: Clause openers that mark the start of the
                             "future" half of a STATE paragraph.
        label_phrases:       Multi-word section labels stripped at line
                             starts, colon optional.
        colon_labels:        Single-word labels stripped at line starts only
                             when followed by a colon.
        label_vocabulary:    Words that mark a parenthesised span as a
                             category hint.
    """

    length_limit: int = DEFAULT_LENGTH_LIMIT
    palette: tuple[str, ...] = field(default=DEFAULT_PALETTE)
    temporal_connectors: tuple[str, ...] = field(default=DEFAULT_TEMPORAL_CONNECTORS)
    label_phrases: tuple[str, ...] = field(default=DEFAULT_LABEL_PHRASES)
    colon_labels: tuple[str, ...] = field(default=DEFAULT_COLON_LABELS)
    label_vocabulary: tuple[str, ...] = field(default=DEFAULT_LABEL_VOCABULARY)

    @classmethod
    def default(cls) -> FormattingConfig:
        """Return the built-in policy."""
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> FormattingConfig:
        """Build a policy from a plain mapping, validating every field.

        Missing keys fall back to the built-in defaults.

        Args:
            data: Mapping with any subset of the policy keys.

        Returns:
            A fully-populated, frozen ``FormattingConfig``.

        Raises:
            ValueError: On a negative or non-integer ``length_limit``, a list
                        field that is not a list of non-empty strings, or a
                        palette with fewer than ``MIN_PALETTE_SIZE`` distinct
                        glyphs.
        """
        if not isinstance(data, dict):
            raise ValueError("Formatting policy must be a mapping.")

        overrides: dict = {}

        if data.get("length_limit") is not None:
            raw_limit = data["length_limit"]
            if isinstance(raw_limit, bool):
                raise ValueError("length_limit must be an integer.")
            try:
                limit = int(raw_limit)
            except (TypeError, ValueError):
                raise ValueError(f"length_limit must be an integer, got {raw_limit!r}.")
            if limit < 0:
                raise ValueError(f"length_limit must be >= 0, got {limit}.")
            overrides["length_limit"] = limit

        for key in _LIST_KEYS:
            if data.get(key) is None:
                continue
            overrides[key] = _parse_string_list(key, data[key])

        if "palette" in overrides:
            palette = tuple(dict.fromkeys(overrides["palette"]))
            if len(palette) < MIN_PALETTE_SIZE:
                raise ValueError(
                    f"palette must contain at least {MIN_PALETTE_SIZE} distinct glyphs, "
                    f"got {len(palette)}."
                )
            overrides["palette"] = palette

        return replace(cls(), **overrides)


def load_formatting_policy(path: Path) -> FormattingConfig:
    """Load and validate a YAML formatting policy.

    Args:
        path: Location of the policy file.

    Returns:
        A frozen :class:`FormattingConfig`.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError:        If the file is not a YAML mapping or fails
                           :meth:`FormattingConfig.from_dict` validation.
    """
    if not path.exists():
        raise FileNotFoundError(f"Formatting policy not found: {path}")

    with path.open(encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)

    if raw is None:
        return FormattingConfig.default()
    if not isinstance(raw, dict):
        raise ValueError(f"{path.name} must be a YAML mapping at the top level.")
    return FormattingConfig.from_dict(raw)


def _parse_string_list(key: str, value: object) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"{key} must be a list of strings.")
    items: list[str] = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise ValueError(f"{key} entries must be non-empty strings, got {item!r}.")
        items.append(item.strip())
    return tuple(items)
