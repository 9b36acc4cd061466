"""Chat messages sent to the model for one explanation request.

The persona wording is short; what matters to the rest of the
service is the layout instruction, which asks for the ``::P1::`` /
``::P2::`` (with ``::BR2::``) / ``::P3::`` tags the marker extractor reads.
"""

from __future__ import annotations

from explain_server.formatting.types import STATE_SEPARATOR, SegmentTag

SYSTEM_PROMPT = (
    "You are a grounded, realistic mentor. Speak with calm confidence and warmth. "
    "Answer in the language of the passage."
)


def _tagged(tag: SegmentTag, body: str) -> str:
    return f"{tag.open_token} {body} {tag.close_token}"


LAYOUT_INSTRUCTIONS = "\n".join(
    [
        "Write exactly three paragraphs and wrap each one in its tags:",
        _tagged(SegmentTag.CONTEXT, "2-3 sentences explaining the passage in context"),
        _tagged(
            SegmentTag.STATE,
            "one sentence on the reader's current situation "
            f"{STATE_SEPARATOR} one sentence on what lies ahead",
        ),
        _tagged(SegmentTag.ACTION, "one sentence with a single concrete action"),
        "No headings, numbering, bullets, markdown or section labels.",
    ]
)


def build_user_prompt(reference: str, verse: str) -> str:
    """Render the user turn for a ``reference``/``verse`` pair."""
    return (
        f"{reference.strip()}\n{verse.strip()}\n\n"
        "Based on the passage above, advise on the current situation and the "
        "next step, realistically and with conviction.\n\n"
        f"{LAYOUT_INSTRUCTIONS}"
    )


def build_messages(reference: str, verse: str) -> list[dict[str, str]]:
    """Return the system and user messages for one request."""
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_user_prompt(reference, verse)},
    ]
