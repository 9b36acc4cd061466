"""Unit tests for the heuristic segmenter (explain_server/formatting/segmenter.py)."""

import pytest

from explain_server.formatting.config import FormattingConfig
from explain_server.formatting.segmenter import (
    normalize_paragraph_count,
    segment_heuristically,
    split_paragraphs,
    split_state_paragraph,
)
from explain_server.formatting.types import ExtractionPath

CONNECTORS = FormattingConfig.default().temporal_connectors


class TestSplitParagraphs:
    def test_blank_lines_split(self):
        assert split_paragraphs("one\n\ntwo") == ["one", "two"]

    def test_single_breaks_flatten(self):
        assert split_paragraphs("wrapped\nline\n\nnext") == ["wrapped line", "next"]

    def test_whitespace_only_lines_count_as_blank(self):
        assert split_paragraphs("a\n  \t\nb") == ["a", "b"]

    def test_empty_chunks_dropped(self):
        assert split_paragraphs("\n\n\n\na\n\n\n\n") == ["a"]

    def test_empty(self):
        assert split_paragraphs("") == []


class TestNormalizeParagraphCount:
    def test_overflow_merges_into_third(self):
        chunks = ["c1", "c2", "c3", "c4", "c5"]
        assert normalize_paragraph_count(chunks) == ["c1", "c2", "c3 c4 c5"]

    def test_short_input_padded(self):
        assert normalize_paragraph_count(["c1"]) == ["c1", "", ""]

    def test_exact_count_unchanged(self):
        assert normalize_paragraph_count(["a", "b", "c"]) == ["a", "b", "c"]


class TestSplitStateParagraph:
    def test_connector_after_comma(self):
        current, future = split_state_paragraph(
            "You feel stretched thin, from now on the load gets lighter.", CONNECTORS
        )
        assert current == "You feel stretched thin,"
        assert future == "from now on the load gets lighter."

    def test_korean_connector_without_sentence_end(self):
        current, future = split_state_paragraph("지금은 힘들지만, 곧 좋아진다", CONNECTORS)
        assert current == "지금은 힘들지만,"
        assert future == "곧 좋아진다"

    def test_connector_mid_clause_is_ignored(self):
        # "soon" is not at a clause start, so the sentence fallback applies.
        current, future = split_state_paragraph("You will soon rest. Then work.", CONNECTORS)
        assert current == "You will soon rest."
        assert future == "Then work."

    def test_connector_is_whole_word(self):
        current, future = split_state_paragraph("It is hard, soonest is not best", CONNECTORS)
        assert (current, future) == ("It is hard, soonest is not best", "")

    def test_sentence_fallback(self):
        assert split_state_paragraph("You are tired! Rest comes.") == ("You are tired!", "Rest comes.")

    def test_leading_connector_gives_no_split(self):
        assert split_state_paragraph("From now on, rest.", CONNECTORS) == ("From now on, rest.", "")

    def test_single_sentence_gives_no_split(self):
        assert split_state_paragraph("Just one sentence.") == ("Just one sentence.", "")

    def test_empty(self):
        assert split_state_paragraph("   ") == ("", "")


class TestSegmentHeuristically:
    def test_three_plain_chunks(self):
        segments = segment_heuristically("Plain text.\n\nSecond part.\n\nThird part.")
        assert segments.path is ExtractionPath.HEURISTIC
        assert segments.context == "Plain text."
        assert segments.state_current == "Second part."
        assert segments.state_future == ""
        assert segments.action == "Third part."

    def test_overflow_merge(self):
        segments = segment_heuristically("One.\n\nTwo.\n\nThree.\n\nFour.\n\nFive.")
        assert segments.context == "One."
        assert segments.state_current == "Two."
        assert segments.action == "Three. Four. Five."

    def test_single_chunk(self):
        segments = segment_heuristically("Only this.")
        assert segments.context == "Only this."
        assert segments.state_current == ""
        assert segments.action == ""

    def test_empty(self):
        assert segment_heuristically("").is_empty()

    def test_policy_connectors(self):
        policy = FormattingConfig(temporal_connectors=("afterwards",))
        segments = segment_heuristically("a\n\nNow tired, afterwards rested\n\nc", policy)
        assert segments.state_current == "Now tired,"
        assert segments.state_future == "afterwards rested"

    @pytest.mark.parametrize("count", [1, 2, 3, 4, 7])
    def test_always_three_slots(self, count):
        text = "\n\n".join(f"Chunk {i}." for i in range(count))
        segments = segment_heuristically(text)
        assert segments.context == "Chunk 0."
        if count >= 3:
            assert segments.action.startswith("Chunk 2.")
