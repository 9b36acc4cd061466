"""Tests for the formatting policy (explain_server/formatting/config.py)."""

from pathlib import Path

import pytest

from explain_server.formatting.config import (
    DEFAULT_LENGTH_LIMIT,
    DEFAULT_PALETTE,
    FormattingConfig,
    load_formatting_policy,
)

REPO_POLICY = Path(__file__).resolve().parents[2] / "policies" / "formatting.yaml"

TEN_GLYPHS = list("abcdefghij")


@pytest.mark.unit
class TestFromDict:
    def test_empty_mapping_is_default(self):
        assert FormattingConfig.from_dict({}) == FormattingConfig.default()

    def test_overrides(self):
        policy = FormattingConfig.from_dict(
            {"length_limit": 500, "temporal_connectors": ["later", " afterwards "]}
        )
        assert policy.length_limit == 500
        assert policy.temporal_connectors == ("later", "afterwards")
        assert policy.palette == DEFAULT_PALETTE

    def test_numeric_string_limit(self):
        assert FormattingConfig.from_dict({"length_limit": "250"}).length_limit == 250

    @pytest.mark.parametrize("value", [-1, "many", True, [10]])
    def test_bad_limit(self, value):
        with pytest.raises(ValueError):
            FormattingConfig.from_dict({"length_limit": value})

    def test_palette_deduplicated(self):
        policy = FormattingConfig.from_dict({"palette": TEN_GLYPHS + ["a", "b"]})
        assert policy.palette == tuple(TEN_GLYPHS)

    def test_palette_too_small(self):
        with pytest.raises(ValueError, match="at least 10"):
            FormattingConfig.from_dict({"palette": TEN_GLYPHS[:9] + ["a"]})

    @pytest.mark.parametrize("value", ["soon", [""], [3], {"a": 1}])
    def test_bad_string_list(self, value):
        with pytest.raises(ValueError):
            FormattingConfig.from_dict({"temporal_connectors": value})

    def test_not_a_mapping(self):
        with pytest.raises(ValueError):
            FormattingConfig.from_dict(["palette"])

    def test_null_values_keep_defaults(self):
        policy = FormattingConfig.from_dict({"length_limit": None, "palette": None})
        assert policy == FormattingConfig.default()


class TestLoadFormattingPolicy:
    def test_repo_policy_matches_defaults(self):
        assert load_formatting_policy(REPO_POLICY) == FormattingConfig.default()

    def test_partial_file(self, tmp_path):
        path = tmp_path / "policy.yaml"
        path.write_text("length_limit: 300\nlabel_phrases: [summary]\n", encoding="utf-8")
        policy = load_formatting_policy(path)
        assert policy.length_limit == 300
        assert policy.label_phrases == ("summary",)

    def test_empty_file_is_default(self, tmp_path):
        path = tmp_path / "policy.yaml"
        path.write_text("", encoding="utf-8")
        policy = load_formatting_policy(path)
        assert policy.length_limit == DEFAULT_LENGTH_LIMIT

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_formatting_policy(tmp_path / "missing.yaml")

    def test_top_level_list(self, tmp_path):
        path = tmp_path / "policy.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            load_formatting_policy(path)

    def test_frozen(self):
        policy = FormattingConfig.default()
        with pytest.raises(AttributeError):
            policy.length_limit = 5  # type: ignore[misc]
