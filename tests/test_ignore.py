"""Tests for ignore pattern compilation."""

import pytest

from cistats.sync.errors import ConfigError
from cistats.sync.ignore import IgnoreMatcher, compile_patterns


class TestCompilePatterns:
    """Tests for compile_patterns."""

    def test_blank_patterns_are_skipped(self):
        """Empty and whitespace-only patterns produce no matchers."""
        matcher = compile_patterns(["", "  ", "^gen_.*"])

        assert len(matcher) == 1
        assert matcher.patterns[0].pattern == "^gen_.*"

    def test_patterns_are_trimmed(self):
        matcher = compile_patterns(["  ^gen_  "])

        assert matcher.patterns[0].pattern == "^gen_"
        assert matcher.matches("gen_abc")

    def test_invalid_pattern_is_config_error(self):
        with pytest.raises(ConfigError):
            compile_patterns(["^ok$", "(["])

    def test_no_patterns(self):
        matcher = compile_patterns([])

        assert len(matcher) == 0
        assert not matcher
        assert matcher.matches("anything") is False


class TestIgnoreMatcher:
    """Tests for IgnoreMatcher."""

    def test_matches_any_pattern(self):
        matcher = compile_patterns(["^gen_", "_tmp$"])

        assert matcher.matches("gen_1234")
        assert matcher.matches("build_tmp")
        assert not matcher.matches("compile")

    def test_unanchored_patterns_match_anywhere(self):
        """Patterns match anywhere in the name unless anchored."""
        matcher = compile_patterns(["uuid"])

        assert matcher.matches("test_uuid_0001")

    def test_empty_matcher_matches_nothing(self):
        assert IgnoreMatcher().matches("gen_x") is False
