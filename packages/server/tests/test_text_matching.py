"""
Tests for the pg_trgm-compatible similarity functions and LIKE escaping.
"""

from __future__ import annotations

import pytest

from app.core.trigram import encode, greatest, similarity, trigrams
from app.services.filters import contains_pattern, escape_like


class TestTrigrams:
    def test_single_word_padding(self):
        assert trigrams("cat") == {"  c", " ca", "cat", "at "}

    def test_lowercases_and_splits_on_punctuation(self):
        assert trigrams("GW-Alpha") == trigrams("gw alpha")
        assert "  g" in trigrams("GW-Alpha")
        assert "  a" in trigrams("GW-Alpha")

    def test_empty_and_symbol_only(self):
        assert trigrams("") == set()
        assert trigrams("%%__") == set()


class TestSimilarity:
    def test_identical_strings(self):
        assert similarity("gateway1", "gateway1") == 1.0

    def test_case_insensitive(self):
        assert similarity("GATEWAY1", "gateway1") == 1.0

    def test_partial_overlap(self):
        # "weather" has 8 trigrams, "weather-app" adds 4 for "app"
        assert similarity("weather-app", "weather") == pytest.approx(8 / 12)

    def test_symmetric(self):
        assert similarity("soil-monitor", "monitor") == similarity("monitor", "soil-monitor")

    def test_disjoint(self):
        assert similarity("abc", "xyz") == 0.0

    def test_empty_side_scores_zero(self):
        assert similarity("weather", "") == 0.0
        assert similarity("", "") == 0.0

    def test_null_propagates(self):
        assert similarity(None, "x") is None


class TestSqlHelpers:
    def test_greatest_ignores_null(self):
        assert greatest(0.2, None, 0.5) == 0.5
        assert greatest(None, None) is None

    def test_encode_hex(self):
        assert encode(bytes.fromhex("0102AABB"), "hex") == "0102aabb"
        assert encode(None, "hex") is None

    def test_encode_rejects_other_formats(self):
        with pytest.raises(ValueError):
            encode(b"\x01", "base64")


class TestLikeEscaping:
    def test_plain_text_untouched(self):
        assert escape_like("weather") == "weather"

    def test_wildcards_escaped(self):
        assert escape_like("100%") == "100\\%"
        assert escape_like("a_b") == "a\\_b"

    def test_escape_char_escaped_first(self):
        assert escape_like("a\\%") == "a\\\\\\%"

    def test_contains_pattern(self):
        assert contains_pattern("gw_") == "%gw\\_%"
        assert contains_pattern("") == "%%"
