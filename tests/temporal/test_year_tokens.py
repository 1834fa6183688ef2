"""
Year Token Parser Tests
=======================

INVARIANTS TESTED:
1. n BC / n BCE -> -(n - 1), so "1 BC" is year 0
2. Before-era prefix (前, 公元前) uses the same transform
3. Bare signed integers pass through unchanged
4. Everything else yields None, never an exception
"""

import pytest
from hypothesis import given, strategies as st

from chronology.temporal.tokens import (
    BOM, bc_to_astronomical, normalize_token, parse_year_token
)


class TestBcSuffix:

    def test_one_bc_is_year_zero(self):
        assert parse_year_token("1BC") == 0

    def test_221_bc(self):
        assert parse_year_token("221 BC") == -220

    @pytest.mark.parametrize("token", ["221bc", "221 Bc", "221BCE", "221 bce", "221  BC"])
    def test_suffix_is_case_and_space_insensitive(self, token):
        assert parse_year_token(token) == -220

    @given(st.integers(min_value=1, max_value=10**6))
    def test_bc_mapping_for_all_years(self, n):
        assert parse_year_token(f"{n}BC") == -(n - 1)
        assert parse_year_token(f"{n} BCE") == -(n - 1)

    def test_suffix_requires_digits(self):
        assert parse_year_token("BC") is None
        assert parse_year_token("-5BC") is None


class TestBeforeEraPrefix:

    def test_plain_prefix(self):
        assert parse_year_token("前221") == -220

    def test_common_era_marker_before_prefix(self):
        assert parse_year_token("公元前221") == -220

    def test_whitespace_after_prefix(self):
        assert parse_year_token("前 1") == 0

    def test_trailing_text_after_digits_is_ignored(self):
        assert parse_year_token("前221年") == -220

    def test_prefix_without_digits_fails(self):
        assert parse_year_token("前") is None


class TestBareIntegers:

    @given(st.integers(min_value=-10**6, max_value=10**6))
    def test_signed_integers_round_trip(self, y):
        assert parse_year_token(str(y)) == y

    def test_int_input_is_accepted(self):
        assert parse_year_token(1054) == 1054

    def test_surrounding_whitespace_and_bom(self):
        assert parse_year_token(f"  {BOM}1054  ") == 1054


class TestFailures:

    @pytest.mark.parametrize("token", [
        "", "   ", None, "abc", "12a", "1.5", "+12", "--3", "１２３", "AD 1054"
    ])
    def test_unparseable_tokens_return_none(self, token):
        assert parse_year_token(token) is None

    @given(st.text())
    def test_never_raises(self, token):
        result = parse_year_token(token)
        assert result is None or isinstance(result, int)


class TestHelpers:

    def test_bc_to_astronomical(self):
        assert bc_to_astronomical(1) == 0
        assert bc_to_astronomical(2070) == -2069

    def test_normalize_token(self):
        assert normalize_token(None) == ""
        assert normalize_token(f"{BOM} 12 ") == "12"
        assert normalize_token(7) == "7"
