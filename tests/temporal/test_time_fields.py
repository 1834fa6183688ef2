"""
Time Field Parser Tests
=======================

INVARIANTS TESTED:
1. Delimited pairs parse to [start, end] with start <= end
2. Reversed pairs are swapped, not rejected
3. Open ranges end at the injected clock's current year
4. A field without a delimiter is a point range
5. Any token failure makes the whole field fail
"""

import pytest
from hypothesis import given, strategies as st

from chronology.contracts.base import YearRange
from chronology.temporal.clock import YearClock
from chronology.temporal.ranges import (
    RANGE_DELIMITERS, format_range, format_year, parse_time_field
)


class TestDocumentedExamples:

    def test_negative_range(self):
        assert parse_time_field("-2070~-1600") == YearRange(start=-2070, end=-1600)

    def test_bc_range_with_hyphen(self):
        assert parse_time_field("221BC-207BC") == YearRange(start=-220, end=-206)

    def test_open_range_uses_clock(self):
        clock = YearClock.fixed(2024)
        assert parse_time_field("1949~", clock=clock) == YearRange(start=1949, end=2024)

    def test_single_year(self):
        assert parse_time_field("1054") == YearRange(start=1054, end=1054)


class TestRanges:

    @given(st.integers(-5000, 5000), st.integers(-5000, 5000))
    def test_ordered_pair_round_trip(self, a, b):
        lo, hi = min(a, b), max(a, b)
        assert parse_time_field(f"{lo}~{hi}") == YearRange(start=lo, end=hi)

    @given(st.integers(-5000, 5000), st.integers(-5000, 5000))
    def test_reversed_pair_is_swapped(self, a, b):
        lo, hi = min(a, b), max(a, b)
        assert parse_time_field(f"{hi}~{lo}") == YearRange(start=lo, end=hi)

    @pytest.mark.parametrize("delimiter", RANGE_DELIMITERS)
    def test_every_delimiter_is_interchangeable(self, delimiter):
        assert parse_time_field(f"618{delimiter}907") == YearRange(start=618, end=907)

    @pytest.mark.parametrize("field", ["618 ~ 907", " 618~907 ", "618 to 907", "618 UNTIL 907"])
    def test_whitespace_and_textual_connectors(self, field):
        assert parse_time_field(field) == YearRange(start=618, end=907)

    def test_hyphen_between_negative_years(self):
        assert parse_time_field("-202-8") == YearRange(start=-202, end=8)

    def test_mixed_token_styles(self):
        assert parse_time_field("前202~8") == YearRange(start=-201, end=8)
        assert parse_time_field("公元前221至前207") == YearRange(start=-220, end=-206)

    def test_point_bc_token(self):
        assert parse_time_field("221BC") == YearRange(start=-220, end=-220)


class TestOpenRanges:

    def test_open_range_reads_clock_once(self):
        clock = YearClock.fixed(2030)
        parse_time_field("1912-", clock=clock)
        assert clock.reading_count() == 1
        assert clock.last_reading() == 2030

    def test_closed_range_does_not_read_clock(self):
        clock = YearClock.fixed(2030)
        parse_time_field("1912-1949", clock=clock)
        assert clock.reading_count() == 0
        assert clock.last_reading() is None

    def test_readings_are_counted_not_stored(self):
        clock = YearClock.fixed(2030)
        for _ in range(1000):
            clock.current_year()
        assert clock.reading_count() == 1000
        assert repr(clock) == "YearClock(FIXED(2030), readings=1000)"

    def test_open_range_after_current_year_is_swapped(self):
        clock = YearClock.fixed(2024)
        assert parse_time_field("3000~", clock=clock) == YearRange(start=2024, end=3000)

    def test_live_clock_without_injection(self):
        result = parse_time_field("1949~")
        assert result is not None
        assert result.start == 1949
        assert result.end >= 2024


class TestFailures:

    @pytest.mark.parametrize("field", [
        "", None, "~", "~1949", "abc~1949", "1949~abc", "1949~~1950", "spring", "1949,1950"
    ])
    def test_unparseable_fields_return_none(self, field):
        assert parse_time_field(field, clock=YearClock.fixed(2024)) is None

    @given(st.text())
    def test_never_raises(self, field):
        result = parse_time_field(field, clock=YearClock.fixed(2024))
        assert result is None or result.start <= result.end


class TestFormatting:

    def test_format_year(self):
        assert format_year(-220) == "220 BC"
        assert format_year(0) == "0"
        assert format_year(1949) == "1949"

    def test_format_range(self):
        assert format_range(-220, -206) == "220BC~206BC"
        assert format_range(1949, 2024) == "1949~2024"
