"""
Tests for the date coercion helpers.

Test organization:
1. TestParseDateValue - one value at a time, every supported format
2. TestToDateSafe - Series behaviour (dtype, index, pass-through)
3. TestReportingQuarter - "YYYY Q#" labels
4. TestConvertDates - bulk column conversion over frames
"""

from datetime import date, datetime

import numpy as np
import pandas as pd
import pytest

from core.dates import (
    convert_dates,
    date_to_reporting_quarter,
    excel_serial_to_date,
    parse_date_value,
    to_date_safe,
)


class TestParseDateValue:
    """Test single-value parsing across formats."""

    def test_excel_serial_number(self):
        """Test that a numeric Excel serial becomes its calendar date."""
        assert parse_date_value(45658) == date(2025, 1, 1)
        assert parse_date_value(45743) == date(2025, 3, 27)

    def test_excel_serial_text_with_thousands_separator(self):
        """Test that serials stored as text, with commas or decimals, parse."""
        assert parse_date_value("45,658") == date(2025, 1, 1)
        assert parse_date_value("45658.0") == date(2025, 1, 1)

    def test_excel_serial_fraction_is_dropped(self):
        """Test that the time-of-day fraction of a serial is ignored."""
        assert parse_date_value(45658.99) == date(2025, 1, 1)

    def test_iso_date(self):
        assert parse_date_value("2025-10-06") == date(2025, 10, 6)

    def test_timestamp_keeps_date_part(self):
        """Test that timestamps with or without seconds, space or T, parse."""
        assert parse_date_value("2025-10-06 14:22:00") == date(2025, 10, 6)
        assert parse_date_value("2025-10-06 14:22") == date(2025, 10, 6)
        assert parse_date_value("2025-10-06T14:22:05") == date(2025, 10, 6)

    def test_month_day_year(self):
        assert parse_date_value("10/06/2025") == date(2025, 10, 6)
        assert parse_date_value("1/2/2025") == date(2025, 1, 2)

    def test_two_digit_year_pivot(self):
        """Test that 00-68 map to the 2000s and 69-99 to the 1900s."""
        assert parse_date_value("1/2/25") == date(2025, 1, 2)
        assert parse_date_value("1/2/99") == date(1999, 1, 2)

    def test_compact_date(self):
        """Test that YYYYMMDD is not mistaken for an (impossible) Excel serial."""
        assert parse_date_value("20250101") == date(2025, 1, 1)

    def test_whitespace_is_trimmed(self):
        assert parse_date_value("  2025-10-06  ") == date(2025, 10, 6)

    @pytest.mark.parametrize("value", [None, "", "   ", "hello", "2025-02-30", "13/01/2025", np.nan, True])
    def test_unparseable_values_are_none(self, value):
        """Test that missing, blank, invalid or boolean values give None."""
        assert parse_date_value(value) is None

    def test_dates_pass_through(self):
        """Test that date and datetime objects are returned as dates."""
        assert parse_date_value(date(2024, 5, 1)) == date(2024, 5, 1)
        assert parse_date_value(datetime(2024, 5, 1, 13, 30)) == date(2024, 5, 1)
        assert parse_date_value(pd.Timestamp("2024-05-01 08:00")) == date(2024, 5, 1)

    def test_excel_serial_out_of_range(self):
        assert excel_serial_to_date(-1) is None
        assert excel_serial_to_date(3_000_000) is None
        assert excel_serial_to_date(0) == date(1899, 12, 30)


class TestToDateSafe:
    """Test Series conversion."""

    def test_mixed_text_formats(self):
        """Test that each element is parsed with the first matching format."""
        series = pd.Series(["10/06/2025", "2025-10-06", "2025-10-06 14:22:00", "45743", "", None])
        result = to_date_safe(series)

        assert pd.api.types.is_datetime64_any_dtype(result)
        assert result.iloc[0] == pd.Timestamp("2025-10-06")
        assert result.iloc[1] == pd.Timestamp("2025-10-06")
        assert result.iloc[2] == pd.Timestamp("2025-10-06")
        assert result.iloc[3] == pd.Timestamp("2025-03-27")
        assert pd.isna(result.iloc[4])
        assert pd.isna(result.iloc[5])

    def test_datetime_series_is_returned_untouched(self):
        """Test that a datetime Series is not re-parsed (times are kept)."""
        series = pd.Series(pd.to_datetime(["2025-01-01 10:30"]))
        assert to_date_safe(series) is series

    def test_numeric_series_as_serials(self):
        result = to_date_safe(pd.Series([45658, np.nan]))

        assert result.iloc[0] == pd.Timestamp("2025-01-01")
        assert pd.isna(result.iloc[1])

    def test_categorical_series(self):
        series = pd.Series(["2025-01-01", "1/2/2025", None], dtype="category")
        result = to_date_safe(series)

        assert result.iloc[0] == pd.Timestamp("2025-01-01")
        assert result.iloc[1] == pd.Timestamp("2025-01-02")
        assert pd.isna(result.iloc[2])

    def test_index_and_name_are_preserved(self):
        series = pd.Series(["2025-01-01", "bad"], index=[10, 20], name="dob")
        result = to_date_safe(series)

        assert list(result.index) == [10, 20]
        assert result.name == "dob"

    def test_list_input(self):
        result = to_date_safe(["2025-01-01", None])
        assert isinstance(result, pd.Series)
        assert result.iloc[0] == pd.Timestamp("2025-01-01")

    def test_scalar_input(self):
        assert to_date_safe("2025-01-01") == date(2025, 1, 1)

    def test_far_future_sentinels_survive(self):
        """Test that 9999-12-31 open-ended dates are kept, not coerced to NaT."""
        result = to_date_safe(pd.Series(["12/31/9999", "2958465", "2025-01-01", 2958465]))

        assert str(result.dtype) == "datetime64[s]"
        assert [ts.date() for ts in result] == [date(9999, 12, 31), date(9999, 12, 31), date(2025, 1, 1), date(9999, 12, 31)]

    def test_dates_before_1677(self):
        result = to_date_safe(pd.Series(["1/1/1600", "1066-10-14"]))
        assert [ts.date() for ts in result] == [date(1600, 1, 1), date(1066, 10, 14)]


class TestReportingQuarter:
    """Test the reporting quarter label."""

    def test_scalar_dates(self):
        assert date_to_reporting_quarter(date(2025, 3, 15)) == "2025 Q1"
        assert date_to_reporting_quarter(date(2025, 7, 1)) == "2025 Q3"
        assert date_to_reporting_quarter(date(2025, 12, 31)) == "2025 Q4"

    def test_missing_is_none(self):
        assert date_to_reporting_quarter(None) is None
        assert date_to_reporting_quarter(pd.NaT) is None

    def test_series(self):
        series = pd.Series(pd.to_datetime(["2025-04-01", None, "2024-11-30"]))
        result = date_to_reporting_quarter(series)

        assert result.iloc[0] == "2025 Q2"
        assert pd.isna(result.iloc[1])
        assert result.iloc[2] == "2024 Q4"


class TestConvertDates:
    """Test bulk conversion of date-like columns."""

    def make_frame(self):
        return pd.DataFrame(
            {
                "updated": pd.to_datetime(["2025-01-01 10:15", "2025-01-02 23:59", None]),
                "entry": [" 2025-01-05", "2025-02-10 ", None],
                "notes": ["2025-01-05 but a long free text note", "x", "y"],
                "mostly": ["2025-01-01", "2025-01-02", "oops"],
                "keep": ["2025-01-01", "2025-01-02", "2025-01-03"],
                "count": [1, 2, 3],
            }
        )

    def test_datetime_columns_become_dates(self):
        result = convert_dates(self.make_frame())

        assert result["updated"].iloc[0] == pd.Timestamp("2025-01-01")
        assert result["updated"].iloc[1] == pd.Timestamp("2025-01-02")

    def test_short_iso_text_columns_are_parsed_and_trimmed(self):
        result = convert_dates(self.make_frame())

        assert pd.api.types.is_datetime64_any_dtype(result["entry"])
        assert result["entry"].iloc[0] == pd.Timestamp("2025-01-05")
        assert result["entry"].iloc[1] == pd.Timestamp("2025-02-10")

    def test_long_text_columns_are_skipped(self):
        result = convert_dates(self.make_frame())
        assert result["notes"].iloc[0] == "2025-01-05 but a long free text note"

    def test_parse_threshold(self):
        """Test that a column converts only when enough values parse."""
        frame = self.make_frame()

        lenient = convert_dates(frame, parse_threshold=0.6)
        strict = convert_dates(frame, parse_threshold=0.9)

        assert pd.api.types.is_datetime64_any_dtype(lenient["mostly"])
        assert pd.isna(lenient["mostly"].iloc[2])
        assert not pd.api.types.is_datetime64_any_dtype(strict["mostly"])

    def test_excluded_columns_are_untouched(self):
        frame = self.make_frame()
        result = convert_dates(frame, exclude=["keep", "updated"])

        assert result["keep"].tolist() == ["2025-01-01", "2025-01-02", "2025-01-03"]
        assert result["updated"].iloc[0] == pd.Timestamp("2025-01-01 10:15")

    def test_numeric_columns_are_untouched(self):
        result = convert_dates(self.make_frame())
        assert result["count"].tolist() == [1, 2, 3]

    def test_timezone_aware_columns_use_utc_date(self):
        local = pd.to_datetime(["2025-01-01 23:30"]).tz_localize("America/New_York")
        result = convert_dates(pd.DataFrame({"ts": local}))

        assert result["ts"].iloc[0] == pd.Timestamp("2025-01-02")

    def test_mapping_input_returns_new_frames(self):
        """Test that a mapping is converted per frame and inputs stay intact."""
        frame = self.make_frame()
        result = convert_dates({"a": frame, "b": frame[["keep"]]})

        assert set(result) == {"a", "b"}
        assert pd.api.types.is_datetime64_any_dtype(result["b"]["keep"])
        assert frame["keep"].iloc[0] == "2025-01-01"

    def test_non_frames_are_rejected(self):
        with pytest.raises(TypeError):
            convert_dates({"a": [1, 2, 3]})
        with pytest.raises(TypeError):
            convert_dates([pd.DataFrame()])
