from datetime import date, timedelta

import pytest

from worktime_ledger.dates import (date_range, day_window, format_date_key, is_date_key, offset_date,
                                   parse_date_key, resolve_target_date)
from worktime_ledger.errors import InvalidInput


def test_parse_and_format_round_trip():
    assert format_date_key(parse_date_key("2024-02-29")) == "2024-02-29"


@pytest.mark.parametrize("value", ["2024-1-01", "2024-02-30", "yesterday", "", None, "2024-01-01T00:00"])
def test_invalid_date_keys(value):
    assert not is_date_key(value)


def test_parse_rejects_invalid_key():
    with pytest.raises(InvalidInput):
        parse_date_key("2024-13-01")


def test_offset_date_crosses_month_and_year():
    assert offset_date(date(2024, 1, 1), -1) == date(2023, 12, 31)
    assert offset_date(date(2024, 2, 28), 1) == date(2024, 2, 29)


def test_date_range_is_inclusive():
    days = list(date_range(date(2024, 1, 30), date(2024, 2, 2)))
    assert [format_date_key(d) for d in days] == ["2024-01-30", "2024-01-31", "2024-02-01", "2024-02-02"]


def test_date_range_empty_when_reversed():
    assert list(date_range(date(2024, 1, 2), date(2024, 1, 1))) == []


def test_day_window_spans_local_midnights():
    window = day_window("2024-06-15")
    assert window.start.tzinfo is not None
    assert window.start.hour == 0 and window.start.minute == 0
    assert window.start.date() == date(2024, 6, 15)
    assert window.end.date() == date(2024, 6, 16)
    assert timedelta(hours=23) <= window.end - window.start <= timedelta(hours=25)


def test_resolve_target_date():
    today = date(2024, 3, 1)
    assert resolve_target_date(None, False, today) == "2024-03-01"
    assert resolve_target_date(None, True, today) == "2024-02-29"
    assert resolve_target_date("2023-12-25", False, today) == "2023-12-25"


def test_resolve_target_date_rejects_conflicting_options():
    with pytest.raises(InvalidInput):
        resolve_target_date("2024-01-01", True, date(2024, 3, 1))


def test_resolve_target_date_rejects_malformed_date():
    with pytest.raises(InvalidInput):
        resolve_target_date("01/02/2024", False, date(2024, 3, 1))
