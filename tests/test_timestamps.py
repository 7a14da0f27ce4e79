from datetime import datetime, timedelta, timezone

import pytest
from flexprice.timestamps import parse_timestamp


def test_parse_iso():
    assert parse_timestamp("2024-03-01T10:15:00") == datetime(2024, 3, 1, 10, 15)


def test_parse_iso_with_offset_and_z():
    """Offsets are kept as parsed, not converted."""
    parsed = parse_timestamp("2024-03-01T10:15:00+01:00")
    assert parsed.utcoffset() == timedelta(hours=1)
    assert parse_timestamp("2024-03-01T09:15:00Z") == datetime(2024, 3, 1, 9, 15, tzinfo=timezone.utc)


def test_parse_space_separated():
    assert parse_timestamp("2024-03-01 10:15") == datetime(2024, 3, 1, 10, 15)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1.3.24 8:05", datetime(2024, 3, 1, 8, 5)),
        ("01.03.2024 08:05", datetime(2024, 3, 1, 8, 5)),
        ("01.03.2024T08:05:30", datetime(2024, 3, 1, 8, 5, 30)),
        ("31.12.99 23:45", datetime(2099, 12, 31, 23, 45)),
    ],
)
def test_parse_swiss(text, expected):
    assert parse_timestamp(text) == expected


def test_strips_bom_and_whitespace():
    assert parse_timestamp("\ufeff  01.03.2024 00:15 \n") == datetime(2024, 3, 1, 0, 15)
    assert parse_timestamp(" \ufeff2024-03-01T00:00") == datetime(2024, 3, 1, 0, 0)


@pytest.mark.parametrize(
    "text",
    ["31.02.2024 10:00", "01.03.2024 25:00", "01.13.24 10:00", "01.03.2024", "Zeitstempel", "", "   ", None, 42],
)
def test_unparseable_returns_none(text):
    """Unknown formats and out-of-range components give None, not an exception."""
    assert parse_timestamp(text) is None
