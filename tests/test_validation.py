from datetime import date

import pytest

from domain.errors import DomainError
from domain.validation import normalize_amount_input, parse_amount_input, parse_ymd


def test_parse_ymd_valid():
    assert parse_ymd("2025-02-01") == date(2025, 2, 1)


def test_parse_ymd_passes_dates_through():
    assert parse_ymd(date(2024, 2, 29)) == date(2024, 2, 29)


@pytest.mark.parametrize(
    "value",
    [
        "2025-13-01",
        "2025-00-10",
        "2025-02-30",
        "2025/02/01",
        "2025-2-1",
        "2025-02",
        "",
    ],
)
def test_parse_ymd_invalid(value):
    with pytest.raises(DomainError):
        parse_ymd(value)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("55k", "55000"),
        ("55K", "55000"),
        ("1.500.000", "1500000"),
        ("12k5k", "120005"),
        ("abc", ""),
        (None, ""),
    ],
)
def test_normalize_amount_input(raw, expected):
    assert normalize_amount_input(raw) == expected


def test_parse_amount_input_coerces_garbage_to_zero():
    assert parse_amount_input("") == 0.0
    assert parse_amount_input("xyz") == 0.0
    assert parse_amount_input(None) == 0.0
    assert parse_amount_input(True) == 0.0


def test_parse_amount_input_accepts_numbers_and_shorthand():
    assert parse_amount_input(42) == 42.0
    assert parse_amount_input(1.5) == 1.5
    assert parse_amount_input("35k") == 35000.0
    assert parse_amount_input("2.000.000 đ") == 2000000.0
