from decimal import Decimal

import pytest

from core.money import format_amount, from_minor, to_minor


@pytest.mark.parametrize("value,minor", [
    (Decimal("150"), 15000),
    ("0.10", 10),
    (0.1, 10),
    (Decimal("12.345"), 1235),
    (None, 0),
    (0, 0),
])
def test_to_minor(value, minor):
    assert to_minor(value) == minor


def test_float_sums_do_not_drift():
    assert sum(to_minor(0.1) for _ in range(3)) == 30


def test_from_minor():
    assert from_minor(12030) == Decimal("120.30")
    assert from_minor(5) == Decimal("0.05")


@pytest.mark.parametrize("minor,text", [(100000, "1000"), (1250, "12.50"), (0, "0")])
def test_format_amount(minor, text):
    assert format_amount(minor) == text
