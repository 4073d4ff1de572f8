"""Tests for money parsing and validation."""

from decimal import Decimal

import pytest

from tradetax.calculators.errors import InvalidInput
from tradetax.calculators.inputs import ensure_money, parse_money, quantize_money


class TestParseMoney:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("£1,234.50", Decimal("1234.50")),
            ("  12 ", Decimal("12.00")),
            ("1e3", Decimal("1000.00")),
            (42, Decimal("42.00")),
            (Decimal("9.999"), Decimal("10.00")),
            (1.005, Decimal("1.01")),
        ],
    )
    def test_valid(self, raw: object, expected: Decimal) -> None:
        assert parse_money(raw) == expected  # type: ignore[arg-type]

    @pytest.mark.parametrize("raw", [None, "", "   ", "£"])
    def test_blank_is_zero(self, raw: str | None) -> None:
        assert parse_money(raw) == 0

    @pytest.mark.parametrize("raw", ["abc", "12..5", "NaN", "Infinity"])
    def test_malformed(self, raw: str) -> None:
        with pytest.raises(InvalidInput, match="not a valid amount"):
            parse_money(raw, "annual_salary")

    def test_negative(self) -> None:
        with pytest.raises(InvalidInput, match="annual_salary must be non-negative"):
            parse_money("-£5", "annual_salary")

    def test_bool_rejected(self) -> None:
        with pytest.raises(InvalidInput):
            parse_money(True)  # type: ignore[arg-type]


class TestEnsureMoney:
    def test_accepts_decimal_and_int(self) -> None:
        assert ensure_money(Decimal("1.5"), "x") == Decimal("1.5")
        assert ensure_money(3, "x") == Decimal("3")

    def test_does_not_round(self) -> None:
        assert ensure_money(Decimal("0.0006"), "x") == Decimal("0.0006")

    @pytest.mark.parametrize("value", [1.5, "1.5", True, None])
    def test_rejects_other_types(self, value: object) -> None:
        with pytest.raises(InvalidInput, match="must be a Decimal"):
            ensure_money(value, "salary")  # type: ignore[arg-type]

    def test_rejects_nan(self) -> None:
        with pytest.raises(InvalidInput, match="finite"):
            ensure_money(Decimal("NaN"), "salary")

    def test_rejects_negative(self) -> None:
        with pytest.raises(InvalidInput, match="non-negative"):
            ensure_money(Decimal("-0.01"), "salary")


class TestQuantizeMoney:
    def test_half_up(self) -> None:
        assert quantize_money(Decimal("2.345")) == Decimal("2.35")
        assert quantize_money(Decimal("2.344")) == Decimal("2.34")

    def test_half_away_from_zero_for_negatives(self) -> None:
        assert quantize_money(Decimal("-2.345")) == Decimal("-2.35")
