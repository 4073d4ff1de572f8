"""National Insurance calculators.

Class 2 and Class 4 are charged on self-employment profit through Self
Assessment. Class 1 is withheld from salary through PAYE and is only used
here to work out what an employee has already paid.
"""

from decimal import Decimal
from typing import NamedTuple

from tradetax.calculators.inputs import ZERO, ensure_money
from tradetax.calculators.tax_data import DEFAULT_TAX_YEAR, NicThresholds, get_tax_year

WEEKS_PER_YEAR = 52


class NicResult(NamedTuple):
    """One National Insurance charge."""

    class_name: str
    description: str
    amount: Decimal


class NationalInsuranceResult(NamedTuple):
    """Self-employed National Insurance, itemised by class."""

    total_nic: Decimal
    breakdown: tuple[NicResult, ...]


def _money(amount: Decimal) -> str:
    return f"£{amount:,.2f}" if amount != amount.to_integral_value() else f"£{amount:,.0f}"


def _percent(rate: Decimal) -> str:
    return f"{(rate * 100).normalize():f}%"


def calculate_national_insurance(
    self_employment_profit: Decimal,
    tax_year: str = DEFAULT_TAX_YEAR,
    *,
    thresholds: NicThresholds | None = None,
) -> NationalInsuranceResult:
    """Calculate Class 2 and Class 4 NIC on self-employment profit.

    Class 2 is a flat weekly charge for the whole year once profit reaches
    the small profits threshold. Class 4 is charged at the lower rate between
    the two thresholds and at the upper rate above. Classes whose threshold is
    not reached are left out of the breakdown.

    Args:
        self_employment_profit: Annual trading profit (must be >= 0).
        tax_year: Tax year key, e.g. "2024-25".
        thresholds: Optional rates to use instead of the year's.

    Returns:
        NationalInsuranceResult with the total and the per-class breakdown.
    """
    profit = ensure_money(self_employment_profit, "self_employment_profit")
    nic = thresholds if thresholds is not None else get_tax_year(tax_year).nic
    breakdown: list[NicResult] = []

    if profit >= nic.class2_annual_threshold:
        breakdown.append(
            NicResult(
                class_name="Class 2 NIC",
                description=f"{_money(nic.class2_weekly_rate)} × {WEEKS_PER_YEAR} weeks",
                amount=nic.class2_weekly_rate * WEEKS_PER_YEAR,
            )
        )

    if profit > nic.class4_lower_threshold:
        liable = min(profit, nic.class4_upper_threshold) - nic.class4_lower_threshold
        breakdown.append(
            NicResult(
                class_name="Class 4 NIC (Lower)",
                description=(
                    f"{_percent(nic.class4_lower_rate)} on "
                    f"{_money(nic.class4_lower_threshold)} - {_money(nic.class4_upper_threshold)}"
                ),
                amount=liable * nic.class4_lower_rate,
            )
        )

    if profit > nic.class4_upper_threshold:
        breakdown.append(
            NicResult(
                class_name="Class 4 NIC (Upper)",
                description=(
                    f"{_percent(nic.class4_upper_rate)} over {_money(nic.class4_upper_threshold)}"
                ),
                amount=(profit - nic.class4_upper_threshold) * nic.class4_upper_rate,
            )
        )

    return NationalInsuranceResult(
        total_nic=sum((item.amount for item in breakdown), ZERO),
        breakdown=tuple(breakdown),
    )


def calculate_class1_nic(salary: Decimal, tax_year: str = DEFAULT_TAX_YEAR) -> Decimal:
    """Employee Class 1 NIC deducted from a salary through PAYE."""
    salary = ensure_money(salary, "salary")
    class1 = get_tax_year(tax_year).class1
    main_band = min(
        max(salary - class1.primary_threshold, ZERO),
        class1.upper_earnings_limit - class1.primary_threshold,
    )
    upper_band = max(ZERO, salary - class1.upper_earnings_limit)
    return main_band * class1.main_rate + upper_band * class1.upper_rate
