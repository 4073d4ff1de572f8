"""Liability calculator: combines income tax, NIC and PAYE reconciliation."""

import logging
from decimal import Decimal
from typing import NamedTuple

from tradetax.calculators.income_tax import BandResult, calculate_income_tax
from tradetax.calculators.inputs import ZERO, ensure_money
from tradetax.calculators.national_insurance import NicResult, calculate_national_insurance
from tradetax.calculators.reconciliation import reconcile
from tradetax.calculators.tax_data import (
    DEFAULT_TAX_YEAR,
    EmploymentStatus,
    NicThresholds,
    TaxBand,
    TaxRegion,
    parse_employment_status,
    parse_region,
)

logger = logging.getLogger(__name__)


class IncomeAggregate(NamedTuple):
    """Annual income streams feeding a liability calculation."""

    employment_income: Decimal
    self_employment_profit: Decimal


class LiabilityBreakdown(NamedTuple):
    """Full tax and NIC position for one taxpayer and tax year."""

    tax_year: str
    region: TaxRegion
    total_income: Decimal
    personal_allowance: Decimal
    per_band_tax: tuple[BandResult, ...]
    total_income_tax: Decimal
    per_nic_class: tuple[NicResult, ...]
    total_nic: Decimal
    already_paid_via_paye: Decimal
    balancing_payment_due: Decimal
    take_home_after_tax: Decimal


def income_aggregate_for(
    status: EmploymentStatus | str,
    annual_salary: Decimal,
    self_employment_profit: Decimal,
) -> IncomeAggregate:
    """Pick the income streams that count for an employment status.

    Self-employed-only taxpayers have no PAYE salary; employed-only taxpayers
    have no trading profit.
    """
    status = parse_employment_status(status)
    salary = ensure_money(annual_salary, "annual_salary")
    profit = ensure_money(self_employment_profit, "self_employment_profit")

    if status is EmploymentStatus.SELF_EMPLOYED_ONLY:
        return IncomeAggregate(employment_income=ZERO, self_employment_profit=profit)
    if status is EmploymentStatus.EMPLOYED_ONLY:
        return IncomeAggregate(employment_income=salary, self_employment_profit=ZERO)
    return IncomeAggregate(employment_income=salary, self_employment_profit=profit)


def calculate_liability(
    aggregate: IncomeAggregate,
    region: TaxRegion | str = TaxRegion.ENGLAND_NI,
    tax_year: str = DEFAULT_TAX_YEAR,
    *,
    bands: tuple[TaxBand, ...] | None = None,
    nic_thresholds: NicThresholds | None = None,
) -> LiabilityBreakdown:
    """Calculate the full liability on combined PAYE and self-employment income.

    Income tax is charged on the combined income, NIC on the trading profit
    only, and the result is reconciled against PAYE deductions on the salary.

    Args:
        aggregate: Salary and self-employment profit for the year.
        region: Tax region. Wales uses the England/NI table.
        tax_year: Tax year key, e.g. "2024-25".
        bands: Optional band table to use instead of the region's table.
        nic_thresholds: Optional NIC rates to use instead of the year's.

    Returns:
        LiabilityBreakdown with every figure needed for a report.

    Raises:
        InvalidInput: Negative income, unknown region or unknown tax year.
    """
    region = parse_region(region)
    salary = ensure_money(aggregate.employment_income, "employment_income")
    profit = ensure_money(aggregate.self_employment_profit, "self_employment_profit")
    total_income = salary + profit

    income_tax = calculate_income_tax(total_income, region, tax_year, bands=bands)
    nic = calculate_national_insurance(profit, tax_year, thresholds=nic_thresholds)
    settled = reconcile(
        total_income,
        income_tax.total_tax,
        nic.total_nic,
        salary,
        region,
        tax_year,
        bands=bands,
    )

    logger.debug(
        "Liability %s: income %s, tax %s, NIC %s, due %s",
        tax_year,
        total_income,
        income_tax.total_tax,
        nic.total_nic,
        settled.balancing_payment_due,
    )

    return LiabilityBreakdown(
        tax_year=tax_year,
        region=region,
        total_income=total_income,
        personal_allowance=income_tax.personal_allowance,
        per_band_tax=income_tax.breakdown,
        total_income_tax=income_tax.total_tax,
        per_nic_class=nic.breakdown,
        total_nic=nic.total_nic,
        already_paid_via_paye=settled.already_paid,
        balancing_payment_due=settled.balancing_payment_due,
        take_home_after_tax=settled.take_home,
    )
