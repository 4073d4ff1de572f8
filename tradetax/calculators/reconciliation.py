"""Self Assessment reconciliation against tax already paid through PAYE."""

from decimal import Decimal
from typing import NamedTuple

from tradetax.calculators.income_tax import calculate_income_tax
from tradetax.calculators.inputs import ZERO, ensure_money
from tradetax.calculators.national_insurance import calculate_class1_nic
from tradetax.calculators.tax_data import DEFAULT_TAX_YEAR, TaxBand, TaxRegion


class Reconciliation(NamedTuple):
    """What has been withheld already and what is left to pay."""

    paye_income_tax: Decimal
    paye_class1_nic: Decimal
    already_paid: Decimal
    balancing_payment_due: Decimal
    take_home: Decimal


def reconcile(
    total_income: Decimal,
    total_tax: Decimal,
    total_nic: Decimal,
    employment_salary: Decimal,
    region: TaxRegion | str = TaxRegion.ENGLAND_NI,
    tax_year: str = DEFAULT_TAX_YEAR,
    *,
    bands: tuple[TaxBand, ...] | None = None,
) -> Reconciliation:
    """Net the total liability against PAYE deductions on the salary.

    PAYE is taken to have withheld income tax on the salary alone plus
    Class 1 NIC. The balancing payment is never negative; an overpayment
    shows up as zero due rather than a refund.

    Args:
        total_income: Salary plus self-employment profit.
        total_tax: Income tax on the total income.
        total_nic: Self-employed NIC on the profit.
        employment_salary: Annual PAYE salary.
        region: Tax region used for the tax on the salary.
        tax_year: Tax year key, e.g. "2024-25".
        bands: Optional band table, as passed to calculate_income_tax.

    Raises:
        InvalidInput: If any amount is negative.
    """
    total_income = ensure_money(total_income, "total_income")
    total_tax = ensure_money(total_tax, "total_tax")
    total_nic = ensure_money(total_nic, "total_nic")
    salary = ensure_money(employment_salary, "employment_salary")

    paye_tax = calculate_income_tax(salary, region, tax_year, bands=bands).total_tax
    paye_nic = calculate_class1_nic(salary, tax_year)
    already_paid = paye_tax + paye_nic

    return Reconciliation(
        paye_income_tax=paye_tax,
        paye_class1_nic=paye_nic,
        already_paid=already_paid,
        balancing_payment_due=max(ZERO, total_tax + total_nic - already_paid),
        take_home=total_income - total_tax - total_nic,
    )
