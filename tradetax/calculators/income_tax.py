"""Income tax calculator: band-by-band breakdown with personal allowance taper."""

import logging
from decimal import ROUND_FLOOR, Decimal
from typing import NamedTuple

from tradetax.calculators.inputs import ZERO, ensure_money
from tradetax.calculators.tax_data import (
    DEFAULT_TAX_YEAR,
    PersonalAllowanceRules,
    TaxBand,
    TaxBandTable,
    TaxRegion,
    band_table_for,
    get_tax_year,
    make_band_table,
)

logger = logging.getLogger(__name__)


class BandResult(NamedTuple):
    """Income falling in one band and the tax charged on it."""

    band_name: str
    rate: Decimal
    taxable_amount: Decimal
    tax: Decimal


class IncomeTaxResult(NamedTuple):
    """Income tax on a total income, itemised by band."""

    total_income: Decimal
    personal_allowance: Decimal
    taxable_income: Decimal
    total_tax: Decimal
    breakdown: tuple[BandResult, ...]


def personal_allowance(total_income: Decimal, rules: PersonalAllowanceRules) -> Decimal:
    """Personal allowance after the taper.

    The allowance drops by £1 for every whole £2 of income above the taper
    threshold and never goes below zero.
    """
    allowance = rules.base_allowance
    if total_income > rules.taper_threshold:
        reduction = ((total_income - rules.taper_threshold) / 2).to_integral_value(
            rounding=ROUND_FLOOR
        )
        allowance = max(ZERO, allowance - reduction)
    return allowance


def effective_band_table(
    bands: TaxBandTable,
    allowance: Decimal,
    rules: PersonalAllowanceRules,
) -> TaxBandTable:
    """Shift a band table for a tapered personal allowance.

    Upper bounds at or below the taper threshold move down by the allowance
    lost, so the 0% band ends at the tapered allowance and the rated bands
    keep their width. Bounds above the threshold are absolute.

    A table whose 0% band is narrower than the tax year's allowance can lose
    at most that band, so no bound moves below zero.
    """
    lost = rules.base_allowance - allowance
    if bands[0].upper is not None:
        lost = min(lost, bands[0].upper)
    if not lost:
        return bands
    return tuple(
        band._replace(upper=band.upper - lost)
        if band.upper is not None and band.upper <= rules.taper_threshold
        else band
        for band in bands
    )


def _walk_bands(total_income: Decimal, bands: TaxBandTable) -> tuple[list[BandResult], Decimal]:
    breakdown: list[BandResult] = []
    total_tax = ZERO
    remaining = total_income
    previous_upper = ZERO

    for band in bands:
        if remaining <= 0:
            break

        width = band.upper - previous_upper if band.upper is not None else remaining
        taxable = max(ZERO, min(remaining, width))
        if taxable > 0:
            tax = taxable * band.rate
            breakdown.append(BandResult(band.name, band.rate, taxable, tax))
            total_tax += tax
        remaining -= taxable
        if band.upper is not None:
            previous_upper = band.upper

    return breakdown, total_tax


def calculate_income_tax(
    total_income: Decimal,
    region: TaxRegion | str = TaxRegion.ENGLAND_NI,
    tax_year: str = DEFAULT_TAX_YEAR,
    *,
    bands: tuple[TaxBand, ...] | None = None,
) -> IncomeTaxResult:
    """Calculate UK income tax with a per-band breakdown.

    The band table carries a 0% personal allowance band first. Bands that
    receive no income are left out of the breakdown, so zero income gives an
    empty breakdown. Amounts are exact decimals; round for display only.

    Args:
        total_income: Gross annual income (must be >= 0).
        region: Tax region. Wales uses the England/NI table.
        tax_year: Tax year key, e.g. "2024-25".
        bands: Optional band table to use instead of the region's table.

    Returns:
        IncomeTaxResult with the allowance, total tax and band breakdown.

    Raises:
        InvalidInput: Negative income, unknown region or unknown tax year.
        ConfigurationError: If ``bands`` is malformed.
    """
    total_income = ensure_money(total_income, "total_income")
    data = get_tax_year(tax_year)
    table = make_band_table(*bands) if bands is not None else band_table_for(region, tax_year)

    rules = data.personal_allowance
    allowance = personal_allowance(total_income, rules)
    breakdown, total_tax = _walk_bands(
        total_income, effective_band_table(table, allowance, rules)
    )

    logger.debug(
        "Income tax %s on %s (%s): allowance %s, tax %s",
        tax_year,
        total_income,
        region,
        allowance,
        total_tax,
    )

    return IncomeTaxResult(
        total_income=total_income,
        personal_allowance=allowance,
        taxable_income=max(ZERO, total_income - allowance),
        total_tax=total_tax,
        breakdown=tuple(breakdown),
    )
