"""Plain-text liability report for sharing.

Sections always appear in the same order: income and expenses, income tax
by band, National Insurance by class, totals, take-home pay.
"""

from decimal import Decimal

from tradetax.calculators.inputs import quantize_money
from tradetax.calculators.ledger import LedgerSummary
from tradetax.calculators.liability import LiabilityBreakdown
from tradetax.calculators.tax_data import TaxRegion

_REGION_LABELS: dict[TaxRegion, str] = {
    TaxRegion.ENGLAND_NI: "England/NI",
    TaxRegion.WALES: "Wales",
    TaxRegion.SCOTLAND: "Scotland",
}

_LABEL_WIDTH = 34


def format_money(amount: Decimal) -> str:
    """Format an amount as pounds and pence, e.g. £1,234.56."""
    rounded = quantize_money(amount)
    sign = "-" if rounded < 0 else ""
    return f"{sign}£{abs(rounded):,.2f}"


def _percent(rate: Decimal) -> str:
    return f"{(rate * 100).normalize():f}%"


def _line(label: str, value: str) -> str:
    return f"  {label:<{_LABEL_WIDTH}}{value:>14}"


def format_liability_report(
    breakdown: LiabilityBreakdown,
    summary: LedgerSummary | None = None,
) -> str:
    """Render a liability breakdown as a plain-text summary."""
    region = _REGION_LABELS[breakdown.region]
    lines = [f"TAX SUMMARY {breakdown.tax_year} ({region})", ""]

    lines.append("INCOME & EXPENSES")
    if summary is not None:
        lines.append(_line("Business income", format_money(summary.total_income)))
        lines.append(_line("Business expenses", format_money(summary.total_expenses)))
        lines.append(_line("Net profit", format_money(summary.net_profit)))
    lines.append(_line("Total taxable income", format_money(breakdown.total_income)))
    lines.append(_line("Personal allowance", format_money(breakdown.personal_allowance)))
    lines.append("")

    lines.append("INCOME TAX")
    if not breakdown.per_band_tax:
        lines.append("  No income tax due.")
    for band in breakdown.per_band_tax:
        label = f"{band.band_name} ({_percent(band.rate)}) on {format_money(band.taxable_amount)}"
        lines.append(_line(label, format_money(band.tax)))
    lines.append(_line("Total income tax", format_money(breakdown.total_income_tax)))
    lines.append("")

    lines.append("NATIONAL INSURANCE")
    if not breakdown.per_nic_class:
        lines.append("  No self-employed NIC due.")
    for nic in breakdown.per_nic_class:
        lines.append(_line(f"{nic.class_name} ({nic.description})", format_money(nic.amount)))
    lines.append(_line("Total NIC", format_money(breakdown.total_nic)))
    lines.append("")

    lines.append("TOTALS")
    total_liability = breakdown.total_income_tax + breakdown.total_nic
    lines.append(_line("Total tax and NIC", format_money(total_liability)))
    lines.append(_line("Already paid (PAYE)", format_money(breakdown.already_paid_via_paye)))
    lines.append(_line("Self Assessment due", format_money(breakdown.balancing_payment_due)))
    lines.append("")

    lines.append("TAKE-HOME PAY")
    lines.append(_line("After tax and NIC", format_money(breakdown.take_home_after_tax)))

    return "\n".join(lines) + "\n"
