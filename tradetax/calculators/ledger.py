"""Ledger totals: income, expenses and trading profit for a tax year."""

from collections import defaultdict
from collections.abc import Iterable
from decimal import Decimal
from typing import NamedTuple

from tradetax.calculators.inputs import ZERO
from tradetax.calculators.tax_data import DEFAULT_TAX_YEAR, tax_year_bounds
from tradetax.db.models import Transaction

UNCATEGORIZED = "Uncategorized"


class LedgerSummary(NamedTuple):
    """Totals of the transactions dated inside one tax year."""

    tax_year: str
    total_income: Decimal
    total_expenses: Decimal
    net_profit: Decimal
    income_by_category: dict[str, Decimal]
    expenses_by_category: dict[str, Decimal]
    transaction_count: int


def _by_amount(totals: dict[str, Decimal]) -> dict[str, Decimal]:
    return dict(sorted(totals.items(), key=lambda item: (-item[1], item[0])))


def summarise_transactions(
    transactions: Iterable[Transaction],
    tax_year: str = DEFAULT_TAX_YEAR,
) -> LedgerSummary:
    """Sum income and expenses for a tax year, by category.

    Transactions dated outside 6 April to 5 April are ignored. Net profit is
    floored at zero: a trading loss is not carried into the tax calculation.
    Category totals are ordered largest first.
    """
    start, end = tax_year_bounds(tax_year)
    income: dict[str, Decimal] = defaultdict(lambda: ZERO)
    expenses: dict[str, Decimal] = defaultdict(lambda: ZERO)
    count = 0

    for txn in transactions:
        if not start <= txn.date <= end:
            continue
        category = (txn.category or "").strip() or UNCATEGORIZED
        if txn.type == "income":
            income[category] += txn.amount
        else:
            expenses[category] += txn.amount
        count += 1

    total_income = sum(income.values(), ZERO)
    total_expenses = sum(expenses.values(), ZERO)

    return LedgerSummary(
        tax_year=tax_year,
        total_income=total_income,
        total_expenses=total_expenses,
        net_profit=max(ZERO, total_income - total_expenses),
        income_by_category=_by_amount(income),
        expenses_by_category=_by_amount(expenses),
        transaction_count=count,
    )
