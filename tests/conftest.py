"""Shared test fixtures."""

from collections.abc import Callable
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest

from tradetax.calculators.tax_data import EmploymentStatus, TaxRegion
from tradetax.db.models import Profile, Transaction

USER_ID = UUID("11111111-2222-4333-8444-555555555555")


def _make_transaction(
    type: str = "income",
    amount: str = "100.00",
    day: date = date(2024, 6, 1),
    category: str | None = "Sales",
    description: str | None = None,
) -> Transaction:
    return Transaction(
        user_id=USER_ID,
        type=type,
        amount=Decimal(amount),
        date=day,
        category=category,
        description=description,
    )


@pytest.fixture
def sample_transactions() -> list[Transaction]:
    """A 2024-25 ledger with £24,000 income and £4,000 expenses, plus
    one transaction either side of the tax year."""
    return [
        _make_transaction("income", "15000.00", date(2024, 4, 6), "Sales"),
        _make_transaction("income", "9000.00", date(2025, 4, 5), "Repairs"),
        _make_transaction("expense", "2500.00", date(2024, 9, 12), "Materials"),
        _make_transaction("expense", "1000.00", date(2024, 11, 3), "Tools"),
        _make_transaction("expense", "500.00", date(2025, 1, 20), "Materials"),
        _make_transaction("income", "7777.00", date(2024, 4, 5), "Sales"),
        _make_transaction("expense", "333.00", date(2025, 4, 6), "Tools"),
    ]


@pytest.fixture
def sample_profile() -> Profile:
    return Profile(
        id=USER_ID,
        full_name="Sam Trader",
        tax_region=TaxRegion.ENGLAND_NI,
        employment_status=EmploymentStatus.EMPLOYED_AND_SELF_EMPLOYED,
        annual_salary=Decimal("40000"),
    )


@pytest.fixture
def mock_db_pool() -> MagicMock:
    """Mock of asyncpg.Pool with context-managed acquire().

    asyncpg.Pool.acquire() returns an async context manager (not a coroutine),
    so we use MagicMock for the pool and configure __aenter__/__aexit__ manually.
    """
    conn = AsyncMock()
    conn.fetch.return_value = []
    conn.fetchrow.return_value = None

    acm = MagicMock()
    acm.__aenter__ = AsyncMock(return_value=conn)
    acm.__aexit__ = AsyncMock(return_value=False)

    pool = MagicMock()
    pool.acquire.return_value = acm
    return pool


@pytest.fixture
def user_id() -> UUID:
    return USER_ID


@pytest.fixture
def make_transaction() -> Callable[..., Transaction]:
    """Factory for ledger rows belonging to the sample user."""
    return _make_transaction
