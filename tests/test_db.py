"""Tests for the profile and transaction stores."""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest

from tradetax.calculators.tax_data import EmploymentStatus, TaxRegion
from tradetax.db.models import Profile, Transaction
from tradetax.db.profiles import get_profile, upsert_profile
from tradetax.db.transactions import fetch_transactions, insert_transaction, miles_claimed


def _conn(pool: MagicMock) -> AsyncMock:
    return pool.acquire.return_value.__aenter__.return_value


@pytest.mark.asyncio
async def test_get_profile_missing(mock_db_pool: MagicMock, user_id: UUID) -> None:
    assert await get_profile(mock_db_pool, user_id) is None


@pytest.mark.asyncio
async def test_upsert_profile_sends_enum_values(
    mock_db_pool: MagicMock, sample_profile: Profile
) -> None:
    conn = _conn(mock_db_pool)
    conn.fetchrow.return_value = sample_profile.model_dump()

    saved = await upsert_profile(mock_db_pool, sample_profile)

    assert saved == sample_profile
    sql, *params = conn.fetchrow.await_args.args
    assert "ON CONFLICT (id) DO UPDATE" in sql
    assert params == [
        sample_profile.id,
        "Sam Trader",
        "england",
        "employed_self",
        Decimal("40000"),
    ]


@pytest.mark.asyncio
async def test_fetch_transactions_builds_models(
    mock_db_pool: MagicMock, user_id: UUID
) -> None:
    _conn(mock_db_pool).fetch.return_value = [
        {
            "id": UUID(int=3),
            "user_id": user_id,
            "type": "expense",
            "amount": Decimal("42.10"),
            "date": date(2024, 8, 14),
            "description": "Van service",
            "category": "Vehicle",
            "created_at": None,
        }
    ]

    rows = await fetch_transactions(mock_db_pool, user_id, date(2024, 4, 6), date(2025, 4, 5))

    assert rows == [
        Transaction(
            id=UUID(int=3),
            user_id=user_id,
            type="expense",
            amount=Decimal("42.10"),
            date=date(2024, 8, 14),
            description="Van service",
            category="Vehicle",
        )
    ]


@pytest.mark.asyncio
async def test_insert_transaction_returns_id(mock_db_pool: MagicMock, user_id: UUID) -> None:
    conn = _conn(mock_db_pool)
    conn.fetchrow.return_value = {"id": UUID(int=9)}
    txn = Transaction(
        user_id=user_id,
        type="income",
        amount=Decimal("250"),
        date=date(2024, 5, 2),
        category="Sales",
    )

    assert await insert_transaction(mock_db_pool, txn) == UUID(int=9)
    assert conn.fetchrow.await_args.args[1:] == (
        user_id,
        "income",
        Decimal("250"),
        date(2024, 5, 2),
        None,
        "Sales",
    )


@pytest.mark.asyncio
async def test_miles_claimed_is_decimal(mock_db_pool: MagicMock, user_id: UUID) -> None:
    _conn(mock_db_pool).fetchval.return_value = 0
    total = await miles_claimed(
        mock_db_pool, user_id, ("car", "van"), date(2024, 4, 6), date(2025, 4, 5)
    )
    assert total == Decimal("0")
    assert isinstance(total, Decimal)
    assert _conn(mock_db_pool).fetchval.await_args.args[2] == ["car", "van"]


def test_profile_rejects_negative_salary(user_id: UUID) -> None:
    with pytest.raises(ValueError):
        Profile(id=user_id, annual_salary=Decimal("-1"))


def test_profile_defaults(user_id: UUID) -> None:
    profile = Profile(id=user_id)
    assert profile.tax_region is TaxRegion.ENGLAND_NI
    assert profile.employment_status is EmploymentStatus.SELF_EMPLOYED_ONLY
    assert profile.annual_salary == 0


@pytest.mark.asyncio
async def test_pool_created_once(monkeypatch: pytest.MonkeyPatch) -> None:
    from tradetax.db import session

    pool = MagicMock()
    pool.close = AsyncMock()
    create_pool = AsyncMock(return_value=pool)
    monkeypatch.setattr(session.asyncpg, "create_pool", create_pool)
    monkeypatch.setattr(session, "_pool", None)

    assert await session.get_pool() is pool
    assert await session.get_pool() is pool
    create_pool.assert_awaited_once()
    assert create_pool.await_args.kwargs["init"] is session._init_connection

    await session.close_pool()
    pool.close.assert_awaited_once()
    assert session._pool is None
