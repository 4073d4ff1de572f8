"""Transaction store: the income/expense ledger and mileage trips."""

import logging
from collections.abc import Sequence
from datetime import date
from decimal import Decimal
from uuid import UUID

import asyncpg

from tradetax.db.models import MileageTrip, Transaction

logger = logging.getLogger(__name__)


async def fetch_transactions(
    pool: asyncpg.Pool,
    user_id: UUID,
    start: date,
    end: date,
) -> list[Transaction]:
    """Fetch a user's transactions dated between start and end inclusive, newest first."""
    async with pool.acquire() as conn:
        rows = await conn.fetch(
            """
            SELECT id, user_id, type, amount, date, description, category, created_at
            FROM transactions
            WHERE user_id = $1 AND date BETWEEN $2 AND $3
            ORDER BY date DESC, created_at DESC
            """,
            user_id,
            start,
            end,
        )
    logger.info("Fetched %d transactions for %s (%s to %s)", len(rows), user_id, start, end)
    return [Transaction(**dict(row)) for row in rows]


async def insert_transaction(pool: asyncpg.Pool, txn: Transaction) -> UUID:
    """Insert a transaction and return its ID."""
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            """
            INSERT INTO transactions (user_id, type, amount, date, description, category)
            VALUES ($1, $2, $3, $4, $5, $6)
            RETURNING id
            """,
            txn.user_id,
            txn.type,
            txn.amount,
            txn.date,
            txn.description,
            txn.category,
        )
    return UUID(str(row["id"]))


async def fetch_mileage_trips(
    pool: asyncpg.Pool,
    user_id: UUID,
    start: date,
    end: date,
) -> list[MileageTrip]:
    """Fetch a user's mileage trips between start and end inclusive, newest first."""
    async with pool.acquire() as conn:
        rows = await conn.fetch(
            """
            SELECT id, user_id, date, distance, purpose, vehicle_type, rate, deduction, created_at
            FROM mileage_trips
            WHERE user_id = $1 AND date BETWEEN $2 AND $3
            ORDER BY date DESC, created_at DESC
            """,
            user_id,
            start,
            end,
        )
    return [MileageTrip(**dict(row)) for row in rows]


async def miles_claimed(
    pool: asyncpg.Pool,
    user_id: UUID,
    vehicle_types: Sequence[str],
    start: date,
    end: date,
) -> Decimal:
    """Total miles already claimed for any of the vehicle types between start and end."""
    async with pool.acquire() as conn:
        total = await conn.fetchval(
            """
            SELECT COALESCE(SUM(distance), 0)
            FROM mileage_trips
            WHERE user_id = $1 AND vehicle_type = ANY($2::text[]) AND date BETWEEN $3 AND $4
            """,
            user_id,
            list(vehicle_types),
            start,
            end,
        )
    return Decimal(total)


async def insert_mileage_trip(pool: asyncpg.Pool, trip: MileageTrip) -> UUID:
    """Insert a mileage trip and return its ID."""
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            """
            INSERT INTO mileage_trips
                (user_id, date, distance, purpose, vehicle_type, rate, deduction)
            VALUES ($1, $2, $3, $4, $5, $6, $7)
            RETURNING id
            """,
            trip.user_id,
            trip.date,
            trip.distance,
            trip.purpose,
            trip.vehicle_type,
            trip.rate,
            trip.deduction,
        )
    logger.info("Saved %s mile trip for %s", trip.distance, trip.user_id)
    return UUID(str(row["id"]))
