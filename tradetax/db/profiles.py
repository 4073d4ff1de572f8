"""Profile store: per-user tax settings in the profiles table."""

import logging
from uuid import UUID

import asyncpg

from tradetax.db.models import Profile

logger = logging.getLogger(__name__)

_PROFILE_COLUMNS = """
    id, full_name, tax_region, employment_status, annual_salary,
    created_at, updated_at
"""


async def get_profile(pool: asyncpg.Pool, user_id: UUID) -> Profile | None:
    """Fetch a user's profile, or None if they have not saved one."""
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            f"SELECT {_PROFILE_COLUMNS} FROM profiles WHERE id = $1",
            user_id,
        )
    if row is None:
        return None
    data = dict(row)
    # Columns are nullable; fall back to the model defaults
    return Profile(**{k: v for k, v in data.items() if v is not None})


async def upsert_profile(pool: asyncpg.Pool, profile: Profile) -> Profile:
    """Insert or update a profile's tax settings and return the stored row."""
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            f"""
            INSERT INTO profiles (id, full_name, tax_region, employment_status, annual_salary)
            VALUES ($1, $2, $3, $4, $5)
            ON CONFLICT (id) DO UPDATE SET
                full_name = EXCLUDED.full_name,
                tax_region = EXCLUDED.tax_region,
                employment_status = EXCLUDED.employment_status,
                annual_salary = EXCLUDED.annual_salary,
                updated_at = NOW()
            RETURNING {_PROFILE_COLUMNS}
            """,
            profile.id,
            profile.full_name,
            profile.tax_region.value,
            profile.employment_status.value,
            profile.annual_salary,
        )
    logger.info("Saved profile %s", profile.id)
    return Profile(**dict(row))
