"""Seed a demo profile and ledger, then print its liability report.

Usage:
    python scripts/seed_demo.py
    python scripts/seed_demo.py --tax-year 2025-26
"""

import argparse
import asyncio
import logging
import sys
from datetime import timedelta
from decimal import Decimal
from pathlib import Path
from uuid import UUID

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from config.settings import settings
from tradetax.calculators.tax_data import EmploymentStatus, TaxRegion, tax_year_bounds
from tradetax.db.models import Profile, Transaction
from tradetax.db.profiles import upsert_profile
from tradetax.db.session import close_pool, get_pool
from tradetax.db.transactions import insert_transaction
from tradetax.report import format_liability_report
from tradetax.service import LiabilityService

logging.basicConfig(level=settings.log_level, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)

DEMO_USER_ID = UUID("00000000-0000-4000-8000-000000000001")

# (days after 6 April, type, amount, category, description)
DEMO_LEDGER: list[tuple[int, str, str, str, str]] = [
    (10, "income", "2400.00", "Sales", "Kitchen refit"),
    (45, "income", "6150.00", "Sales", "Bathroom refit"),
    (52, "expense", "835.20", "Materials", "Tiles and adhesive"),
    (90, "expense", "120.00", "Tools", "Mitre saw blade"),
    (140, "income", "11800.00", "Sales", "Loft conversion"),
    (141, "expense", "2410.55", "Materials", "Timber"),
    (200, "expense", "310.00", "Insurance", "Public liability"),
    (260, "income", "3900.00", "Repairs", "Storm damage"),
]


async def run(tax_year: str) -> None:
    start, _ = tax_year_bounds(tax_year)
    pool = await get_pool()
    try:
        await upsert_profile(
            pool,
            Profile(
                id=DEMO_USER_ID,
                full_name="Demo Trader",
                tax_region=TaxRegion.ENGLAND_NI,
                employment_status=EmploymentStatus.EMPLOYED_AND_SELF_EMPLOYED,
                annual_salary=Decimal("18000"),
            ),
        )
        for offset, kind, amount, category, description in DEMO_LEDGER:
            await insert_transaction(
                pool,
                Transaction(
                    user_id=DEMO_USER_ID,
                    type=kind,
                    amount=Decimal(amount),
                    date=start + timedelta(days=offset),
                    category=category,
                    description=description,
                ),
            )
        logger.info("Seeded %d transactions for %s", len(DEMO_LEDGER), DEMO_USER_ID)

        result = await LiabilityService(pool).liability_for_user(DEMO_USER_ID, tax_year)
        if result is not None:
            print(format_liability_report(result.liability, result.ledger))
    finally:
        await close_pool()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed a demo TradeTax ledger")
    parser.add_argument("--tax-year", default=settings.default_tax_year)
    args = parser.parse_args()
    asyncio.run(run(args.tax_year))


if __name__ == "__main__":
    main()
