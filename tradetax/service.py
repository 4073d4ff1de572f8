"""Liability service: load a user's profile and ledger, then run the calculators."""

import logging
from datetime import date
from decimal import Decimal
from typing import NamedTuple
from uuid import UUID

import asyncpg

from tradetax.calculators.ledger import LedgerSummary, summarise_transactions
from tradetax.calculators.liability import (
    LiabilityBreakdown,
    calculate_liability,
    income_aggregate_for,
)
from tradetax.calculators.mileage import (
    MileageResult,
    calculate_mileage_allowance,
    threshold_group,
)
from tradetax.calculators.tax_data import (
    DEFAULT_TAX_YEAR,
    get_tax_year,
    tax_year_bounds,
    tax_year_for_date,
)
from tradetax.db.models import MileageTrip, Profile
from tradetax.db.profiles import get_profile
from tradetax.db.transactions import (
    fetch_mileage_trips,
    fetch_transactions,
    insert_mileage_trip,
    miles_claimed,
)

logger = logging.getLogger(__name__)


class UserLiability(NamedTuple):
    """A user's liability with the inputs it was calculated from."""

    profile: Profile
    ledger: LedgerSummary
    liability: LiabilityBreakdown


class RecordedTrip(NamedTuple):
    """A saved mileage trip and its deduction."""

    trip_id: UUID
    allowance: MileageResult


class LiabilityService:
    """Coordinates the profile and transaction stores with the calculators."""

    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    async def liability_for_user(
        self,
        user_id: UUID,
        tax_year: str = DEFAULT_TAX_YEAR,
    ) -> UserLiability | None:
        """Calculate a user's liability from their saved profile and ledger.

        Self-employment profit is the ledger's net profit for the tax year;
        the salary comes from the profile.

        Returns:
            UserLiability, or None if the user has no profile.

        Raises:
            InvalidInput: Unknown tax year.
        """
        get_tax_year(tax_year)
        start, end = tax_year_bounds(tax_year)
        profile = await get_profile(self._pool, user_id)
        if profile is None:
            logger.info("No profile for user %s", user_id)
            return None

        transactions = await fetch_transactions(self._pool, user_id, start, end)
        ledger = summarise_transactions(transactions, tax_year)
        aggregate = income_aggregate_for(
            profile.employment_status,
            profile.annual_salary,
            ledger.net_profit,
        )
        liability = calculate_liability(aggregate, profile.tax_region, tax_year)

        logger.info(
            "Liability for %s in %s: %d transactions, due %s",
            user_id,
            tax_year,
            ledger.transaction_count,
            liability.balancing_payment_due,
        )
        return UserLiability(profile=profile, ledger=ledger, liability=liability)

    async def record_trip(
        self,
        user_id: UUID,
        miles: Decimal,
        vehicle: str,
        purpose: str,
        day: date,
    ) -> RecordedTrip:
        """Work out the mileage deduction for a trip and save it.

        Miles already claimed earlier in the trip's tax year, for any vehicle
        sharing the same threshold, count towards the higher-rate threshold.
        """
        start, end = tax_year_bounds(tax_year_for_date(day))
        already = await miles_claimed(self._pool, user_id, threshold_group(vehicle), start, end)
        allowance = calculate_mileage_allowance(miles, vehicle, already)

        # Blended pence-per-mile when the trip straddles the threshold
        rate = (
            (allowance.deduction / allowance.miles).quantize(Decimal("0.0001"))
            if allowance.miles
            else Decimal("0")
        )
        trip_id = await insert_mileage_trip(
            self._pool,
            MileageTrip(
                user_id=user_id,
                date=day,
                distance=allowance.miles,
                purpose=purpose,
                vehicle_type=vehicle,
                rate=rate,
                deduction=allowance.deduction,
            ),
        )
        return RecordedTrip(trip_id=trip_id, allowance=allowance)

    async def trips_for_user(
        self,
        user_id: UUID,
        tax_year: str = DEFAULT_TAX_YEAR,
    ) -> list[MileageTrip]:
        """A user's saved mileage trips for a tax year, newest first.

        Raises:
            InvalidInput: Unknown tax year.
        """
        start, end = tax_year_bounds(tax_year)
        return await fetch_mileage_trips(self._pool, user_id, start, end)
