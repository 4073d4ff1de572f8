"""Mileage allowance calculator: HMRC approved mileage rates per vehicle."""

from decimal import Decimal
from typing import Any, NamedTuple

from config import load_yaml_config
from tradetax.calculators.errors import InvalidInput
from tradetax.calculators.inputs import ZERO, ensure_money


class MileageBand(NamedTuple):
    """Miles claimed at one rate."""

    miles: Decimal
    rate: Decimal
    amount: Decimal


class MileageResult(NamedTuple):
    """Allowable deduction for a journey."""

    vehicle: str
    miles: Decimal
    deduction: Decimal
    breakdown: tuple[MileageBand, ...]


def mileage_vehicles() -> dict[str, dict[str, Any]]:
    """Vehicle types and their rates from allowances.yaml."""
    return load_yaml_config("allowances.yaml")["mileage"]["vehicles"]


def _vehicle_rates(vehicles: dict[str, dict[str, Any]], vehicle: str) -> dict[str, Any]:
    if vehicle not in vehicles:
        valid = ", ".join(sorted(vehicles))
        raise InvalidInput(f"Unknown vehicle: {vehicle}. Must be one of: {valid}")
    return vehicles[vehicle]


def threshold_group(vehicle: str) -> tuple[str, ...]:
    """Vehicle types whose miles count towards the same yearly threshold.

    Cars and vans share one threshold. A vehicle without a threshold is
    only grouped with itself.

    Raises:
        InvalidInput: Unknown vehicle.
    """
    vehicles = mileage_vehicles()
    rates = _vehicle_rates(vehicles, vehicle)
    if "threshold" not in rates:
        return (vehicle,)
    return tuple(
        sorted(
            key
            for key, other in vehicles.items()
            if "threshold" in other and other.get("label") == rates.get("label")
        )
    )


def calculate_mileage_allowance(
    miles: Decimal,
    vehicle: str = "car",
    miles_already_claimed: Decimal = ZERO,
) -> MileageResult:
    """Calculate the deduction for business miles.

    Cars and vans are claimed at the first rate up to the yearly threshold
    and the second rate beyond it, counting miles already claimed in the
    same tax year. Other vehicles have a single rate.

    Args:
        miles: Business miles for this journey (must be >= 0).
        vehicle: One of the vehicle keys in allowances.yaml.
        miles_already_claimed: Miles claimed earlier in the tax year.

    Raises:
        InvalidInput: Unknown vehicle or negative miles.
    """
    miles = ensure_money(miles, "miles")
    already = ensure_money(miles_already_claimed, "miles_already_claimed")
    vehicles = mileage_vehicles()
    rates = _vehicle_rates(vehicles, vehicle)
    first_rate = Decimal(str(rates["first_rate"]))
    if "threshold" in rates:
        remaining_at_first = max(ZERO, Decimal(rates["threshold"]) - already)
        first_miles = min(miles, remaining_at_first)
        splits = [
            (first_miles, first_rate),
            (miles - first_miles, Decimal(str(rates["second_rate"]))),
        ]
    else:
        splits = [(miles, first_rate)]

    breakdown = tuple(
        MileageBand(miles=band_miles, rate=rate, amount=band_miles * rate)
        for band_miles, rate in splits
        if band_miles > 0
    )
    return MileageResult(
        vehicle=vehicle,
        miles=miles,
        deduction=sum((band.amount for band in breakdown), ZERO),
        breakdown=breakdown,
    )
