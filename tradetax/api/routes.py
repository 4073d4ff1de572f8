"""API routes for the TradeTax liability service."""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Literal
from uuid import UUID

import asyncpg
from fastapi import APIRouter, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, ValidationInfo, field_validator

from config.settings import settings
from tradetax.calculators.errors import InvalidInput
from tradetax.calculators.inputs import parse_money, quantize_money
from tradetax.calculators.ledger import LedgerSummary
from tradetax.calculators.liability import (
    LiabilityBreakdown,
    calculate_liability,
    income_aggregate_for,
)
from tradetax.calculators.mileage import MileageResult, calculate_mileage_allowance
from tradetax.calculators.tax_data import (
    TAX_YEARS,
    EmploymentStatus,
    TaxRegion,
    tax_year_bounds,
)
from tradetax.calculators.vat import add_vat, remove_vat
from tradetax.db.models import (
    BandTaxLine,
    LedgerSummaryResponse,
    LiabilityResponse,
    MileageBandLine,
    MileageLogResponse,
    MileageResponse,
    MileageTripLine,
    NicLine,
    UserLiabilityResponse,
    VatResponse,
)
from tradetax.report import format_liability_report
from tradetax.service import UserLiability

logger = logging.getLogger(__name__)

router = APIRouter()


def _money(amount: Decimal) -> float:
    return float(quantize_money(amount))


class CalculateRequest(BaseModel):
    """Request body for the /calculate endpoint."""

    annual_salary: Decimal = Decimal("0")
    self_employment_profit: Decimal = Decimal("0")
    tax_region: TaxRegion = TaxRegion.ENGLAND_NI
    employment_status: EmploymentStatus = EmploymentStatus.EMPLOYED_AND_SELF_EMPLOYED
    tax_year: str | None = None

    @field_validator("annual_salary", "self_employment_profit", mode="before")
    @classmethod
    def _parse_amounts(cls, value: Any, info: ValidationInfo) -> Decimal:
        return parse_money(value, info.field_name)


class VatRequest(BaseModel):
    """Request body for the /vat endpoint."""

    amount: Decimal
    rate: Decimal | None = None  # fraction, e.g. 0.20; defaults to the standard rate
    mode: Literal["add", "remove"] = "add"

    @field_validator("amount", mode="before")
    @classmethod
    def _parse_amount(cls, value: Any, info: ValidationInfo) -> Decimal:
        return parse_money(value, info.field_name)


class MileageRequest(BaseModel):
    """Request body for the /mileage endpoint."""

    miles: Decimal
    vehicle: str = "car"
    miles_already_claimed: Decimal = Decimal("0")

    @field_validator("miles", "miles_already_claimed", mode="before")
    @classmethod
    def _parse_miles(cls, value: Any, info: ValidationInfo) -> Decimal:
        return parse_money(value, info.field_name)


class TripRequest(BaseModel):
    """Request body for recording a mileage trip."""

    miles: Decimal
    vehicle: str = "car"
    purpose: str
    date: date

    @field_validator("miles", mode="before")
    @classmethod
    def _parse_miles(cls, value: Any, info: ValidationInfo) -> Decimal:
        return parse_money(value, info.field_name)


def _error(message: str, status_code: int = 422) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report request validation failures in the same shape as handler errors."""
    messages = []
    for error in exc.errors():
        if error["type"] == "value_error":
            messages.append(error["msg"].removeprefix("Value error, "))
        else:
            field = ".".join(str(loc) for loc in error["loc"][1:]) or str(error["loc"][0])
            messages.append(f"{field}: {error['msg']}")
    return _error("; ".join(messages))


def to_liability_response(breakdown: LiabilityBreakdown) -> LiabilityResponse:
    """Round a liability breakdown to pennies for the API."""
    return LiabilityResponse(
        tax_year=breakdown.tax_year,
        region=breakdown.region,
        total_income=_money(breakdown.total_income),
        personal_allowance=_money(breakdown.personal_allowance),
        per_band_tax=[
            BandTaxLine(
                band_name=band.band_name,
                rate=float(band.rate),
                taxable_amount=_money(band.taxable_amount),
                tax=_money(band.tax),
            )
            for band in breakdown.per_band_tax
        ],
        total_income_tax=_money(breakdown.total_income_tax),
        per_nic_class=[
            NicLine(class_name=nic.class_name, description=nic.description, amount=_money(nic.amount))
            for nic in breakdown.per_nic_class
        ],
        total_nic=_money(breakdown.total_nic),
        already_paid_via_paye=_money(breakdown.already_paid_via_paye),
        balancing_payment_due=_money(breakdown.balancing_payment_due),
        take_home_after_tax=_money(breakdown.take_home_after_tax),
    )


def to_ledger_response(summary: LedgerSummary) -> LedgerSummaryResponse:
    """Round ledger totals to pennies for the API."""
    return LedgerSummaryResponse(
        tax_year=summary.tax_year,
        total_income=_money(summary.total_income),
        total_expenses=_money(summary.total_expenses),
        net_profit=_money(summary.net_profit),
        income_by_category={k: _money(v) for k, v in summary.income_by_category.items()},
        expenses_by_category={k: _money(v) for k, v in summary.expenses_by_category.items()},
        transaction_count=summary.transaction_count,
    )


def to_mileage_response(result: MileageResult) -> MileageResponse:
    """Round a mileage deduction to pennies for the API."""
    return MileageResponse(
        vehicle=result.vehicle,
        miles=float(result.miles),
        deduction=_money(result.deduction),
        breakdown=[
            MileageBandLine(miles=float(band.miles), rate=float(band.rate), amount=_money(band.amount))
            for band in result.breakdown
        ],
    )


@router.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok", "default_tax_year": settings.default_tax_year}


@router.get("/tax-years")
async def tax_years() -> dict[str, Any]:
    """List the supported tax years and their date ranges."""
    years = []
    for label in sorted(TAX_YEARS):
        start, end = tax_year_bounds(label)
        years.append({"tax_year": label, "start": start.isoformat(), "end": end.isoformat()})
    return {"default": settings.default_tax_year, "tax_years": years}


@router.post("/calculate", response_model=LiabilityResponse)
async def calculate(body: CalculateRequest) -> LiabilityResponse | JSONResponse:
    """Calculate income tax, NIC and the Self Assessment balance."""
    try:
        aggregate = income_aggregate_for(
            body.employment_status, body.annual_salary, body.self_employment_profit
        )
        breakdown = calculate_liability(
            aggregate, body.tax_region, body.tax_year or settings.default_tax_year
        )
    except InvalidInput as e:
        return _error(str(e))
    return to_liability_response(breakdown)


async def _user_liability(
    request: Request, user_id: UUID, tax_year: str | None
) -> UserLiability | JSONResponse:
    service = request.app.state.service
    try:
        result = await service.liability_for_user(user_id, tax_year or settings.default_tax_year)
    except InvalidInput as e:
        return _error(str(e))
    except asyncpg.PostgresError:
        logger.exception("Failed to load ledger for %s", user_id)
        return _error("Ledger unavailable", status_code=503)
    if result is None:
        return _error("Profile not found", status_code=404)
    return result


@router.get("/users/{user_id}/liability", response_model=UserLiabilityResponse)
async def user_liability(
    user_id: UUID, request: Request, tax_year: str | None = None
) -> UserLiabilityResponse | JSONResponse:
    """Calculate a user's liability from their profile and ledger."""
    result = await _user_liability(request, user_id, tax_year)
    if isinstance(result, JSONResponse):
        return result
    return UserLiabilityResponse(
        user_id=user_id,
        employment_status=result.profile.employment_status,
        ledger=to_ledger_response(result.ledger),
        liability=to_liability_response(result.liability),
    )


@router.get("/users/{user_id}/report", response_class=PlainTextResponse, response_model=None)
async def user_report(
    user_id: UUID, request: Request, tax_year: str | None = None
) -> PlainTextResponse | JSONResponse:
    """Plain-text liability summary for sharing."""
    result = await _user_liability(request, user_id, tax_year)
    if isinstance(result, JSONResponse):
        return result
    return PlainTextResponse(format_liability_report(result.liability, result.ledger))


@router.post("/users/{user_id}/mileage-trips", status_code=201, response_model=None)
async def record_trip(user_id: UUID, body: TripRequest, request: Request) -> JSONResponse:
    """Save a business journey with its mileage deduction."""
    service = request.app.state.service
    try:
        recorded = await service.record_trip(
            user_id, body.miles, body.vehicle, body.purpose, body.date
        )
    except InvalidInput as e:
        return _error(str(e))
    except asyncpg.PostgresError:
        logger.exception("Failed to save mileage trip for %s", user_id)
        return _error("Ledger unavailable", status_code=503)
    payload = to_mileage_response(recorded.allowance).model_dump()
    payload["trip_id"] = str(recorded.trip_id)
    return JSONResponse(payload, status_code=201)


@router.get("/users/{user_id}/mileage-trips", response_model=MileageLogResponse)
async def list_trips(
    user_id: UUID, request: Request, tax_year: str | None = None
) -> MileageLogResponse | JSONResponse:
    """Saved mileage trips for a tax year with their total deduction."""
    service = request.app.state.service
    tax_year = tax_year or settings.default_tax_year
    try:
        trips = await service.trips_for_user(user_id, tax_year)
    except InvalidInput as e:
        return _error(str(e))
    except asyncpg.PostgresError:
        logger.exception("Failed to load mileage trips for %s", user_id)
        return _error("Ledger unavailable", status_code=503)
    return MileageLogResponse(
        tax_year=tax_year,
        total_miles=float(sum((trip.distance for trip in trips), Decimal("0"))),
        total_deduction=_money(sum((trip.deduction for trip in trips), Decimal("0"))),
        trips=[
            MileageTripLine(
                id=trip.id,
                date=trip.date,
                distance=float(trip.distance),
                purpose=trip.purpose,
                vehicle_type=trip.vehicle_type,
                rate=float(trip.rate),
                deduction=_money(trip.deduction),
            )
            for trip in trips
        ],
    )


@router.post("/vat", response_model=VatResponse)
async def vat(body: VatRequest) -> VatResponse | JSONResponse:
    """Add VAT to a net amount or remove it from a gross amount."""
    try:
        result = add_vat(body.amount, body.rate) if body.mode == "add" else remove_vat(
            body.amount, body.rate
        )
    except InvalidInput as e:
        return _error(str(e))
    return VatResponse(
        net=_money(result.net),
        vat=_money(result.vat),
        gross=_money(result.gross),
        rate=float(result.rate),
    )


@router.post("/mileage", response_model=MileageResponse)
async def mileage(body: MileageRequest) -> MileageResponse | JSONResponse:
    """Calculate the mileage allowance for a journey."""
    try:
        result = calculate_mileage_allowance(body.miles, body.vehicle, body.miles_already_claimed)
    except InvalidInput as e:
        return _error(str(e))
    return to_mileage_response(result)
