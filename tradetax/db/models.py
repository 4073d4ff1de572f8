"""Pydantic models for database rows and API responses."""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from tradetax.calculators.tax_data import EmploymentStatus, TaxRegion

# --- Database row models ---


class Profile(BaseModel):
    """A user's tax settings (maps to profiles table)."""

    id: UUID
    full_name: str | None = None
    tax_region: TaxRegion = TaxRegion.ENGLAND_NI
    employment_status: EmploymentStatus = EmploymentStatus.SELF_EMPLOYED_ONLY
    annual_salary: Decimal = Field(default=Decimal("0"), ge=0)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class Transaction(BaseModel):
    """A dated income or expense record (maps to transactions table)."""

    id: UUID | None = None
    user_id: UUID
    type: Literal["income", "expense"]
    amount: Decimal = Field(ge=0)
    date: date
    description: str | None = None
    category: str | None = None
    created_at: datetime | None = None


class MileageTrip(BaseModel):
    """A business journey claimed at the approved mileage rate (maps to mileage_trips)."""

    id: UUID | None = None
    user_id: UUID
    date: date
    distance: Decimal = Field(ge=0)
    purpose: str
    vehicle_type: str
    rate: Decimal
    deduction: Decimal
    created_at: datetime | None = None


# --- API response models ---


class BandTaxLine(BaseModel):
    """Income tax charged in one band."""

    band_name: str
    rate: float
    taxable_amount: float
    tax: float


class NicLine(BaseModel):
    """One National Insurance charge."""

    class_name: str
    description: str
    amount: float


class LiabilityResponse(BaseModel):
    """Response from the /calculate endpoint."""

    tax_year: str
    region: TaxRegion
    total_income: float
    personal_allowance: float
    per_band_tax: list[BandTaxLine]
    total_income_tax: float
    per_nic_class: list[NicLine]
    total_nic: float
    already_paid_via_paye: float
    balancing_payment_due: float
    take_home_after_tax: float


class LedgerSummaryResponse(BaseModel):
    """Ledger totals for a tax year."""

    tax_year: str
    total_income: float
    total_expenses: float
    net_profit: float
    income_by_category: dict[str, float]
    expenses_by_category: dict[str, float]
    transaction_count: int


class UserLiabilityResponse(BaseModel):
    """Response from the /users/{user_id}/liability endpoint."""

    user_id: UUID
    employment_status: EmploymentStatus
    ledger: LedgerSummaryResponse
    liability: LiabilityResponse


class VatResponse(BaseModel):
    """Response from the /vat endpoint."""

    net: float
    vat: float
    gross: float
    rate: float


class MileageBandLine(BaseModel):
    """Miles charged at one approved mileage rate."""

    miles: float
    rate: float
    amount: float


class MileageResponse(BaseModel):
    """Response from the /mileage endpoint."""

    vehicle: str
    miles: float
    deduction: float
    breakdown: list[MileageBandLine]


class MileageTripLine(BaseModel):
    """A saved mileage trip."""

    id: UUID | None
    date: date
    distance: float
    purpose: str
    vehicle_type: str
    rate: float
    deduction: float


class MileageLogResponse(BaseModel):
    """Response from GET /users/{user_id}/mileage-trips."""

    tax_year: str
    total_miles: float
    total_deduction: float
    trips: list[MileageTripLine]
