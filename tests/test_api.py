"""Tests for the API endpoints."""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock
from uuid import UUID

import asyncpg
import pytest
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.testclient import TestClient

from tradetax.api.routes import router, validation_error_handler
from tradetax.calculators.errors import InvalidInput
from tradetax.calculators.ledger import summarise_transactions
from tradetax.calculators.liability import IncomeAggregate, calculate_liability
from tradetax.calculators.mileage import calculate_mileage_allowance
from tradetax.db.models import MileageTrip, Profile, Transaction
from tradetax.service import RecordedTrip, UserLiability


@pytest.fixture
def app() -> FastAPI:
    """Create a test app with the router but no lifespan (no DB)."""
    test_app = FastAPI()
    test_app.include_router(router)
    test_app.add_exception_handler(RequestValidationError, validation_error_handler)
    test_app.state.service = AsyncMock()
    return test_app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture
def user_liability(
    sample_profile: Profile, sample_transactions: list[Transaction]
) -> UserLiability:
    ledger = summarise_transactions(sample_transactions, "2024-25")
    liability = calculate_liability(
        IncomeAggregate(sample_profile.annual_salary, ledger.net_profit),
        sample_profile.tax_region,
        "2024-25",
    )
    return UserLiability(profile=sample_profile, ledger=ledger, liability=liability)


def test_health(client: TestClient) -> None:
    """GET /health returns ok status and the default tax year."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["default_tax_year"] == "2024-25"


def test_tax_years(client: TestClient) -> None:
    response = client.get("/tax-years")
    assert response.status_code == 200
    data = response.json()
    assert [y["tax_year"] for y in data["tax_years"]] == ["2023-24", "2024-25", "2025-26"]
    assert data["tax_years"][1]["start"] == "2024-04-06"
    assert data["tax_years"][1]["end"] == "2025-04-05"


# --- /calculate ---


class TestCalculate:
    def test_employed_and_self_employed(self, client: TestClient) -> None:
        response = client.post(
            "/calculate",
            json={
                "annual_salary": "£40,000",
                "self_employment_profit": 20000,
                "tax_region": "england",
                "tax_year": "2024-25",
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["total_income"] == 60000.0
        assert data["total_income_tax"] == 11432.0
        assert data["total_nic"] == 625.2
        assert data["already_paid_via_paye"] == 7680.4
        assert data["balancing_payment_due"] == 4376.8
        assert data["take_home_after_tax"] == 47942.8
        assert [n["class_name"] for n in data["per_nic_class"]] == [
            "Class 2 NIC",
            "Class 4 NIC (Lower)",
        ]

    def test_self_employed_ignores_salary(self, client: TestClient) -> None:
        response = client.post(
            "/calculate",
            json={
                "annual_salary": 40000,
                "self_employment_profit": 30000,
                "employment_status": "self_employed",
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["total_income"] == 30000.0
        assert data["already_paid_via_paye"] == 0.0

    def test_defaults_to_configured_year(self, client: TestClient) -> None:
        response = client.post("/calculate", json={})
        assert response.status_code == 200
        assert response.json()["tax_year"] == "2024-25"
        assert response.json()["per_band_tax"] == []

    def test_blank_amount_is_zero(self, client: TestClient) -> None:
        response = client.post("/calculate", json={"annual_salary": ""})
        assert response.status_code == 200
        assert response.json()["total_income"] == 0.0

    def test_scotland_rounded_to_pennies(self, client: TestClient) -> None:
        response = client.post(
            "/calculate",
            json={"self_employment_profit": "12570.01", "tax_region": "scotland"},
        )
        assert response.status_code == 200
        lower = response.json()["per_nic_class"][1]
        assert lower["amount"] == 0.0

    def test_negative_amount(self, client: TestClient) -> None:
        response = client.post("/calculate", json={"annual_salary": -1})
        assert response.status_code == 422
        assert response.json() == {"error": "annual_salary must be non-negative."}

    def test_malformed_amount(self, client: TestClient) -> None:
        response = client.post("/calculate", json={"self_employment_profit": "lots"})
        assert response.status_code == 422
        assert response.json() == {
            "error": "self_employment_profit is not a valid amount: 'lots'."
        }

    def test_unknown_region(self, client: TestClient) -> None:
        response = client.post("/calculate", json={"tax_region": "mars"})
        assert response.status_code == 422
        assert response.json()["error"].startswith("tax_region: ")

    def test_unknown_tax_year(self, client: TestClient) -> None:
        response = client.post("/calculate", json={"tax_year": "2019-20"})
        assert response.status_code == 422
        assert "Unknown tax year" in response.json()["error"]


# --- /users/{user_id}/... ---


class TestUserLiability:
    def test_liability(
        self,
        app: FastAPI,
        client: TestClient,
        user_id: UUID,
        user_liability: UserLiability,
    ) -> None:
        app.state.service.liability_for_user.return_value = user_liability

        response = client.get(f"/users/{user_id}/liability", params={"tax_year": "2024-25"})

        assert response.status_code == 200
        data = response.json()
        assert data["user_id"] == str(user_id)
        assert data["employment_status"] == "employed_self"
        assert data["ledger"]["net_profit"] == 20000.0
        assert data["ledger"]["expenses_by_category"] == {"Materials": 3000.0, "Tools": 1000.0}
        assert data["liability"]["balancing_payment_due"] == 4376.8
        app.state.service.liability_for_user.assert_awaited_once_with(user_id, "2024-25")

    def test_defaults_to_configured_year(
        self, app: FastAPI, client: TestClient, user_id: UUID, user_liability: UserLiability
    ) -> None:
        app.state.service.liability_for_user.return_value = user_liability
        client.get(f"/users/{user_id}/liability")
        app.state.service.liability_for_user.assert_awaited_once_with(user_id, "2024-25")

    def test_no_profile(self, app: FastAPI, client: TestClient, user_id: UUID) -> None:
        app.state.service.liability_for_user.return_value = None
        response = client.get(f"/users/{user_id}/liability")
        assert response.status_code == 404
        assert response.json() == {"error": "Profile not found"}

    def test_bad_tax_year(self, app: FastAPI, client: TestClient, user_id: UUID) -> None:
        app.state.service.liability_for_user.side_effect = InvalidInput("Malformed tax year: x")
        response = client.get(f"/users/{user_id}/liability", params={"tax_year": "x"})
        assert response.status_code == 422

    def test_database_down(self, app: FastAPI, client: TestClient, user_id: UUID) -> None:
        app.state.service.liability_for_user.side_effect = (
            asyncpg.exceptions.UndefinedTableError("relation \"profiles\" does not exist")
        )
        response = client.get(f"/users/{user_id}/liability")
        assert response.status_code == 503
        assert response.json() == {"error": "Ledger unavailable"}

    def test_invalid_user_id(self, client: TestClient) -> None:
        response = client.get("/users/not-a-uuid/liability")
        assert response.status_code == 422
        assert response.json()["error"].startswith("user_id: ")

    def test_report(
        self, app: FastAPI, client: TestClient, user_id: UUID, user_liability: UserLiability
    ) -> None:
        app.state.service.liability_for_user.return_value = user_liability

        response = client.get(f"/users/{user_id}/report")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text.startswith("TAX SUMMARY 2024-25 (England/NI)")
        assert "£4,376.80" in response.text

    def test_report_no_profile(self, app: FastAPI, client: TestClient, user_id: UUID) -> None:
        app.state.service.liability_for_user.return_value = None
        response = client.get(f"/users/{user_id}/report")
        assert response.status_code == 404


class TestMileageTrips:
    def test_record_trip(self, app: FastAPI, client: TestClient, user_id: UUID) -> None:
        trip_id = UUID("aaaaaaaa-bbbb-4ccc-8ddd-eeeeeeeeeeee")
        app.state.service.record_trip.return_value = RecordedTrip(
            trip_id=trip_id,
            allowance=calculate_mileage_allowance(Decimal("100")),
        )

        response = client.post(
            f"/users/{user_id}/mileage-trips",
            json={"miles": "100", "vehicle": "car", "purpose": "Client visit", "date": "2024-06-01"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["trip_id"] == str(trip_id)
        assert data["deduction"] == 45.0
        app.state.service.record_trip.assert_awaited_once_with(
            user_id, Decimal("100"), "car", "Client visit", date(2024, 6, 1)
        )

    def test_record_trip_unknown_vehicle(
        self, app: FastAPI, client: TestClient, user_id: UUID
    ) -> None:
        app.state.service.record_trip.side_effect = InvalidInput("Unknown vehicle: boat")
        response = client.post(
            f"/users/{user_id}/mileage-trips",
            json={"miles": 5, "vehicle": "boat", "purpose": "Ferry", "date": "2024-06-01"},
        )
        assert response.status_code == 422
        assert response.json() == {"error": "Unknown vehicle: boat"}

    def test_record_trip_missing_purpose(self, client: TestClient, user_id: UUID) -> None:
        response = client.post(
            f"/users/{user_id}/mileage-trips", json={"miles": 5, "date": "2024-06-01"}
        )
        assert response.status_code == 422
        assert response.json() == {"error": "purpose: Field required"}

    def test_list_trips(self, app: FastAPI, client: TestClient, user_id: UUID) -> None:
        app.state.service.trips_for_user.return_value = [
            MileageTrip(
                user_id=user_id,
                date=date(2024, 7, 1),
                distance=Decimal("300"),
                purpose="Site survey",
                vehicle_type="car",
                rate=Decimal("0.4500"),
                deduction=Decimal("135.00"),
            ),
            MileageTrip(
                user_id=user_id,
                date=date(2024, 6, 1),
                distance=Decimal("12.5"),
                purpose="Merchant",
                vehicle_type="bicycle",
                rate=Decimal("0.2000"),
                deduction=Decimal("2.50"),
            ),
        ]

        response = client.get(f"/users/{user_id}/mileage-trips", params={"tax_year": "2024-25"})

        assert response.status_code == 200
        data = response.json()
        assert data["tax_year"] == "2024-25"
        assert data["total_miles"] == 312.5
        assert data["total_deduction"] == 137.5
        assert [trip["purpose"] for trip in data["trips"]] == ["Site survey", "Merchant"]

    def test_list_trips_empty(self, app: FastAPI, client: TestClient, user_id: UUID) -> None:
        app.state.service.trips_for_user.return_value = []
        response = client.get(f"/users/{user_id}/mileage-trips")
        assert response.status_code == 200
        assert response.json()["total_deduction"] == 0.0


# --- /vat and /mileage ---


class TestVat:
    def test_add(self, client: TestClient) -> None:
        response = client.post("/vat", json={"amount": "£100"})
        assert response.status_code == 200
        assert response.json() == {"net": 100.0, "vat": 20.0, "gross": 120.0, "rate": 0.2}

    def test_remove(self, client: TestClient) -> None:
        response = client.post("/vat", json={"amount": 10, "mode": "remove"})
        assert response.status_code == 200
        data = response.json()
        assert data["net"] == 8.33
        assert data["vat"] == 1.67

    def test_reduced_rate(self, client: TestClient) -> None:
        response = client.post("/vat", json={"amount": 100, "rate": "0.05"})
        assert response.json()["vat"] == 5.0

    def test_rate_over_one(self, client: TestClient) -> None:
        response = client.post("/vat", json={"amount": 100, "rate": 20})
        assert response.status_code == 422
        assert "fraction" in response.json()["error"]

    def test_bad_mode(self, client: TestClient) -> None:
        response = client.post("/vat", json={"amount": 100, "mode": "double"})
        assert response.status_code == 422
        assert response.json()["error"].startswith("mode: ")


class TestMileage:
    def test_car(self, client: TestClient) -> None:
        response = client.post("/mileage", json={"miles": 12000})
        assert response.status_code == 200
        data = response.json()
        assert data["deduction"] == 5000.0
        assert len(data["breakdown"]) == 2

    def test_unknown_vehicle(self, client: TestClient) -> None:
        response = client.post("/mileage", json={"miles": 10, "vehicle": "boat"})
        assert response.status_code == 422
        assert "Unknown vehicle" in response.json()["error"]
