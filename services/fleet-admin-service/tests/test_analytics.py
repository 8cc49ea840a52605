"""
Tests for derived fleet metrics.
"""

from datetime import date, datetime, timezone

import pytest

from app import analytics
from app.models import Page, Vehicle, VehicleDetailedInfo

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


def test_collection_rate() -> None:
    assert analytics.collection_rate(1000, 200, 100) == pytest.approx(30.0)


@pytest.mark.parametrize("contract_value", [0, -50])
def test_collection_rate_without_contract_value(contract_value: float) -> None:
    assert analytics.collection_rate(contract_value, 200, 100) == 0.0


def test_vehicle_collection_rate_from_records(sample_contracts, sample_payments) -> None:
    figures = analytics.vehicle_collection_rate(sample_contracts, sample_payments)

    assert figures["total_contract_value"] == pytest.approx(1000.0)
    assert figures["total_deposits"] == pytest.approx(100.0)
    # FAILED payments are not collected money
    assert figures["total_payments"] == pytest.approx(200.0)
    assert figures["total_income"] == pytest.approx(300.0)
    assert figures["collection_rate"] == pytest.approx(30.0)


def test_vehicle_collection_rate_prefers_income_totals(sample_contracts, sample_payments) -> None:
    income = {"total_deposits": 250, "total_payments": "250.00", "total_income": 500}

    figures = analytics.vehicle_collection_rate(sample_contracts, sample_payments, income)

    assert figures["total_deposits"] == pytest.approx(250.0)
    assert figures["total_payments"] == pytest.approx(250.0)
    assert figures["collection_rate"] == pytest.approx(50.0)


def test_health_score_poor_with_overdue_maintenance() -> None:
    records = [
        {"id": 1, "status": "scheduled", "scheduled_date": "2025-06-01"},
        {"id": 2, "status": "scheduled", "scheduled_date": "2025-06-10T09:00:00Z"},
        {"id": 3, "status": "scheduled", "scheduled_date": "2025-07-01"},
        {"id": 4, "status": "completed", "scheduled_date": "2025-01-01"},
    ]

    assert analytics.health_score("POOR", records, now=NOW) == 50


@pytest.mark.parametrize(
    "condition, expected",
    [("EXCELLENT", 100), ("good", 90), ("FAIR", 80), ("POOR", 60), (None, 100)],
)
def test_health_score_by_condition(condition, expected: int) -> None:
    assert analytics.health_score(condition, [], now=NOW) == expected


def test_health_score_never_negative() -> None:
    records = [{"status": "scheduled", "scheduled_date": "2025-01-01"}] * 20

    assert analytics.health_score("POOR", records, now=NOW) == 0


@pytest.mark.parametrize(
    "score, label",
    [(100, "Excellent"), (80, "Excellent"), (79, "Good"), (60, "Good"), (45, "Fair"), (39, "Poor")],
)
def test_health_label(score: int, label: str) -> None:
    assert analytics.health_label(score) == label


def test_profit_margin() -> None:
    assert analytics.profit_margin(1000, 250) == pytest.approx(75.0)
    assert analytics.profit_margin(0, 250) == 0.0


def test_vehicle_cost_totals() -> None:
    maintenance = [{"id": 1, "cost": "1500.50"}, {"id": 2, "cost": None}]
    stock_usage = [
        {"id": 1, "part": {"id": 3, "unit_cost": "200.00"}, "quantity": 2},
        {"id": 2, "part": 4, "quantity": 10},
        {"id": 3, "part": {"id": 5, "unit_cost": "50"}, "quantity_used": 3},
    ]

    totals = analytics.vehicle_cost_totals(maintenance, stock_usage)

    assert totals["maintenance_cost"] == pytest.approx(1500.5)
    assert totals["parts_cost"] == pytest.approx(550.0)
    assert totals["total_cost"] == pytest.approx(2050.5)


def test_roi() -> None:
    assert analytics.roi(300_000, 1_200_000) == pytest.approx(25.0)
    assert analytics.roi(300_000, 0) == 0.0


def test_months_in_service() -> None:
    assert analytics.months_in_service("2024-01-15T08:00:00Z", NOW) == 17
    assert analytics.months_in_service("2025-06-01", NOW) == 1
    assert analytics.months_in_service(None, NOW) == 1


def test_profitability_analysis(sample_vehicle, sample_contracts) -> None:
    result = analytics.profitability_analysis(
        sample_vehicle, sample_contracts, total_income=340_000, total_expenses=40_000, now=NOW
    )

    time_analysis = result["time_analysis"]
    assert time_analysis["months_in_service"] == 17
    assert time_analysis["avg_monthly_income"] == pytest.approx(20_000)
    assert time_analysis["break_even_point"] == "Reached"
    assert time_analysis["payback_period_months"] == 60

    assert result["performance_metrics"]["revenue_per_contract"] == pytest.approx(170_000)
    assert result["investment_analysis"]["roi_percentage"] == pytest.approx(25.0)
    assert result["financial_health"]["is_profitable"] is True
    assert result["financial_health"]["expense_ratio_percentage"] == pytest.approx(40_000 / 340_000 * 100)


def test_profitability_analysis_without_income(sample_vehicle) -> None:
    vehicle = Vehicle.model_validate(sample_vehicle)

    result = analytics.profitability_analysis(vehicle, [], 0, 5_000, now=NOW)

    assert result["time_analysis"]["break_even_point"] == "Not Reached"
    assert result["time_analysis"]["payback_period_months"] == 0
    assert result["performance_metrics"]["revenue_per_contract"] == 0.0
    assert result["financial_health"]["profit_margin_percentage"] == 0.0


def test_to_amount() -> None:
    assert analytics.to_amount("1,500") == 0.0
    assert analytics.to_amount("1500.25") == pytest.approx(1500.25)
    assert analytics.to_amount(None) == 0.0


def test_garage_summary() -> None:
    job_cards = [
        {"id": 1, "status": "PENDING"},
        {"id": 2, "status": "in_progress"},
        {"id": 3, "status": "COMPLETED", "date_completed": "2025-06-15T09:30:00Z"},
        {"id": 4, "status": "completed", "date_completed": "2025-06-14"},
        {"id": 5, "status": None},
    ]
    equipment = [
        {"id": 1, "status": "AVAILABLE"},
        {"id": 2, "status": "IN_USE"},
        {"id": 3, "status": "AVAILABLE"},
    ]

    summary = analytics.garage_summary(job_cards, equipment, today=date(2025, 6, 15))

    assert summary == {"active_jobs": 2, "completed_today": 1, "available_equipment": 2}


def test_supplier_counts() -> None:
    suppliers = [{"id": 1, "is_active": True}, {"id": 2, "is_active": False}, {"id": 3}]

    assert analytics.supplier_counts(suppliers) == {
        "total_suppliers": 3,
        "active_suppliers": 2,
        "inactive_suppliers": 1,
    }


def test_parts_stock_alerts() -> None:
    parts = [
        {"id": 1, "current_stock": 0, "is_low_stock": True, "stock_value": "0.00"},
        {"id": 2, "current_stock": 3, "is_low_stock": True, "stock_value": "450.50"},
        {"id": 3, "current_stock": 40, "is_low_stock": False, "stock_value": 1000},
        {"id": 4, "current_stock": None, "is_low_stock": None, "stock_value": None},
    ]

    alerts = analytics.parts_stock_alerts(parts)

    assert alerts["low_stock"] == 2
    assert alerts["out_of_stock"] == 1
    assert alerts["total_stock_value"] == pytest.approx(1450.5)


def test_active_user_count() -> None:
    users = [{"id": 1, "status": "Active"}, {"id": 2, "status": "Inactive"}, {"id": 3}]

    assert analytics.active_user_count(users) == 1


def test_detailed_info_null_sections() -> None:
    info = VehicleDetailedInfo.model_validate(
        {"vehicle_info": None, "analytics": None, "contracts_history": None}
    )

    assert info.vehicle_info.condition is None
    assert info.analytics.total_revenue is None
    assert info.contracts_history == []


def test_page_with_null_count() -> None:
    page = Page.model_validate({"results": [{"id": 1}], "count": None, "next": None})

    assert page.results == [{"id": 1}]
    assert page.count is None
