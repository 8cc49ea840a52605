"""
Derived fleet metrics computed from backend records.

Everything here is a pure function of its inputs: records may be passed as
raw dicts or as the models in ``app.models``, and any notion of "now" is an
explicit argument.
"""

import math
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel

from .logging_config import get_logger
from .models import (
    Contract,
    Equipment,
    JobCard,
    MaintenanceRecord,
    Part,
    PartSummary,
    Payment,
    StockUsage,
    Supplier,
    User,
    Vehicle,
)

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
Record = Union[Mapping[str, Any], BaseModel]

CONDITION_PENALTIES = {"POOR": 40, "FAIR": 20, "GOOD": 10}
OVERDUE_PENALTY = 5
HEALTH_LABELS = ((80, "Excellent"), (60, "Good"), (40, "Fair"))
ACTIVE_JOB_STATUSES = ("PENDING", "IN_PROGRESS")


def _as_model(model: Type[ModelT], record: Record) -> ModelT:
    if isinstance(record, model):
        return record
    if isinstance(record, BaseModel):
        record = record.model_dump()
    return model.model_validate(record)


def to_amount(value: Any) -> float:
    """Parse a backend money value ("1500.00", 1500, None) into a float."""
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning(
            "Treating unparseable amount as zero",
            extra={"extra_fields": {"value": value}},
        )
        return 0.0


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _utc_now(now: Optional[datetime]) -> datetime:
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now


def collection_rate(contract_value: float, payments: float, deposits: float) -> float:
    """
    Share of the contract value actually collected, in percent.

    >>> collection_rate(1000, 200, 100)
    30.0
    """
    if contract_value <= 0:
        return 0.0
    return (payments + deposits) / contract_value * 100


def vehicle_collection_rate(
    contracts: Iterable[Record],
    payments: Iterable[Record],
    income: Optional[Mapping[str, Any]] = None,
) -> Dict[str, float]:
    """
    Collection figures for one vehicle.

    Deposits and payments come from the precomputed income totals when
    available; otherwise deposits are summed from the contracts' security
    deposits and payments from the SUCCESS payments.

    Returns:
        ``total_deposits``, ``total_payments``, ``total_income``,
        ``total_contract_value`` and ``collection_rate``
    """
    contract_models = [_as_model(Contract, contract) for contract in contracts]
    contract_value = sum(to_amount(c.total_contract_value) for c in contract_models)

    if income:
        deposits = to_amount(income.get("total_deposits"))
        total_payments = to_amount(income.get("total_payments"))
        total_income = to_amount(income.get("total_income")) or deposits + total_payments
    else:
        deposits = sum(to_amount(c.security_deposit) for c in contract_models)
        total_payments = sum(
            to_amount(payment.amount)
            for payment in (_as_model(Payment, p) for p in payments)
            if payment.status == "SUCCESS"
        )
        total_income = deposits + total_payments

    return {
        "total_deposits": deposits,
        "total_payments": total_payments,
        "total_income": total_income,
        "total_contract_value": contract_value,
        "collection_rate": collection_rate(contract_value, total_payments, deposits),
    }


def health_score(
    condition: Optional[str],
    maintenance_records: Iterable[Record],
    now: Optional[datetime] = None,
) -> int:
    """
    Vehicle health on a 0-100 scale.

    Condition costs 40 (POOR), 20 (FAIR) or 10 (GOOD) points and every
    scheduled maintenance record whose date has passed costs 5 more.
    """
    now = _utc_now(now)
    score = 100 - CONDITION_PENALTIES.get((condition or "").upper(), 0)

    overdue = 0
    for record in maintenance_records:
        record = _as_model(MaintenanceRecord, record)
        if (record.status or "").lower() != "scheduled":
            continue
        scheduled = _parse_datetime(record.scheduled_date)
        if scheduled is not None and scheduled < now:
            overdue += 1

    score -= overdue * OVERDUE_PENALTY
    return max(0, min(100, score))


def health_label(score: float) -> str:
    for threshold, label in HEALTH_LABELS:
        if score >= threshold:
            return label
    return "Poor"


def profit_margin(revenue: float, cost: float) -> float:
    if revenue <= 0:
        return 0.0
    return (revenue - cost) / revenue * 100


def _parts_cost(usage: StockUsage) -> float:
    part = usage.part
    if not isinstance(part, PartSummary) or part.unit_cost in (None, ""):
        return 0.0
    quantity = usage.quantity if usage.quantity is not None else usage.quantity_used
    return to_amount(part.unit_cost) * (quantity or 0)


def vehicle_cost_totals(
    maintenance_records: Iterable[Record], stock_usage: Iterable[Record]
) -> Dict[str, float]:
    """
    Maintenance and parts spend for a vehicle.

    Parts only count when the usage record embeds the part with its unit cost.
    """
    maintenance_cost = sum(
        to_amount(_as_model(MaintenanceRecord, record).cost) for record in maintenance_records
    )
    parts_cost = sum(_parts_cost(_as_model(StockUsage, usage)) for usage in stock_usage)
    return {
        "maintenance_cost": maintenance_cost,
        "parts_cost": parts_cost,
        "total_cost": maintenance_cost + parts_cost,
    }


def roi(net_profit: float, purchase_price: float) -> float:
    if purchase_price <= 0:
        return 0.0
    return net_profit / purchase_price * 100


def months_in_service(created_at: Optional[str], now: Optional[datetime] = None) -> int:
    """Whole calendar months since ``created_at``, never less than 1."""
    now = _utc_now(now)
    created = _parse_datetime(created_at) or now
    months = (now.year - created.year) * 12 + (now.month - created.month)
    return max(1, months)


def profitability_analysis(
    vehicle: Record,
    contracts: Iterable[Record],
    total_income: float,
    total_expenses: float,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Profitability of a vehicle over its time in service.

    Args:
        vehicle: Vehicle record (``purchase_price`` and ``created_at`` are used)
        contracts: The vehicle's contracts
        total_income: Income earned by the vehicle
        total_expenses: Money spent on the vehicle
        now: Reference time for the months-in-service count

    Returns:
        Nested dict with ``performance_metrics``, ``time_analysis``,
        ``investment_analysis`` and ``financial_health``
    """
    vehicle = _as_model(Vehicle, vehicle)
    contract_count = len(list(contracts))
    purchase_price = to_amount(vehicle.purchase_price)
    net_profit = total_income - total_expenses
    months = months_in_service(vehicle.created_at, now)
    avg_monthly_income = total_income / months
    avg_monthly_expenses = total_expenses / months
    payback_months = math.ceil(purchase_price / avg_monthly_income) if avg_monthly_income > 0 else 0

    return {
        "vehicle_id": str(vehicle.id),
        "registration_number": vehicle.registration_number,
        "performance_metrics": {
            "total_income": total_income,
            "total_expenses": total_expenses,
            "revenue_per_contract": total_income / contract_count if contract_count else 0.0,
            "net_profit_loss": net_profit,
        },
        "time_analysis": {
            "months_in_service": months,
            "avg_monthly_income": avg_monthly_income,
            "avg_monthly_expenses": avg_monthly_expenses,
            "break_even_point": "Reached" if net_profit > 0 else "Not Reached",
            "payback_period_months": payback_months,
        },
        "investment_analysis": {
            "purchase_price": purchase_price,
            "total_invested": purchase_price + total_expenses,
            "total_returns": total_income,
            "net_gain_loss": net_profit,
            "roi_percentage": roi(net_profit, purchase_price),
        },
        "financial_health": {
            "is_profitable": net_profit > 0,
            "expense_ratio_percentage": (
                total_expenses / total_income * 100 if total_income > 0 else 0.0
            ),
            "profit_margin_percentage": profit_margin(total_income, total_expenses),
        },
    }


def garage_summary(
    job_cards: Iterable[Record],
    equipment: Iterable[Record],
    today: Optional[date] = None,
) -> Dict[str, int]:
    """
    Counts shown on the garage management home page.

    A job is active while PENDING or IN_PROGRESS (any case). Completed jobs
    count for today only when their ``date_completed`` falls on ``today``.
    """
    today_iso = (today or _utc_now(None).date()).isoformat()
    cards = [_as_model(JobCard, card) for card in job_cards]
    return {
        "active_jobs": sum(
            1 for card in cards if (card.status or "").upper() in ACTIVE_JOB_STATUSES
        ),
        "completed_today": sum(
            1
            for card in cards
            if (card.status or "").lower() == "completed"
            and (card.date_completed or "")[:10] == today_iso
        ),
        "available_equipment": sum(
            1 for item in equipment if _as_model(Equipment, item).status == "AVAILABLE"
        ),
    }


def supplier_counts(suppliers: Iterable[Record]) -> Dict[str, int]:
    flags = [bool(_as_model(Supplier, supplier).is_active) for supplier in suppliers]
    return {
        "total_suppliers": len(flags),
        "active_suppliers": sum(flags),
        "inactive_suppliers": len(flags) - sum(flags),
    }


def parts_stock_alerts(parts: Iterable[Record]) -> Dict[str, Any]:
    """Low-stock and out-of-stock counts plus total stock value for a parts list."""
    models = [_as_model(Part, part) for part in parts]
    return {
        "low_stock": sum(1 for part in models if part.is_low_stock),
        "out_of_stock": sum(1 for part in models if part.current_stock == 0),
        "total_stock_value": sum(to_amount(part.stock_value) for part in models),
    }


def active_user_count(users: Iterable[Record]) -> int:
    return sum(1 for user in users if _as_model(User, user).status == "Active")
