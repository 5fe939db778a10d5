"""Cost entry recording and monthly category reports."""
from __future__ import annotations

import math
import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from pymongo.database import Database

import database
from database import COSTS, USERS
from errors import EntityNotFoundError, InvalidCategoryError, MissingFieldsError, ValidationFailedError
from log import get_logger
from schemas import CATEGORIES, Cost, CostCreate

LOGGER = get_logger(__name__)

MIN_YEAR = 1900
MAX_YEAR = 2100

_DIGITS = re.compile(r"[0-9]+")


def _is_blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


def _is_positive_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0


def validate_cost(payload: CostCreate) -> None:
    """Raise if the payload cannot be stored.

    An unknown category is reported on its own, before any missing fields.
    """
    if payload.category and payload.category not in CATEGORIES:
        raise InvalidCategoryError(details=[f"Category must be one of: {', '.join(CATEGORIES)}"])

    missing: List[str] = []
    if _is_blank(payload.description):
        missing.append("Description is required")
    if _is_blank(payload.userid):
        missing.append("User ID is required")
    if not _is_positive_number(payload.sum):
        missing.append("Sum must be a positive number")
    if not payload.category:
        missing.append("Category is required")
    if missing:
        raise MissingFieldsError(details=missing)


def _to_local_naive(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def add_cost(db: Database, payload: CostCreate) -> Dict[str, Any]:
    """Store a cost entry and add its sum to the owner's running total."""
    validate_cost(payload)

    userid = str(payload.userid).strip()
    cost = Cost(
        description=payload.description.strip(),
        category=payload.category,
        sum=payload.sum,
        userid=userid,
        created_at=_to_local_naive(payload.created_at) if payload.created_at else datetime.now(),
    )

    with database.transaction(db) as session:
        user = db[USERS].find_one({"id": userid}, session=session)
        if user is None:
            raise EntityNotFoundError()
        doc = database.create_document(db, COSTS, cost, session=session)
        db[USERS].update_one({"id": userid}, {"$inc": {"total_costs": cost.sum}}, session=session)

    LOGGER.info("Added %s cost of %s for user %s", cost.category, cost.sum, userid)
    return database.serialize_doc(doc)


def month_range(year: int, month: int):
    """Return ``(start, end)`` covering the calendar month, end exclusive."""
    start = datetime(year, month, 1)
    if month == 12:
        end = datetime(year + 1, 1, 1)
    else:
        end = datetime(year, month + 1, 1)
    return start, end


def _parse_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    if not _DIGITS.fullmatch(text):
        return None
    return int(text)


def validate_report_params(user_id: Any, year: Any, month: Any):
    """Check the report parameters and return them normalised."""
    errors: List[str] = []
    if _is_blank(user_id):
        errors.append("User ID is required")

    year_num = _parse_int(year)
    if year_num is None or not MIN_YEAR <= year_num <= MAX_YEAR:
        errors.append("Invalid year format")

    month_num = _parse_int(month)
    if month_num is None or not 1 <= month_num <= 12:
        errors.append("Invalid month format")

    if errors:
        raise ValidationFailedError(details=errors)
    return str(user_id).strip(), year_num, month_num


def monthly_report(db: Database, user_id: Any, year: Any, month: Any) -> Dict[str, Any]:
    user_id, year, month = validate_report_params(user_id, year, month)

    if db[USERS].find_one({"id": user_id}) is None:
        raise EntityNotFoundError()

    start, end = month_range(year, month)
    match = {"userid": user_id, "created_at": {"$gte": start, "$lt": end}}

    # Sum expenses by category
    pipeline = [
        {"$match": match},
        {"$group": {"_id": "$category", "total": {"$sum": "$sum"}}},
    ]
    spent_by_cat = {d["_id"]: d["total"] for d in db[COSTS].aggregate(pipeline)}

    entries: Dict[str, List[Dict[str, Any]]] = {category: [] for category in CATEGORIES}
    for doc in db[COSTS].find(match).sort("created_at", 1):
        if doc.get("category") in entries:
            entries[doc["category"]].append({
                "sum": doc["sum"],
                "description": doc["description"],
                "day": doc["created_at"].day,
            })

    category_totals = {category: spent_by_cat.get(category, 0) for category in CATEGORIES}
    monthly_total = sum(category_totals.values())

    return {
        "userid": user_id,
        "year": year,
        "month": month,
        "summary": {
            "monthlyTotal": monthly_total,
            "totalCosts": monthly_total,
            "categoryTotals": category_totals,
        },
        "costs": [{category: entries[category]} for category in CATEGORIES],
    }
