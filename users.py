"""User registration, lookup and running-total reconciliation."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict

from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

import database
from database import COSTS, USERS
from errors import EntityConflictError, EntityNotFoundError, MissingFieldsError
from log import get_logger
from schemas import User, UserCreate

LOGGER = get_logger(__name__)

REQUIRED_USER_FIELDS = ("id", "first_name", "last_name", "birthday", "marital_status")


def create_user(db: Database, payload: UserCreate) -> Dict[str, Any]:
    data = payload.model_dump()
    missing = [
        f"{field} is required"
        for field in REQUIRED_USER_FIELDS
        if data.get(field) is None or str(data[field]).strip() == ""
    ]
    if missing:
        raise MissingFieldsError(details=missing)

    user_id = str(payload.id).strip()
    if db[USERS].find_one({"id": user_id}) is not None:
        raise EntityConflictError(f"User with id {user_id} already exists")

    user = User(
        id=user_id,
        first_name=payload.first_name.strip(),
        last_name=payload.last_name.strip(),
        # BSON has no date-only type
        birthday=datetime.combine(payload.birthday, datetime.min.time()),
        marital_status=payload.marital_status.strip(),
    )
    try:
        doc = database.create_document(db, USERS, user)
    except DuplicateKeyError as exc:
        raise EntityConflictError(f"User with id {user_id} already exists") from exc

    LOGGER.info("Registered user %s", user_id)
    return database.serialize_doc(doc)


def _details(user: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": user["id"],
        "first_name": user["first_name"],
        "last_name": user["last_name"],
        "total": user.get("total_costs", 0),
    }


def get_user_details(db: Database, user_id: str) -> Dict[str, Any]:
    user = db[USERS].find_one({"id": user_id})
    if user is None:
        raise EntityNotFoundError()
    return _details(user)


def compute_total_costs(db: Database, user_id: str) -> float:
    """Sum every cost entry recorded for the user, across all months."""
    pipeline = [
        {"$match": {"userid": user_id}},
        {"$group": {"_id": "$userid", "total": {"$sum": "$sum"}}},
    ]
    rows = list(db[COSTS].aggregate(pipeline))
    return rows[0]["total"] if rows else 0


def recompute_total_costs(db: Database, user_id: str) -> Dict[str, Any]:
    """Overwrite the stored running total with a fresh sum of the user's costs."""
    user = db[USERS].find_one({"id": user_id})
    if user is None:
        raise EntityNotFoundError()

    total = compute_total_costs(db, user_id)
    if total != user.get("total_costs", 0):
        LOGGER.warning(
            "Corrected total for user %s from %s to %s", user_id, user.get("total_costs", 0), total
        )
    db[USERS].update_one({"id": user_id}, {"$set": {"total_costs": total}})
    user["total_costs"] = total
    return _details(user)
