from __future__ import annotations

import pathlib
import sys
from contextlib import contextmanager

import mongomock
import pytest
from fastapi.testclient import TestClient

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import database  # noqa: E402
from main import app  # noqa: E402


@pytest.fixture()
def mongo_db():
    client = mongomock.MongoClient()
    db = client["cost_manager_test"]
    database.ensure_indexes(db)
    yield db
    client.close()


@pytest.fixture()
def transactions(monkeypatch):
    """Replace the MongoDB transaction scope, recording how each one ended.

    mongomock has no session support, so writes run without a session.
    """
    outcomes: list[str] = []

    @contextmanager
    def recording_transaction(db):
        try:
            yield None
        except Exception:
            outcomes.append("abort")
            raise
        outcomes.append("commit")

    monkeypatch.setattr(database, "transaction", recording_transaction)
    return outcomes


@pytest.fixture()
def client(mongo_db, transactions):
    app.dependency_overrides[database.get_db] = lambda: mongo_db
    # Not used as a context manager: the lifespan would connect to a real server.
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def user_u1(mongo_db):
    mongo_db[database.USERS].insert_one(
        {
            "id": "u1",
            "first_name": "Dana",
            "last_name": "Levi",
            "marital_status": "single",
            "total_costs": 0,
        }
    )
    return "u1"
