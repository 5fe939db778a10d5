from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from bson import ObjectId

import database
from settings import Settings, get_settings


def test_transaction_commits_on_success():
    db = MagicMock()
    session_cm = db.client.start_session.return_value
    session = session_cm.__enter__.return_value

    with database.transaction(db) as active:
        assert active is session

    txn_cm = session.start_transaction.return_value
    assert txn_cm.__exit__.call_args[0][0] is None
    session_cm.__exit__.assert_called_once()


def test_transaction_aborts_and_ends_session_on_error():
    db = MagicMock()
    session_cm = db.client.start_session.return_value
    session = session_cm.__enter__.return_value

    with pytest.raises(RuntimeError):
        with database.transaction(db):
            raise RuntimeError("boom")

    txn_cm = session.start_transaction.return_value
    assert txn_cm.__exit__.call_args[0][0] is RuntimeError
    session_cm.__exit__.assert_called_once()


def test_serialize_doc_converts_object_id():
    oid = ObjectId()
    assert database.serialize_doc({"_id": oid, "sum": 3}) == {"id": str(oid), "sum": 3}


def test_serialize_doc_keeps_external_id():
    assert database.serialize_doc({"_id": ObjectId(), "id": "u1"}) == {"id": "u1"}


def test_create_document_returns_inserted_id(mongo_db):
    doc = database.create_document(mongo_db, database.COSTS, {"sum": 1})
    assert mongo_db[database.COSTS].find_one({"_id": doc["_id"]})["sum"] == 1


def test_settings_defaults(monkeypatch):
    for name in ("DATABASE_URL", "DATABASE_NAME", "LOG_LEVEL", "PORT"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env()

    assert settings.database_url == "mongodb://localhost:27017"
    assert settings.database_name == "cost_manager"
    assert settings.log_level == "INFO"
    assert settings.port == 8000


def test_get_settings_reads_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_NAME", "costs_prod")
    monkeypatch.setenv("PORT", "9001")
    get_settings.cache_clear()
    try:
        settings = get_settings()
        assert settings.database_name == "costs_prod"
        assert settings.port == 9001
    finally:
        get_settings.cache_clear()
