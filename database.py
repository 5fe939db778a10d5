"""
Database helpers

MongoDB access for the API. Two collections are used:
- "users": one document per registered user, keyed by the external ``id``
- "costs": one document per cost entry, referencing the user by ``userid``
"""

from contextlib import contextmanager
from functools import lru_cache
from typing import Any, Dict, Iterator, Optional, Union

from pydantic import BaseModel
from pymongo import ASCENDING, MongoClient
from pymongo.client_session import ClientSession
from pymongo.database import Database

from settings import get_settings

USERS = "users"
COSTS = "costs"


@lru_cache(maxsize=1)
def get_client() -> MongoClient:
    settings = get_settings()
    return MongoClient(settings.database_url)


def get_db() -> Database:
    """FastAPI dependency that provides the configured database."""
    return get_client()[get_settings().database_name]


def ensure_indexes(db: Database) -> None:
    db[USERS].create_index([("id", ASCENDING)], unique=True)
    db[COSTS].create_index([("userid", ASCENDING)])
    db[COSTS].create_index([("created_at", ASCENDING)])


@contextmanager
def transaction(db: Database) -> Iterator[ClientSession]:
    """Run the enclosed writes in one multi-document transaction.

    Commits when the block exits normally, aborts when it raises, and ends
    the session either way.
    """
    with db.client.start_session() as session:
        with session.start_transaction():
            yield session


def create_document(
    db: Database,
    collection_name: str,
    data: Union[BaseModel, Dict[str, Any]],
    session: Optional[ClientSession] = None,
) -> Dict[str, Any]:
    """Insert a single document and return it with its assigned ``_id``."""
    if isinstance(data, BaseModel):
        data_dict = data.model_dump()
    else:
        data_dict = dict(data)
    result = db[collection_name].insert_one(data_dict, session=session)
    data_dict["_id"] = result.inserted_id
    return data_dict


# Helper to convert ObjectId to str in responses

def serialize_doc(doc: Optional[Dict[str, Any]]):
    if not doc:
        return doc
    doc = dict(doc)
    object_id = doc.pop("_id", None)
    if object_id is not None and "id" not in doc:
        doc["id"] = str(object_id)
    return doc
