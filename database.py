"""
MongoDB access helpers.

Collections are addressed by name ("orders", "requests", "claims",
"archived_claims", "settings"); documents are stored with the same camelCase
keys the API exchanges.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel
from pymongo import MongoClient
from pymongo.errors import ConfigurationError

from config import DATABASE_NAME, DATABASE_URL

logger = logging.getLogger(__name__)

_client: Optional[MongoClient] = None
db = None

if DATABASE_URL:
    try:
        _client = MongoClient(DATABASE_URL, serverSelectionTimeoutMS=5000)
        db = _client[DATABASE_NAME]
        logger.info(f"✅ MongoDB client created for database '{DATABASE_NAME}'")
    except Exception as e:
        logger.error(f"❌ Failed to create MongoDB client: {e}")
        raise
else:
    logger.warning("⚠️ DATABASE_URL not set - database features are unavailable")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_collection(collection_name: str):
    if db is None:
        raise ConfigurationError("Database is not configured (DATABASE_URL missing)")
    return db[collection_name]


def create_document(collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
    """Insert a document, stamping createdAt/updatedAt. Returns the inserted _id as a string."""
    if isinstance(data, BaseModel):
        doc = data.model_dump(by_alias=True)
    else:
        doc = dict(data)

    now = utcnow()
    doc.setdefault("createdAt", now)
    doc["updatedAt"] = now

    result = get_collection(collection_name).insert_one(doc)
    return str(result.inserted_id)


def get_documents(
    collection_name: str,
    filter_dict: Optional[Dict[str, Any]] = None,
    limit: Optional[int] = None,
    sort: Optional[List[tuple]] = None,
    skip: int = 0,
) -> List[Dict[str, Any]]:
    cursor = get_collection(collection_name).find(filter_dict or {})
    if sort:
        cursor = cursor.sort(sort)
    if skip:
        cursor = cursor.skip(skip)
    if limit:
        cursor = cursor.limit(limit)
    return [serialize_document(d) for d in cursor]


def serialize_document(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    # ObjectId is not JSON serializable
    if doc is not None and "_id" in doc:
        doc["_id"] = str(doc["_id"])
    return doc
