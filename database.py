"""
MongoDB access for the POS.

The client is created lazily from DATABASE_URL / DATABASE_NAME so importing
this module never opens a connection.
"""
from typing import Any, Dict, List, Optional

from pymongo import MongoClient
from pymongo.database import Database

import config

_client: Optional[MongoClient] = None
_db: Optional[Database] = None

STAGING_SUFFIX = "__staging"


def get_db() -> Optional[Database]:
    global _client, _db
    if _db is None and config.DATABASE_URL:
        _client = MongoClient(config.DATABASE_URL, tz_aware=True)
        _db = _client[config.DATABASE_NAME]
    return _db


def collection_exists(db: Database, collection_name: str) -> bool:
    return collection_name in db.list_collection_names()


def get_documents(db: Database, collection_name: str, filter_dict: Optional[Dict[str, Any]] = None) -> List[dict]:
    docs = []
    for d in db[collection_name].find(filter_dict or {}).sort("_seq", 1):
        d.pop("_id", None)
        d.pop("_seq", None)
        docs.append(d)
    return docs


def replace_documents(db: Database, collection_name: str, docs: List[dict]):
    """Swap in a new version of the collection.

    The documents are written to a staging collection which is then renamed
    over the live one, so readers see either the old or the new contents.
    A failed insert leaves the live collection untouched.
    """
    staging = f"{collection_name}{STAGING_SUFFIX}"
    db.drop_collection(staging)
    db.create_collection(staging)
    try:
        if docs:
            # _seq keeps list order stable across reads
            db[staging].insert_many([{**d, "_id": d["id"], "_seq": n} for n, d in enumerate(docs)])
    except Exception:
        db.drop_collection(staging)
        raise
    db[staging].rename(collection_name, dropTarget=True)
