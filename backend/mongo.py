import logging
import os
from typing import Any

from pymongo import ASCENDING, MongoClient
from pymongo.errors import ServerSelectionTimeoutError
from pymongo.server_api import ServerApi

logger = logging.getLogger(__name__)

# collections holding per-student view state; stale documents expire on expiresAt
STATE_COLLECTIONS = ("quiz_runs", "authored_runs", "conversations")

_client: MongoClient | None = None


def connect(timeout_ms: int = 5000) -> Any:
    global _client
    uri = os.getenv("MONGO_URI")
    db_name = os.getenv("MONGO_DB")

    if not uri:
        raise RuntimeError("MONGO_URI environment variable is not set")
    if not db_name:
        raise RuntimeError("MONGO_DB environment variable is not set")

    if _client is None:
        _client = MongoClient(
            uri,
            tls=os.getenv("MONGO_TLS", "true").lower() != "false",
            tz_aware=True,
            serverSelectionTimeoutMS=timeout_ms,
            server_api=ServerApi('1')
        )
        try:
            _client.admin.command("ping")
        except ServerSelectionTimeoutError as exc:
            _client = None
            raise RuntimeError("Unable to connect to MongoDB") from exc
        logger.info("Connected to MongoDB database %s", db_name)

    return _client[db_name]


def ensure_indexes(db: Any) -> None:
    for name in STATE_COLLECTIONS:
        collection = db[name]
        collection.create_index([("expiresAt", ASCENDING)], expireAfterSeconds=0)
        collection.create_index([("userId", ASCENDING)])
