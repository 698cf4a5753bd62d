import logging
import threading
import time

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, PyMongoError

from utils.config import get_settings

logger = logging.getLogger(__name__)

# Driver-level logs are noisy at INFO
pymongo_logger = logging.getLogger('pymongo')
pymongo_logger.setLevel(logging.WARNING)

_client_cache: MongoClient | None = None
_client_lock = threading.Lock()

# After a failed connect, requests fail fast instead of queueing on the lock
RETRY_INTERVAL_SECONDS = 5.0
_last_failure: float | None = None


def _connect(uri: str) -> MongoClient:
    client = MongoClient(
        uri,
        tz_aware=True,  # created_at/updated_at come back as aware UTC datetimes
        serverSelectionTimeoutMS=5000,
        connectTimeoutMS=5000,
        maxPoolSize=50,
        minPoolSize=0,
        maxIdleTimeMS=30000,
        waitQueueTimeoutMS=10000,
        # A failed operation is reported to the caller, never replayed
        retryWrites=False,
        retryReads=False,
    )
    try:
        client.admin.command('ping')
    except PyMongoError:
        client.close()
        raise
    return client


def _in_backoff() -> bool:
    failed_at = _last_failure
    return failed_at is not None and time.monotonic() - failed_at < RETRY_INTERVAL_SECONDS


def get_mongodb_client() -> MongoClient | None:
    """Get the shared MongoDB client, connecting on first use.

    The client owns its connection pool and is safe to share across
    request threads; callers never lock around it.

    Returns:
        MongoDB client or None if the server cannot be reached
    """
    global _client_cache, _last_failure

    if _client_cache is not None:
        return _client_cache
    if _in_backoff():
        return None

    settings = get_settings()
    with _client_lock:
        if _client_cache is not None:
            return _client_cache
        if _in_backoff():
            return None
        try:
            _client_cache = _connect(settings.mongo_uri)
        except (ConnectionFailure, PyMongoError) as e:
            _last_failure = time.monotonic()
            logger.error("[MONGODB] Connection failed", extra={"error": str(e)[:200]})
            return None
        _last_failure = None

    logger.info(f"[MONGODB] Connected successfully to {settings.mongo_db_name}")
    return _client_cache


def get_database() -> Database | None:
    """Return the configured database, or None if MongoDB is unavailable."""
    client = get_mongodb_client()
    if client is None:
        return None
    return client[get_settings().mongo_db_name]


def close_mongodb_client() -> None:
    """Close the shared client and drop it from the cache."""
    global _client_cache, _last_failure

    with _client_lock:
        client, _client_cache = _client_cache, None
        _last_failure = None
    if client is not None:
        client.close()
        logger.info("[MONGODB] Connection closed")
