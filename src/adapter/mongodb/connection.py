"""MongoDB client lifecycle.

One MongoClient is shared by the whole process. It is created lazily, pinged
before reuse, and never retried after a configuration failure (missing or
unreachable MONGO_URL at startup); the API then stays on the JSON file
store until restart.
"""

import os
import logging
from pymongo import MongoClient
from pymongo.errors import ConnectionFailure, PyMongoError

logger = logging.getLogger(__name__)

logging.getLogger('pymongo').setLevel(logging.WARNING)

MONGO_URL = os.getenv('MONGO_URL')
DATABASE_NAME = os.getenv('MONGODB_DATABASE', 'clinic')
SERVER_SELECTION_TIMEOUT_MS = int(os.getenv('MONGO_SERVER_SELECTION_TIMEOUT_MS', '5000'))

_client_cache: MongoClient | None = None
_ever_connected = False
_config_failed = False


def reset_client():
    """Forget the cached client and any earlier failure."""
    global _client_cache, _ever_connected, _config_failed
    _client_cache = None
    _ever_connected = False
    _config_failed = False


def close_client():
    global _client_cache
    if _client_cache is not None:
        _client_cache.close()
        logger.info("[MONGODB] Client closed")
    _client_cache = None


def _ping(client: MongoClient) -> bool:
    try:
        client.admin.command('ping')
        return True
    except PyMongoError:
        return False


def get_mongodb_client() -> MongoClient | None:
    """Return a healthy shared client, or None when MongoDB is not usable.

    A cached client that stops answering ping is replaced. A failure before
    the first successful connection is treated as configuration and sticks
    until reset_client().
    """
    global _client_cache, _ever_connected, _config_failed

    if _client_cache is not None:
        if _ping(_client_cache):
            return _client_cache
        logger.debug("[MONGODB] Cached client failed ping, reconnecting")
        _client_cache = None

    if _config_failed:
        return None

    if not MONGO_URL:
        logger.warning("[MONGODB] MONGO_URL not configured")
        _config_failed = True
        return None

    try:
        client = MongoClient(
            MONGO_URL,
            serverSelectionTimeoutMS=SERVER_SELECTION_TIMEOUT_MS,
            connectTimeoutMS=5000,
            socketTimeoutMS=45000,
            maxPoolSize=10,
            retryWrites=True,
            retryReads=True,
            tz_aware=True,  # session expiry compares against aware UTC datetimes
        )
        client.admin.command('ping')
    except (ConnectionFailure, PyMongoError) as e:
        if not _ever_connected:
            logger.error(f"[MONGODB] Initial connection failed: {str(e)[:200]}")
            _config_failed = True
        return None

    if not _ever_connected:
        logger.info(f"[MONGODB] Connected to {DATABASE_NAME}")
    _ever_connected = True
    _client_cache = client
    return client
