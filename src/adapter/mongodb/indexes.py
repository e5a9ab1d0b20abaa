"""MongoDB index management for the users and sessions collections.

Index definitions live on each repository (ensure_indexes); this module
creates them and repairs conflicts left behind by older deployments.
"""

from logging import getLogger

from pymongo.errors import OperationFailure, PyMongoError

logger = getLogger(__name__)

# server codes for IndexOptionsConflict and IndexKeySpecsConflict
_CONFLICT_CODES = {85, 86}


def _is_conflict(error: PyMongoError) -> bool:
    if isinstance(error, OperationFailure) and error.code in _CONFLICT_CODES:
        return True
    text = str(error)
    return "already exists" in text or "Conflict" in text


def create_index_safe(collection, keys: list, name: str, **kwargs) -> bool:
    """Create an index, replacing an existing one that clashes with it.

    A clash is an index with the same name but other keys or options
    (a TTL or uniqueness change), or the same keys under another name.
    """
    try:
        collection.create_index(keys, name=name, **kwargs)
        return True
    except PyMongoError as e:
        if not _is_conflict(e):
            raise
        return _replace_conflicting(collection, keys, name, **kwargs)


def _replace_conflicting(collection, keys: list, name: str, **kwargs) -> bool:
    wanted = dict(keys)
    for existing_name, info in collection.index_information().items():
        if existing_name == '_id_':
            continue
        if existing_name != name and dict(info.get('key', [])) != wanted:
            continue

        logger.warning("Replacing conflicting index", extra={"index": existing_name, "wanted": name})
        collection.drop_index(existing_name)
        collection.create_index(keys, name=name, **kwargs)
        return True

    logger.error("Index conflict could not be resolved", extra={"index": name})
    return False


def ensure_all_indexes(db) -> bool:
    """Ensure indexes for every collection. Called once at startup."""
    from adapter.mongodb.session_repository import MongoSessionRepository
    from adapter.mongodb.user_repository import MongoUserRepository

    results = [
        MongoUserRepository(db).ensure_indexes(),
        MongoSessionRepository(db).ensure_indexes(),
    ]
    return all(results)
