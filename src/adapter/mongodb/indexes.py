"""Index definitions for the users collection and their reconciliation.

The wanted indexes are compared against ``index_information()`` before
anything is created: an existing index that reuses one of our names with
other keys, or our keys under another name, is dropped first so that
``create_indexes`` never fails on a conflict.
"""

from logging import getLogger

from pymongo import ASCENDING, DESCENDING, IndexModel
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

logger = getLogger(__name__)

USER_INDEXES = [
    # list() sorts newest first with _id as tiebreaker
    IndexModel([('created_at', DESCENDING), ('_id', DESCENDING)], name='idx_users_created_at'),
    IndexModel([('country', ASCENDING)], name='idx_users_country'),
    IndexModel([('email', ASCENDING)], name='idx_users_email'),
]


def _key_tuple(key) -> tuple:
    items = key.items() if hasattr(key, 'items') else key
    # server may report 1.0 for 1; text and geo indexes use string types
    return tuple(
        (field, direction if isinstance(direction, str) else int(direction))
        for field, direction in items
    )


def stale_indexes(existing: dict, wanted: list[IndexModel]) -> list[str]:
    """Names of existing indexes that clash with a wanted one by name or by keys."""
    wanted_by_name = {m.document['name']: _key_tuple(m.document['key']) for m in wanted}
    wanted_keys = set(wanted_by_name.values())

    stale = []
    for name, info in existing.items():
        if name == '_id_':
            continue
        keys = _key_tuple(info.get('key', []))
        if name in wanted_by_name:
            if wanted_by_name[name] != keys:
                stale.append(name)
        elif keys in wanted_keys:
            stale.append(name)
    return stale


def sync_indexes(collection: Collection, wanted: list[IndexModel]) -> list[str]:
    """Drop clashing indexes, then create the wanted ones. Returns the dropped names."""
    dropped = stale_indexes(collection.index_information(), wanted)
    for name in dropped:
        logger.warning("Dropping conflicting index",
                       extra={"collection": collection.name, "index": name})
        collection.drop_index(name)

    collection.create_indexes(wanted)
    return dropped


def ensure_all_indexes(db: Database) -> bool:
    """Ensure indexes for all collections. Called at app startup."""
    from adapter.mongodb.user_repository import MongoUserRepository

    return MongoUserRepository(db).ensure_indexes()
