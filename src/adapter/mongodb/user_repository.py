"""MongoDB implementation of UserRepository."""

from datetime import datetime, timezone
from logging import getLogger

import pymongo
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING, ReturnDocument
from pymongo.database import Database
from pymongo.errors import PyMongoError

from adapter.mongodb import USERS_COLLECTION_NAME
from adapter.mongodb.indexes import USER_INDEXES, sync_indexes
from domain.model.errors import NotFoundError, PersistenceError
from domain.model.user import User, UserCreateData, UserUpdateData

logger = getLogger(__name__)

ERR_RETRIEVE_FAILED = "failed to retrieve data from mongo"
ERR_INSERT_FAILED = "failed to insert data into mongo"
ERR_CONVERT_INSERTED_ID = "failed to convert inserted id to object id"
ERR_CONVERT_TO_OBJECT_ID = "failed to convert id string to object id"
ERR_UPDATE_FAILED = "failed to update user in mongo"
ERR_DELETE_FAILED = "failed to delete user from mongo"

_NO_PASSWORD = {'password': 0}


def _now() -> datetime:
    # BSON dates carry millisecond precision
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def to_object_id(user_id: str) -> ObjectId:
    """Translate an external hex identifier into the store's native key."""
    if not isinstance(user_id, str):
        raise NotFoundError(f"{ERR_CONVERT_TO_OBJECT_ID}: {user_id!r}")
    try:
        return ObjectId(user_id)
    except (InvalidId, TypeError) as e:
        raise NotFoundError(f"{ERR_CONVERT_TO_OBJECT_ID}: {e}") from e


class MongoUserRepository:
    def __init__(self, db: Database):
        self.collection = db[USERS_COLLECTION_NAME]

    # ── indexes ──────────────────────────────────────────────

    def ensure_indexes(self) -> bool:
        """Create indexes for users collection."""
        try:
            sync_indexes(self.collection, USER_INDEXES)
            return True
        except PyMongoError as e:
            logger.error("Failed to create users indexes", extra={"error": str(e)})
            return False

    # ── helpers ──────────────────────────────────────────────

    def _to_domain(self, doc: dict) -> User:
        """Convert MongoDB document to User domain model."""
        return User(
            id=str(doc['_id']),
            first_name=doc['first_name'],
            last_name=doc['last_name'],
            nickname=doc['nickname'],
            email=doc['email'],
            country=doc['country'],
            created_at=doc['created_at'],
            updated_at=doc['updated_at'],
        )

    @staticmethod
    def _build_filter(country: str | None, email: str | None) -> dict:
        query: dict = {}
        if country is not None:
            query['country'] = country
        if email is not None:
            query['email'] = email
        return query

    @staticmethod
    def _build_update(patch: UserUpdateData, now: datetime) -> list[dict]:
        """Update pipeline setting exactly the present fields.

        Values go through ``$literal`` so user input starting with ``$`` is
        never read as a field path. ``updated_at`` moves forward by at least
        one millisecond even if the clock has not.
        """
        stage = {
            name: {'$literal': value}
            for name, value in patch.present_fields().items()
        }
        stage['updated_at'] = {'$max': [now, {'$add': ['$updated_at', 1]}]}
        return [{'$set': stage}]

    # ── write operations ─────────────────────────────────────

    def create(self, data: UserCreateData, timeout: float | None = None) -> str:
        """Insert a new user document and return its hex identifier."""
        now = _now()
        user_doc = {
            'first_name': data.first_name,
            'last_name': data.last_name,
            'nickname': data.nickname,
            'email': data.email,
            'country': data.country,
            'password': data.password,
            'created_at': now,
            'updated_at': now,
        }

        try:
            with pymongo.timeout(timeout):
                result = self.collection.insert_one(user_doc)
        except PyMongoError as e:
            raise PersistenceError(f"{ERR_INSERT_FAILED}: {e}") from e

        inserted_id = getattr(result, 'inserted_id', None)
        if not isinstance(inserted_id, ObjectId):
            raise PersistenceError(f"{ERR_CONVERT_INSERTED_ID}: {inserted_id!r}")

        logger.info("User created", extra={"userId": str(inserted_id)})
        return str(inserted_id)

    def update(self, user_id: str, patch: UserUpdateData, timeout: float | None = None) -> User:
        """Atomically apply a patch and return the post-update user."""
        oid = to_object_id(user_id)

        try:
            with pymongo.timeout(timeout):
                doc = self.collection.find_one_and_update(
                    {'_id': oid},
                    self._build_update(patch, _now()),
                    projection=_NO_PASSWORD,
                    return_document=ReturnDocument.AFTER,
                )
        except PyMongoError as e:
            raise PersistenceError(f"{ERR_UPDATE_FAILED} with id '{user_id}': {e}") from e

        if doc is None:
            raise NotFoundError(f"{ERR_UPDATE_FAILED} with id '{user_id}': no matching document")
        try:
            user = self._to_domain(doc)
        except KeyError as e:
            raise NotFoundError(f"{ERR_UPDATE_FAILED} with id '{user_id}': missing field {e}") from e

        logger.debug("User updated", extra={"userId": user_id, "fields": sorted(patch.present_fields())})
        return user

    def delete(self, user_id: str, timeout: float | None = None) -> None:
        """Atomically remove a user."""
        oid = to_object_id(user_id)

        try:
            with pymongo.timeout(timeout):
                doc = self.collection.find_one_and_delete({'_id': oid}, projection={'_id': 1})
        except PyMongoError as e:
            raise PersistenceError(f"{ERR_DELETE_FAILED} with id '{user_id}': {e}") from e

        if doc is None:
            raise NotFoundError(f"{ERR_DELETE_FAILED} with id '{user_id}': no matching document")

        logger.info("User deleted", extra={"userId": user_id})

    # ── read operations ──────────────────────────────────────

    def list(
        self,
        page: int = 0,
        limit: int = 10,
        country: str | None = None,
        email: str | None = None,
        timeout: float | None = None,
    ) -> list[User]:
        """List users newest first with equality filters and skip/limit pagination."""
        if page < 0 or limit < 1:
            raise ValueError(f"invalid window: page={page}, limit={limit}")
        query = self._build_filter(country, email)

        try:
            with pymongo.timeout(timeout):
                with self.collection.find(query, projection=_NO_PASSWORD) \
                        .sort([('created_at', DESCENDING), ('_id', DESCENDING)]) \
                        .skip(page) \
                        .limit(limit) as cursor:
                    users = [self._to_domain(doc) for doc in cursor]
        except PyMongoError as e:
            raise PersistenceError(f"{ERR_RETRIEVE_FAILED}: {e}") from e
        except KeyError as e:
            raise PersistenceError(f"{ERR_RETRIEVE_FAILED}: malformed document, missing {e}") from e

        logger.debug("Listed users", extra={"count": len(users), "page": page, "limit": limit})
        return users
