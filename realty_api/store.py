"""
SSP Realty - Record Store
===========================
Persistence for the four independent record collections.

Records are schema-loose documents matched by their external 'id' field,
never by the store-internal identity. The store does not enforce id
uniqueness: duplicate creates are accepted and lookups return the first
match.

Implementations:
    MongoRecordStore  -> MongoDB through pymongo's asyncio client
    MemoryRecordStore -> In-process dictionaries, for local development
                         and tests (selected with a memory:// URI)

Every driver failure surfaces as a StoreError; callers decide which
message the client sees.
"""

import copy
import logging
from abc import ABC, abstractmethod

from pymongo import AsyncMongoClient, ReturnDocument
from pymongo.errors import PyMongoError

from realty_api.errors import StoreError


logger = logging.getLogger(__name__)

DEFAULT_DATABASE = "ssp-realty"
ASCENDING = 1
DESCENDING = -1

# Projection that hides the store-internal identity from every read.
_HIDE_INTERNAL_ID = {"_id": 0}


class RecordStore(ABC):
    """Abstract document store keyed by external id."""

    @abstractmethod
    async def find_all(
        self, collection: str, sort: tuple[str, int] | None = None,
    ) -> list[dict]:
        """Return every record, optionally sorted by (field, direction)."""

    @abstractmethod
    async def find_one(self, collection: str, record_id: str) -> dict | None:
        """Return the first record whose id matches, or None."""

    @abstractmethod
    async def insert(self, collection: str, record: dict) -> dict:
        """Store a new record and return it as stored."""

    @abstractmethod
    async def update(
        self, collection: str, record_id: str, fields: dict,
    ) -> dict | None:
        """
        Set the given fields on the first record whose id matches.

        Returns:
            The record after the update, or None when nothing matched.
        """

    @abstractmethod
    async def delete(self, collection: str, record_id: str) -> int:
        """Delete the first record whose id matches. Returns the count removed."""

    @abstractmethod
    async def ping(self) -> bool:
        """Check the store is reachable."""

    async def close(self) -> None:
        """Release any held connections."""


class MongoRecordStore(RecordStore):
    """
    MongoDB-backed record store.

    Attributes:
        client: The pymongo AsyncMongoClient (connects lazily).
        db:     Database named by the URI path, or DEFAULT_DATABASE.
    """

    def __init__(self, uri: str):
        # tz_aware so reads return UTC datetimes like the ones written on create
        self.client = AsyncMongoClient(uri, tz_aware=True)
        self.db = self.client.get_default_database(default=DEFAULT_DATABASE)

    async def find_all(self, collection, sort=None):
        try:
            cursor = self.db[collection].find({}, _HIDE_INTERNAL_ID)
            if sort:
                cursor = cursor.sort(*sort)
            return await cursor.to_list()
        except PyMongoError as e:
            raise StoreError(str(e), "find_all", collection) from e

    async def find_one(self, collection, record_id):
        try:
            return await self.db[collection].find_one({"id": record_id}, _HIDE_INTERNAL_ID)
        except PyMongoError as e:
            raise StoreError(str(e), "find_one", collection) from e

    async def insert(self, collection, record):
        # insert_one adds _id to the dict it is given
        document = dict(record)
        try:
            await self.db[collection].insert_one(document)
        except PyMongoError as e:
            raise StoreError(str(e), "insert", collection) from e
        document.pop("_id", None)
        return document

    async def update(self, collection, record_id, fields):
        fields = {k: v for k, v in fields.items() if k != "_id"}
        if not fields:
            return await self.find_one(collection, record_id)
        try:
            return await self.db[collection].find_one_and_update(
                {"id": record_id},
                {"$set": fields},
                projection=_HIDE_INTERNAL_ID,
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise StoreError(str(e), "update", collection) from e

    async def delete(self, collection, record_id):
        try:
            result = await self.db[collection].delete_one({"id": record_id})
        except PyMongoError as e:
            raise StoreError(str(e), "delete", collection) from e
        return result.deleted_count

    async def ping(self):
        try:
            await self.client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.error("Store ping failed: %s", e)
            return False

    async def close(self):
        await self.client.close()


class MemoryRecordStore(RecordStore):
    """
    In-process record store.

    Collections are lists kept in insertion order. Records are copied on
    the way in and out so callers never share state with the store.
    """

    def __init__(self):
        self._collections: dict[str, list[dict]] = {}

    def _records(self, collection: str) -> list[dict]:
        return self._collections.setdefault(collection, [])

    def _match(self, collection: str, record_id: str) -> dict | None:
        for record in self._records(collection):
            if record.get("id") == record_id:
                return record
        return None

    async def find_all(self, collection, sort=None):
        records = [copy.deepcopy(r) for r in self._records(collection)]
        if sort:
            field, direction = sort
            # Missing values order before present ones, as in MongoDB.
            records.sort(
                key=lambda r: (r.get(field) is not None, r.get(field) or 0),
                reverse=direction == DESCENDING,
            )
        return records

    async def find_one(self, collection, record_id):
        record = self._match(collection, record_id)
        return copy.deepcopy(record) if record is not None else None

    async def insert(self, collection, record):
        stored = copy.deepcopy(record)
        self._records(collection).append(stored)
        return copy.deepcopy(stored)

    async def update(self, collection, record_id, fields):
        record = self._match(collection, record_id)
        if record is None:
            return None
        record.update(copy.deepcopy({k: v for k, v in fields.items() if k != "_id"}))
        return copy.deepcopy(record)

    async def delete(self, collection, record_id):
        record = self._match(collection, record_id)
        if record is None:
            return 0
        self._records(collection).remove(record)
        return 1

    async def ping(self):
        return True


def open_store(uri: str) -> RecordStore:
    """
    Create the record store for a connection URI.

    Args:
        uri: 'memory://' for the in-process store, otherwise a MongoDB URI.

    Returns:
        An unconnected RecordStore; MongoDB connects on first use.
    """
    if uri.startswith("memory://"):
        logger.warning("Using the in-memory record store; data is lost on restart")
        return MemoryRecordStore()
    return MongoRecordStore(uri)
