"""
SSP Realty - Resource Handlers
================================
The generic CRUD contract, instantiated once per record collection.

Each collection is described by a Collection value (store name, model,
timestamp field, id policy, ordering and client-facing failure messages).
ResourceHandlers turns list/get/create/update/delete calls into a single
record store operation. There are no retries: a StoreError is logged with
its detail and re-raised as an OperationFailed carrying a static message.

Per-collection differences:
    Property    -> caller-supplied id, no list order, update never 404s
    TeamMember  -> caller-supplied id, no list order, update 404s on no match
    Contact     -> server-generated id, listed newest-first
    Lead        -> server-generated id, listed newest-first
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone

from realty_api.errors import NotFoundError, OperationFailed, StoreError
from realty_api.models import Contact, Lead, Property, Record, TeamMember
from realty_api.store import DESCENDING, RecordStore


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Collection:
    """
    Static description of one record collection.

    Attributes:
        name:            Store collection name.
        model:           Pydantic model for request bodies.
        timestamp_field: Creation timestamp filled in on create.
        generate_id:     Whether create assigns a time-derived id.
        newest_first:    Whether list orders by timestamp_field descending.
        not_found:       Message for a 404 on get/update.
        messages:        Failure message per operation.
    """
    name: str
    model: type[Record]
    timestamp_field: str
    generate_id: bool = False
    newest_first: bool = False
    not_found: str = "Record not found"
    messages: dict[str, str] = field(default_factory=dict)

    def failure(self, operation: str) -> str:
        return self.messages.get(operation, "Internal server error")


PROPERTIES = Collection(
    name="properties",
    model=Property,
    timestamp_field="createdAt",
    not_found="Property not found",
    messages={
        "list": "Failed to fetch properties",
        "get": "Failed to fetch property",
        "create": "Failed to create property",
        "update": "Failed to update property",
        "delete": "Failed to delete property",
    },
)

TEAM = Collection(
    name="teammembers",
    model=TeamMember,
    timestamp_field="createdAt",
    not_found="Team member not found",
    messages={
        "list": "Failed to fetch team",
        "get": "Failed to fetch team member",
        "create": "Failed to create team member",
        "update": "Failed to update team member",
        "delete": "Failed to delete team member",
    },
)

CONTACTS = Collection(
    name="contacts",
    model=Contact,
    timestamp_field="created_at",
    generate_id=True,
    newest_first=True,
    messages={
        "list": "Failed to fetch contacts",
        "create": "Failed to submit contact form",
    },
)

LEADS = Collection(
    name="leads",
    model=Lead,
    timestamp_field="created_at",
    generate_id=True,
    newest_first=True,
    messages={
        "list": "Failed to fetch leads",
        "create": "Failed to submit lead",
    },
)


def generate_id() -> str:
    """Millisecond timestamp as text. Rapid submissions may collide."""
    return str(int(time.time() * 1000))


class ResourceHandlers:
    """
    CRUD operations for one collection.

    Attributes:
        collection: The Collection description.
        store:      The RecordStore all operations go to.
    """

    def __init__(self, collection: Collection, store: RecordStore):
        self.collection = collection
        self.store = store

    @contextmanager
    def _failures(self, operation: str):
        """Log a StoreError with its detail and raise a static OperationFailed."""
        try:
            yield
        except StoreError as e:
            logger.error(
                "Store %s failed on %s: %s", e.operation, e.collection, e.message,
                extra={"collection": self.collection.name, "operation": operation},
            )
            raise OperationFailed(self.collection.failure(operation)) from e

    async def list(self) -> list[dict]:
        """All records, newest-first where the collection defines it."""
        sort = None
        if self.collection.newest_first:
            sort = (self.collection.timestamp_field, DESCENDING)
        with self._failures("list"):
            return await self.store.find_all(self.collection.name, sort=sort)

    async def get(self, record_id: str) -> dict:
        """
        Look up a record by external id.

        Raises:
            NotFoundError: If no record has this id.
        """
        with self._failures("get"):
            record = await self.store.find_one(self.collection.name, record_id)
        if record is None:
            raise NotFoundError(self.collection.not_found)
        return record

    async def create(self, body: Record) -> dict:
        """
        Store the request body as a new record.

        The id is replaced by a generated one for collections that assign
        their own ids; otherwise the caller's id is kept, and generated only
        when the caller sent none. The creation timestamp is set unless the
        caller provided one.
        """
        record = body.to_document()
        if self.collection.generate_id or not record.get("id"):
            record["id"] = generate_id()
        if record.get(self.collection.timestamp_field) is None:
            record[self.collection.timestamp_field] = datetime.now(timezone.utc)

        with self._failures("create"):
            return await self.store.insert(self.collection.name, record)

    async def update(self, record_id: str, body: Record, require_match: bool) -> dict | None:
        """
        Set the fields present in the body on the record with this id.

        Args:
            record_id:     External id to match.
            body:          Partial or full record.
            require_match: Raise NotFoundError when nothing matched.
                           When False a miss is reported as success.

        Returns:
            The record after the update, or None when nothing matched.
        """
        with self._failures("update"):
            record = await self.store.update(
                self.collection.name, record_id, body.to_document(),
            )
        if record is None and require_match:
            raise NotFoundError(self.collection.not_found)
        return record

    async def delete(self, record_id: str) -> None:
        """Delete by external id. Succeeds whether or not a record existed."""
        with self._failures("delete"):
            deleted = await self.store.delete(self.collection.name, record_id)
        logger.info(
            "Deleted %d record(s) with id %s", deleted, record_id,
            extra={"collection": self.collection.name, "operation": "delete"},
        )
