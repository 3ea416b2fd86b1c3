"""Document store over the SQLModel session.

The planner treats its data as three collections of documents: events,
users and notifications. This module gives routes and background jobs a
small document-style interface over the tables:

    get(collection, id)             -> document (raises if missing)
    create(collection, data)        -> id
    update(collection, id, fields)  shallow merge of named fields
    delete(collection, id)
    query(collection, **filters)    -> list of documents
    subscribe(query, on_change)     -> unsubscribe()

Concurrency:
    Events are rewritten field by field from a snapshot (read the votes map,
    add a voter, write the map back). Two writers working from the same
    snapshot would lose one update. Versioned tables therefore carry a
    ``version`` column; ``update(..., expected_version=n)`` only applies if
    the row is still at version ``n`` and raises ConflictError otherwise.
    Every successful update bumps the version.

Subscriptions:
    Subscriptions are process-wide. After each committed create, update or
    delete, every subscription on the affected collection is re-queried and
    its callback receives the full list of matching documents as dicts.
"""
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import update as sa_update
from sqlmodel import Session, SQLModel, select

from app.models import Event, Notification, UserProfile

logger = logging.getLogger(__name__)

COLLECTIONS: dict[str, type[SQLModel]] = {
    "events": Event,
    "users": UserProfile,
    "notifications": Notification,
}


class DocumentNotFoundError(Exception):
    """No document with this ID exists in the collection."""

    status_code = 404
    error = "not_found"

    def __init__(self, collection: str, doc_id: str) -> None:
        self.collection = collection
        self.doc_id = doc_id
        self.detail = f"{collection} document {doc_id} not found"
        super().__init__(self.detail)


class ConflictError(Exception):
    """The document changed since it was read."""

    status_code = 409
    error = "conflict"

    def __init__(self, collection: str, doc_id: str) -> None:
        self.collection = collection
        self.doc_id = doc_id
        self.detail = f"{collection} document {doc_id} was modified concurrently"
        super().__init__(self.detail)


@dataclass
class QueryDescriptor:
    """Which documents a query or subscription covers.

    Attributes:
        collection: Collection name.
        filters: Field name -> required value (equality only).
        order_by: Field to sort by, optional.
        descending: Sort direction.
        limit: Maximum number of documents, optional.
    """
    collection: str
    filters: dict[str, Any] = field(default_factory=dict)
    order_by: str | None = None
    descending: bool = False
    limit: int | None = None


OnChange = Callable[[list[dict]], None]


class SubscriptionRegistry:
    """Process-wide set of live queries."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._next_id = 0
        self._subscriptions: dict[int, tuple[QueryDescriptor, OnChange]] = {}

    def add(self, query: QueryDescriptor, on_change: OnChange) -> int:
        with self._lock:
            self._next_id += 1
            self._subscriptions[self._next_id] = (query, on_change)
            return self._next_id

    def remove(self, subscription_id: int) -> None:
        with self._lock:
            self._subscriptions.pop(subscription_id, None)

    def for_collection(self, collection: str) -> list[tuple[QueryDescriptor, OnChange]]:
        with self._lock:
            return [
                entry for entry in self._subscriptions.values()
                if entry[0].collection == collection
            ]

    def clear(self) -> None:
        with self._lock:
            self._subscriptions.clear()


subscriptions = SubscriptionRegistry()


def to_document(obj: SQLModel) -> dict:
    """Serialize a stored object to a JSON-compatible dict."""
    return obj.model_dump(mode="json")


class DocumentStore:
    """Collection-oriented access to the database for one session."""

    def __init__(self, session: Session, registry: SubscriptionRegistry = subscriptions):
        self.session = session
        self.registry = registry

    def _model(self, collection: str) -> type[SQLModel]:
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise ValueError(f"Unknown collection: {collection}") from None

    def _check_fields(self, model: type[SQLModel], fields: dict) -> None:
        unknown = set(fields) - set(model.model_fields)
        if unknown:
            raise ValueError(f"Unknown fields for {model.__name__}: {sorted(unknown)}")
        if "id" in fields:
            raise ValueError("Document id cannot be changed")

    def get(self, collection: str, doc_id: str):
        """Fetch one document or raise DocumentNotFoundError."""
        obj = self.session.get(self._model(collection), doc_id)
        if obj is None:
            raise DocumentNotFoundError(collection, doc_id)
        return obj

    def create(self, collection: str, data: dict) -> str:
        """Insert a new document and return its ID."""
        model = self._model(collection)
        obj = model(**data)
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        logger.debug(f"Created {collection}/{obj.id}")
        self._notify(collection)
        return obj.id

    def update(
        self,
        collection: str,
        doc_id: str,
        fields: dict,
        expected_version: int | None = None,
    ) -> None:
        """
        Overwrite the named fields of a document.

        For versioned collections the version is bumped, and when
        ``expected_version`` is given the write only happens if the stored
        version still matches. Raises ConflictError on a mismatch and
        DocumentNotFoundError if the document does not exist.
        """
        model = self._model(collection)
        self._check_fields(model, fields)
        if not fields:
            return

        values = dict(fields)
        statement = sa_update(model).where(model.id == doc_id)
        if "version" in model.model_fields:
            if expected_version is not None:
                statement = statement.where(model.version == expected_version)
            values["version"] = model.version + 1

        result = self.session.execute(
            statement.values(**values).execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.session.rollback()
            if self.session.get(model, doc_id) is None:
                raise DocumentNotFoundError(collection, doc_id)
            logger.info(f"Version conflict updating {collection}/{doc_id}")
            raise ConflictError(collection, doc_id)

        self.session.commit()
        logger.debug(f"Updated {collection}/{doc_id}: {sorted(fields)}")
        self._notify(collection)

    def delete(self, collection: str, doc_id: str) -> None:
        """Remove a document."""
        obj = self.get(collection, doc_id)
        self.session.delete(obj)
        self.session.commit()
        logger.info(f"Deleted {collection}/{doc_id}")
        self._notify(collection)

    def query(self, collection: str, **filters) -> list:
        """Return documents whose fields equal the given values."""
        return self.run(QueryDescriptor(collection=collection, filters=filters))

    def run(self, query: QueryDescriptor) -> list:
        """Execute a query descriptor."""
        model = self._model(query.collection)
        statement = select(model)
        for name, value in query.filters.items():
            statement = statement.where(getattr(model, name) == value)
        if query.order_by:
            column = getattr(model, query.order_by)
            statement = statement.order_by(column.desc() if query.descending else column)
        if query.limit is not None:
            statement = statement.limit(query.limit)
        return list(self.session.exec(statement).all())

    def subscribe(self, query: QueryDescriptor, on_change: OnChange) -> Callable[[], None]:
        """
        Watch a query.

        ``on_change`` is called right away with the current matching
        documents, then again after every change to the collection.
        Returns a function that cancels the subscription.
        """
        self._model(query.collection)
        subscription_id = self.registry.add(query, on_change)
        on_change([to_document(obj) for obj in self.run(query)])

        def unsubscribe() -> None:
            self.registry.remove(subscription_id)

        return unsubscribe

    def _notify(self, collection: str) -> None:
        for query, on_change in self.registry.for_collection(collection):
            documents = [to_document(obj) for obj in self.run(query)]
            try:
                on_change(documents)
            except Exception as e:
                logger.error(f"Subscriber for {collection} failed: {e}")
