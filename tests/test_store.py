"""Tests for the document store."""

import pytest

from app.core.store import (
    ConflictError,
    DocumentNotFoundError,
    DocumentStore,
    QueryDescriptor,
)


class TestCrud:
    def test_create_and_get(self, store: DocumentStore):
        event_id = store.create("events", {"name": "Picnic", "host_id": "h1"})

        event = store.get("events", event_id)
        assert event.name == "Picnic"
        assert event.votes == {}
        assert event.comments == []
        assert event.version == 0

    def test_get_missing(self, store: DocumentStore):
        with pytest.raises(DocumentNotFoundError):
            store.get("events", "missing")

    def test_unknown_collection(self, store: DocumentStore):
        with pytest.raises(ValueError):
            store.get("widgets", "x")

    def test_update_merges_named_fields(self, store: DocumentStore):
        event_id = store.create(
            "events", {"name": "Picnic", "host_id": "h1", "items": ["Blanket"]}
        )
        store.update("events", event_id, {"votes": {"2026-06-01": {"count": 1, "voters": []}}})

        event = store.get("events", event_id)
        assert event.votes == {"2026-06-01": {"count": 1, "voters": []}}
        assert event.items == ["Blanket"]
        assert event.name == "Picnic"
        assert event.version == 1

    def test_update_unknown_field(self, store: DocumentStore):
        event_id = store.create("events", {"name": "Picnic", "host_id": "h1"})
        with pytest.raises(ValueError):
            store.update("events", event_id, {"colour": "blue"})

    def test_update_missing_document(self, store: DocumentStore):
        with pytest.raises(DocumentNotFoundError):
            store.update("events", "missing", {"name": "x"})

    def test_delete(self, store: DocumentStore):
        event_id = store.create("events", {"name": "Picnic", "host_id": "h1"})
        store.delete("events", event_id)
        with pytest.raises(DocumentNotFoundError):
            store.get("events", event_id)

    def test_query_filters(self, store: DocumentStore):
        store.create("events", {"name": "Mine", "host_id": "h1"})
        store.create("events", {"name": "Theirs", "host_id": "h2"})

        names = [e.name for e in store.query("events", host_id="h1")]
        assert names == ["Mine"]


class TestOptimisticConcurrency:
    def test_matching_version_applies(self, store: DocumentStore):
        event_id = store.create("events", {"name": "Picnic", "host_id": "h1"})
        store.update("events", event_id, {"name": "Beach Picnic"}, expected_version=0)
        assert store.get("events", event_id).name == "Beach Picnic"

    def test_stale_version_conflicts(self, store: DocumentStore):
        event_id = store.create("events", {"name": "Picnic", "host_id": "h1"})
        store.update("events", event_id, {"votes": {"A": 1}}, expected_version=0)

        with pytest.raises(ConflictError):
            store.update("events", event_id, {"votes": {"B": 1}}, expected_version=0)

        event = store.get("events", event_id)
        assert event.votes == {"A": 1}
        assert event.version == 1

    def test_unversioned_collection(self, store: DocumentStore):
        store.create("users", {"id": "u1", "name": "Ann"})
        store.update("users", "u1", {"role": "admin"})
        assert store.get("users", "u1").role == "admin"


class TestSubscribe:
    def test_initial_snapshot_and_changes(self, store: DocumentStore):
        seen: list[list[dict]] = []
        store.create("events", {"name": "Existing", "host_id": "h1"})

        unsubscribe = store.subscribe(
            QueryDescriptor(collection="events", filters={"host_id": "h1"}),
            seen.append,
        )
        assert [d["name"] for d in seen[-1]] == ["Existing"]

        event_id = store.create("events", {"name": "New", "host_id": "h1"})
        assert sorted(d["name"] for d in seen[-1]) == ["Existing", "New"]

        store.update("events", event_id, {"name": "Renamed"})
        assert sorted(d["name"] for d in seen[-1]) == ["Existing", "Renamed"]

        unsubscribe()
        calls = len(seen)
        store.delete("events", event_id)
        assert len(seen) == calls

    def test_other_collections_do_not_trigger(self, store: DocumentStore):
        seen: list[list[dict]] = []
        store.subscribe(QueryDescriptor(collection="notifications"), seen.append)

        store.create("events", {"name": "Picnic", "host_id": "h1"})
        assert len(seen) == 1

    def test_failing_subscriber_does_not_block_writes(self, store: DocumentStore):
        def broken(documents):
            if documents:
                raise RuntimeError("boom")

        store.subscribe(QueryDescriptor(collection="events"), broken)
        event_id = store.create("events", {"name": "Picnic", "host_id": "h1"})
        assert store.get("events", event_id).name == "Picnic"

    def test_documents_are_plain_dicts(self, store: DocumentStore):
        seen: list[list[dict]] = []
        store.create("events", {"name": "Picnic", "host_id": "h1"})
        store.subscribe(QueryDescriptor(collection="events"), seen.append)

        document = seen[0][0]
        assert isinstance(document, dict)
        assert isinstance(document["created_at"], str)
