import threading

import pytest
from pydantic import ValidationError

from agent.core.memory import ChatStore
from agent.core.models import Location, NewChat


def _chat(message: str = "What is around here?") -> NewChat:
    return NewChat(
        message=message,
        response='{"description": "ok"}',
        system_prompt="You are a guide.",
        location=Location(lat=40.7128, lng=-74.006, address="New York, NY"),
    )


def test_ids_are_sequential_from_one(store: ChatStore):
    ids = [store.create(_chat(f"q{i}")).id for i in range(3)]
    assert ids == [1, 2, 3]


def test_list_returns_records_in_insertion_order(store: ChatStore):
    first = store.create(_chat("first"))
    second = store.create(_chat("second"))
    assert store.list() == [first, second]
    assert first.timestamp <= second.timestamp


def test_list_returns_records_unchanged(store: ChatStore):
    created = store.create(_chat())
    (listed,) = store.list()
    assert listed == created
    assert listed.model_dump() == created.model_dump()


def test_records_are_immutable(store: ChatStore):
    record = store.create(_chat())
    with pytest.raises(ValidationError):
        record.message = "changed"


def test_clear_empties_store_and_resets_ids(store: ChatStore):
    store.create(_chat())
    store.create(_chat())
    assert store.clear() == 2
    assert store.list() == []
    assert store.create(_chat()).id == 1


def test_clear_on_empty_store(store: ChatStore):
    assert store.clear() == 0
    assert len(store) == 0


def test_concurrent_creates_never_share_an_id(store: ChatStore):
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        for _ in range(25):
            store.create(_chat())

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    ids = [r.id for r in store.list()]
    assert len(ids) == 200
    assert sorted(set(ids)) == list(range(1, 201))
