"""Tests for the time-slot repository's weekday bookkeeping."""
from unittest.mock import Mock

import pytest

from hospital_cms.repositories import SlotShapeError, TimeSlotRepository
from hospital_cms.store import DocumentStore, Query, StoreError, StoreRequestError
from hospital_cms.store.memory import InMemoryDocumentStore

COLLECTION = "timeSlots"


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def time_slots(store):
    return TimeSlotRepository(store, COLLECTION, batch_size=2)


def test_records_for_doctor_reads_both_keys_once(store, time_slots):
    store.create_document(COLLECTION, {"docId": "d1", "day": "Monday", "time": ["09:00 AM"]})
    store.create_document(COLLECTION, {"doctorId": "d1", "availableDays": ["Tuesday"], "availableTimes": []})
    store.create_document(COLLECTION, {"docId": "d1", "doctorId": "d1", "day": "Friday", "time": []})
    store.create_document(COLLECTION, {"docId": "d2", "day": "Monday", "time": []})

    records = time_slots.records_for_doctor("d1")

    assert len(records) == 3
    assert time_slots.occupied_days("d1") == ["Monday", "Tuesday", "Friday"]


def test_records_for_doctor_skips_unknown_doctor_id_attribute():
    """Collections without the older attribute reject the query on it."""
    store = Mock(spec=DocumentStore)
    canonical = {"$id": "s1", "docId": "d1", "day": "Monday", "time": []}
    store.list_all_documents.side_effect = [
        [canonical],
        StoreRequestError('Invalid query: Attribute not found in schema: doctorId', code=400),
    ]

    records = TimeSlotRepository(store, COLLECTION).records_for_doctor("d1")

    assert records == [canonical]
    queries = [call.args[1] for call in store.list_all_documents.call_args_list]
    assert queries == [[Query.equal("docId", "d1")], [Query.equal("doctorId", "d1")]]


def test_records_for_doctor_propagates_outage():
    store = Mock(spec=DocumentStore)
    store.list_all_documents.side_effect = StoreError("Service unavailable", code=503)

    with pytest.raises(StoreError):
        TimeSlotRepository(store, COLLECTION).records_for_doctor("d1")


def test_update_rewrites_older_record(store, time_slots):
    slot = store.create_document(COLLECTION, {
        "doctorId": {"$id": "d1"}, "availableDays": ["thursday"], "availableTimes": ["09:00 AM"],
    })

    updated = time_slots.update(slot["$id"], times=["10:00 AM"])

    assert updated["docId"] == "d1"
    assert updated["day"] == "Thursday"
    assert updated["time"] == ["10:00 AM"]
    assert updated["doctorId"] is None
    assert updated["availableDays"] is None
    assert updated["availableTimes"] is None


def test_update_multi_day_record_without_day_raises(store, time_slots):
    slot = store.create_document(COLLECTION, {
        "doctorId": "d1", "availableDays": ["Monday", "Friday"], "availableTimes": [],
    })

    with pytest.raises(SlotShapeError) as exc_info:
        time_slots.update(slot["$id"], times=["10:00 AM"])

    assert exc_info.value.days == ["Monday", "Friday"]
    assert store.get_document(COLLECTION, slot["$id"])["availableDays"] == ["Monday", "Friday"]
