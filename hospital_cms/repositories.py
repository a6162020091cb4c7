"""Collection-level access to doctors, users and time slots.

Pattern: Thin wrappers around the DocumentStore. Pagination, search and
filters are handed to the store as queries; only the schedule views
combine collections in memory.
"""
from typing import Any, Dict, List, Optional

from hospital_cms import scheduling
from hospital_cms.config import DAYS_OF_WEEK
from hospital_cms.logging_config import get_logger
from hospital_cms.store import Document, DocumentStore, Query, StoreRequestError

logger = get_logger(__name__)

CREATED_AT = "$createdAt"


class SlotConflictError(Exception):
    """Raised when a doctor already has a time-slot record for a weekday."""

    def __init__(self, doctor_id: str, day: str):
        super().__init__(f"Doctor {doctor_id} already has time slots on {day}")
        self.doctor_id = doctor_id
        self.day = day


class SlotShapeError(ValueError):
    """Raised when a multi-day record is updated without naming the day to keep."""

    def __init__(self, slot_id: str, days: List[str]):
        super().__init__(
            f"Time slot {slot_id} covers {len(days)} days ({', '.join(days) or 'none'}); "
            "send the day it should keep"
        )
        self.slot_id = slot_id
        self.days = days


class DoctorRepository:
    """Doctors collection."""

    def __init__(self, store: DocumentStore, collection_id: str, batch_size: int = 100):
        self.store = store
        self.collection_id = collection_id
        self.batch_size = batch_size

    def create(self, data: Dict[str, Any]) -> Document:
        return self.store.create_document(
            self.collection_id,
            {**data, "specialties": data.get("specialties") or []},
        )

    def list(
        self,
        limit: int = 10,
        offset: int = 0,
        specialty: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Dict[str, Any]:
        queries = []
        if specialty:
            queries.append(Query.equal("specialty", specialty))
        if search:
            queries.append(Query.search("name", search))

        return self.store.list_documents(
            self.collection_id,
            [*queries, Query.limit(limit), Query.offset(offset), Query.order_desc(CREATED_AT)],
        )

    def get(self, doctor_id: str) -> Document:
        return self.store.get_document(self.collection_id, doctor_id)

    def update(self, doctor_id: str, data: Dict[str, Any]) -> Document:
        return self.store.update_document(self.collection_id, doctor_id, data)

    def delete(self, doctor_id: str) -> None:
        self.store.delete_document(self.collection_id, doctor_id)

    def all(self) -> List[Document]:
        return self.store.list_all_documents(self.collection_id, batch_size=self.batch_size)

    def specialties(self) -> List[str]:
        """Sorted distinct primary specialties across every doctor."""
        return sorted({doc["specialty"] for doc in self.all() if doc.get("specialty")})


class UserRepository:
    """Users collection."""

    def __init__(self, store: DocumentStore, collection_id: str):
        self.store = store
        self.collection_id = collection_id

    def create(self, data: Dict[str, Any]) -> Document:
        return self.store.create_document(self.collection_id, data)

    def list(self, limit: int = 10, offset: int = 0, search: Optional[str] = None) -> Dict[str, Any]:
        queries = []
        if search:
            queries.append(Query.search("name", search))

        return self.store.list_documents(
            self.collection_id,
            [*queries, Query.limit(limit), Query.offset(offset), Query.order_desc(CREATED_AT)],
        )

    def get(self, user_id: str) -> Document:
        return self.store.get_document(self.collection_id, user_id)

    def update(self, user_id: str, data: Dict[str, Any]) -> Document:
        return self.store.update_document(self.collection_id, user_id, data)

    def delete(self, user_id: str) -> None:
        self.store.delete_document(self.collection_id, user_id)


class TimeSlotRepository:
    """
    Time slots collection, written in the ``docId`` / ``day`` / ``time[]`` shape.

    One record per doctor per weekday is checked before every write. The
    check and the write are separate store calls, so two concurrent writers
    can still both pass it.
    """

    def __init__(self, store: DocumentStore, collection_id: str, batch_size: int = 100):
        self.store = store
        self.collection_id = collection_id
        self.batch_size = batch_size

    def list_for_doctor(self, doctor_id: str, limit: int = 10, offset: int = 0) -> Dict[str, Any]:
        return self.store.list_documents(
            self.collection_id,
            [
                Query.equal("docId", doctor_id),
                Query.limit(limit),
                Query.offset(offset),
                Query.order_desc(CREATED_AT),
            ],
        )

    def records_for_doctor(self, doctor_id: str) -> List[Document]:
        """
        Every record of the doctor, whichever key references it.

        Collections created without the older ``doctorId`` attribute reject
        a query on it; those simply have no records keyed that way.
        """
        records: Dict[str, Document] = {}
        for key in scheduling.DOCTOR_KEYS:
            try:
                matches = self.store.list_all_documents(
                    self.collection_id,
                    [Query.equal(key, doctor_id)],
                    batch_size=self.batch_size,
                )
            except StoreRequestError as e:
                if key == "docId":
                    raise
                logger.debug("Skipping doctor key unknown to collection", key=key, error=e.message)
                continue
            for record in matches:
                records.setdefault(record["$id"], record)
        return list(records.values())

    def occupied_days(self, doctor_id: str, exclude_id: Optional[str] = None) -> List[str]:
        """Weekdays the doctor already has records for, in week order."""
        occupied = set()
        for record in self.records_for_doctor(doctor_id):
            if record.get("$id") == exclude_id:
                continue
            for entry in scheduling.normalize_slot(record):
                day = scheduling.normalize_day(entry["day"])
                if day:
                    occupied.add(day)
        return [day for day in DAYS_OF_WEEK if day in occupied]

    def _ensure_day_free(self, doctor_id: str, day: str, exclude_id: Optional[str] = None):
        if day in self.occupied_days(doctor_id, exclude_id=exclude_id):
            raise SlotConflictError(doctor_id, day)

    def create(self, doctor_id: str, day: str, times: List[str]) -> Document:
        self._ensure_day_free(doctor_id, day)
        return self.store.create_document(
            self.collection_id,
            {"docId": doctor_id, "day": day, "time": list(times)},
        )

    def get(self, slot_id: str) -> Document:
        return self.store.get_document(self.collection_id, slot_id)

    @staticmethod
    def _canonical_update(
        current: Document,
        doctor_id: Optional[str],
        day: Optional[str],
        times: Optional[List[str]],
    ) -> Dict[str, Any]:
        """
        Full ``docId`` / ``day`` / ``time[]`` write for a record stored in an
        older shape, with the older fields cleared.

        Raises:
            SlotShapeError: If the record spans several days and no day was given
        """
        entries = scheduling.normalize_slot(current)
        days = []
        for entry in entries:
            normalized = scheduling.normalize_day(entry["day"])
            if normalized and normalized not in days:
                days.append(normalized)

        if not day:
            if len(days) != 1:
                raise SlotShapeError(current.get("$id"), days)
            day = days[0]

        data: Dict[str, Any] = {
            "docId": doctor_id or scheduling.doctor_ref(current),
            "day": day,
            "time": list(times) if times else (list(entries[0]["time"]) if entries else []),
        }
        for key in scheduling.LEGACY_SLOT_FIELDS:
            if current.get(key) is not None:
                data[key] = None
        return data

    def update(
        self,
        slot_id: str,
        doctor_id: Optional[str] = None,
        day: Optional[str] = None,
        times: Optional[List[str]] = None,
    ) -> Document:
        """
        Partial update. A record still in an older shape is rewritten into
        the ``docId`` / ``day`` / ``time[]`` shape so the change takes effect.
        """
        current = self.get(slot_id)

        if scheduling.is_legacy_slot(current):
            data = self._canonical_update(current, doctor_id, day, times)
            logger.info("Rewriting time slot into current shape", slot_id=slot_id)
        else:
            data = {}
            if doctor_id:
                data["docId"] = doctor_id
            if day:
                data["day"] = day
            if times:
                data["time"] = list(times)

        if "docId" in data or "day" in data:
            target_doctor = data.get("docId") or scheduling.doctor_ref(current)
            target_day = data.get("day") or scheduling.normalize_day(current.get("day"))
            if target_doctor and target_day:
                self._ensure_day_free(target_doctor, target_day, exclude_id=slot_id)

        return self.store.update_document(self.collection_id, slot_id, data)

    def delete(self, slot_id: str) -> None:
        self.store.delete_document(self.collection_id, slot_id)

    def all(self) -> List[Document]:
        return self.store.list_all_documents(
            self.collection_id,
            [Query.order_desc(CREATED_AT)],
            batch_size=self.batch_size,
        )


class ScheduleService:
    """Views that combine the doctors and time-slot collections."""

    def __init__(self, doctors: DoctorRepository, time_slots: TimeSlotRepository):
        self.doctors = doctors
        self.time_slots = time_slots

    def schedules(self, limit: int = 10, offset: int = 0) -> Dict[str, Any]:
        """Grouped ``{doctorId, doctor, timeSlots}`` page, newest slots first."""
        merged = scheduling.merge_schedule(self.time_slots.all(), self.doctors.all())
        return scheduling.paginate(merged, limit, offset)

    def available_doctors(self) -> List[Document]:
        doctors = self.doctors.all()
        slots = self.time_slots.all()
        logger.info("Loaded collections for availability", doctors=len(doctors), slots=len(slots))
        return scheduling.doctors_available_for_new_slots(doctors, slots)

    def unscheduled_doctors(self) -> List[Document]:
        return scheduling.doctors_without_time_slots(self.doctors.all(), self.time_slots.all())

    def coverage(self) -> List[Dict[str, Any]]:
        return scheduling.coverage_report(self.doctors.all(), self.time_slots.all())
