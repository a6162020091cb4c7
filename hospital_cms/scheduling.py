"""Doctor schedule aggregation and weekly coverage.

Time-slot records exist in three shapes:

- ``doctorId`` + ``availableDays[]`` + ``availableTimes[]``
- ``docId`` + ``day`` + ``time[]`` (what this service writes)
- ``doctorId`` + single ``time`` + ``status`` / ``label`` / ``date``

Everything here reads all three through normalize_slot(), so grouping and
coverage never depend on which shape a record was stored in.
"""
from collections import OrderedDict
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from hospital_cms.config import DAYS_OF_WEEK
from hospital_cms.logging_config import get_logger

logger = get_logger(__name__)

_DAY_LOOKUP = {day.lower(): day for day in DAYS_OF_WEEK}
_EXTRA_SLOT_FIELDS = ("status", "label", "date", "available")

DOCTOR_KEYS = ("docId", "doctorId")
# Fields of the older shapes; cleared when a record is rewritten
LEGACY_SLOT_FIELDS = ("doctorId", "availableDays", "availableTimes")


class CoverageStatus(str, Enum):
    """How much of the week a doctor's slots cover."""
    NONE = "none"
    PARTIAL = "partial"
    FULL = "full"


def normalize_day(value: Any) -> Optional[str]:
    """'monday ' -> 'Monday'; anything that is not a weekday -> None."""
    if not isinstance(value, str):
        return None
    return _DAY_LOOKUP.get(value.strip().lower())


def _weekday_from_date(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    try:
        return DAYS_OF_WEEK[datetime.strptime(value[:10], "%Y-%m-%d").weekday()]
    except ValueError:
        return None


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def doctor_ref(document: Dict[str, Any]) -> Optional[str]:
    """
    Doctor id a slot belongs to.

    Accepts ``docId`` or ``doctorId``, either as a plain id or as an
    expanded relationship document (``{"$id": ...}``).
    """
    for key in DOCTOR_KEYS:
        value = document.get(key)
        if isinstance(value, dict):
            value = value.get("$id")
        if isinstance(value, str) and value:
            return value
    return None


def is_legacy_slot(document: Dict[str, Any]) -> bool:
    """True unless the record is in the plain ``docId`` / ``day`` / ``time[]`` shape."""
    if any(document.get(key) is not None for key in LEGACY_SLOT_FIELDS):
        return True
    return not document.get("day")


def normalize_slot(document: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Convert one stored time-slot record into schedule entries.

    Returns one ``{"$id", "doctorId", "day", "time", "$createdAt"}`` entry
    per weekday the record covers; a record in the multi-day shape yields
    one entry per listed day. Unknown day strings are kept as-is in ``day``
    (so they still show up in the schedule) but never count as coverage.
    """
    doctor_id = doctor_ref(document)

    if document.get("availableDays") is not None:
        days = _as_list(document.get("availableDays"))
        times = _as_list(document.get("availableTimes"))
    elif document.get("day"):
        days = [document["day"]]
        times = _as_list(document.get("time"))
    elif document.get("date"):
        days = [_weekday_from_date(document["date"]) or document["date"]]
        times = _as_list(document.get("time"))
    else:
        days = []
        times = _as_list(document.get("time"))

    entries = []
    for day in days:
        entry = {
            "$id": document.get("$id"),
            "doctorId": doctor_id,
            "day": normalize_day(day) or day,
            "time": list(times),
            "$createdAt": document.get("$createdAt"),
        }
        for key in _EXTRA_SLOT_FIELDS:
            if key in document:
                entry[key] = document[key]
        entries.append(entry)

    return entries


def group_slots_by_doctor(slots: Iterable[Dict[str, Any]]) -> "OrderedDict[str, List[Dict[str, Any]]]":
    """
    Group slot records by doctor, keeping first-appearance order.

    Each record lands in exactly one group; records without a doctor
    reference are skipped.
    """
    grouped: "OrderedDict[str, List[Dict[str, Any]]]" = OrderedDict()

    for slot in slots:
        doctor_id = doctor_ref(slot)
        if doctor_id is None:
            logger.warning("Skipping time slot without doctor reference", slot_id=slot.get("$id"))
            continue

        entries = normalize_slot(slot)
        if not entries:
            # Nothing scheduled yet, but the doctor still owns a record
            entries = [{
                "$id": slot.get("$id"),
                "doctorId": doctor_id,
                "day": None,
                "time": _as_list(slot.get("time")),
                "$createdAt": slot.get("$createdAt"),
            }]
        grouped.setdefault(doctor_id, []).extend(entries)

    return grouped


def doctor_summary(doctor: Dict[str, Any]) -> Dict[str, Any]:
    """The doctor fields the schedule view shows."""
    return {
        "$id": doctor.get("$id"),
        "name": doctor.get("name"),
        "specialty": doctor.get("specialty"),
        "image": doctor.get("image"),
    }


def merge_schedule(
    slots: Iterable[Dict[str, Any]],
    doctors: Iterable[Dict[str, Any]],
) -> List[Dict[str, Any]]:
    """
    Join grouped slots with their doctors.

    Returns ``[{"doctorId", "doctor", "timeSlots"}]`` in group order.
    Groups whose doctor no longer exists are dropped.
    """
    doctors_by_id = {doctor["$id"]: doctor for doctor in doctors if doctor.get("$id")}
    grouped = group_slots_by_doctor(slots)

    merged = []
    for doctor_id, entries in grouped.items():
        doctor = doctors_by_id.get(doctor_id)
        if doctor is None:
            logger.warning("Dropping time slots of unknown doctor", doctor_id=doctor_id, slots=len(entries))
            continue

        merged.append({
            "doctorId": doctor_id,
            "doctor": doctor_summary(doctor),
            "timeSlots": [
                {key: value for key, value in entry.items() if key != "doctorId"}
                for entry in entries
            ],
        })

    logger.info("Merged doctor schedules", groups=len(grouped), merged=len(merged))
    return merged


def paginate(items: Sequence[Any], limit: int, offset: int) -> Dict[str, Any]:
    """Slice an in-memory list into the ``{documents, total}`` page shape."""
    return {
        "documents": list(items[offset:offset + limit]),
        "total": len(items),
    }


def coverage_by_doctor(slots: Iterable[Dict[str, Any]]) -> Dict[str, Set[str]]:
    """
    Distinct weekdays covered per doctor.

    Doctors that own records but no recognizable weekday map to an
    empty set, which distinguishes them from doctors with no records.
    """
    coverage: Dict[str, Set[str]] = {}

    for slot in slots:
        doctor_id = doctor_ref(slot)
        if doctor_id is None:
            continue

        days = coverage.setdefault(doctor_id, set())
        for entry in normalize_slot(slot):
            day = normalize_day(entry["day"])
            if day is not None:
                days.add(day)

    return coverage


def doctors_available_for_new_slots(
    doctors: Iterable[Dict[str, Any]],
    slots: Iterable[Dict[str, Any]],
) -> List[Dict[str, Any]]:
    """Doctors covering fewer than 7 weekdays, including those with no slots."""
    doctors = list(doctors)
    coverage = coverage_by_doctor(slots)

    available = [
        doctor for doctor in doctors
        if len(coverage.get(doctor["$id"], ())) < len(DAYS_OF_WEEK)
    ]

    logger.info("Doctors available for new slots", doctors=len(doctors), available=len(available))
    return available


def doctors_without_time_slots(
    doctors: Iterable[Dict[str, Any]],
    slots: Iterable[Dict[str, Any]],
) -> List[Dict[str, Any]]:
    """Doctors that have no time-slot records at all."""
    scheduled = {doctor_ref(slot) for slot in slots}
    return [doctor for doctor in doctors if doctor["$id"] not in scheduled]


def coverage_report(
    doctors: Iterable[Dict[str, Any]],
    slots: Iterable[Dict[str, Any]],
) -> List[Dict[str, Any]]:
    """Per-doctor covered days, missing days and coverage status."""
    coverage = coverage_by_doctor(slots)

    report = []
    for doctor in doctors:
        covered = coverage.get(doctor["$id"], set())

        if not covered:
            status = CoverageStatus.NONE
        elif len(covered) < len(DAYS_OF_WEEK):
            status = CoverageStatus.PARTIAL
        else:
            status = CoverageStatus.FULL

        report.append({
            "doctorId": doctor["$id"],
            "name": doctor.get("name"),
            "coveredDays": [day for day in DAYS_OF_WEEK if day in covered],
            "missingDays": [day for day in DAYS_OF_WEEK if day not in covered],
            "status": status.value,
        })

    return report
