"""Doctor time-slot CRUD and the grouped schedule listing."""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status

from hospital_cms.api.dependencies import (
    Pagination,
    get_doctor_repository,
    get_schedule_service,
    get_time_slot_repository,
)
from hospital_cms.api.errors import APIError, store_errors
from hospital_cms.api.models import DocumentPage, SuccessResponse, TimeSlotPayload
from hospital_cms.config import DAYS_OF_WEEK
from hospital_cms.guard import DuplicateValueError, append_unique
from hospital_cms.logging_config import get_logger
from hospital_cms.repositories import DoctorRepository, ScheduleService, TimeSlotRepository
from hospital_cms.scheduling import normalize_day

logger = get_logger(__name__)

router = APIRouter(tags=["Time Slots"])


def _bad_request(error: str, detail: Optional[str] = None) -> APIError:
    return APIError(400, error, detail=detail, code="VALIDATION_ERROR")


def _clean_day(day: str) -> str:
    normalized = normalize_day(day)
    if normalized is None:
        raise _bad_request("Invalid day", f"Day must be one of: {', '.join(DAYS_OF_WEEK)}")
    return normalized


def _clean_times(times: List[str]) -> List[str]:
    """Run each time through the duplicate guard, in order."""
    cleaned: List[str] = []
    for value in times:
        try:
            cleaned = append_unique(cleaned, value, label="time")
        except DuplicateValueError as e:
            raise _bad_request("Duplicate Time", str(e))
        except ValueError as e:
            raise _bad_request("Invalid time", str(e))
    return cleaned


@router.get("/time-slots", response_model=DocumentPage)
def list_time_slots(
    pagination: Pagination = Depends(),
    doctor_id: Optional[str] = Query(
        None,
        alias="doctorId",
        description="Return this doctor's raw slot records instead of grouped schedules"
    ),
    time_slots: TimeSlotRepository = Depends(get_time_slot_repository),
    schedule: ScheduleService = Depends(get_schedule_service),
):
    """
    Without ``doctorId``: one entry per doctor ``{doctorId, doctor, timeSlots}``,
    paginated in memory. With ``doctorId``: that doctor's records.
    """
    with store_errors("Failed to fetch time slots"):
        if doctor_id:
            return time_slots.list_for_doctor(doctor_id, pagination.limit, pagination.offset)
        return schedule.schedules(pagination.limit, pagination.offset)


@router.post("/time-slots", status_code=status.HTTP_201_CREATED)
def create_time_slot(
    payload: TimeSlotPayload,
    time_slots: TimeSlotRepository = Depends(get_time_slot_repository),
    doctors: DoctorRepository = Depends(get_doctor_repository),
) -> Dict[str, Any]:
    if not payload.doc_id:
        raise _bad_request("Doctor ID is required")
    if not payload.day:
        raise _bad_request("Day is required")
    if not payload.time:
        raise _bad_request("At least one time slot must be selected")

    day = _clean_day(payload.day)
    times = _clean_times(payload.time)

    with store_errors("Failed to create time slot", resource="Doctor"):
        doctors.get(payload.doc_id)
        slot = time_slots.create(payload.doc_id, day, times)

    logger.info("Time slot created", slot_id=slot.get("$id"), doctor_id=payload.doc_id, day=day)
    return slot


@router.get("/time-slots/{slot_id}")
def get_time_slot(
    slot_id: str,
    time_slots: TimeSlotRepository = Depends(get_time_slot_repository),
) -> Dict[str, Any]:
    with store_errors("Failed to fetch time slot", resource="Time slot"):
        return time_slots.get(slot_id)


@router.put("/time-slots/{slot_id}")
def update_time_slot(
    slot_id: str,
    payload: TimeSlotPayload,
    time_slots: TimeSlotRepository = Depends(get_time_slot_repository),
) -> Dict[str, Any]:
    """Partial update; any field that is sent must be non-empty."""
    sent = payload.model_fields_set

    if "day" in sent and not payload.day:
        raise _bad_request("Day must not be empty")
    if "time" in sent and not payload.time:
        raise _bad_request("Available times must be a non-empty array")
    if "doc_id" in sent and not payload.doc_id:
        raise _bad_request("Doctor ID must not be empty")

    day = _clean_day(payload.day) if payload.day else None
    times = _clean_times(payload.time) if payload.time else None

    if not (payload.doc_id or day or times):
        raise _bad_request("No fields to update")

    with store_errors("Failed to update time slot", resource="Time slot"):
        return time_slots.update(slot_id, doctor_id=payload.doc_id, day=day, times=times)


@router.delete("/time-slots/{slot_id}", response_model=SuccessResponse)
def delete_time_slot(
    slot_id: str,
    time_slots: TimeSlotRepository = Depends(get_time_slot_repository),
):
    with store_errors("Failed to delete time slot", resource="Time slot"):
        time_slots.delete(slot_id)
    return SuccessResponse()
