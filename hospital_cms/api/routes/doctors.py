"""Doctor CRUD, specialty listing and slot-form options."""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status

from hospital_cms.api.dependencies import (
    Pagination,
    get_doctor_repository,
    get_time_slot_repository,
)
from hospital_cms.api.errors import APIError, store_errors
from hospital_cms.api.models import (
    DocumentPage,
    DoctorCreate,
    DoctorUpdate,
    ScheduleOptions,
    SuccessResponse,
)
from hospital_cms.guard import selectable_days, selectable_times
from hospital_cms.repositories import DoctorRepository, TimeSlotRepository
from hospital_cms.scheduling import doctor_ref, normalize_day, normalize_slot

router = APIRouter(tags=["Doctors"])


@router.get("/doctors", response_model=DocumentPage)
def list_doctors(
    pagination: Pagination = Depends(),
    specialty: Optional[str] = Query(None, description="Exact primary specialty"),
    search: Optional[str] = Query(None, description="Full-text search on name"),
    doctors: DoctorRepository = Depends(get_doctor_repository),
):
    """Paged doctors, newest first."""
    with store_errors("Failed to fetch doctors"):
        return doctors.list(pagination.limit, pagination.offset, specialty or None, search or None)


@router.post("/doctors", status_code=status.HTTP_201_CREATED)
def create_doctor(
    payload: DoctorCreate,
    doctors: DoctorRepository = Depends(get_doctor_repository),
) -> Dict[str, Any]:
    with store_errors("Failed to create doctor"):
        return doctors.create(payload.to_document())


@router.get("/doctors/{doctor_id}")
def get_doctor(
    doctor_id: str,
    doctors: DoctorRepository = Depends(get_doctor_repository),
) -> Dict[str, Any]:
    with store_errors("Failed to fetch doctor", resource="Doctor"):
        return doctors.get(doctor_id)


@router.put("/doctors/{doctor_id}")
def update_doctor(
    doctor_id: str,
    payload: DoctorUpdate,
    doctors: DoctorRepository = Depends(get_doctor_repository),
) -> Dict[str, Any]:
    """Partial update; only the fields sent are written."""
    data = payload.to_document()
    if not data:
        raise APIError(400, "No fields to update", code="EMPTY_UPDATE")

    with store_errors("Failed to update doctor", resource="Doctor", expose_detail=True):
        return doctors.update(doctor_id, data)


@router.delete("/doctors/{doctor_id}", response_model=SuccessResponse)
def delete_doctor(
    doctor_id: str,
    doctors: DoctorRepository = Depends(get_doctor_repository),
):
    with store_errors("Failed to delete doctor", resource="Doctor"):
        doctors.delete(doctor_id)
    return SuccessResponse()


@router.get("/doctors/{doctor_id}/schedule-options", response_model=ScheduleOptions)
def schedule_options(
    doctor_id: str,
    slot_id: Optional[str] = Query(
        None,
        alias="slotId",
        description="Record being edited; its own day stays selectable"
    ),
    doctors: DoctorRepository = Depends(get_doctor_repository),
    time_slots: TimeSlotRepository = Depends(get_time_slot_repository),
):
    """Days still free for this doctor and the time options not yet chosen."""
    with store_errors("Failed to fetch schedule options", resource="Doctor"):
        doctors.get(doctor_id)
        occupied = time_slots.occupied_days(doctor_id)

    current_days: List[str] = []
    chosen: List[str] = []
    if slot_id:
        with store_errors("Failed to fetch schedule options", resource="Time slot"):
            current = time_slots.get(slot_id)
        if doctor_ref(current) != doctor_id:
            raise APIError(404, "Time slot not found", code="NOT_FOUND")
        entries = normalize_slot(current)
        current_days = [normalize_day(entry["day"]) for entry in entries if normalize_day(entry["day"])]
        chosen = entries[0]["time"] if entries else []

    return ScheduleOptions(
        doctorId=doctor_id,
        occupiedDays=occupied,
        days=selectable_days(occupied, current_days=current_days),
        times=selectable_times(chosen),
    )


@router.get("/specialties", response_model=List[str])
def list_specialties(doctors: DoctorRepository = Depends(get_doctor_repository)):
    """Sorted distinct primary specialties."""
    with store_errors("Failed to fetch specialties"):
        return doctors.specialties()
