"""Which doctors can still be given time slots."""
from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from hospital_cms.api.dependencies import get_schedule_service
from hospital_cms.api.errors import store_errors
from hospital_cms.api.models import CoverageEntry
from hospital_cms.repositories import ScheduleService

router = APIRouter(prefix="/availability", tags=["Availability"])


@router.get("")
def available_doctors(schedule: ScheduleService = Depends(get_schedule_service)) -> List[Dict[str, Any]]:
    """Doctors covering fewer than 7 weekdays (including doctors with no slots)."""
    with store_errors("Failed to fetch available doctors"):
        return schedule.available_doctors()


@router.get("/unscheduled")
def unscheduled_doctors(schedule: ScheduleService = Depends(get_schedule_service)) -> List[Dict[str, Any]]:
    """Doctors without any time-slot records."""
    with store_errors("Failed to fetch doctors without time slots"):
        return schedule.unscheduled_doctors()


@router.get("/coverage", response_model=List[CoverageEntry])
def coverage(schedule: ScheduleService = Depends(get_schedule_service)):
    with store_errors("Failed to fetch coverage"):
        return schedule.coverage()
