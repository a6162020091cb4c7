"""API package initialization."""
from hospital_cms.api.models import DoctorCreate, ErrorResponse, TimeSlotPayload, UserCreate

__all__ = ["DoctorCreate", "ErrorResponse", "TimeSlotPayload", "UserCreate"]
