"""Pydantic models for API request/response validation."""
import re
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from hospital_cms.guard import find_duplicates

PHONE_PATTERN = re.compile(r"^01[1-9]\d{8}$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _strip_specialties(values: Optional[List[str]]) -> Optional[List[str]]:
    if values is None:
        return None
    cleaned = [value.strip() for value in values if value and value.strip()]
    duplicates = find_duplicates(cleaned)
    if duplicates:
        raise ValueError(f"Duplicate specialty: {', '.join(duplicates)}")
    return cleaned


class DoctorCreate(BaseModel):
    """Request schema for POST /api/doctors."""
    name: str = Field(..., min_length=1, description="Doctor's full name")
    specialty: str = Field(..., min_length=1, description="Primary specialty")
    hourly_rate: int = Field(..., ge=0, alias="hourlyRate", description="Hourly rate (0 or positive)")
    image: Optional[str] = Field(None, description="Profile image URL")
    experience: Optional[str] = Field(None, description="Free-text experience summary")
    specialties: List[str] = Field(default_factory=list, description="Additional specialties")

    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "name": "Dr. Amina Rahman",
                "specialty": "Cardiology",
                "hourlyRate": 120,
                "image": "https://example.com/amina.png",
                "experience": "12 years at City General",
                "specialties": ["Echocardiography"]
            }
        }
    )

    @field_validator("specialties")
    @classmethod
    def validate_specialties(cls, v):
        return _strip_specialties(v)

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class DoctorUpdate(BaseModel):
    """Request schema for PUT /api/doctors/{id} (partial)."""
    name: Optional[str] = Field(None, min_length=1)
    specialty: Optional[str] = Field(None, min_length=1)
    hourly_rate: Optional[int] = Field(None, ge=0, alias="hourlyRate")
    image: Optional[str] = None
    experience: Optional[str] = None
    specialties: Optional[List[str]] = None

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    @field_validator("specialties")
    @classmethod
    def validate_specialties(cls, v):
        return _strip_specialties(v)

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)


class UserBase(BaseModel):
    """Shared user fields and validation."""
    age: Optional[int] = Field(None, ge=1, le=150, description="Age in years")
    phone: Optional[str] = Field(None, description="11 digits starting with 01[1-9]")
    email: Optional[str] = None
    role: Optional[str] = None

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if v is not None and not PHONE_PATTERN.match(v):
            raise ValueError("Phone must be 11 digits starting with 01-019 (e.g., 01700000000)")
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        if v is not None and not EMAIL_PATTERN.match(v):
            raise ValueError("Invalid email format")
        return v


class UserCreate(UserBase):
    """Request schema for POST /api/users."""
    name: str = Field(..., min_length=1)

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class UserUpdate(UserBase):
    """Request schema for PUT /api/users/{id} (partial)."""
    name: Optional[str] = Field(None, min_length=1)

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class TimeSlotPayload(BaseModel):
    """
    Body of POST/PUT /api/time-slots.

    Fields are optional at the schema level; the handlers check presence
    themselves so they can answer 400 with a specific message.
    """
    doc_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("docId", "doctorId"),
        description="Doctor id the slot belongs to"
    )
    day: Optional[str] = Field(None, description="Weekday, e.g. Monday")
    time: Optional[List[str]] = Field(None, description="Times for that day, e.g. ['09:00 AM']")

    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "docId": "6650f0c2a1b2c3d4e5f6",
                "day": "Monday",
                "time": ["09:00 AM", "10:00 AM"]
            }
        }
    )


class DocumentPage(BaseModel):
    """Paged listing: ``{documents, total}``."""
    documents: List[Dict[str, Any]]
    total: int


class ScheduleOptions(BaseModel):
    """Days and times still selectable for a doctor's slot form."""
    doctorId: str
    occupiedDays: List[str]
    days: List[str]
    times: List[str]


class CoverageEntry(BaseModel):
    """One doctor's weekly coverage."""
    doctorId: str
    name: Optional[str] = None
    coveredDays: List[str]
    missingDays: List[str]
    status: str


class SuccessResponse(BaseModel):
    success: bool = True


class ErrorResponse(BaseModel):
    """Error response schema."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Detailed error information")
    code: Optional[str] = Field(None, description="Error code")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "Failed to fetch doctors",
                "detail": None,
                "code": "STORE_ERROR"
            }
        }
    )
