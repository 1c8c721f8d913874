# patient models: creation, update, and response schemas
# a patient belongs to exactly one therapist, set from the caller on create

from datetime import date
from typing import Optional, Literal
from pydantic import BaseModel, Field

PatientStatus = Literal["active", "completed", "discontinued"]
Gender = Literal["male", "female", "other"]


class Address(BaseModel):
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip_code: Optional[str] = Field(None, alias="zipCode")
    country: Optional[str] = None

    model_config = {"populate_by_name": True}


class PatientCreate(BaseModel):
    name: str = Field(..., min_length=1)
    age: int = Field(..., ge=0, le=130)
    gender: Gender
    contact_number: str = Field(..., min_length=1, alias="contactNumber")
    email: Optional[str] = None
    address: Address
    medical_history: str = Field(..., min_length=1, alias="medicalHistory")
    diagnosis: str = Field(..., min_length=1)
    status: PatientStatus = "active"
    total_sessions: int = Field(0, ge=0, alias="totalSessions")
    last_session_date: Optional[date] = Field(None, alias="lastSessionDate")

    model_config = {"populate_by_name": True}


class PatientUpdate(BaseModel):
    """partial update; the owning therapist cannot be changed"""
    name: Optional[str] = Field(None, min_length=1)
    age: Optional[int] = Field(None, ge=0, le=130)
    gender: Optional[Gender] = None
    contact_number: Optional[str] = Field(None, min_length=1, alias="contactNumber")
    email: Optional[str] = None
    address: Optional[Address] = None
    medical_history: Optional[str] = Field(None, min_length=1, alias="medicalHistory")
    diagnosis: Optional[str] = Field(None, min_length=1)
    status: Optional[PatientStatus] = None
    total_sessions: Optional[int] = Field(None, ge=0, alias="totalSessions")
    last_session_date: Optional[date] = Field(None, alias="lastSessionDate")

    model_config = {"populate_by_name": True}


class PatientResponse(BaseModel):
    id: str
    therapist_id: str = Field(..., alias="therapistId")
    therapist_name: Optional[str] = Field(None, alias="therapistName")
    name: str
    age: int
    gender: str
    contact_number: str = Field("", alias="contactNumber")
    email: Optional[str] = None
    address: Optional[Address] = None
    medical_history: str = Field("", alias="medicalHistory")
    diagnosis: str = ""
    status: str = "active"
    total_sessions: int = Field(0, alias="totalSessions")
    last_session_date: Optional[str] = Field(None, alias="lastSessionDate")
    created_at: str = Field("", alias="createdAt")
    updated_at: str = Field("", alias="updatedAt")

    model_config = {"populate_by_name": True}
