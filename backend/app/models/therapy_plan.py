# therapy plan models: goals, activities, create/update payloads, response
# status and review fields are never accepted from the client; they change
# only through the review endpoints

from datetime import date
from typing import Optional, Literal
from pydantic import BaseModel, Field, model_validator

GoalStatus = Literal["pending", "in_progress", "achieved", "not_achieved"]


class Goal(BaseModel):
    description: str = Field(..., min_length=1)
    target_date: date = Field(..., alias="targetDate")
    status: GoalStatus = "pending"

    model_config = {"populate_by_name": True}


class Activity(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    frequency: str = Field(..., min_length=1, description="e.g. 'twice weekly'")
    duration: int = Field(..., gt=0, description="minutes per session")
    instructions: Optional[str] = None


class TherapyPlanCreate(BaseModel):
    patient_id: str = Field(..., alias="patient")
    supervisor_id: str = Field(..., alias="supervisor")
    goals: list[Goal] = Field(default_factory=list)
    activities: list[Activity] = Field(default_factory=list)
    start_date: date = Field(..., alias="startDate")
    end_date: date = Field(..., alias="endDate")
    notes: Optional[str] = None

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _end_after_start(self):
        if self.end_date < self.start_date:
            raise ValueError("endDate must be on or after startDate")
        return self


class TherapyPlanUpdate(BaseModel):
    """partial update; patient and owner are fixed at creation"""
    supervisor_id: Optional[str] = Field(None, alias="supervisor")
    goals: Optional[list[Goal]] = None
    activities: Optional[list[Activity]] = None
    start_date: Optional[date] = Field(None, alias="startDate")
    end_date: Optional[date] = Field(None, alias="endDate")
    notes: Optional[str] = None

    model_config = {"populate_by_name": True}


class TherapyPlanResponse(BaseModel):
    id: str
    patient_id: str = Field(..., alias="patientId")
    patient_name: Optional[str] = Field(None, alias="patientName")
    therapist_id: str = Field(..., alias="therapistId")
    therapist_name: Optional[str] = Field(None, alias="therapistName")
    supervisor_id: Optional[str] = Field(None, alias="supervisorId")
    supervisor_name: Optional[str] = Field(None, alias="supervisorName")
    goals: list[Goal] = Field(default_factory=list)
    activities: list[Activity] = Field(default_factory=list)
    start_date: str = Field("", alias="startDate")
    end_date: str = Field("", alias="endDate")
    notes: Optional[str] = None
    status: str
    supervisor_feedback: Optional[str] = Field(None, alias="supervisorFeedback")
    submitted_at: Optional[str] = Field(None, alias="submittedAt")
    reviewed_by: Optional[str] = Field(None, alias="reviewedBy")
    reviewed_at: Optional[str] = Field(None, alias="reviewedAt")
    allowed_transitions: list[str] = Field(default_factory=list, alias="allowedTransitions")
    created_at: str = Field("", alias="createdAt")
    updated_at: str = Field("", alias="updatedAt")

    model_config = {"populate_by_name": True}
