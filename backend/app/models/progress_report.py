# progress report models: session details, progress summary, payloads, response

import datetime as dt
from typing import Optional, Literal
from pydantic import BaseModel, Field

SessionType = Literal["individual", "group", "family"]


class SessionDetails(BaseModel):
    date: dt.date
    duration: int = Field(..., gt=0, description="minutes")
    type: SessionType


class Progress(BaseModel):
    goals: list[str] = Field(default_factory=list)
    achievements: list[str] = Field(default_factory=list)
    challenges: list[str] = Field(default_factory=list)


class ProgressReportCreate(BaseModel):
    """drafts may leave progress lists empty; they are checked on submit"""
    patient_id: str = Field(..., alias="patient")
    therapy_plan_id: Optional[str] = Field(None, alias="therapyPlan")
    session_details: SessionDetails = Field(..., alias="sessionDetails")
    progress: Progress = Field(default_factory=Progress)
    next_steps: list[str] = Field(default_factory=list, alias="nextSteps")
    observations: Optional[str] = None
    recommendations: Optional[str] = None

    model_config = {"populate_by_name": True}


class ProgressReportUpdate(BaseModel):
    therapy_plan_id: Optional[str] = Field(None, alias="therapyPlan")
    session_details: Optional[SessionDetails] = Field(None, alias="sessionDetails")
    progress: Optional[Progress] = None
    next_steps: Optional[list[str]] = Field(None, alias="nextSteps")
    observations: Optional[str] = None
    recommendations: Optional[str] = None

    model_config = {"populate_by_name": True}


class ProgressReportResponse(BaseModel):
    id: str
    patient_id: str = Field(..., alias="patientId")
    patient_name: Optional[str] = Field(None, alias="patientName")
    therapist_id: str = Field(..., alias="therapistId")
    therapist_name: Optional[str] = Field(None, alias="therapistName")
    therapy_plan_id: Optional[str] = Field(None, alias="therapyPlanId")
    session_details: SessionDetails = Field(..., alias="sessionDetails")
    progress: Progress = Field(default_factory=Progress)
    next_steps: list[str] = Field(default_factory=list, alias="nextSteps")
    observations: Optional[str] = None
    recommendations: Optional[str] = None
    status: str
    supervisor_feedback: Optional[str] = Field(None, alias="supervisorFeedback")
    submitted_at: Optional[str] = Field(None, alias="submittedAt")
    reviewed_by: Optional[str] = Field(None, alias="reviewedBy")
    reviewed_at: Optional[str] = Field(None, alias="reviewedAt")
    allowed_transitions: list[str] = Field(default_factory=list, alias="allowedTransitions")
    created_at: str = Field("", alias="createdAt")
    updated_at: str = Field("", alias="updatedAt")

    model_config = {"populate_by_name": True}
