# clinical rating models: per-domain scores and recommendations

from datetime import date
from typing import Optional, Literal
from pydantic import BaseModel, Field, model_validator

Domain = Literal[
    "articulation",
    "language_comprehension",
    "language_expression",
    "voice",
    "fluency",
    "pragmatics",
    "feeding_swallowing",
    "cognition",
]
Priority = Literal["high", "medium", "low"]
RatingStatus = Literal["draft", "published", "archived"]


class EvaluationPeriod(BaseModel):
    start_date: date = Field(..., alias="startDate")
    end_date: date = Field(..., alias="endDate")

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _end_after_start(self):
        if self.end_date < self.start_date:
            raise ValueError("endDate must be on or after startDate")
        return self


class OverallRating(BaseModel):
    score: int = Field(..., ge=1, le=5)
    comments: Optional[str] = None


class DomainRating(BaseModel):
    domain: Domain
    score: int = Field(..., ge=1, le=5)
    comments: Optional[str] = None


class Recommendation(BaseModel):
    description: str = Field(..., min_length=1)
    priority: Priority


class ClinicalRatingCreate(BaseModel):
    patient_id: str = Field(..., alias="patient")
    evaluation_period: EvaluationPeriod = Field(..., alias="evaluationPeriod")
    overall_rating: OverallRating = Field(..., alias="overallRating")
    domain_ratings: list[DomainRating] = Field(default_factory=list, alias="domainRatings")
    recommendations: list[Recommendation] = Field(default_factory=list)
    status: RatingStatus = "draft"

    model_config = {"populate_by_name": True}


class ClinicalRatingUpdate(BaseModel):
    evaluation_period: Optional[EvaluationPeriod] = Field(None, alias="evaluationPeriod")
    overall_rating: Optional[OverallRating] = Field(None, alias="overallRating")
    domain_ratings: Optional[list[DomainRating]] = Field(None, alias="domainRatings")
    recommendations: Optional[list[Recommendation]] = None
    status: Optional[RatingStatus] = None

    model_config = {"populate_by_name": True}


class ClinicalRatingResponse(BaseModel):
    id: str
    patient_id: str = Field(..., alias="patientId")
    patient_name: Optional[str] = Field(None, alias="patientName")
    therapist_id: str = Field(..., alias="therapistId")
    therapist_name: Optional[str] = Field(None, alias="therapistName")
    evaluation_period: EvaluationPeriod = Field(..., alias="evaluationPeriod")
    overall_rating: OverallRating = Field(..., alias="overallRating")
    domain_ratings: list[DomainRating] = Field(default_factory=list, alias="domainRatings")
    recommendations: list[Recommendation] = Field(default_factory=list)
    status: str = "draft"
    created_at: str = Field("", alias="createdAt")
    updated_at: str = Field("", alias="updatedAt")

    model_config = {"populate_by_name": True}
