# clinical ratings router: list, retrieve, create, update, and delete ratings
# ratings are published by their therapist directly, no supervisor review

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from app.config import settings
from app.models.common import EntityKind
from app.models.principal import Principal
from app.models.rating import ClinicalRatingCreate, ClinicalRatingUpdate, ClinicalRatingResponse
from app.services.workflow import WorkflowService
from app.dependencies import get_principal, get_workflow

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/ratings", tags=["ratings"])

KIND = EntityKind.CLINICAL_RATING


def _doc_to_rating(doc: dict) -> ClinicalRatingResponse:
    return ClinicalRatingResponse(
        id=str(doc["_id"]),
        patientId=doc.get("patient_id", ""),
        patientName=doc.get("patient_name"),
        therapistId=doc.get("therapist_id", ""),
        therapistName=doc.get("therapist_name"),
        evaluationPeriod=doc.get("evaluation_period"),
        overallRating=doc.get("overall_rating"),
        domainRatings=doc.get("domain_ratings", []),
        recommendations=doc.get("recommendations", []),
        status=doc.get("status", "draft"),
        createdAt=doc.get("created_at", ""),
        updatedAt=doc.get("updated_at", ""),
    )


@router.get("", response_model=list[ClinicalRatingResponse])
async def list_ratings(
    patient: Optional[str] = Query(None, description="filter by patient id"),
    rating_status: Optional[Literal["draft", "published", "archived"]] = Query(None, alias="status"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    skip: int = Query(0, ge=0),
    principal: Principal = Depends(get_principal),
    workflow: WorkflowService = Depends(get_workflow),
):
    docs = await workflow.list_records(
        principal, KIND, patient=patient, status=rating_status, skip=skip, limit=limit,
    )
    return [_doc_to_rating(doc) for doc in docs]


@router.post("", response_model=ClinicalRatingResponse, status_code=status.HTTP_201_CREATED)
async def create_rating(
    body: ClinicalRatingCreate,
    principal: Principal = Depends(get_principal),
    workflow: WorkflowService = Depends(get_workflow),
):
    doc = await workflow.create_record(principal, KIND, body.model_dump(mode="json"))
    return _doc_to_rating(doc)


@router.get("/{rating_id}", response_model=ClinicalRatingResponse)
async def get_rating(
    rating_id: str,
    principal: Principal = Depends(get_principal),
    workflow: WorkflowService = Depends(get_workflow),
):
    doc = await workflow.get_record(principal, KIND, rating_id)
    return _doc_to_rating(doc)


@router.put("/{rating_id}", response_model=ClinicalRatingResponse)
async def update_rating(
    rating_id: str,
    body: ClinicalRatingUpdate,
    principal: Principal = Depends(get_principal),
    workflow: WorkflowService = Depends(get_workflow),
):
    """partial update, including moving between draft, published, and archived"""
    changes = body.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    doc = await workflow.update_record(principal, KIND, rating_id, changes)
    return _doc_to_rating(doc)


@router.delete("/{rating_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_rating(
    rating_id: str,
    principal: Principal = Depends(get_principal),
    workflow: WorkflowService = Depends(get_workflow),
):
    await workflow.delete_record(principal, KIND, rating_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
