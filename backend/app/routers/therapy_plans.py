# therapy plans router: crud plus the submit/approve/reject review endpoints
# therapists author plans; supervisors review them

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from app.config import settings
from app.models.common import EntityKind, ReviewStatus
from app.models.principal import Principal, THERAPIST, SUPERVISOR
from app.models.review import StatusChange, ReviewFeedback, ReviewStatusValue
from app.models.therapy_plan import TherapyPlanCreate, TherapyPlanUpdate, TherapyPlanResponse
from app.services.approval import allowed_targets
from app.services.workflow import WorkflowService
from app.dependencies import get_principal, get_workflow, require_role

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/therapy-plans", tags=["therapy-plans"])

KIND = EntityKind.THERAPY_PLAN


def _doc_to_plan(doc: dict, principal: Principal) -> TherapyPlanResponse:
    """map a populated therapy_plans document to the api shape"""
    plan_status = doc.get("status", ReviewStatus.DRAFT.value)
    return TherapyPlanResponse(
        id=str(doc["_id"]),
        patientId=doc.get("patient_id", ""),
        patientName=doc.get("patient_name"),
        therapistId=doc.get("therapist_id", ""),
        therapistName=doc.get("therapist_name"),
        supervisorId=doc.get("supervisor_id"),
        supervisorName=doc.get("supervisor_name"),
        goals=doc.get("goals", []),
        activities=doc.get("activities", []),
        startDate=doc.get("start_date", ""),
        endDate=doc.get("end_date", ""),
        notes=doc.get("notes"),
        status=plan_status,
        supervisorFeedback=doc.get("supervisor_feedback"),
        submittedAt=doc.get("submitted_at"),
        reviewedBy=doc.get("reviewed_by"),
        reviewedAt=doc.get("reviewed_at"),
        allowedTransitions=sorted(allowed_targets(plan_status, principal)),
        createdAt=doc.get("created_at", ""),
        updatedAt=doc.get("updated_at", ""),
    )


@router.get("", response_model=list[TherapyPlanResponse])
async def list_therapy_plans(
    patient: Optional[str] = Query(None, description="filter by patient id"),
    plan_status: Optional[ReviewStatusValue] = Query(None, alias="status"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    skip: int = Query(0, ge=0),
    principal: Principal = Depends(get_principal),
    workflow: WorkflowService = Depends(get_workflow),
):
    """therapists see their own plans; supervisors see all, e.g. ?status=pending_approval"""
    docs = await workflow.list_records(
        principal, KIND, patient=patient, status=plan_status, skip=skip, limit=limit,
    )
    return [_doc_to_plan(doc, principal) for doc in docs]


@router.post("", response_model=TherapyPlanResponse, status_code=status.HTTP_201_CREATED)
async def create_therapy_plan(
    body: TherapyPlanCreate,
    principal: Principal = Depends(get_principal),
    workflow: WorkflowService = Depends(get_workflow),
):
    """create a draft plan owned by the calling therapist"""
    doc = await workflow.create_record(principal, KIND, body.model_dump(mode="json"))
    return _doc_to_plan(doc, principal)


@router.get("/{plan_id}", response_model=TherapyPlanResponse)
async def get_therapy_plan(
    plan_id: str,
    principal: Principal = Depends(get_principal),
    workflow: WorkflowService = Depends(get_workflow),
):
    doc = await workflow.get_record(principal, KIND, plan_id)
    return _doc_to_plan(doc, principal)


@router.put("/{plan_id}", response_model=TherapyPlanResponse)
async def update_therapy_plan(
    plan_id: str,
    body: TherapyPlanUpdate,
    principal: Principal = Depends(get_principal),
    workflow: WorkflowService = Depends(get_workflow),
):
    """edit content of a draft or rejected plan; status is not accepted here"""
    changes = body.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    doc = await workflow.update_record(principal, KIND, plan_id, changes)
    return _doc_to_plan(doc, principal)


@router.delete("/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_therapy_plan(
    plan_id: str,
    principal: Principal = Depends(get_principal),
    workflow: WorkflowService = Depends(get_workflow),
):
    await workflow.delete_record(principal, KIND, plan_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# review


@router.post("/{plan_id}/submit", response_model=TherapyPlanResponse)
async def submit_therapy_plan(
    plan_id: str,
    principal: Principal = Depends(require_role(THERAPIST)),
    workflow: WorkflowService = Depends(get_workflow),
):
    """send a draft or rejected plan to the supervisor"""
    doc = await workflow.transition(principal, KIND, plan_id, ReviewStatus.PENDING_APPROVAL.value)
    return _doc_to_plan(doc, principal)


@router.put("/{plan_id}/approve", response_model=TherapyPlanResponse)
async def approve_therapy_plan(
    plan_id: str,
    body: Optional[ReviewFeedback] = None,
    principal: Principal = Depends(require_role(SUPERVISOR)),
    workflow: WorkflowService = Depends(get_workflow),
):
    feedback = body.feedback if body else None
    doc = await workflow.transition(principal, KIND, plan_id, ReviewStatus.APPROVED.value, feedback)
    return _doc_to_plan(doc, principal)


@router.put("/{plan_id}/reject", response_model=TherapyPlanResponse)
async def reject_therapy_plan(
    plan_id: str,
    body: Optional[ReviewFeedback] = None,
    principal: Principal = Depends(require_role(SUPERVISOR)),
    workflow: WorkflowService = Depends(get_workflow),
):
    """reject with feedback; empty feedback is a 400 on the feedback field"""
    feedback = body.feedback if body else None
    doc = await workflow.transition(principal, KIND, plan_id, ReviewStatus.REJECTED.value, feedback)
    return _doc_to_plan(doc, principal)


@router.put("/{plan_id}/status", response_model=TherapyPlanResponse)
async def change_therapy_plan_status(
    plan_id: str,
    body: StatusChange,
    principal: Principal = Depends(get_principal),
    workflow: WorkflowService = Depends(get_workflow),
):
    """generic transition; the state machine decides role and legality"""
    doc = await workflow.transition(principal, KIND, plan_id, body.status, body.feedback)
    return _doc_to_plan(doc, principal)
