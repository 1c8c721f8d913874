# progress reports router: crud plus the submit/approve/reject review endpoints
# same review lifecycle as therapy plans

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from app.config import settings
from app.models.common import EntityKind, ReviewStatus
from app.models.principal import Principal, THERAPIST, SUPERVISOR
from app.models.progress_report import ProgressReportCreate, ProgressReportUpdate, ProgressReportResponse
from app.models.review import StatusChange, ReviewFeedback, ReviewStatusValue
from app.services.approval import allowed_targets
from app.services.workflow import WorkflowService
from app.dependencies import get_principal, get_workflow, require_role

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/progress-reports", tags=["progress-reports"])

KIND = EntityKind.PROGRESS_REPORT


def _doc_to_report(doc: dict, principal: Principal) -> ProgressReportResponse:
    report_status = doc.get("status", ReviewStatus.DRAFT.value)
    return ProgressReportResponse(
        id=str(doc["_id"]),
        patientId=doc.get("patient_id", ""),
        patientName=doc.get("patient_name"),
        therapistId=doc.get("therapist_id", ""),
        therapistName=doc.get("therapist_name"),
        therapyPlanId=doc.get("therapy_plan_id"),
        sessionDetails=doc.get("session_details"),
        progress=doc.get("progress") or {},
        nextSteps=doc.get("next_steps", []),
        observations=doc.get("observations"),
        recommendations=doc.get("recommendations"),
        status=report_status,
        supervisorFeedback=doc.get("supervisor_feedback"),
        submittedAt=doc.get("submitted_at"),
        reviewedBy=doc.get("reviewed_by"),
        reviewedAt=doc.get("reviewed_at"),
        allowedTransitions=sorted(allowed_targets(report_status, principal)),
        createdAt=doc.get("created_at", ""),
        updatedAt=doc.get("updated_at", ""),
    )


@router.get("", response_model=list[ProgressReportResponse])
async def list_progress_reports(
    patient: Optional[str] = Query(None, description="filter by patient id"),
    report_status: Optional[ReviewStatusValue] = Query(None, alias="status"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    skip: int = Query(0, ge=0),
    principal: Principal = Depends(get_principal),
    workflow: WorkflowService = Depends(get_workflow),
):
    docs = await workflow.list_records(
        principal, KIND, patient=patient, status=report_status, skip=skip, limit=limit,
    )
    return [_doc_to_report(doc, principal) for doc in docs]


@router.post("", response_model=ProgressReportResponse, status_code=status.HTTP_201_CREATED)
async def create_progress_report(
    body: ProgressReportCreate,
    principal: Principal = Depends(get_principal),
    workflow: WorkflowService = Depends(get_workflow),
):
    """create a draft report owned by the calling therapist"""
    doc = await workflow.create_record(principal, KIND, body.model_dump(mode="json"))
    return _doc_to_report(doc, principal)


@router.get("/{report_id}", response_model=ProgressReportResponse)
async def get_progress_report(
    report_id: str,
    principal: Principal = Depends(get_principal),
    workflow: WorkflowService = Depends(get_workflow),
):
    doc = await workflow.get_record(principal, KIND, report_id)
    return _doc_to_report(doc, principal)


@router.put("/{report_id}", response_model=ProgressReportResponse)
async def update_progress_report(
    report_id: str,
    body: ProgressReportUpdate,
    principal: Principal = Depends(get_principal),
    workflow: WorkflowService = Depends(get_workflow),
):
    changes = body.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    doc = await workflow.update_record(principal, KIND, report_id, changes)
    return _doc_to_report(doc, principal)


@router.delete("/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_progress_report(
    report_id: str,
    principal: Principal = Depends(get_principal),
    workflow: WorkflowService = Depends(get_workflow),
):
    await workflow.delete_record(principal, KIND, report_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# review


@router.post("/{report_id}/submit", response_model=ProgressReportResponse)
async def submit_progress_report(
    report_id: str,
    principal: Principal = Depends(require_role(THERAPIST)),
    workflow: WorkflowService = Depends(get_workflow),
):
    doc = await workflow.transition(principal, KIND, report_id, ReviewStatus.PENDING_APPROVAL.value)
    return _doc_to_report(doc, principal)


@router.put("/{report_id}/approve", response_model=ProgressReportResponse)
async def approve_progress_report(
    report_id: str,
    body: Optional[ReviewFeedback] = None,
    principal: Principal = Depends(require_role(SUPERVISOR)),
    workflow: WorkflowService = Depends(get_workflow),
):
    feedback = body.feedback if body else None
    doc = await workflow.transition(principal, KIND, report_id, ReviewStatus.APPROVED.value, feedback)
    return _doc_to_report(doc, principal)


@router.put("/{report_id}/reject", response_model=ProgressReportResponse)
async def reject_progress_report(
    report_id: str,
    body: Optional[ReviewFeedback] = None,
    principal: Principal = Depends(require_role(SUPERVISOR)),
    workflow: WorkflowService = Depends(get_workflow),
):
    feedback = body.feedback if body else None
    doc = await workflow.transition(principal, KIND, report_id, ReviewStatus.REJECTED.value, feedback)
    return _doc_to_report(doc, principal)


@router.put("/{report_id}/status", response_model=ProgressReportResponse)
async def change_progress_report_status(
    report_id: str,
    body: StatusChange,
    principal: Principal = Depends(get_principal),
    workflow: WorkflowService = Depends(get_workflow),
):
    doc = await workflow.transition(principal, KIND, report_id, body.status, body.feedback)
    return _doc_to_report(doc, principal)
