# patients router: list, retrieve, create, update, and delete patients
# therapists manage the patients they own; supervisors can read every patient

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from app.config import settings
from app.models.common import EntityKind
from app.models.patient import PatientCreate, PatientUpdate, PatientResponse
from app.models.principal import Principal
from app.services.workflow import WorkflowService
from app.dependencies import get_principal, get_workflow

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/patients", tags=["patients"])

KIND = EntityKind.PATIENT


def _doc_to_patient(doc: dict) -> PatientResponse:
    """map a populated patients document to the api shape"""
    return PatientResponse(
        id=str(doc["_id"]),
        therapistId=doc.get("therapist_id", ""),
        therapistName=doc.get("therapist_name"),
        name=doc.get("name", ""),
        age=doc.get("age", 0),
        gender=doc.get("gender", "other"),
        contactNumber=doc.get("contact_number", ""),
        email=doc.get("email"),
        address=doc.get("address"),
        medicalHistory=doc.get("medical_history", ""),
        diagnosis=doc.get("diagnosis", ""),
        status=doc.get("status", "active"),
        totalSessions=doc.get("total_sessions", 0),
        lastSessionDate=doc.get("last_session_date"),
        createdAt=doc.get("created_at", ""),
        updatedAt=doc.get("updated_at", ""),
    )


@router.get("", response_model=list[PatientResponse])
async def list_patients(
    patient_status: Optional[Literal["active", "completed", "discontinued"]] = Query(None, alias="status"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    skip: int = Query(0, ge=0),
    principal: Principal = Depends(get_principal),
    workflow: WorkflowService = Depends(get_workflow),
):
    """therapists see their own patients, supervisors see all"""
    docs = await workflow.list_records(principal, KIND, status=patient_status, skip=skip, limit=limit)
    return [_doc_to_patient(doc) for doc in docs]


@router.post("", response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
async def create_patient(
    body: PatientCreate,
    principal: Principal = Depends(get_principal),
    workflow: WorkflowService = Depends(get_workflow),
):
    """create a patient owned by the calling therapist"""
    doc = await workflow.create_record(principal, KIND, body.model_dump(mode="json"))
    return _doc_to_patient(doc)


@router.get("/{patient_id}", response_model=PatientResponse)
async def get_patient(
    patient_id: str,
    principal: Principal = Depends(get_principal),
    workflow: WorkflowService = Depends(get_workflow),
):
    doc = await workflow.get_record(principal, KIND, patient_id)
    return _doc_to_patient(doc)


@router.put("/{patient_id}", response_model=PatientResponse)
async def update_patient(
    patient_id: str,
    body: PatientUpdate,
    principal: Principal = Depends(get_principal),
    workflow: WorkflowService = Depends(get_workflow),
):
    """partial update of a patient the caller owns"""
    changes = body.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    doc = await workflow.update_record(principal, KIND, patient_id, changes)
    return _doc_to_patient(doc)


@router.delete("/{patient_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_patient(
    patient_id: str,
    principal: Principal = Depends(get_principal),
    workflow: WorkflowService = Depends(get_workflow),
):
    await workflow.delete_record(principal, KIND, patient_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
