# workflow service: applies the visibility filter and the approval state machine
# against the store. the only place that raises workflow errors and the only
# place that writes patients, plans, reports, and ratings

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Optional

from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from app.config import settings
from app.errors import Conflict, Forbidden, NotFound, StoreFailure, ValidationFailed, WorkflowError
from app.models.common import EDITABLE_STATUSES, EntityKind, ReviewStatus
from app.models.principal import Principal, Therapist, SUPERVISOR
from app.services.approval import attempt_transition, check_date_order
from app.services.db import Database
from app.services.visibility import parse_object_id, scoped_query

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@contextmanager
def store_errors(action: str):
    """turn driver failures into a StoreFailure without leaking detail"""
    try:
        yield
    except PyMongoError as e:
        logger.exception(f"Store failure during {action}")
        raise StoreFailure(f"Store failure: {e}" if settings.is_development else None) from e


class WorkflowService:
    """list/get/create/update/delete and status transitions for the clinical records"""

    def __init__(self, db: Database):
        self.db = db

    def _collection(self, kind: EntityKind):
        return self.db.collection(kind.collection)

    @staticmethod
    def _require_therapist(principal: Principal, action: str, kind: EntityKind):
        if not isinstance(principal, Therapist):
            raise Forbidden(f"Only therapists can {action} {kind.label.lower()}s")

    async def _load(self, principal: Principal, kind: EntityKind, record_id: str) -> dict:
        query = scoped_query(principal, kind, record_id)
        with store_errors(f"{kind.value} lookup"):
            doc = await self._collection(kind).find_one(query)
        if not doc:
            raise NotFound(f"{kind.label} not found")
        return doc

    # reads

    async def list_records(
        self,
        principal: Principal,
        kind: EntityKind,
        patient: Optional[str] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = settings.DEFAULT_PAGE_SIZE,
    ) -> list[dict]:
        """visible records, newest first. patient and status narrow the result"""
        filters = {"status": status}
        if kind != EntityKind.PATIENT:
            filters["patient_id"] = patient
        query = scoped_query(principal, kind, **filters)

        docs = []
        with store_errors(f"{kind.value} list"):
            cursor = self._collection(kind).find(query).sort("created_at", -1).skip(skip).limit(limit)
            async for doc in cursor:
                docs.append(doc)
            return await self._populate(docs)

    async def get_record(self, principal: Principal, kind: EntityKind, record_id: str) -> dict:
        doc = await self._load(principal, kind, record_id)
        with store_errors(f"{kind.value} populate"):
            populated = await self._populate([doc])
        return populated[0]

    # writes

    async def create_record(self, principal: Principal, kind: EntityKind, payload: dict) -> dict:
        """insert a record owned by the caller. reviewable records start as draft"""
        self._require_therapist(principal, "create", kind)
        doc = dict(payload)
        await self._check_references(principal, kind, doc)

        now = _now()
        doc["therapist_id"] = principal.id
        doc["created_at"] = now
        doc["updated_at"] = now
        if kind.reviewable:
            doc["status"] = ReviewStatus.DRAFT.value
            doc["supervisor_feedback"] = None

        with store_errors(f"{kind.value} create"):
            result = await self._collection(kind).insert_one(doc)
            doc["_id"] = result.inserted_id
            populated = await self._populate([doc])

        logger.info(f"{kind.label} {doc['_id']} created by therapist {principal.id}")
        return populated[0]

    async def update_record(self, principal: Principal, kind: EntityKind, record_id: str, changes: dict) -> dict:
        """merge content fields into a visible record owned by the caller.

        plans and reports are only editable while draft or rejected; the write
        is conditioned on the status that was read so a concurrent transition
        turns this into a Conflict rather than an edit of a submitted record.
        """
        self._require_therapist(principal, "update", kind)
        current = await self._load(principal, kind, record_id)

        status = current.get("status")
        if kind.reviewable and status not in EDITABLE_STATUSES:
            raise Conflict(f"{kind.label} is {status} and can no longer be edited")

        if not changes:
            return await self.get_record(principal, kind, record_id)

        if kind == EntityKind.THERAPY_PLAN and ("start_date" in changes or "end_date" in changes):
            merged = {**current, **changes}
            problem = check_date_order(merged.get("start_date"), merged.get("end_date"), "startDate", "endDate")
            if problem is not None:
                raise problem

        await self._check_references(principal, kind, changes, current)

        guard = {"_id": current["_id"], "therapist_id": principal.id}
        if kind.reviewable:
            guard["status"] = status

        update = dict(changes)
        update["updated_at"] = _now()
        with store_errors(f"{kind.value} update"):
            updated = await self._collection(kind).find_one_and_update(
                guard, {"$set": update}, return_document=ReturnDocument.AFTER,
            )
        if updated is None:
            raise Conflict()

        logger.info(f"{kind.label} {record_id} updated by therapist {principal.id}")
        with store_errors(f"{kind.value} populate"):
            populated = await self._populate([updated])
        return populated[0]

    async def transition(
        self,
        principal: Principal,
        kind: EntityKind,
        record_id: str,
        requested_status: str,
        feedback: Optional[str] = None,
    ) -> dict:
        """move a plan or report to requested_status via the approval state machine"""
        current = await self._load(principal, kind, record_id)

        result = attempt_transition(kind, current, requested_status, principal, feedback)
        if isinstance(result, WorkflowError):
            logger.warning(
                f"{kind.label} {record_id}: {current.get('status')} -> {requested_status} "
                f"refused for {principal.role} {principal.id}: {result.message}"
            )
            raise result

        # compare-and-set on the status we decided from
        guard = {"_id": current["_id"], "status": result.from_status}
        with store_errors(f"{kind.value} transition"):
            updated = await self._collection(kind).find_one_and_update(
                guard, {"$set": result.changes}, return_document=ReturnDocument.AFTER,
            )
        if updated is None:
            logger.warning(f"{kind.label} {record_id}: lost race on {result.from_status} -> {result.status}")
            raise Conflict()

        logger.info(
            f"{kind.label} {record_id}: {result.from_status} -> {result.status} by {principal.role} {principal.id}"
        )
        with store_errors(f"{kind.value} populate"):
            populated = await self._populate([updated])
        return populated[0]

    async def delete_record(self, principal: Principal, kind: EntityKind, record_id: str) -> None:
        """remove a visible record owned by the caller; approved records are kept"""
        self._require_therapist(principal, "delete", kind)
        current = await self._load(principal, kind, record_id)

        guard = {"_id": current["_id"], "therapist_id": principal.id}
        if kind.reviewable:
            status = current.get("status")
            if status == ReviewStatus.APPROVED.value:
                raise Conflict(f"Approved {kind.label.lower()}s cannot be deleted")
            guard["status"] = status

        with store_errors(f"{kind.value} delete"):
            result = await self._collection(kind).delete_one(guard)
        if result.deleted_count == 0:
            raise Conflict()

        logger.info(f"{kind.label} {record_id} deleted by therapist {principal.id}")

    # references

    async def _check_references(
        self,
        principal: Principal,
        kind: EntityKind,
        fields: dict,
        current: Optional[dict] = None,
    ):
        """referenced patient, supervisor, and plan must exist and be visible to the caller"""
        if kind == EntityKind.PATIENT:
            return

        with store_errors("reference lookup"):
            if "patient_id" in fields:
                query = scoped_query(principal, EntityKind.PATIENT, fields["patient_id"])
                if not await self.db.patients.find_one(query):
                    raise ValidationFailed("patient", "Patient not found")

            if fields.get("supervisor_id") is not None:
                oid = parse_object_id(fields["supervisor_id"])
                supervisor = None
                if oid is not None:
                    supervisor = await self.db.users.find_one({"_id": oid, "role": SUPERVISOR})
                if not supervisor:
                    raise ValidationFailed("supervisor", "Supervisor not found")

            if fields.get("therapy_plan_id") is not None:
                query = scoped_query(principal, EntityKind.THERAPY_PLAN, fields["therapy_plan_id"])
                plan = await self.db.therapy_plans.find_one(query)
                patient_id = fields.get("patient_id") or (current or {}).get("patient_id")
                if not plan or plan.get("patient_id") != patient_id:
                    raise ValidationFailed("therapyPlan", "Therapy plan not found for this patient")

    # read-side population

    async def _populate(self, docs: list[dict]) -> list[dict]:
        """copy docs and attach patient_name, therapist_name, supervisor_name"""
        patient_oids = {parse_object_id(d["patient_id"]) for d in docs if d.get("patient_id")}
        user_oids = set()
        for d in docs:
            for key in ("therapist_id", "supervisor_id"):
                if d.get(key):
                    user_oids.add(parse_object_id(d[key]))
        patient_oids.discard(None)
        user_oids.discard(None)

        patient_names = {}
        if patient_oids:
            async for p in self.db.patients.find({"_id": {"$in": list(patient_oids)}}, {"name": 1}):
                patient_names[str(p["_id"])] = p.get("name")

        user_names = {}
        if user_oids:
            async for u in self.db.users.find({"_id": {"$in": list(user_oids)}}, {"name": 1}):
                user_names[str(u["_id"])] = u.get("name")

        populated = []
        for d in docs:
            out = dict(d)
            if "patient_id" in d:
                out["patient_name"] = patient_names.get(d["patient_id"])
            out["therapist_name"] = user_names.get(d.get("therapist_id"))
            if "supervisor_id" in d:
                out["supervisor_name"] = user_names.get(d["supervisor_id"])
            populated.append(out)
        return populated
