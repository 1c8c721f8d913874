# approval state machine for therapy plans and progress reports
# decides whether a requested status change is legal and what it writes.
# pure: takes the stored document and the principal, returns an outcome or an error
# instance, never raises and never touches the database

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Callable, Optional, Union

from app.errors import Forbidden, InvalidTransition, ValidationFailed, WorkflowError
from app.models.common import EntityKind, ReviewStatus
from app.models.principal import Principal, Therapist, Supervisor

DRAFT = ReviewStatus.DRAFT.value
PENDING_APPROVAL = ReviewStatus.PENDING_APPROVAL.value
APPROVED = ReviewStatus.APPROVED.value
REJECTED = ReviewStatus.REJECTED.value

STATUSES = (DRAFT, PENDING_APPROVAL, APPROVED, REJECTED)


@dataclass(frozen=True)
class TransitionRule:
    role: type
    owner_only: bool = False
    validate_content: bool = False
    requires_feedback: bool = False
    review: bool = False


# the legal transitions; anything not listed here is rejected
TRANSITIONS: dict[tuple[str, str], TransitionRule] = {
    (DRAFT, PENDING_APPROVAL): TransitionRule(Therapist, owner_only=True, validate_content=True),
    (PENDING_APPROVAL, APPROVED): TransitionRule(Supervisor, review=True),
    (PENDING_APPROVAL, REJECTED): TransitionRule(Supervisor, review=True, requires_feedback=True),
    (REJECTED, DRAFT): TransitionRule(Therapist, owner_only=True),
    (REJECTED, PENDING_APPROVAL): TransitionRule(Therapist, owner_only=True, validate_content=True),
}

TERMINAL_STATUSES = frozenset(
    s for s in STATUSES if not any(src == s for src, _ in TRANSITIONS)
)


@dataclass(frozen=True)
class TransitionOutcome:
    """a legal transition and the fields to persist for it"""

    from_status: str
    status: str
    changes: dict = field(default_factory=dict)


TransitionResult = Union[TransitionOutcome, WorkflowError]


def allowed_targets(current_status: str, principal: Principal) -> set[str]:
    """statuses this principal could move a record to from current_status"""
    return {
        to for (src, to), rule in TRANSITIONS.items()
        if src == current_status and isinstance(principal, rule.role)
    }


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES


# content checks


def _as_date(value) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def _has_entries(values) -> bool:
    return bool(values) and any(str(v).strip() for v in values)


def check_date_order(start, end, start_field: str, end_field: str) -> Optional[ValidationFailed]:
    """end must not come before start"""
    start_d, end_d = _as_date(start), _as_date(end)
    if start_d is None:
        return ValidationFailed(start_field, "Start date is required")
    if end_d is None:
        return ValidationFailed(end_field, "End date is required")
    if end_d < start_d:
        return ValidationFailed(end_field, "End date must be on or after the start date")
    return None


def _check_plan(plan: dict) -> Optional[ValidationFailed]:
    if not plan.get("goals"):
        return ValidationFailed("goals", "At least one goal is required before submitting")
    if not plan.get("activities"):
        return ValidationFailed("activities", "At least one activity is required before submitting")
    return check_date_order(plan.get("start_date"), plan.get("end_date"), "startDate", "endDate")


def _check_report(report: dict) -> Optional[ValidationFailed]:
    session = report.get("session_details") or {}
    if _as_date(session.get("date")) is None:
        return ValidationFailed("sessionDetails.date", "Session date is required")
    if not session.get("duration"):
        return ValidationFailed("sessionDetails.duration", "Session duration is required")
    if not session.get("type"):
        return ValidationFailed("sessionDetails.type", "Session type is required")

    progress = report.get("progress") or {}
    for key in ("goals", "achievements", "challenges"):
        if not _has_entries(progress.get(key)):
            return ValidationFailed(f"progress.{key}", f"At least one entry in progress {key} is required")

    if not _has_entries(report.get("next_steps")):
        return ValidationFailed("nextSteps", "At least one next step is required")
    return None


CONTENT_CHECKS: dict[EntityKind, Callable[[dict], Optional[ValidationFailed]]] = {
    EntityKind.THERAPY_PLAN: _check_plan,
    EntityKind.PROGRESS_REPORT: _check_report,
}


def check_submittable(kind: EntityKind, entity: dict) -> Optional[ValidationFailed]:
    """run the content checks a record must pass to enter pending_approval"""
    return CONTENT_CHECKS[kind](entity)


# transition decision


def attempt_transition(
    kind: EntityKind,
    entity: dict,
    requested_status: str,
    principal: Principal,
    feedback: Optional[str] = None,
    at: Optional[datetime] = None,
) -> TransitionResult:
    """decide a status change for a plan or report.

    the checks run in a fixed order so callers can tell the failures apart:
    an unknown (from, to) pair is InvalidTransition whoever asks, a known pair
    requested by the wrong role or a non-owner is Forbidden, and a permitted
    request that fails its preconditions is ValidationFailed.
    """
    current = entity.get("status", DRAFT)
    if not kind.reviewable:
        return InvalidTransition(current, requested_status)

    rule = TRANSITIONS.get((current, requested_status))
    if rule is None:
        return InvalidTransition(current, requested_status)

    if not isinstance(principal, rule.role):
        return Forbidden(f"Only a {rule.role.__name__.lower()} can move a record from {current} to {requested_status}")

    if rule.owner_only and entity.get("therapist_id") != principal.id:
        return Forbidden()

    note = feedback.strip() if isinstance(feedback, str) else None
    if rule.requires_feedback and not note:
        return ValidationFailed("feedback", "Feedback is required when rejecting")

    if rule.validate_content:
        problem = check_submittable(kind, entity)
        if problem is not None:
            return problem

    timestamp = (at or datetime.now(timezone.utc)).isoformat()
    changes = {"status": requested_status, "updated_at": timestamp}
    if requested_status == PENDING_APPROVAL:
        changes["submitted_at"] = timestamp
    if rule.review:
        changes["supervisor_feedback"] = note or None
        changes["reviewed_by"] = principal.id
        changes["reviewed_at"] = timestamp

    return TransitionOutcome(from_status=current, status=requested_status, changes=changes)
