# shared enums for the clinical record collections

from enum import Enum


class EntityKind(str, Enum):
    """record classes guarded by the visibility filter"""

    PATIENT = "patient"
    THERAPY_PLAN = "therapy_plan"
    PROGRESS_REPORT = "progress_report"
    CLINICAL_RATING = "clinical_rating"

    @property
    def collection(self) -> str:
        return _COLLECTIONS[self]

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").capitalize()

    @property
    def reviewable(self) -> bool:
        """true for kinds that go through supervisor approval"""
        return self in (EntityKind.THERAPY_PLAN, EntityKind.PROGRESS_REPORT)


_COLLECTIONS = {
    EntityKind.PATIENT: "patients",
    EntityKind.THERAPY_PLAN: "therapy_plans",
    EntityKind.PROGRESS_REPORT: "progress_reports",
    EntityKind.CLINICAL_RATING: "clinical_ratings",
}


class ReviewStatus(str, Enum):
    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    REJECTED = "rejected"


# statuses in which the owning therapist may still edit content
EDITABLE_STATUSES = frozenset({ReviewStatus.DRAFT.value, ReviewStatus.REJECTED.value})
