# ownership and visibility filter
# builds the mongodb predicate that limits which records a principal can read or change.
# pure functions, no database access

from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId

from app.models.common import EntityKind
from app.models.principal import Principal, Therapist, Supervisor

# field naming the owning therapist, per guarded kind
OWNER_FIELDS = {
    EntityKind.PATIENT: "therapist_id",
    EntityKind.THERAPY_PLAN: "therapist_id",
    EntityKind.PROGRESS_REPORT: "therapist_id",
    EntityKind.CLINICAL_RATING: "therapist_id",
}

# matches no document; used for unknown roles and malformed ids
DENY_ALL = {"_id": {"$in": []}}


def compute_filter(principal: Principal, kind: EntityKind) -> dict:
    """return the visibility predicate for a principal over one entity kind.

    therapists see only records they own, supervisors see everything,
    anything else sees nothing.
    """
    if isinstance(principal, Therapist):
        return {OWNER_FIELDS[kind]: principal.id}
    if isinstance(principal, Supervisor):
        return {}
    return dict(DENY_ALL)


def parse_object_id(record_id: str) -> Optional[ObjectId]:
    """convert a path id to an objectid, none when malformed"""
    if record_id is None:
        return None
    try:
        return ObjectId(record_id)
    except (InvalidId, TypeError):
        return None


def scoped_query(
    principal: Principal,
    kind: EntityKind,
    record_id: Optional[str] = None,
    **filters,
) -> dict:
    """AND the visibility predicate with an optional id and list filters.

    filters with a None value are dropped. a filter can never loosen
    the ownership key: if it names the owner field with a different value
    the query matches nothing.
    """
    query = compute_filter(principal, kind)
    if query == DENY_ALL:
        return query

    if record_id is not None:
        oid = parse_object_id(record_id)
        if oid is None:
            return dict(DENY_ALL)
        query["_id"] = oid

    for key, value in filters.items():
        if value is None:
            continue
        if key in query and query[key] != value:
            return dict(DENY_ALL)
        query[key] = value

    return query
