# principal: the authenticated actor behind a request
# therapist and supervisor are distinct variants so role checks dispatch on type

from dataclasses import dataclass
from typing import Optional

THERAPIST = "therapist"
SUPERVISOR = "supervisor"
ROLES = (THERAPIST, SUPERVISOR)


@dataclass(frozen=True)
class Principal:
    """an authenticated user whose role grants nothing"""

    id: str
    name: str = ""
    role: Optional[str] = None


@dataclass(frozen=True)
class Therapist(Principal):
    role: Optional[str] = THERAPIST


@dataclass(frozen=True)
class Supervisor(Principal):
    role: Optional[str] = SUPERVISOR


_VARIANTS = {
    THERAPIST: Therapist,
    SUPERVISOR: Supervisor,
}


def principal_from_user(user: dict) -> Principal:
    """build the principal variant for a user dict as returned by get_current_user"""
    role = user.get("role")
    variant = _VARIANTS.get(role)
    if variant is None:
        return Principal(id=user["id"], name=user.get("name", ""), role=role)
    return variant(id=user["id"], name=user.get("name", ""))
