# users router: staff directory and supervisor picker
# never returns password hashes

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query

from app.models.user import UserResponse
from app.models.principal import SUPERVISOR
from app.routers.auth import _doc_to_user
from app.services.db import Database, get_db
from app.dependencies import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users", tags=["users"])

PUBLIC_FIELDS = {"hashed_password": 0}


@router.get("", response_model=list[UserResponse])
async def list_users(
    role: Optional[Literal["therapist", "supervisor"]] = Query(None, description="filter by role"),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """list staff, optionally filtered by role, sorted by name"""
    query = {"role": role} if role else {}
    cursor = db.users.find(query, PUBLIC_FIELDS).sort("name", 1)
    users = []
    async for doc in cursor:
        users.append(_doc_to_user(doc))
    return users


@router.get("/supervisors", response_model=list[UserResponse])
async def list_supervisors(
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """supervisors a therapist can assign as plan reviewer"""
    cursor = db.users.find({"role": SUPERVISOR}, PUBLIC_FIELDS).sort("name", 1)
    supervisors = []
    async for doc in cursor:
        supervisors.append(_doc_to_user(doc))
    return supervisors
