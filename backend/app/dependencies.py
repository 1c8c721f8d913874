# fastapi dependency injection
# provides get_current_user, the request principal, role checks, and the workflow service

import logging
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from bson import ObjectId
from bson.errors import InvalidId

from app.errors import Forbidden, Unauthenticated
from app.models.principal import Principal, principal_from_user
from app.services.auth_service import decode_token
from app.services.db import Database, get_db
from app.services.workflow import WorkflowService

logger = logging.getLogger(__name__)

# missing credentials are reported as 401 by get_current_user, not 403 by the scheme
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Database = Depends(get_db),
) -> dict:
    """extract and validate the current user from the jwt bearer token"""
    if credentials is None:
        raise Unauthenticated()

    payload = decode_token(credentials.credentials)

    if payload is None:
        raise Unauthenticated("Invalid or expired token")

    if payload.get("type") != "access":
        raise Unauthenticated("Invalid token type")

    user_id = payload.get("sub")
    if not user_id:
        raise Unauthenticated("Token missing subject")

    # fetch user from database
    try:
        user = await db.users.find_one({"_id": ObjectId(user_id)})
    except InvalidId:
        user = None

    if not user:
        raise Unauthenticated("User not found")

    # convert _id to string
    user["id"] = str(user["_id"])
    del user["_id"]
    user.pop("hashed_password", None)
    return user


async def get_principal(current_user: dict = Depends(get_current_user)) -> Principal:
    """the immutable principal for this request"""
    return principal_from_user(current_user)


def require_role(role: str):
    """factory for role-based access control dependency"""

    async def role_checker(principal: Principal = Depends(get_principal)) -> Principal:
        if principal.role != role:
            raise Forbidden(f"Access denied. Required role: {role}")
        return principal

    return role_checker


async def get_workflow(db: Database = Depends(get_db)) -> WorkflowService:
    return WorkflowService(db)
