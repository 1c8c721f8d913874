# auth router: signup, login, refresh, current user, profile update
# staff accounts only: therapists and supervisors

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from bson import ObjectId
from bson.errors import InvalidId

from app.models.user import UserCreate, UserLogin, TokenResponse, RefreshRequest, UserResponse, ProfileUpdate
from app.services.auth_service import hash_password, verify_password, issue_tokens, decode_token
from app.services.db import Database, get_db
from app.dependencies import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


def _doc_to_user(doc: dict) -> UserResponse:
    """map a users document (with id already stringified or not) to the api shape"""
    return UserResponse(
        id=doc.get("id") or str(doc["_id"]),
        email=doc.get("email", ""),
        name=doc.get("name", ""),
        role=doc.get("role", ""),
        specialization=doc.get("specialization", ""),
        experience=doc.get("experience", 0),
        createdAt=doc.get("created_at", ""),
    )


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def signup(body: UserCreate, db: Database = Depends(get_db)):
    """register a therapist or supervisor and sign them in"""
    email = body.email.strip().lower()
    existing = await db.users.find_one({"email": email})
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An account with this email already exists",
        )

    user_doc = {
        "email": email,
        "hashed_password": hash_password(body.password),
        "name": body.name,
        "role": body.role,
        "specialization": body.specialization,
        "experience": body.experience,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    result = await db.users.insert_one(user_doc)
    user_id = str(result.inserted_id)
    logger.info(f"Registered {body.role} {user_id}")

    return TokenResponse(**issue_tokens(user_id, body.role))


@router.post("/login", response_model=TokenResponse)
async def login(body: UserLogin, db: Database = Depends(get_db)):
    """exchange email + password for tokens"""
    user = await db.users.find_one({"email": body.email.strip().lower()})
    if not user or not user.get("hashed_password") or not verify_password(body.password, user["hashed_password"]):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    return TokenResponse(**issue_tokens(str(user["_id"]), user.get("role", "")))


@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest, db: Database = Depends(get_db)):
    """issue a new token pair from a valid refresh token"""
    payload = decode_token(body.refresh_token)
    if payload is None or payload.get("type") != "refresh" or not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token",
        )

    try:
        user = await db.users.find_one({"_id": ObjectId(payload["sub"])})
    except InvalidId:
        user = None

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    return TokenResponse(**issue_tokens(str(user["_id"]), user.get("role", "")))


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: dict = Depends(get_current_user)):
    """return the authenticated user's profile"""
    return _doc_to_user(current_user)


@router.patch("/profile", response_model=UserResponse)
async def update_profile(
    body: ProfileUpdate,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """update name, specialization, or years of experience"""
    updates = body.model_dump(exclude_unset=True, exclude_none=True)
    if not updates:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields to update",
        )

    await db.users.update_one({"_id": ObjectId(current_user["id"])}, {"$set": updates})
    logger.info(f"Profile updated for user {current_user['id']}: {sorted(updates)}")

    return _doc_to_user({**current_user, **updates})
