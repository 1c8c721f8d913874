# user models: auth, token, and profile schemas
# users are clinic staff: therapists and supervisors

from typing import Optional, Literal
from pydantic import BaseModel, Field


# auth

class UserCreate(BaseModel):
    email: str = Field(..., description="user email address")
    password: str = Field(..., min_length=8, description="plaintext password (min 8 chars)")
    name: str = Field(..., min_length=1, description="full name")
    role: Literal["therapist", "supervisor"] = Field(..., description="user role")
    specialization: str = Field(..., min_length=1, description="clinical specialization")
    experience: int = Field(..., ge=0, le=70, description="years of experience")


class UserLogin(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    access_token: str = Field(..., alias="accessToken")
    refresh_token: str = Field(..., alias="refreshToken")
    token_type: str = "bearer"

    model_config = {"populate_by_name": True}


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., alias="refreshToken")

    model_config = {"populate_by_name": True}


# user responses

class UserResponse(BaseModel):
    id: str
    email: str
    name: str
    role: str
    specialization: str = ""
    experience: int = 0
    created_at: str = Field("", alias="createdAt")

    model_config = {"populate_by_name": True}


# profile update

class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, description="full name")
    specialization: Optional[str] = Field(None, min_length=1)
    experience: Optional[int] = Field(None, ge=0, le=70)
