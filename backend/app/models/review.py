# review models: status change and supervisor feedback payloads

from typing import Optional, Literal
from pydantic import BaseModel, Field

ReviewStatusValue = Literal["draft", "pending_approval", "approved", "rejected"]


class StatusChange(BaseModel):
    status: ReviewStatusValue
    feedback: Optional[str] = Field(None, max_length=5000)


class ReviewFeedback(BaseModel):
    """body for approve/reject; emptiness on reject is checked by the state machine"""
    feedback: Optional[str] = Field(None, max_length=5000)
