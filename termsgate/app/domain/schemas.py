"""API I/O schemas."""
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .models import ActionOutcome, RequiredActionStatus, UserAccountRead


class UserCreate(BaseModel):
    username: str = Field(..., min_length=1)


class UserDetailOut(UserAccountRead):
    attributes: Dict[str, str] = Field(default_factory=dict)
    required_actions: List[str] = Field(default_factory=list)


class EvaluationOut(BaseModel):
    user_id: str
    status: RequiredActionStatus
    action_required: bool


class ProcessOut(BaseModel):
    user_id: str
    status: RequiredActionStatus
    outcome: Optional[ActionOutcome] = None
    required_actions: List[str] = Field(default_factory=list)
