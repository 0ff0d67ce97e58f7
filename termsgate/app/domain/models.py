"""Domain models shared between the gate, the API and persistence layers."""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, StrictStr
from sqlalchemy import UniqueConstraint
from sqlmodel import Field as SQLField, SQLModel

PROVIDER_ID = "EXTERNAL_TERMS_AND_CONDITIONS"
DELETE_ACCOUNT_ACTION = "delete_account"

USER_TERMS_ATTRIBUTE = "agreed_tos"
USER_PRIVACY_ATTRIBUTE = "agreed_privacy"

FORM_TOS_URL_ATTRIBUTE = "tos_url"
FORM_PRIVACY_URL_ATTRIBUTE = "privacy_url"
FORM_CANCEL_FIELD = "cancel"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PolicyType(str, Enum):
    TOS = "tos"
    PRIVACY = "privacy"


class ActionOutcome(str, Enum):
    ACCEPTED = "accepted"
    CANCELLED_TO_DELETION = "cancelled_to_deletion"


class RequiredActionStatus(str, Enum):
    """Lifecycle states of one required-action interaction."""

    IDLE = "idle"
    FETCHING = "fetching"
    SATISFIED = "satisfied"
    TRIGGERED = "triggered"
    CHALLENGING = "challenging"
    AWAITING_SUBMISSION = "awaiting_submission"
    COMPLETED = "completed"
    REDIRECTED = "redirected"
    FAILED = "failed"


class PolicyDescriptor(BaseModel):
    """Latest published policy versions, as served by the descriptor endpoint."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    tos_version: StrictStr = Field(alias="tos")
    privacy_version: StrictStr = Field(alias="privacy")


class UserAcceptanceRecord(BaseModel):
    """Versions a user has previously agreed to; ``None`` means never."""

    model_config = ConfigDict(frozen=True)

    accepted_tos_version: Optional[str] = None
    accepted_privacy_version: Optional[str] = None


class ChallengeContext(BaseModel):
    """View-model for one render of the accept / cancel form."""

    model_config = ConfigDict(frozen=True)

    tos_url: str
    privacy_url: str
    tos_version: str
    privacy_version: str

    def form_attributes(self) -> dict[str, str]:
        return {
            FORM_TOS_URL_ATTRIBUTE: self.tos_url,
            FORM_PRIVACY_URL_ATTRIBUTE: self.privacy_url,
            USER_TERMS_ATTRIBUTE: self.tos_version,
            USER_PRIVACY_ATTRIBUTE: self.privacy_version,
        }


class UserAccount(SQLModel, table=True):
    """User row owned by the host identity store."""

    __tablename__ = "users"

    id: str = SQLField(default_factory=lambda: str(uuid4()), primary_key=True, index=True)
    username: str = SQLField(index=True, unique=True)
    created_at: datetime = SQLField(default_factory=_utcnow, nullable=False)


class UserAttribute(SQLModel, table=True):
    """Single-valued named attribute attached to a user."""

    __tablename__ = "user_attributes"
    __table_args__ = (UniqueConstraint("user_id", "name"),)

    id: str = SQLField(default_factory=lambda: str(uuid4()), primary_key=True)
    user_id: str = SQLField(foreign_key="users.id", index=True)
    name: str
    value: str


class UserRequiredAction(SQLModel, table=True):
    """Pending required action the user must satisfy before the session proceeds."""

    __tablename__ = "user_required_actions"
    __table_args__ = (UniqueConstraint("user_id", "action"),)

    id: str = SQLField(default_factory=lambda: str(uuid4()), primary_key=True)
    user_id: str = SQLField(foreign_key="users.id", index=True)
    action: str
    created_at: datetime = SQLField(default_factory=_utcnow, nullable=False)


class UserAccountRead(BaseModel):
    id: str
    username: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
