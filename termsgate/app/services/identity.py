"""Identity store helpers: user attributes and pending required actions."""
from __future__ import annotations

from typing import Optional

from sqlmodel import Session, select

from ..domain.models import (
    USER_PRIVACY_ATTRIBUTE,
    USER_TERMS_ATTRIBUTE,
    UserAcceptanceRecord,
    UserAccount,
    UserAttribute,
    UserRequiredAction,
)


class IdentityStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def create_user(self, username: str) -> UserAccount:
        user = UserAccount(username=username)
        self.session.add(user)
        self.session.flush()
        self.session.refresh(user)
        return user

    def get_user(self, user_id: str) -> UserAccount | None:
        return self.session.get(UserAccount, user_id)

    def find_by_username(self, username: str) -> UserAccount | None:
        stmt = select(UserAccount).where(UserAccount.username == username)
        return self.session.exec(stmt).first()

    def get_attribute(self, user_id: str, name: str) -> Optional[str]:
        row = self._attribute_row(user_id, name)
        return row.value if row else None

    def set_attribute(self, user_id: str, name: str, value: str) -> None:
        row = self._attribute_row(user_id, name)
        if row:
            row.value = value
        else:
            row = UserAttribute(user_id=user_id, name=name, value=value)
        self.session.add(row)
        self.session.flush()

    def remove_attribute(self, user_id: str, name: str) -> None:
        row = self._attribute_row(user_id, name)
        if row:
            self.session.delete(row)
            self.session.flush()

    def attributes(self, user_id: str) -> dict[str, str]:
        stmt = (
            select(UserAttribute)
            .where(UserAttribute.user_id == user_id)
            .order_by(UserAttribute.name)
        )
        return {row.name: row.value for row in self.session.exec(stmt).all()}

    def acceptance_record(self, user_id: str) -> UserAcceptanceRecord:
        return UserAcceptanceRecord(
            accepted_tos_version=self.get_attribute(user_id, USER_TERMS_ATTRIBUTE),
            accepted_privacy_version=self.get_attribute(user_id, USER_PRIVACY_ATTRIBUTE),
        )

    def add_required_action(self, user_id: str, action: str) -> None:
        if self._action_row(user_id, action):
            return
        self.session.add(UserRequiredAction(user_id=user_id, action=action))
        self.session.flush()

    def remove_required_action(self, user_id: str, action: str) -> None:
        row = self._action_row(user_id, action)
        if row:
            self.session.delete(row)
            self.session.flush()

    def required_actions(self, user_id: str) -> list[str]:
        stmt = (
            select(UserRequiredAction.action)
            .where(UserRequiredAction.user_id == user_id)
            .order_by(UserRequiredAction.created_at, UserRequiredAction.action)
        )
        return list(self.session.exec(stmt).all())

    def _attribute_row(self, user_id: str, name: str) -> UserAttribute | None:
        stmt = select(UserAttribute).where(
            UserAttribute.user_id == user_id, UserAttribute.name == name
        )
        return self.session.exec(stmt).first()

    def _action_row(self, user_id: str, action: str) -> UserRequiredAction | None:
        stmt = select(UserRequiredAction).where(
            UserRequiredAction.user_id == user_id, UserRequiredAction.action == action
        )
        return self.session.exec(stmt).first()
