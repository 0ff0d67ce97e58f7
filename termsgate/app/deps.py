"""Dependency injection utilities."""
from collections.abc import Generator

from fastapi import Depends, HTTPException, Request
from sqlmodel import Session

from .domain.models import UserAccount
from .infra.db import get_session
from .services.identity import IdentityStore
from .services.required_action import ExternalTermsProvider


def db_session() -> Generator[Session, None, None]:
    """Provide a scoped DB session to FastAPI endpoints."""
    with get_session() as session:
        yield session


def identity_store(session: Session = Depends(db_session)) -> IdentityStore:
    return IdentityStore(session)


def terms_provider(request: Request) -> ExternalTermsProvider:
    """The process-wide provider created during application startup."""
    return request.app.state.terms_provider


def current_user(user_id: str, identity: IdentityStore = Depends(identity_store)) -> UserAccount:
    user = identity.get_user(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
