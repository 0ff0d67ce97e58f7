"""User and identity-store routes."""
from fastapi import APIRouter, Depends, HTTPException, status

from ..deps import current_user, identity_store
from ..domain.models import UserAccount
from ..domain.schemas import UserCreate, UserDetailOut
from ..services.identity import IdentityStore

router = APIRouter()


def _detail(user: UserAccount, identity: IdentityStore) -> UserDetailOut:
    return UserDetailOut(
        id=user.id,
        username=user.username,
        created_at=user.created_at,
        attributes=identity.attributes(user.id),
        required_actions=identity.required_actions(user.id),
    )


@router.post("/", response_model=UserDetailOut, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, identity: IdentityStore = Depends(identity_store)):
    if identity.find_by_username(payload.username):
        raise HTTPException(status_code=400, detail="User already exists")
    user = identity.create_user(payload.username)
    return _detail(user, identity)


@router.get("/{user_id}", response_model=UserDetailOut)
def get_user(
    user: UserAccount = Depends(current_user),
    identity: IdentityStore = Depends(identity_store),
):
    return _detail(user, identity)
