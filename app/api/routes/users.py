import uuid

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_current_user, require_capability, require_db
from app.core.policy import Capability, ensure_self_or_capability, restrict_user_changes
from app.cqrs.commands import users as users_commands
from app.cqrs.queries import users as users_queries
from app.models.schemas import OperationResult, PaginatedUsers, PasswordChange, UserOut, UserUpdate

router = APIRouter(prefix="/users", tags=["users"])

can_manage = require_capability(Capability.USERS_MANAGE)


@router.get("", response_model=PaginatedUsers, dependencies=[Depends(can_manage)])
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=users_queries.MAX_USERS_PAGE),
):
    require_db()
    return users_queries.list_users_paginated(page, limit)


@router.put("/profile", response_model=UserOut)
def update_profile(payload: UserUpdate, user: dict = Depends(get_current_user)):
    require_db()
    changes = restrict_user_changes(user, payload.model_dump(exclude_unset=True), strict=False)
    return users_commands.update_user(uuid.UUID(user["id"]), changes)


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: uuid.UUID, user: dict = Depends(get_current_user)):
    ensure_self_or_capability(user, str(user_id), Capability.USERS_MANAGE)
    require_db()
    return users_queries.get_user(user_id)


@router.put("/{user_id}", response_model=UserOut)
def update_user(user_id: uuid.UUID, payload: UserUpdate, user: dict = Depends(get_current_user)):
    ensure_self_or_capability(user, str(user_id), Capability.USERS_MANAGE)
    changes = restrict_user_changes(user, payload.model_dump(exclude_unset=True))
    require_db()
    return users_commands.update_user(user_id, changes)


@router.delete("/{user_id}", response_model=OperationResult)
def delete_user(user_id: uuid.UUID, user: dict = Depends(can_manage)):
    require_db()
    return users_commands.delete_user(user_id, user["id"])


@router.post("/{user_id}/change-password", response_model=OperationResult)
def change_password(
    user_id: uuid.UUID, payload: PasswordChange, user: dict = Depends(get_current_user)
):
    ensure_self_or_capability(user, str(user_id), Capability.USERS_MANAGE)
    require_db()
    return users_commands.change_password(
        user_id, payload.current_password, payload.new_password
    )
