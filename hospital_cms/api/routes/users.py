"""User CRUD."""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status

from hospital_cms.api.dependencies import Pagination, get_user_repository
from hospital_cms.api.errors import APIError, store_errors
from hospital_cms.api.models import DocumentPage, SuccessResponse, UserCreate, UserUpdate
from hospital_cms.repositories import UserRepository

router = APIRouter(tags=["Users"])


@router.get("/users", response_model=DocumentPage)
def list_users(
    pagination: Pagination = Depends(),
    search: Optional[str] = Query(None, description="Full-text search on name"),
    users: UserRepository = Depends(get_user_repository),
):
    with store_errors("Failed to fetch users"):
        return users.list(pagination.limit, pagination.offset, search or None)


@router.post("/users", status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    users: UserRepository = Depends(get_user_repository),
) -> Dict[str, Any]:
    with store_errors("Failed to create user"):
        return users.create(payload.to_document())


@router.get("/users/{user_id}")
def get_user(
    user_id: str,
    users: UserRepository = Depends(get_user_repository),
) -> Dict[str, Any]:
    with store_errors("Failed to fetch user", resource="User"):
        return users.get(user_id)


@router.put("/users/{user_id}")
def update_user(
    user_id: str,
    payload: UserUpdate,
    users: UserRepository = Depends(get_user_repository),
) -> Dict[str, Any]:
    data = payload.to_document()
    if not data:
        raise APIError(400, "No fields to update", code="EMPTY_UPDATE")

    with store_errors("Failed to update user", resource="User"):
        return users.update(user_id, data)


@router.delete("/users/{user_id}", response_model=SuccessResponse)
def delete_user(
    user_id: str,
    users: UserRepository = Depends(get_user_repository),
):
    with store_errors("Failed to delete user", resource="User"):
        users.delete(user_id)
    return SuccessResponse()
