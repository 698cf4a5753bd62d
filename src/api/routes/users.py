"""User resource routes.

- GET /users: List users (newest first, skip/limit pagination, country/email filters)
- POST /users: Create user, returns its id
- PATCH|PUT /users/{id}: Partially update user, returns the updated user
- DELETE /users/{id}: Delete user

Request bodies are bound by FastAPI before these handlers run; binding
failures are rendered as 400 by the app-level handler in ``api.main``.
Every other failure is logged here with its cause and answered with a fixed
per-operation message.

Handlers are plain ``def`` so each request runs on its own worker thread.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from api.dependencies import get_password_hasher, get_request_timeout, get_user_repo
from api.models import (
    CreateUserResponse,
    ErrorResponse,
    UserCreateRequest,
    UserListResponse,
    UserResponse,
    UserUpdateRequest,
)
from domain.model.errors import DomainError, HashingError
from domain.model.user import UNSET
from port.password_hasher import PasswordHasher
from port.user_repository import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

ERR_PARSE_BODY = "failed to parse request body"
ERR_GET_USERS = "failed to get users"
ERR_CREATE_USER = "failed to create user"
ERR_ENCRYPT_PASSWORD = "failed to encrypt password"
ERR_UPDATE_USER = "failed to update user"
ERR_DELETE_USER = "failed to delete user"

MAX_PAGE_SIZE = 100

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _hash_password(hasher: PasswordHasher, password: str) -> str:
    try:
        return hasher.hash(password)
    except HashingError as e:
        logger.error(ERR_ENCRYPT_PASSWORD, extra={"error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=ERR_ENCRYPT_PASSWORD,
        )


@router.get("", response_model=UserListResponse, responses=_ERROR_RESPONSES)
def list_users(
    page: int = Query(default=0, ge=0, description="Number of matching users to skip"),
    limit: int = Query(default=10, ge=1, le=MAX_PAGE_SIZE, description="Maximum number of users returned"),
    country: Optional[str] = Query(default=None, description="Only users from this country"),
    email: Optional[str] = Query(default=None, description="Only users with this email"),
    repo: UserRepository = Depends(get_user_repo),
    timeout: Optional[float] = Depends(get_request_timeout),
):
    """List users ordered by creation time, newest first."""
    try:
        users = repo.list(page=page, limit=limit, country=country, email=email, timeout=timeout)
    except DomainError as e:
        logger.error(ERR_GET_USERS, extra={"page": page, "limit": limit, "error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=ERR_GET_USERS,
        )

    return UserListResponse(users=[UserResponse.from_domain(u) for u in users])


@router.post(
    "",
    response_model=CreateUserResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERROR_RESPONSES,
)
def create_user(
    request: UserCreateRequest,
    repo: UserRepository = Depends(get_user_repo),
    hasher: PasswordHasher = Depends(get_password_hasher),
    timeout: Optional[float] = Depends(get_request_timeout),
):
    """Create a user and return only its identifier."""
    password_hash = _hash_password(hasher, request.password)

    try:
        user_id = repo.create(request.to_domain(password_hash), timeout=timeout)
    except DomainError as e:
        logger.error(ERR_CREATE_USER, extra={"error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=ERR_CREATE_USER,
        )

    logger.info("User registered", extra={"userId": user_id})
    return CreateUserResponse(id=user_id)


@router.api_route(
    "/{user_id}",
    methods=["PATCH", "PUT"],
    response_model=UserResponse,
    responses=_ERROR_RESPONSES,
)
def update_user(
    user_id: str,
    request: UserUpdateRequest,
    repo: UserRepository = Depends(get_user_repo),
    hasher: PasswordHasher = Depends(get_password_hasher),
    timeout: Optional[float] = Depends(get_request_timeout),
):
    """Apply a partial update. An empty or missing password is left untouched."""
    patch = request.to_domain()
    if request.password:
        patch = patch.with_password(_hash_password(hasher, request.password))
    else:
        patch = patch.with_password(UNSET)

    try:
        user = repo.update(user_id, patch, timeout=timeout)
    except DomainError as e:
        logger.error(ERR_UPDATE_USER, extra={"userId": user_id, "error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=ERR_UPDATE_USER,
        )

    return UserResponse.from_domain(user)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=_ERROR_RESPONSES,
)
def delete_user(
    user_id: str,
    repo: UserRepository = Depends(get_user_repo),
    timeout: Optional[float] = Depends(get_request_timeout),
):
    """Delete a user."""
    try:
        repo.delete(user_id, timeout=timeout)
    except DomainError as e:
        logger.error(ERR_DELETE_USER, extra={"userId": user_id, "error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=ERR_DELETE_USER,
        )

    return Response(status_code=status.HTTP_204_NO_CONTENT)
