from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from app.adapters.users.base import AbstractUserRepository
from app.core.auth import Principal, require_principal
from app.core.rate_limit import enforce_rate_limit
from app.schemas.users import UserCreate, UserListResponse, UserQuery, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Users"], dependencies=[Depends(enforce_rate_limit)])


def get_user_repository(request: Request) -> AbstractUserRepository:
    """Return the repository owned by the application serving ``request``."""
    return request.app.state.user_repository


@router.get("/users", response_model=UserListResponse)
async def list_users(
    query: Annotated[UserQuery, Query()],
    principal: Annotated[Principal, Depends(require_principal)],
    repository: Annotated[AbstractUserRepository, Depends(get_user_repository)],
) -> UserListResponse:
    """List users, optionally filtered by exact id and/or email.

    Rate limited per client, then authenticated via X-API-Key.
    """
    users = repository.find(user_id=query.id, email=query.email)
    logger.info(
        "users.listed",
        extra={"principal_id": principal.id, "count": len(users)},
    )
    return UserListResponse(users=users)


async def read_user_create(request: Request) -> UserCreate:
    """Parse the create-user body.

    Runs after rate limiting and auth. The route declares no body parameter,
    so FastAPI never parses the body ahead of those dependencies.

    Raises:
        RequestValidationError: 400 when the body is not valid JSON or fails
            schema validation.
    """
    try:
        return UserCreate.model_validate_json(await request.body())
    except ValidationError as exc:
        raise RequestValidationError(
            [{**err, "loc": ("body", *err["loc"])} for err in exc.errors(include_url=False)]
        ) from exc


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": UserCreate.model_json_schema()}},
        },
    },
)
async def create_user(
    principal: Annotated[Principal, Depends(require_principal)],
    payload: Annotated[UserCreate, Depends(read_user_create)],
    repository: Annotated[AbstractUserRepository, Depends(get_user_repository)],
) -> UserResponse:
    """Create a user from a validated body.

    Raises:
        ConflictAppError: 409 when the email is already registered.
    """
    user = repository.create(email=payload.email, name=payload.name)
    logger.info(
        "users.created",
        extra={"principal_id": principal.id, "user_id": str(user.id)},
    )
    return UserResponse(user=user)
