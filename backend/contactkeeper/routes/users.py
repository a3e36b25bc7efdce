"""
ContactKeeper Backend — User Registration Route
=================================================

What:  POST /api/users registers an account and returns a bearer token.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from contactkeeper.database import get_db_session
from contactkeeper.schemas.common import ErrorResponse, ValidationErrorResponse
from contactkeeper.schemas.user import TokenResponse, UserCreate
from contactkeeper.services.user_service import user_service

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.post(
    "",
    response_model=TokenResponse,
    responses={
        400: {"description": "Invalid input or user already exists", "model": ValidationErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Register a user",
)
async def register_user(
    payload: UserCreate,
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    return await user_service.register(db=db, payload=payload)
