"""
ContactKeeper Backend — Authentication Routes
===============================================

What:  GET /api/auth returns the logged-in user; POST /api/auth logs in.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from contactkeeper.database import get_db_session
from contactkeeper.schemas.common import ErrorResponse, ValidationErrorResponse
from contactkeeper.schemas.user import LoginRequest, TokenResponse, UserResponse
from contactkeeper.security import AuthenticatedUser, get_current_user
from contactkeeper.services.user_service import user_service

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.get(
    "",
    response_model=UserResponse,
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "User no longer exists", "model": ErrorResponse},
    },
    summary="Get the logged-in user",
)
async def get_logged_in_user(
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.get_user(db=db, current=user)


@router.post(
    "",
    response_model=TokenResponse,
    responses={400: {"description": "Invalid credentials", "model": ValidationErrorResponse}},
    summary="Log in and get a token",
)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    return await user_service.authenticate(db=db, payload=payload)
