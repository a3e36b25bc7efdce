"""
ContactKeeper Backend — Contacts Route Handlers
=================================================

What:  CRUD endpoints for the caller's contacts under /api/contacts.
How:   Every route depends on get_current_user (401 without a valid token)
       and on a per-request database session, then delegates to ContactService.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from contactkeeper.database import get_db_session
from contactkeeper.schemas.common import (
    ErrorResponse,
    MessageResponse,
    ValidationErrorResponse,
)
from contactkeeper.schemas.contact import ContactCreate, ContactResponse, ContactUpdate
from contactkeeper.security import AuthenticatedUser, get_current_user
from contactkeeper.services.contact_service import contact_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/contacts", tags=["Contacts"])

_AUTH_ERRORS = {
    401: {"description": "Missing/invalid token or not the owner", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=List[ContactResponse],
    responses=_AUTH_ERRORS,
    summary="List the caller's contacts, newest first",
)
async def list_contacts(
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[ContactResponse]:
    return await contact_service.list_contacts(db=db, user=user)


@router.post(
    "",
    response_model=ContactResponse,
    responses={400: {"description": "Validation failed", "model": ValidationErrorResponse}, **_AUTH_ERRORS},
    summary="Create a contact owned by the caller",
)
async def create_contact(
    payload: ContactCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ContactResponse:
    """
    Create a contact. `name` is required; `email`, `phone` and `type` are
    optional. Any owner/user field in the body is ignored.
    """
    return await contact_service.create_contact(db=db, user=user, payload=payload)


@router.put(
    "/{contact_id}",
    response_model=ContactResponse,
    responses={
        400: {"description": "Validation failed", "model": ValidationErrorResponse},
        404: {"description": "Contact not found", "model": ErrorResponse},
        **_AUTH_ERRORS,
    },
    summary="Update some fields of a contact",
)
async def update_contact(
    contact_id: str,
    payload: ContactUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ContactResponse:
    """
    Partial update: only the fields present in the body change.

    `contact_id` is taken as a plain string so an unknown or malformed id
    is reported as 404 rather than a path validation error.
    """
    return await contact_service.update_contact(
        db=db, user=user, contact_id=contact_id, payload=payload,
    )


@router.delete(
    "/{contact_id}",
    response_model=MessageResponse,
    responses={404: {"description": "Contact not found", "model": ErrorResponse}, **_AUTH_ERRORS},
    summary="Delete a contact",
)
async def delete_contact(
    contact_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await contact_service.delete_contact(db=db, user=user, contact_id=contact_id)
