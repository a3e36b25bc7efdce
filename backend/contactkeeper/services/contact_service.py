"""
ContactKeeper Backend — Contact Service (Business Logic)
=========================================================

What:  List, create, update and delete contacts on behalf of their owner.
How:   Receives the per-request session and the caller identity, applies
       the ownership rules, and returns response models.
Who:   Called by the /api/contacts route handlers.

Ownership guard (update and delete):
    1. Fetch the contact by id           → NotFoundError (404) if absent
    2. Compare its owner with the caller → AuthorizationError (401)
    3. Act on exactly the fetched record

    Existence is always checked first: a caller probing an id that does not
    exist sees 404, never 401.

Error Handling:
    Application errors propagate unchanged. Any other failure from the
    database layer is logged and re-raised as DatabaseError (generic 500).
    Nothing is retried.
"""

import logging
import uuid
from typing import List

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from contactkeeper.exceptions import (
    AuthorizationError,
    ContactKeeperError,
    DatabaseError,
    NotFoundError,
)
from contactkeeper.models.contact import Contact
from contactkeeper.schemas.common import MessageResponse
from contactkeeper.schemas.contact import ContactCreate, ContactResponse, ContactUpdate
from contactkeeper.security import AuthenticatedUser

logger = logging.getLogger(__name__)


def _parse_contact_id(contact_id: str) -> uuid.UUID:
    """A malformed id cannot name a stored contact, so it is reported as 404."""
    try:
        return uuid.UUID(contact_id)
    except (ValueError, TypeError):
        raise NotFoundError(resource="Contact", resource_id=str(contact_id)) from None


class ContactService:
    """
    Business logic layer for contact operations.

    Stateless: every method receives the session and the caller.
    """

    async def list_contacts(
        self,
        db: AsyncSession,
        user: AuthenticatedUser,
    ) -> List[ContactResponse]:
        """
        All contacts owned by the caller, newest first.

        Query plan:
            SELECT * FROM contacts WHERE owner = :user ORDER BY created_at DESC
            → idx_contacts_owner_created_at
        """
        try:
            result = await db.execute(
                select(Contact)
                .where(Contact.owner == user.id)
                .order_by(desc(Contact.created_at))
            )
            contacts = result.scalars().all()
            return [ContactResponse.model_validate(c) for c in contacts]

        except Exception as e:
            logger.error("Database error listing contacts for %s: %s", user.id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve contacts.",
                context={"user_id": str(user.id), "error_type": type(e).__name__},
            ) from e

    async def create_contact(
        self,
        db: AsyncSession,
        user: AuthenticatedUser,
        payload: ContactCreate,
    ) -> ContactResponse:
        """
        Persist a new contact owned by the caller.

        The payload has already been validated (non-empty name). The owner
        always comes from the caller identity; ContactCreate has no owner
        field, so a client cannot set it.
        """
        try:
            contact = Contact(
                owner=user.id,
                name=payload.name,
                email=payload.email,
                phone=payload.phone,
                type=payload.type,
            )
            db.add(contact)
            await db.commit()
            logger.info("Contact %s created by %s", contact.id, user.id)
            return ContactResponse.model_validate(contact)

        except Exception as e:
            logger.error("Database error creating contact for %s: %s", user.id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the contact.",
                context={"user_id": str(user.id), "error_type": type(e).__name__},
            ) from e

    async def update_contact(
        self,
        db: AsyncSession,
        user: AuthenticatedUser,
        contact_id: str,
        payload: ContactUpdate,
    ) -> ContactResponse:
        """
        Apply the supplied fields to a contact the caller owns.

        Only fields present in the request body change; everything else
        keeps its stored value.

        Raises:
            NotFoundError: No contact with that id (→ 404)
            AuthorizationError: Contact belongs to someone else (→ 401)
            DatabaseError: Query or commit failed (→ 500)
        """
        try:
            contact = await self._get_owned_contact(db, user, contact_id)

            changes = payload.changes()
            for field, value in changes.items():
                setattr(contact, field, value)

            await db.commit()
            await db.refresh(contact)
            logger.info("Contact %s updated by %s (%s)", contact.id, user.id, ", ".join(sorted(changes)))
            return ContactResponse.model_validate(contact)

        except ContactKeeperError:
            raise
        except Exception as e:
            logger.error("Database error updating contact %s: %s", contact_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the contact.",
                context={"contact_id": str(contact_id), "error_type": type(e).__name__},
            ) from e

    async def delete_contact(
        self,
        db: AsyncSession,
        user: AuthenticatedUser,
        contact_id: str,
    ) -> MessageResponse:
        """
        Remove a contact the caller owns. Hard delete.

        Raises:
            NotFoundError: No contact with that id (→ 404)
            AuthorizationError: Contact belongs to someone else (→ 401)
            DatabaseError: Query or commit failed (→ 500)
        """
        try:
            contact = await self._get_owned_contact(db, user, contact_id)
            await db.delete(contact)
            await db.commit()
            logger.info("Contact %s removed by %s", contact.id, user.id)
            return MessageResponse(msg="Contact removed")

        except ContactKeeperError:
            raise
        except Exception as e:
            logger.error("Database error deleting contact %s: %s", contact_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the contact.",
                context={"contact_id": str(contact_id), "error_type": type(e).__name__},
            ) from e

    async def _get_owned_contact(
        self,
        db: AsyncSession,
        user: AuthenticatedUser,
        contact_id: str,
    ) -> Contact:
        """Existence check, then ownership check. Order matters."""
        contact_uuid = _parse_contact_id(contact_id)

        result = await db.execute(select(Contact).where(Contact.id == contact_uuid))
        contact = result.scalar_one_or_none()
        if contact is None:
            raise NotFoundError(resource="Contact", resource_id=str(contact_uuid))

        if contact.owner != user.id:
            logger.warning(
                "User %s attempted to modify contact %s owned by %s",
                user.id, contact.id, contact.owner,
            )
            raise AuthorizationError(
                context={"contact_id": str(contact.id), "user_id": str(user.id)},
            )
        return contact


# ── Singleton Instance ────────────────────────────────────────────────────
contact_service = ContactService()
