"""
ContactKeeper Backend — User Service
======================================

What:  Registration, login and current-user lookup.
How:   Stores Argon2 password hashes; issues JWTs via contactkeeper.security.
Who:   Called by the /api/users and /api/auth route handlers.

Login failures use one message for "unknown email" and "wrong password" so
the response does not reveal which accounts exist.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from contactkeeper.exceptions import (
    ContactKeeperError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from contactkeeper.models.user import User
from contactkeeper.schemas.user import LoginRequest, TokenResponse, UserCreate, UserResponse
from contactkeeper.security import (
    AuthenticatedUser,
    create_access_token,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)


class UserService:
    """Business logic for accounts and credentials."""

    async def register(self, db: AsyncSession, payload: UserCreate) -> TokenResponse:
        """
        Create an account and return a token for it.

        Raises:
            ValidationError: Email already registered (→ 400)
            DatabaseError: Query or commit failed (→ 500)
        """
        try:
            existing = await self._find_by_email(db, payload.email)
            if existing is not None:
                raise ValidationError(message="User already exists", field="email")

            user = User(
                name=payload.name,
                email=payload.email,
                password=hash_password(payload.password),
            )
            db.add(user)
            await db.commit()
            logger.info("User %s registered", user.id)
            return TokenResponse(token=create_access_token(user.id))

        except ContactKeeperError:
            raise
        except IntegrityError:
            # Lost a race with a concurrent registration of the same email
            await db.rollback()
            raise ValidationError(message="User already exists", field="email") from None
        except Exception as e:
            logger.error("Database error registering user: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not register the user.",
                context={"error_type": type(e).__name__},
            ) from e

    async def authenticate(self, db: AsyncSession, payload: LoginRequest) -> TokenResponse:
        """
        Check credentials and return a fresh token.

        Raises:
            ValidationError: "Invalid Credentials" (→ 400)
            DatabaseError: Query failed (→ 500)
        """
        try:
            user = await self._find_by_email(db, payload.email)
        except Exception as e:
            logger.error("Database error during login: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not log in.",
                context={"error_type": type(e).__name__},
            ) from e

        if user is None or not verify_password(payload.password, user.password):
            logger.info("Failed login attempt for %s", payload.email)
            raise ValidationError(message="Invalid Credentials")

        return TokenResponse(token=create_access_token(user.id))

    async def get_user(self, db: AsyncSession, current: AuthenticatedUser) -> UserResponse:
        """
        The account behind the caller's token, without the password hash.

        Raises:
            NotFoundError: The account was deleted after the token was issued (→ 404)
        """
        try:
            user = await db.get(User, current.id)
        except Exception as e:
            logger.error("Database error fetching user %s: %s", current.id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve the user.",
                context={"user_id": str(current.id)},
            ) from e

        if user is None:
            raise NotFoundError(resource="User", resource_id=str(current.id))
        return UserResponse.model_validate(user)

    async def _find_by_email(self, db: AsyncSession, email: str) -> User | None:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()


user_service = UserService()
