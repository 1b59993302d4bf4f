"""Accounts: sign-up, credential checks, profile edits and host promotion."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from stayfinder.auth.passwords import hash_password, verify_password
from stayfinder.exceptions import ConflictError
from stayfinder.models.user import User
from stayfinder.schemas.auth import ProfileUpdate, RegisterRequest

logger = logging.getLogger(__name__)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def register_user(db: AsyncSession, data: RegisterRequest) -> User:
    """Create a guest or host account.

    Raises:
        ConflictError: the email is already registered.
    """
    if await get_user_by_email(db, data.email) is not None:
        raise ConflictError("Email already registered")

    user = User(
        email=data.email,
        hashed_password=hash_password(data.password),
        name=data.name,
        phone=data.phone,
        role=data.role,
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError:
        raise ConflictError("Email already registered") from None
    await db.refresh(user)

    logger.info("Registered %s account %s", user.role, user.id)
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User | None:
    """The account matching the credentials, or None. Inactive accounts are returned too."""
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.hashed_password):
        return None
    return user


async def update_profile(db: AsyncSession, user: User, changes: ProfileUpdate) -> User:
    for field, value in changes.model_dump(exclude_unset=True).items():
        setattr(user, field, value)
    await db.flush()
    await db.refresh(user)
    return user


async def promote_to_host(db: AsyncSession, user: User) -> User:
    """Turn a guest into a host. Hosts and admins are left as they are."""
    if user.role != "guest":
        return user
    user.role = "host"
    await db.flush()
    await db.refresh(user)
    logger.info("Account %s is now a host", user.id)
    return user
