"""
Credential checks for the login flow.

Soft-deleted users are invisible to the lookup, so they cannot log in.
"""
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import verify_password
from app.models.user import User
from app.repositories.users import UserRepository


async def authenticate_user(
    db: AsyncSession,
    *,
    email: str,
    password: str,
) -> Optional[User]:
    """Return the user when the password matches, otherwise None."""
    user = await UserRepository(db).find_by_email(email)
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user
