from datetime import datetime, timezone, timedelta
import secrets
from typing import Optional
from jose import jwt, JWTError
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from passlib.context import CryptContext
from sqlalchemy.future import select
from app.db.session import get_db
from app.models.access_token import AccessToken
from app.models.user import User
from app.core.config import settings
from app.core.exceptions import AuthError

JWT_ALGORITHM = "HS256"

bearer_scheme = HTTPBearer(auto_error=False)


pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception:
        return False

def create_access_token(subject: str, jti: str, expires_minutes: int | None = None) -> str:
    expires = expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
    expire_dt = datetime.now(timezone.utc) + timedelta(minutes=expires)
    to_encode = {"sub": str(subject), "jti": jti, "exp": expire_dt}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=JWT_ALGORITHM)

def decode_access_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError:
        raise AuthError()
    if payload.get("sub") is None or payload.get("jti") is None:
        raise AuthError()
    return payload


async def issue_token(db: AsyncSession, user: User, expires_minutes: Optional[int] = None) -> str:
    """
    Persist a new token row for ``user`` and return the bearer string.

    Every login gets its own row, so tokens issued to other devices stay
    valid until they are revoked one by one.
    """
    expires = expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
    jti = secrets.token_hex(20)
    db.add(AccessToken(
        user_id=user.id,
        name=settings.TOKEN_NAME,
        jti=jti,
        expires_at=datetime.now(timezone.utc) + timedelta(minutes=expires),
    ))
    await db.flush()
    return create_access_token(str(user.id), jti, expires)


async def revoke_token(db: AsyncSession, token: AccessToken) -> None:
    await db.delete(token)
    await db.flush()


async def authenticate(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> AccessToken:
    """Resolve the presented bearer token or reject the request with 401."""
    if credentials is None:
        raise AuthError()

    payload = decode_access_token(credentials.credentials)
    res = await db.execute(select(AccessToken).where(AccessToken.jti == payload["jti"]))
    token = res.scalars().first()
    if token is None or str(token.user_id) != str(payload["sub"]):
        raise AuthError()
    if token.user is None or token.user.is_deleted:
        raise AuthError()

    token.last_used_at = datetime.now(timezone.utc)
    await db.commit()
    return token

async def get_current_user(token: AccessToken = Depends(authenticate)) -> User:
    return token.user
