import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.schemas.auth import LoginIn, LogoutOut, TokenOut
from app.models.access_token import AccessToken
from app.db.session import get_db
from app.core.security import authenticate, issue_token, revoke_token
from app.core.exceptions import AuthError
from app.core.audit_log import log_audit
from app.core.enums import AuditAction
from app.core.metrics import login_attempts
from app.core.response_builders import build_user_response
from app.services.auth_service import authenticate_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

# mounted behind the authentication dependency in app.main
session_router = APIRouter(tags=["auth"])


@router.post("/login", response_model=TokenOut)
async def login(payload: LoginIn, db: AsyncSession = Depends(get_db)):
    user = await authenticate_user(db, email=payload.email, password=payload.password)
    if not user:
        login_attempts.labels(outcome="failure").inc()
        logger.warning(f"Failed login attempt for {payload.email}")
        raise AuthError("Invalid credentials")

    token = await issue_token(db, user)
    await log_audit(db, int(user.id), AuditAction.LOGIN, {"email": payload.email})
    await db.commit()
    login_attempts.labels(outcome="success").inc()

    return TokenOut(access_token=token, token_type="Bearer", user=build_user_response(user))


@session_router.post("/logout", response_model=LogoutOut)
async def logout(
    token: AccessToken = Depends(authenticate),
    db: AsyncSession = Depends(get_db),
):
    await log_audit(db, int(token.user_id), AuditAction.LOGOUT, {"token_id": token.id})
    await revoke_token(db, token)
    await db.commit()
    return LogoutOut(status=True, message="Logged out successfully.")
