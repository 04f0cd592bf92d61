import logging
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.audit_log import log_audit
from app.core.config import settings
from app.core.enums import AuditAction
from app.core.exceptions import NotFoundError, StoreError, ValidationError
from app.core.metrics import users_inserted
from app.core.response_builders import build_user_page, format_validation_errors
from app.core.security import hash_password
from app.models.user import User
from app.repositories.users import UserRepository
from app.schemas.user import UserCreate, UserPage, UserUpdate

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "The email has already been taken."


def check_not_found(user: Optional[User]) -> User:
    if user is None:
        raise NotFoundError("User")
    return user


async def list_users(
    db: AsyncSession,
    search: Optional[str],
    page: int,
    path: str,
) -> UserPage:
    per_page = settings.USERS_PER_PAGE
    users, total = await UserRepository(db).search(search, page, per_page)
    return build_user_page(users, total, page, per_page, path, search)


async def validate_batch(
    repo: UserRepository,
    records: Sequence[Dict[str, Any]],
) -> List[UserCreate]:
    """
    Check every record and raise one ValidationError carrying all failures.

    Errors are keyed by the record's index in the batch. An email is rejected
    when it is already stored or when an earlier record of the same batch
    claims it.
    """
    errors: Dict[str, Dict[str, List[str]]] = {}
    valid: List[UserCreate] = []

    for index, record in enumerate(records):
        try:
            valid.append(UserCreate.model_validate(record))
        except PydanticValidationError as exc:
            errors[str(index)] = format_validation_errors(exc.errors())

    candidates = [
        (index, record["email"].strip())
        for index, record in enumerate(records)
        if isinstance(record.get("email"), str)
        and "email" not in errors.get(str(index), {})
    ]
    existing = await repo.existing_emails(email for _, email in candidates)

    seen = set()
    for index, email in candidates:
        key = email.lower()
        if key in existing or key in seen:
            errors.setdefault(str(index), {}).setdefault("email", []).append(EMAIL_TAKEN)
        seen.add(key)

    if errors:
        ordered = {key: errors[key] for key in sorted(errors, key=int)}
        raise ValidationError(ordered, "Validation failed for some records.")
    return valid


async def bulk_create(
    db: AsyncSession,
    current_user: User,
    records: Sequence[Dict[str, Any]],
) -> int:
    repo = UserRepository(db)
    users = await validate_batch(repo, records)

    rows = [
        {
            "name": user.name,
            "email": str(user.email),
            "role": user.role,
            "password_hash": hash_password(user.password),
        }
        for user in users
    ]

    try:
        inserted = await repo.insert_many(rows)
        await log_audit(db, current_user.id, AuditAction.CREATE_USERS, list(records))
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"User insertion error: {e}")
        raise StoreError("Failed to insert users.", str(e))

    users_inserted.inc(inserted)
    return inserted


async def update_user(
    db: AsyncSession,
    current_user: User,
    user_id: int,
    payload: UserUpdate,
) -> User:
    repo = UserRepository(db)
    user = check_not_found(await repo.find_by_id(user_id))

    fields = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "password" in fields:
        fields["password_hash"] = hash_password(fields.pop("password"))

    try:
        await repo.update_fields(user, fields)
        await log_audit(db, current_user.id, AuditAction.UPDATE_USER, payload, resource_id=user_id)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"User update error for id {user_id}: {e}")
        raise StoreError("Failed to update user.", str(e))
    return user


async def soft_delete_user(db: AsyncSession, current_user: User, user_id: int) -> None:
    repo = UserRepository(db)
    user = check_not_found(await repo.find_by_id(user_id))

    await repo.soft_delete(user)
    await log_audit(db, current_user.id, AuditAction.DELETE_USER, resource_id=user_id)
    await db.commit()


async def batch_delete_users(db: AsyncSession, current_user: User, ids: Sequence[int]) -> int:
    deleted = await UserRepository(db).soft_delete_many(ids)
    await log_audit(db, current_user.id, AuditAction.BATCH_DELETE_USERS, {"ids": list(ids)})
    await db.commit()
    logger.info(f"Soft-deleted {deleted} of {len(ids)} requested users")
    return deleted
