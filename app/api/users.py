from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.db.session import get_db
from app.models.user import User
from app.schemas.user import (
    BatchDeleteIn,
    BulkCreateIn,
    BulkCreateOut,
    MessageOut,
    UserListOut,
    UserUpdate,
)
from app.core.config import settings
from app.core.security import get_current_user
from app.services import users as user_service

# mounted behind the authentication dependency in app.main
router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=UserListOut)
async def list_users(
    request: Request,
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1, le=settings.MAX_PAGE),
    db: AsyncSession = Depends(get_db),
):
    path = str(request.url.replace(query=""))
    page_data = await user_service.list_users(db, search, page, path)
    return UserListOut(status=True, data=page_data)


@router.post("", response_model=BulkCreateOut, status_code=201)
async def create_users(
    payload: BulkCreateIn,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    inserted = await user_service.bulk_create(db, current_user, payload.users)
    return BulkCreateOut(status=True, message="Users added successfully.", inserted_count=inserted)


@router.post("/batch-delete", response_model=MessageOut)
async def batch_delete_users(
    payload: Optional[BatchDeleteIn] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ids = payload.ids if payload else []
    await user_service.batch_delete_users(db, current_user, ids)
    return MessageOut(message="selected users are deleted")


@router.put("/{user_id}", response_model=MessageOut)
async def update_user(
    user_id: int,
    payload: Optional[UserUpdate] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await user_service.update_user(db, current_user, user_id, payload or UserUpdate())
    return MessageOut(message="User updated")


@router.delete("/{user_id}", response_model=MessageOut)
async def delete_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await user_service.soft_delete_user(db, current_user, user_id)
    return MessageOut(message="User deleted")
