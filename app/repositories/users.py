"""Typed queries over the users table"""
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from sqlalchemy import func, or_, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.core.metrics import track_db_operation
from app.models.user import User


class UserRepository:
    """
    Data access for :class:`User` rows.

    Every read except :meth:`existing_emails` hides soft-deleted rows. Writes
    are flushed but never committed here; the caller owns the transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _active():
        return User.deleted_at.is_(None)

    @track_db_operation("select", "users")
    async def find_by_id(self, user_id: int) -> Optional[User]:
        res = await self.db.execute(select(User).where(User.id == user_id, self._active()))
        return res.scalars().first()

    @track_db_operation("select", "users")
    async def find_by_email(self, email: str) -> Optional[User]:
        res = await self.db.execute(
            select(User).where(func.lower(User.email) == email.lower(), self._active())
        )
        return res.scalars().first()

    @track_db_operation("select", "users")
    async def search(
        self,
        term: Optional[str],
        page: int,
        per_page: int,
    ) -> Tuple[List[User], int]:
        conditions = [self._active()]
        if term:
            conditions.append(or_(
                User.name.icontains(term, autoescape=True),
                User.email.icontains(term, autoescape=True),
            ))

        total = await self.db.scalar(select(func.count(User.id)).where(*conditions))
        res = await self.db.execute(
            select(User)
            .where(*conditions)
            .order_by(User.id)
            .limit(per_page)
            .offset((page - 1) * per_page)
        )
        return list(res.scalars().all()), total or 0

    @track_db_operation("select", "users")
    async def existing_emails(self, emails: Iterable[str]) -> Set[str]:
        """Lower-cased emails already stored, soft-deleted rows included."""
        lowered = {email.lower() for email in emails}
        if not lowered:
            return set()
        res = await self.db.execute(
            select(func.lower(User.email)).where(func.lower(User.email).in_(lowered))
        )
        return set(res.scalars().all())

    @track_db_operation("insert", "users")
    async def insert_many(self, rows: Sequence[Dict[str, Any]]) -> int:
        self.db.add_all([User(**row) for row in rows])
        await self.db.flush()
        return len(rows)

    @track_db_operation("update", "users")
    async def update_fields(self, user: User, fields: Dict[str, Any]) -> User:
        for field, value in fields.items():
            setattr(user, field, value)
        await self.db.flush()
        return user

    @track_db_operation("soft_delete", "users")
    async def soft_delete(self, user: User) -> None:
        user.deleted_at = datetime.now(timezone.utc)
        await self.db.flush()

    @track_db_operation("soft_delete", "users")
    async def soft_delete_many(self, ids: Sequence[int]) -> int:
        if not ids:
            return 0
        res = await self.db.execute(
            update(User)
            .where(User.id.in_(list(ids)), self._active())
            .values(deleted_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        return res.rowcount
