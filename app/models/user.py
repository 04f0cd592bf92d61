from sqlalchemy import Column, String, Enum, DateTime, Index, func
from app.models.base import BaseModel
from app.core.enums import UserRole


class User(BaseModel):
    __tablename__ = "users"
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    role = Column(
        Enum(UserRole, values_callable=lambda roles: [role.value for role in roles], name="user_role"),
        nullable=False,
    )
    password_hash = Column(String(255), nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)

    # emails differing only by case count as the same address
    __table_args__ = (
        Index("uq_users_email_lower", func.lower(email), unique=True),
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
