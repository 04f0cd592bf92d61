from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from app.models.base import BaseModel


class AccessToken(BaseModel):
    __tablename__ = "access_tokens"

    user_id = Column(ForeignKey("users.id"), nullable=False, index=True)
    user = relationship("User", backref="tokens", lazy="joined")

    name = Column(String(255), nullable=False)
    jti = Column(String(64), unique=True, nullable=False, index=True)
    last_used_at = Column(DateTime(timezone=True), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
