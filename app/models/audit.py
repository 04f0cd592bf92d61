from sqlalchemy import Column, String, Integer, Enum, ForeignKey
from sqlalchemy.orm import relationship
from app.models.base import BaseModel
from app.core.enums import AuditAction


class Audit(BaseModel):
    __tablename__ = "audits"

    user_id = Column(ForeignKey("users.id"), nullable=False, index=True)
    user = relationship("User", backref="audit_logs")

    action = Column(
        Enum(AuditAction, values_callable=lambda actions: [a.value for a in actions], name="audit_action"),
        nullable=False,
    )
    resource_id = Column(Integer, nullable=True)
    payload_hash = Column(String(128), nullable=False)
