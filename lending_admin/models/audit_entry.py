import uuid

from sqlalchemy import JSON, Column, DateTime, Index, String, Text, func
from sqlalchemy.dialects.postgresql import UUID

from lending_admin.db.base import Base


class AuditEntry(Base):
    """One row per administrative mutation. Rows are append-only."""

    __tablename__ = "admin_modification_log"
    __table_args__ = (
        Index("ix_admin_modification_log_target", "target_type", "target_id"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    actor_id = Column(String(255), nullable=False, index=True)
    actor_name = Column(String(255), nullable=False)
    actor_email = Column(String(255), nullable=True)
    target_type = Column(String(50), nullable=False)
    target_id = Column(String(255), nullable=False)
    modification_type = Column(String(50), nullable=False)
    old_value = Column(JSON, nullable=True)
    new_value = Column(JSON, nullable=True)
    changes = Column(JSON, nullable=True)
    reason = Column(Text, nullable=False)
    notification_id = Column(UUID(as_uuid=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
