import uuid

from sqlalchemy import CheckConstraint, Column, Date, DateTime, Integer, String, func
from sqlalchemy.dialects.postgresql import UUID

from lending_admin.db.base import Base
from lending_admin.models.types import EncryptedString


class UserActivationProfile(Base):
    __tablename__ = "user_activation_profiles"
    __table_args__ = (
        CheckConstraint(
            "activation_status IN ('pending', 'in_progress', 'completed', 'rejected')",
            name="ck_user_activation_profiles_status",
        ),
        CheckConstraint("version >= 1", name="ck_user_activation_profiles_version_positive"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), nullable=False, unique=True, index=True)
    full_name = Column(String(255), nullable=True)
    gender = Column(String(10), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    marital_status = Column(String(50), nullable=True)
    nationality = Column(String(100), nullable=True)
    residing_country = Column(String(100), nullable=True)
    state_region_province = Column(String(100), nullable=True)
    town_city = Column(String(100), nullable=True)
    id_type = Column(String(50), nullable=True)
    id_number = Column(EncryptedString(), nullable=True)
    account_type = Column(String(20), nullable=True)
    bank_name = Column(String(100), nullable=True)
    account_number = Column(EncryptedString(), nullable=True)
    account_holder_name = Column(String(255), nullable=True)
    activation_status = Column(String(20), nullable=False, default="pending")
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    __mapper_args__ = {"version_id_col": version}
