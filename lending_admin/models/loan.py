import uuid

from sqlalchemy import CheckConstraint, Column, Date, DateTime, Integer, Numeric, String, Text, func
from sqlalchemy.dialects.postgresql import UUID

from lending_admin.db.base import Base


class Loan(Base):
    __tablename__ = "loans"
    __table_args__ = (
        CheckConstraint("loan_amount > 0", name="ck_loans_amount_positive"),
        CheckConstraint(
            "duration_months > 0 AND duration_months <= 360",
            name="ck_loans_duration_range",
        ),
        CheckConstraint(
            "interest_rate >= 0 AND interest_rate <= 100",
            name="ck_loans_interest_rate_range",
        ),
        CheckConstraint("version >= 1", name="ck_loans_version_positive"),
        CheckConstraint(
            "status IN ('Pending Approval', 'Approved', 'In Repayment', 'Completed', 'Rejected')",
            name="ck_loans_status",
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    application_number = Column(String(50), nullable=True, unique=True)
    loan_amount = Column(Numeric(12, 2), nullable=False)
    duration_months = Column(Integer, nullable=False)
    interest_rate = Column(Numeric(5, 2), nullable=False)
    monthly_payment = Column(Numeric(12, 2), nullable=True)
    total_amount = Column(Numeric(12, 2), nullable=True)
    total_interest = Column(Numeric(12, 2), nullable=True)
    loan_purpose = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="Pending Approval", index=True)
    admin_notes = Column(Text, nullable=True)
    approval_date = Column(Date, nullable=True)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    __mapper_args__ = {"version_id_col": version}
