"""Create loans, activation profiles, withdrawals, admin modification log and user notifications"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_admin_mutation_tables"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "loans",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("application_number", sa.String(length=50), nullable=True),
        sa.Column("loan_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("duration_months", sa.Integer(), nullable=False),
        sa.Column("interest_rate", sa.Numeric(5, 2), nullable=False),
        sa.Column("monthly_payment", sa.Numeric(12, 2), nullable=True),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("total_interest", sa.Numeric(12, 2), nullable=True),
        sa.Column("loan_purpose", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="Pending Approval"),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        sa.Column("approval_date", sa.Date(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("application_number", name="uq_loans_application_number"),
        sa.CheckConstraint("loan_amount > 0", name="ck_loans_amount_positive"),
        sa.CheckConstraint("duration_months > 0 AND duration_months <= 360", name="ck_loans_duration_range"),
        sa.CheckConstraint("interest_rate >= 0 AND interest_rate <= 100", name="ck_loans_interest_rate_range"),
        sa.CheckConstraint("version >= 1", name="ck_loans_version_positive"),
        sa.CheckConstraint(
            "status IN ('Pending Approval', 'Approved', 'In Repayment', 'Completed', 'Rejected')",
            name="ck_loans_status",
        ),
    )
    op.create_index("ix_loans_user_id", "loans", ["user_id"])
    op.create_index("ix_loans_status", "loans", ["status"])

    op.create_table(
        "user_activation_profiles",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=True),
        sa.Column("gender", sa.String(length=10), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("marital_status", sa.String(length=50), nullable=True),
        sa.Column("nationality", sa.String(length=100), nullable=True),
        sa.Column("residing_country", sa.String(length=100), nullable=True),
        sa.Column("state_region_province", sa.String(length=100), nullable=True),
        sa.Column("town_city", sa.String(length=100), nullable=True),
        sa.Column("id_type", sa.String(length=50), nullable=True),
        sa.Column("id_number", sa.LargeBinary(), nullable=True),
        sa.Column("account_type", sa.String(length=20), nullable=True),
        sa.Column("bank_name", sa.String(length=100), nullable=True),
        sa.Column("account_number", sa.LargeBinary(), nullable=True),
        sa.Column("account_holder_name", sa.String(length=255), nullable=True),
        sa.Column("activation_status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "activation_status IN ('pending', 'in_progress', 'completed', 'rejected')",
            name="ck_user_activation_profiles_status",
        ),
        sa.CheckConstraint("version >= 1", name="ck_user_activation_profiles_version_positive"),
    )
    op.create_index(
        "ix_user_activation_profiles_user_id", "user_activation_profiles", ["user_id"], unique=True
    )

    op.create_table(
        "withdrawals",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("previous_balance", sa.Numeric(12, 2), nullable=False),
        sa.Column("new_balance", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("bank_details", postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("admin_note", sa.Text(), nullable=True),
        sa.Column("transaction_id", sa.String(length=255), nullable=True),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("amount > 0", name="ck_withdrawals_amount_positive"),
        sa.CheckConstraint(
            "status IN ('pending', 'review', 'approved', 'rejected')",
            name="ck_withdrawals_status",
        ),
        sa.CheckConstraint("version >= 1", name="ck_withdrawals_version_positive"),
    )
    op.create_index("ix_withdrawals_user_id", "withdrawals", ["user_id"])
    op.create_index("ix_withdrawals_status", "withdrawals", ["status"])

    op.create_table(
        "admin_modification_log",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("actor_id", sa.String(length=255), nullable=False),
        sa.Column("actor_name", sa.String(length=255), nullable=False),
        sa.Column("actor_email", sa.String(length=255), nullable=True),
        sa.Column("target_type", sa.String(length=50), nullable=False),
        sa.Column("target_id", sa.String(length=255), nullable=False),
        sa.Column("modification_type", sa.String(length=50), nullable=False),
        sa.Column("old_value", sa.JSON(), nullable=True),
        sa.Column("new_value", sa.JSON(), nullable=True),
        sa.Column("changes", sa.JSON(), nullable=True),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("notification_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_admin_modification_log_actor_id", "admin_modification_log", ["actor_id"])
    op.create_index("ix_admin_modification_log_created_at", "admin_modification_log", ["created_at"])
    op.create_index(
        "ix_admin_modification_log_target", "admin_modification_log", ["target_type", "target_id"]
    )

    op.create_table(
        "user_notifications",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("type", sa.String(length=50), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("data", sa.JSON(), nullable=False, server_default=sa.text("'{}'::json")),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_user_notifications_user_id", "user_notifications", ["user_id"])
    op.create_index("ix_user_notifications_user_read", "user_notifications", ["user_id", "read"])


def downgrade() -> None:
    op.drop_index("ix_user_notifications_user_read", table_name="user_notifications")
    op.drop_index("ix_user_notifications_user_id", table_name="user_notifications")
    op.drop_table("user_notifications")
    op.drop_index("ix_admin_modification_log_target", table_name="admin_modification_log")
    op.drop_index("ix_admin_modification_log_created_at", table_name="admin_modification_log")
    op.drop_index("ix_admin_modification_log_actor_id", table_name="admin_modification_log")
    op.drop_table("admin_modification_log")
    op.drop_index("ix_withdrawals_status", table_name="withdrawals")
    op.drop_index("ix_withdrawals_user_id", table_name="withdrawals")
    op.drop_table("withdrawals")
    op.drop_index("ix_user_activation_profiles_user_id", table_name="user_activation_profiles")
    op.drop_table("user_activation_profiles")
    op.drop_index("ix_loans_status", table_name="loans")
    op.drop_index("ix_loans_user_id", table_name="loans")
    op.drop_table("loans")
