"""Initial recruitment schema

Creates users, requisition (inline HOD/HR/COO stages), job,
application, offer (inline HOD/COO stages), notification and audit_log.

Stage status columns are limited to pending/approved/rejected, and a
rejected stage must carry comments.

Revision ID: 3a91c6e0b2d4
Revises:
Create Date: 2026-10-19 09:12:04.118503

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3a91c6e0b2d4"
down_revision = None
branch_labels = None
depends_on = None

_ROLES = (
    "admin",
    "recruiter",
    "sub_recruiter",
    "hod",
    "hr",
    "coo",
    "interviewer",
    "user",
)


def _in(values) -> str:
    return ", ".join(f"'{v}'" for v in values)


def _stage_columns(prefix: str) -> list:
    return [
        sa.Column(f"{prefix}_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column(f"{prefix}_reviewer_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column(f"{prefix}_reviewed_at", sa.DateTime(), nullable=True),
        sa.Column(f"{prefix}_comments", sa.Text(), nullable=True),
    ]


def _stage_constraints(table: str, prefix: str) -> list:
    return [
        sa.CheckConstraint(
            f"{prefix}_status IN ('pending', 'approved', 'rejected')",
            name=f"CK_{table}_{prefix}_status",
        ),
        sa.CheckConstraint(
            f"{prefix}_status <> 'rejected' OR {prefix}_comments IS NOT NULL",
            name=f"CK_{table}_{prefix}_reject_comments",
        ),
    ]


def upgrade():
    """Create every table of the recruitment workflow."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(200), nullable=False, unique=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("role", sa.String(30), nullable=False, server_default="user"),
        sa.Column("department", sa.String(100), nullable=True),
        sa.Column("designation", sa.String(100), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_login", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(f"role IN ({_in(_ROLES)})", name="CK_users_role"),
    )
    op.create_index("ix_users_role", "users", ["role"])
    op.create_index("ix_users_department", "users", ["department"])

    op.create_table(
        "requisition",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("requisition_number", sa.String(30), nullable=False, unique=True),
        sa.Column("position", sa.String(200), nullable=False),
        sa.Column("department", sa.String(100), nullable=False),
        sa.Column("location", sa.String(100), nullable=False),
        sa.Column("requisition_type", sa.String(20), nullable=False),
        sa.Column("nature_of_employment", sa.String(30), nullable=True),
        sa.Column("grade", sa.String(20), nullable=True),
        sa.Column("salary", sa.Numeric(12, 2), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("experience", sa.String(200), nullable=True),
        sa.Column("replacement_name", sa.String(200), nullable=True),
        sa.Column("replacement_reason", sa.String(30), nullable=True),
        sa.Column("created_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("assigned_hod_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        *_stage_columns("hod"),
        *_stage_columns("hr"),
        *_stage_columns("coo"),
        sa.Column("consumed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "requisition_type IN ('New', 'Replacement')", name="CK_requisition_type"
        ),
        *_stage_constraints("requisition", "hod"),
        *_stage_constraints("requisition", "hr"),
        *_stage_constraints("requisition", "coo"),
    )
    op.create_index("ix_requisition_department", "requisition", ["department"])
    op.create_index("ix_requisition_created_by_id", "requisition", ["created_by_id"])
    op.create_index("ix_requisition_assigned_hod_id", "requisition", ["assigned_hod_id"])

    op.create_table(
        "job",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("department", sa.String(100), nullable=False),
        sa.Column("location", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("employment_type", sa.String(20), nullable=False, server_default="full-time"),
        sa.Column("experience_required", sa.String(200), nullable=True),
        sa.Column("deadline", sa.Date(), nullable=True),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("requisition_id", sa.Integer(), sa.ForeignKey("requisition.id"), nullable=False),
        sa.Column("created_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("requisition_id", name="UQ_job_requisition"),
    )

    op.create_table(
        "application",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("job_id", sa.Integer(), sa.ForeignKey("job.id"), nullable=False),
        sa.Column("applicant_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("status", sa.String(30), nullable=False, server_default="applied"),
        sa.Column("cover_letter", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("job_id", "applicant_id", name="UQ_application_job_applicant"),
    )
    op.create_index("ix_application_job_id", "application", ["job_id"])
    op.create_index("ix_application_applicant_id", "application", ["applicant_id"])

    op.create_table(
        "offer",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("application_id", sa.Integer(), sa.ForeignKey("application.id"), nullable=False),
        sa.Column("designation", sa.String(200), nullable=False),
        sa.Column("department", sa.String(100), nullable=False),
        sa.Column("location", sa.String(100), nullable=False),
        sa.Column("grade", sa.String(20), nullable=True),
        sa.Column("offered_salary", sa.Numeric(12, 2), nullable=False),
        sa.Column("approval_status", sa.String(20), nullable=False, server_default="pending_hod"),
        sa.Column("assigned_hod_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        *_stage_columns("hod"),
        *_stage_columns("coo"),
        sa.Column("response_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("response_comment", sa.Text(), nullable=True),
        sa.Column("responded_at", sa.DateTime(), nullable=True),
        sa.Column("sent_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("sent_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "approval_status IN ('pending_hod', 'pending_coo', 'approved', 'rejected')",
            name="CK_offer_approval_status",
        ),
        sa.CheckConstraint(
            "response_status IN ('pending', 'accepted', 'rejected')",
            name="CK_offer_response_status",
        ),
        *_stage_constraints("offer", "hod"),
        *_stage_constraints("offer", "coo"),
    )
    op.create_index("ix_offer_application_id", "offer", ["application_id"])
    op.create_index("ix_offer_approval_status", "offer", ["approval_status"])

    op.create_table(
        "notification",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.String(1000), nullable=False),
        sa.Column("link", sa.String(300), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_notification_user_id", "notification", ["user_id"])

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("action_type", sa.String(50), nullable=False),
        sa.Column("entity_type", sa.String(100), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=True),
        sa.Column("previous_value", sa.Text(), nullable=True),
        sa.Column("new_value", sa.Text(), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("user_agent", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_audit_log_entity_type", "audit_log", ["entity_type"])


def downgrade():
    """Drop every table created in upgrade(), children first."""
    op.drop_table("audit_log")
    op.drop_table("notification")
    op.drop_table("offer")
    op.drop_table("application")
    op.drop_table("job")
    op.drop_table("requisition")
    op.drop_table("users")
