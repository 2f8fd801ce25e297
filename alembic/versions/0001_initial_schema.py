"""Initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Enum columns store member names
user_role = sa.Enum("ADMIN", "LAWYER", "CLIENT", name="userrole")
case_status = sa.Enum("PENDING", "ON_TRIAL", "COMPLETED", "DISMISSED", name="casestatus")
invoice_status = sa.Enum("PAID", "PARTIALLY_PAID", "UNPAID", "OVERDUE", name="invoicestatus")
invoice_client_status = sa.Enum("VIEWED", "NOT_VIEWED", name="invoiceclientstatus")
service_category = sa.Enum("CONSULTATION", "LITIGATION", "DOCUMENTATION", "OTHER", name="servicecategory")
appointment_status = sa.Enum("SCHEDULED", "COMPLETED", "CANCELLED", "RESCHEDULED", name="appointmentstatus")
team_member_role = sa.Enum("ADMIN", "ATTORNEY", "PARALEGAL", "ASSISTANT", "OTHER", name="teammemberrole")
team_member_status = sa.Enum("ACTIVE", "INACTIVE", "ON_LEAVE", name="teammemberstatus")
task_status = sa.Enum("PENDING", "IN_PROGRESS", "COMPLETED", name="taskstatus")
task_priority = sa.Enum("LOW", "MEDIUM", "HIGH", name="taskpriority")
recipient_kind = sa.Enum("USER", "CLIENT", name="recipientkind")
notification_type = sa.Enum("CASE", "APPOINTMENT", "TASK", "SYSTEM", name="notificationtype")
reference_model = sa.Enum("CASE", "APPOINTMENT", "TASK", name="referencemodel")


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    ]


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", user_role, nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("client_id", sa.String(length=36), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])
    op.create_index("ix_users_client_id", "users", ["client_id"])

    op.create_table(
        "clients",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("mobile", sa.String(length=20), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("company", sa.String(length=255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", sa.Boolean(), nullable=False),
        sa.Column("created_by", sa.String(length=36),
                  sa.ForeignKey("users.id", name="fk_clients_created_by_users"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_clients_email", "clients", ["email"], unique=True)
    op.create_index("ix_clients_status", "clients", ["status"])
    op.create_index("ix_clients_created_at", "clients", ["created_at"])

    # users <-> clients reference each other
    with op.batch_alter_table("users") as batch_op:
        batch_op.create_foreign_key("fk_users_client_id_clients", "clients", ["client_id"], ["id"])

    op.create_table(
        "cases",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("client_no", sa.String(length=100), nullable=False),
        sa.Column("client_name", sa.String(length=255), nullable=False),
        sa.Column("client_id", sa.String(length=36), sa.ForeignKey("clients.id"), nullable=True),
        sa.Column("case_type", sa.String(length=255), nullable=False),
        sa.Column("court", sa.String(length=255), nullable=False),
        sa.Column("court_no", sa.String(length=100), nullable=True),
        sa.Column("magistrate", sa.String(length=255), nullable=True),
        sa.Column("petitioner", sa.String(length=255), nullable=False),
        sa.Column("respondent", sa.String(length=255), nullable=False),
        sa.Column("next_date", sa.DateTime(), nullable=True),
        sa.Column("status", case_status, nullable=False),
        sa.Column("is_important", sa.Boolean(), nullable=False),
        sa.Column("is_archived", sa.Boolean(), nullable=False),
        sa.Column("assigned_to", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_by", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_cases_client_no", "cases", ["client_no"], unique=True)
    op.create_index("ix_cases_client_name", "cases", ["client_name"])
    op.create_index("ix_cases_client_id", "cases", ["client_id"])
    op.create_index("ix_cases_case_type", "cases", ["case_type"])
    op.create_index("ix_cases_next_date", "cases", ["next_date"])
    op.create_index("ix_cases_status", "cases", ["status"])
    op.create_index("ix_cases_assigned_to", "cases", ["assigned_to"])
    op.create_index("ix_cases_created_at", "cases", ["created_at"])

    op.create_table(
        "case_documents",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("case_id", sa.String(length=36), sa.ForeignKey("cases.id"), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("file_url", sa.String(length=500), nullable=False),
        sa.Column("uploaded_at", sa.DateTime(), nullable=True),
        sa.Column("uploaded_by", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
    )
    op.create_index("ix_case_documents_case_id", "case_documents", ["case_id"])
    op.create_index("ix_case_documents_uploaded_at", "case_documents", ["uploaded_at"])

    op.create_table(
        "case_timeline_entries",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("case_id", sa.String(length=36), sa.ForeignKey("cases.id"), nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("added_by", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
    )
    op.create_index("ix_case_timeline_entries_case_id", "case_timeline_entries", ["case_id"])
    op.create_index("ix_case_timeline_entries_date", "case_timeline_entries", ["date"])

    op.create_table(
        "case_notes",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("case_id", sa.String(length=36), sa.ForeignKey("cases.id"), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("created_by", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
    )
    op.create_index("ix_case_notes_case_id", "case_notes", ["case_id"])

    op.create_table(
        "services",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False, unique=True),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("category", service_category, nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "invoices",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("invoice_no", sa.String(length=50), nullable=False),
        sa.Column("client_id", sa.String(length=36), sa.ForeignKey("clients.id"), nullable=False),
        sa.Column("client_name", sa.String(length=255), nullable=False),
        sa.Column("issue_date", sa.DateTime(), nullable=False),
        sa.Column("due_date", sa.DateTime(), nullable=False),
        sa.Column("subtotal", sa.Float(), nullable=False),
        sa.Column("tax_rate", sa.Float(), nullable=True),
        sa.Column("tax_amount", sa.Float(), nullable=True),
        sa.Column("total", sa.Float(), nullable=False),
        sa.Column("paid", sa.Float(), nullable=False),
        sa.Column("status", invoice_status, nullable=False),
        sa.Column("client_status", invoice_client_status, nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(length=36), sa.ForeignKey("users.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_invoices_invoice_no", "invoices", ["invoice_no"], unique=True)
    op.create_index("ix_invoices_client_id", "invoices", ["client_id"])
    op.create_index("ix_invoices_issue_date", "invoices", ["issue_date"])
    op.create_index("ix_invoices_status", "invoices", ["status"])

    op.create_table(
        "invoice_items",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("invoice_id", sa.String(length=36), sa.ForeignKey("invoices.id"), nullable=False),
        sa.Column("service_id", sa.String(length=36),
                  sa.ForeignKey("services.id", ondelete="SET NULL"), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=False),
        sa.Column("quantity", sa.Float(), nullable=False),
        sa.Column("rate", sa.Float(), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
    )
    op.create_index("ix_invoice_items_invoice_id", "invoice_items", ["invoice_id"])

    op.create_table(
        "appointments",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("client_id", sa.String(length=36), sa.ForeignKey("clients.id"), nullable=False),
        sa.Column("date_time", sa.DateTime(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", appointment_status, nullable=False),
        sa.Column("created_by", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_appointments_client_id", "appointments", ["client_id"])
    op.create_index("ix_appointments_date_time", "appointments", ["date_time"])
    op.create_index("ix_appointments_status", "appointments", ["status"])

    op.create_table(
        "tasks",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("due_date", sa.DateTime(), nullable=False),
        sa.Column("start_date", sa.DateTime(), nullable=True),
        sa.Column("status", task_status, nullable=False),
        sa.Column("priority", task_priority, nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("related_to", sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_tasks_due_date", "tasks", ["due_date"])
    op.create_index("ix_tasks_user_id", "tasks", ["user_id"])

    op.create_table(
        "team_members",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("position", sa.String(length=255), nullable=False),
        sa.Column("role", team_member_role, nullable=False),
        sa.Column("phone_number", sa.String(length=20), nullable=True),
        sa.Column("date_joined", sa.DateTime(), nullable=True),
        sa.Column("profile_image_url", sa.String(length=500), nullable=True),
        sa.Column("status", team_member_status, nullable=False),
        sa.Column("specializations", sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_team_members_email", "team_members", ["email"], unique=True)
    op.create_index("ix_team_members_role", "team_members", ["role"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("recipient_id", sa.String(length=36), nullable=False),
        sa.Column("recipient_kind", recipient_kind, nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", notification_type, nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        sa.Column("reference_model", reference_model, nullable=True),
        sa.Column("reference_id", sa.String(length=36), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_notifications_recipient_id", "notifications", ["recipient_id"])
    op.create_index("ix_notifications_is_read", "notifications", ["is_read"])
    op.create_index("ix_notifications_created_at", "notifications", ["created_at"])


def downgrade():
    op.drop_table("notifications")
    op.drop_table("team_members")
    op.drop_table("tasks")
    op.drop_table("appointments")
    op.drop_table("invoice_items")
    op.drop_table("invoices")
    op.drop_table("services")
    op.drop_table("case_notes")
    op.drop_table("case_timeline_entries")
    op.drop_table("case_documents")
    op.drop_table("cases")
    with op.batch_alter_table("users") as batch_op:
        batch_op.drop_constraint("fk_users_client_id_clients", type_="foreignkey")
    op.drop_table("clients")
    op.drop_table("users")
    bind = op.get_bind()
    for enum_type in (
        user_role, case_status, invoice_status, invoice_client_status, service_category,
        appointment_status, team_member_role, team_member_status, task_status, task_priority,
        recipient_kind, notification_type, reference_model,
    ):
        enum_type.drop(bind, checkfirst=True)
