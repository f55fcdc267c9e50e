"""initial school portal schema

Revision ID: 3a1f0c9e7b21
Revises:
Create Date: 2026-10-19 09:12:44.118203

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3a1f0c9e7b21"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


user_role = sa.Enum("admin", "principal", "teacher", "student", "parent", name="userrole")
application_status = sa.Enum("pending", "approved", "rejected", name="applicationstatus")


def _id():
    return sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True)


def _created_at():
    return sa.Column(
        "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")
    )


def _updated_at():
    return sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True)


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("role", user_role, nullable=False),
        sa.Column("first_name", sa.String()),
        sa.Column("last_name", sa.String()),
        sa.Column("is_active", sa.Boolean()),
        _created_at(),
        _updated_at(),
        sa.Column("failed_login_attempts", sa.Integer()),
        sa.Column("locked_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "user_sessions",
        _id(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("refresh_token", sa.String(), nullable=False),
        sa.Column("user_agent", sa.String()),
        sa.Column("ip_address", sa.String()),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        _created_at(),
    )
    op.create_index(
        "ix_user_sessions_refresh_token", "user_sessions", ["refresh_token"], unique=True
    )

    op.create_table(
        "teachers",
        _id(),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), nullable=False),
        sa.Column("email", sa.String()),
        sa.Column("phone", sa.String()),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=True),
        _created_at(),
        _updated_at(),
    )

    op.create_table(
        "grades",
        _id(),
        sa.Column("name", sa.String(), nullable=False, unique=True),
        sa.Column("level", sa.Integer(), nullable=True),
        _created_at(),
    )

    op.create_table(
        "classes",
        _id(),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("grade_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("grades.id"), nullable=False),
        sa.Column("teacher_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("teachers.id"), nullable=True),
        sa.Column("academic_year", sa.Integer(), nullable=False),
        _created_at(),
        _updated_at(),
        sa.UniqueConstraint("name", "grade_id", "academic_year", name="uq_class_grade_year"),
    )

    op.create_table(
        "subjects",
        _id(),
        sa.Column("name", sa.String(), nullable=False, unique=True),
        sa.Column("code", sa.String(), nullable=True, unique=True),
        sa.Column("description", sa.Text()),
        sa.Column("is_compulsory", sa.Boolean()),
        _created_at(),
    )

    op.create_table(
        "students",
        _id(),
        sa.Column("student_id", sa.String(), nullable=False),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), nullable=False),
        sa.Column("email", sa.String()),
        sa.Column("phone", sa.String()),
        sa.Column("gender", sa.String()),
        sa.Column("date_of_birth", sa.String()),
        sa.Column("address", sa.Text()),
        sa.Column("profile_image_url", sa.String()),
        sa.Column("class_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("classes.id"), nullable=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("is_active", sa.Boolean()),
        _created_at(),
        _updated_at(),
    )
    op.create_index("ix_students_student_id", "students", ["student_id"], unique=True)

    op.create_table(
        "parents",
        _id(),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), nullable=False),
        sa.Column("email", sa.String()),
        sa.Column("phone", sa.String()),
        sa.Column("address", sa.Text()),
        _created_at(),
    )

    op.create_table(
        "student_parents",
        _id(),
        sa.Column("student_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("students.id"), nullable=False),
        sa.Column("parent_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("parents.id"), nullable=False),
        sa.Column("relationship", sa.String()),
    )

    op.create_table(
        "applications",
        _id(),
        sa.Column("status", application_status, nullable=False),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), nullable=False),
        sa.Column("gender", sa.String(), nullable=False),
        sa.Column("date_of_birth", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("phone", sa.String()),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("parent_name", sa.String(), nullable=False),
        sa.Column("parent_phone", sa.String(), nullable=False),
        sa.Column("parent_email", sa.String()),
        sa.Column("term3_average", sa.Float()),
        sa.Column("term4_average", sa.Float()),
        sa.Column("overall_average", sa.Float()),
        sa.Column("marks_data", sa.JSON()),
        sa.Column("results_document_url", sa.String()),
        sa.Column("academic_year", sa.Integer(), nullable=False),
        sa.Column("comments", sa.Text()),
        _created_at(),
        _updated_at(),
    )

    op.create_table(
        "class_subjects",
        _id(),
        sa.Column("class_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("classes.id"), nullable=False),
        sa.Column("subject_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("subjects.id"), nullable=False),
        sa.Column("teacher_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("teachers.id"), nullable=True),
        _created_at(),
        _updated_at(),
        sa.UniqueConstraint("class_id", "subject_id", name="uq_class_subject"),
    )

    op.create_table(
        "teacher_subjects",
        _id(),
        sa.Column("teacher_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("teachers.id"), nullable=False),
        sa.Column("subject_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("subjects.id"), nullable=False),
        sa.UniqueConstraint("teacher_id", "subject_id", name="uq_teacher_subject"),
    )

    op.create_table(
        "student_subjects",
        _id(),
        sa.Column("student_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("students.id"), nullable=False),
        sa.Column("subject_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("subjects.id"), nullable=False),
        sa.Column("academic_year", sa.Integer(), nullable=False),
        _created_at(),
        _updated_at(),
        sa.UniqueConstraint(
            "student_id", "subject_id", "academic_year", name="uq_student_subject_year"
        ),
    )

    op.create_table(
        "class_representatives",
        _id(),
        sa.Column("class_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("classes.id"), nullable=False),
        sa.Column("student_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("students.id"), nullable=False),
        sa.Column("role", sa.String(), nullable=False),
        _created_at(),
        _updated_at(),
        sa.UniqueConstraint("class_id", "role", name="uq_class_representative_role"),
    )

    op.create_table(
        "learning_materials",
        _id(),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("file_url", sa.String(), nullable=False),
        sa.Column("material_type", sa.String(), nullable=False),
        sa.Column("subject_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("subjects.id"), nullable=False),
        sa.Column("grade_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("grades.id"), nullable=False),
        sa.Column("uploaded_by", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=True),
        _created_at(),
    )

    op.create_table(
        "notifications",
        _id(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("notification_type", sa.String(), nullable=False),
        sa.Column("is_read", sa.Boolean()),
        _created_at(),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])

    op.create_table(
        "timetables",
        _id(),
        sa.Column("class_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("classes.id"), nullable=False),
        sa.Column("academic_year", sa.Integer(), nullable=False),
        sa.Column("term", sa.Integer(), nullable=False),
        sa.Column("schedule", sa.JSON(), nullable=False),
        _created_at(),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()")
        ),
        sa.UniqueConstraint("class_id", "academic_year", "term", name="uq_timetable_class_term"),
    )

    op.create_table(
        "events",
        _id(),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("location", sa.String()),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_all_day", sa.Boolean()),
        sa.Column("event_type", sa.String(), nullable=False),
        sa.Column("is_public", sa.Boolean()),
        sa.Column("created_by", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=True),
        _created_at(),
        _updated_at(),
    )


def downgrade() -> None:
    """Downgrade schema."""
    for table in (
        "events",
        "timetables",
        "notifications",
        "learning_materials",
        "class_representatives",
        "student_subjects",
        "teacher_subjects",
        "class_subjects",
        "applications",
        "student_parents",
        "parents",
        "students",
        "subjects",
        "classes",
        "grades",
        "teachers",
        "user_sessions",
        "users",
    ):
        op.drop_table(table)
    application_status.drop(op.get_bind(), checkfirst=True)
    user_role.drop(op.get_bind(), checkfirst=True)
