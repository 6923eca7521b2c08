"""Initial Practice Log schema."""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "202610010900"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "plan",
        sa.Column("user_id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("daily_goal", sa.Integer(), nullable=False, server_default=sa.text("180")),
        sa.Column("scales_minutes", sa.Integer(), nullable=False, server_default=sa.text("45")),
        sa.Column("scales_note", sa.Text(), nullable=True),
        sa.Column("review_minutes", sa.Integer(), nullable=False, server_default=sa.text("45")),
        sa.Column("review_note", sa.Text(), nullable=True),
        sa.Column("new_minutes", sa.Integer(), nullable=False, server_default=sa.text("45")),
        sa.Column("new_note", sa.Text(), nullable=True),
        sa.Column("technique_minutes", sa.Integer(), nullable=False, server_default=sa.text("45")),
        sa.Column("technique_note", sa.Text(), nullable=True),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    )

    op.create_table(
        "sessions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("session_date", sa.Date(), nullable=False),
        sa.Column("category", sa.String(length=20), nullable=False),
        sa.Column("minutes", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.UniqueConstraint("user_id", "session_date", "category", name="uq_sessions_user_date_category"),
        sa.CheckConstraint("minutes >= 0", name="ck_sessions_minutes_non_negative"),
        sa.CheckConstraint(
            "category IN ('scales', 'review', 'new', 'technique')",
            name="ck_sessions_category",
        ),
    )
    op.create_index("ix_sessions_user_id_session_date", "sessions", ["user_id", "session_date"], unique=False)

    op.create_table(
        "push_subscriptions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("endpoint", sa.Text(), nullable=False, unique=True),
        sa.Column("p256dh", sa.Text(), nullable=False),
        sa.Column("auth", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_push_subscriptions_user_id", "push_subscriptions", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_push_subscriptions_user_id", table_name="push_subscriptions")
    op.drop_table("push_subscriptions")
    op.drop_index("ix_sessions_user_id_session_date", table_name="sessions")
    op.drop_table("sessions")
    op.drop_table("plan")
