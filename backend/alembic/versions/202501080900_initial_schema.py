"""Initial LifePilot schema."""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "202501080900"
down_revision = None
branch_labels = None
depends_on = None

DOCUMENT_TABLES = ("user_profiles", "personalized_analyses", "weekly_schedules")


def upgrade() -> None:
    for table_name in DOCUMENT_TABLES:
        op.create_table(
            table_name,
            sa.Column("user_id", sa.String(length=128), primary_key=True, nullable=False),
            sa.Column("document", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        )

    op.create_table(
        "generation_tickets",
        sa.Column("ticket_id", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("finished_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
    )
    op.create_index("ix_generation_tickets_user_id", "generation_tickets", ["user_id"])
    op.create_index("ix_generation_tickets_status", "generation_tickets", ["status"])


def downgrade() -> None:
    op.drop_index("ix_generation_tickets_status", table_name="generation_tickets")
    op.drop_index("ix_generation_tickets_user_id", table_name="generation_tickets")
    op.drop_table("generation_tickets")
    for table_name in reversed(DOCUMENT_TABLES):
        op.drop_table(table_name)
