"""care knowledge, sessions and interactions.

Revision ID: 0a1b2c3d4e5f
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = "0a1b2c3d4e5f"
down_revision = None
branch_labels = None
depends_on = None


class Vector(sa.types.UserDefinedType):
    def __init__(self, dimensions: int):
        self.dimensions = dimensions

    def get_col_spec(self, **kwargs) -> str:
        return f"vector({self.dimensions})"


def upgrade() -> None:
    is_postgres = op.get_bind().dialect.name == "postgresql"
    if is_postgres:
        # pgvector extension (requires pgvector-enabled Postgres image).
        op.execute("CREATE EXTENSION IF NOT EXISTS vector")

    op.create_table(
        "care_knowledge",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("topic", sa.String(), nullable=False, server_default="general"),
        sa.Column("lang", sa.String(length=2), nullable=False, server_default="en"),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("chunk_text", sa.Text(), nullable=False),
        sa.Column("embedding", Vector(1536) if is_postgres else sa.Text(), nullable=True),
        sa.Column("source_url", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("ix_care_knowledge_topic", "care_knowledge", ["topic"])
    op.create_index("ix_care_knowledge_lang", "care_knowledge", ["lang"])

    op.create_table(
        "care_sessions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("session_id", sa.String(), nullable=False),
        sa.Column("channel", sa.String(), nullable=False, server_default="web"),
        sa.Column("user_ref", sa.String(), nullable=True),
        sa.Column("turns_json", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("expires_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("ix_care_sessions_session_id", "care_sessions", ["session_id"])

    op.create_table(
        "care_interactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("channel", sa.String(), nullable=False, server_default="web"),
        sa.Column("session_id", sa.String(), nullable=False),
        sa.Column("user_ref", sa.String(), nullable=True),
        sa.Column("lang", sa.String(length=2), nullable=False, server_default="en"),
        sa.Column("user_text", sa.Text(), nullable=False),
        sa.Column("bot_text", sa.Text(), nullable=False),
        sa.Column("category", sa.String(), nullable=False, server_default="general"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("ix_care_interactions_channel", "care_interactions", ["channel"])
    op.create_index("ix_care_interactions_session_id", "care_interactions", ["session_id"])


def downgrade() -> None:
    op.drop_index("ix_care_interactions_session_id", table_name="care_interactions")
    op.drop_index("ix_care_interactions_channel", table_name="care_interactions")
    op.drop_table("care_interactions")

    op.drop_index("ix_care_sessions_session_id", table_name="care_sessions")
    op.drop_table("care_sessions")

    op.drop_index("ix_care_knowledge_lang", table_name="care_knowledge")
    op.drop_index("ix_care_knowledge_topic", table_name="care_knowledge")
    op.drop_table("care_knowledge")
