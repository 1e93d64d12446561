"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-18

Creates:
- pgvector extension
- document, chunk (with vector embedding column)
- chat_session
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from pgvector.sqlalchemy import Vector
from sqlalchemy.dialects import postgresql

from docqa.app.config import get_settings

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create extension and all tables."""
    dimensions = get_settings().embedding_dimensions

    op.execute("CREATE EXTENSION IF NOT EXISTS vector")

    # document table
    op.create_table(
        "document",
        sa.Column("document_id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("owner_id", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("raw_content", sa.Text(), nullable=False),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("idx_document_owner", "document", ["owner_id", "uploaded_at"])

    # chunk table
    op.create_table(
        "chunk",
        sa.Column("chunk_id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("document_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("embedding", Vector(dimensions), nullable=False),
        sa.Column("token_count", sa.Integer(), nullable=False),
        sa.Column("chunk_index", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["document_id"], ["document.document_id"], ondelete="CASCADE"),
        sa.UniqueConstraint("document_id", "chunk_index", name="uq_chunk_document_index"),
    )
    op.create_index("idx_chunk_document", "chunk", ["document_id"])

    # chat_session table
    op.create_table(
        "chat_session",
        sa.Column("session_id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("owner_id", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("messages", postgresql.JSONB(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("idx_chat_session_owner", "chat_session", ["owner_id", "created_at"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index("idx_chat_session_owner", table_name="chat_session")
    op.drop_table("chat_session")

    op.drop_index("idx_chunk_document", table_name="chunk")
    op.drop_table("chunk")

    op.drop_index("idx_document_owner", table_name="document")
    op.drop_table("document")
