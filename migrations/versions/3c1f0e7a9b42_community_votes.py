"""community_votes

Create the community voting schema:
- Community definitions (alternate meanings submitted for dictionary words)
- Community votes (one upvote or downvote per user per definition)

Revision ID: 3c1f0e7a9b42
Revises:
Create Date: 2026-10-18 10:12:44.201113

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3c1f0e7a9b42"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # gen_random_uuid()
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')

    # Create ENUM types (idempotent)
    op.execute("""
        DO $$ BEGIN
            CREATE TYPE content_status AS ENUM ('pending', 'approved', 'rejected', 'hidden');
        EXCEPTION
            WHEN duplicate_object THEN null;
        END $$;
    """)

    op.execute("""
        DO $$ BEGIN
            CREATE TYPE vote_type AS ENUM ('upvote', 'downvote');
        EXCEPTION
            WHEN duplicate_object THEN null;
        END $$;
    """)

    # ========================================================================
    # COMMUNITY_DEFINITIONS table
    # ========================================================================
    op.create_table(
        "community_definitions",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("word_id", sa.String(255), nullable=False),
        sa.Column("user_id", sa.UUID(), nullable=False),  # Author
        sa.Column("definition", sa.Text(), nullable=False),
        sa.Column("usage_example", sa.Text(), nullable=True),
        sa.Column(
            "tags",
            postgresql.ARRAY(sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'"),
        ),
        sa.Column("context", sa.Text(), nullable=True),
        sa.Column(
            "status",
            postgresql.ENUM(name="content_status", create_type=False),
            nullable=False,
            server_default="pending",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "char_length(definition) BETWEEN 1 AND 2000", name="definition_length"
        ),
    )
    op.create_index(
        "idx_community_definitions_word_id", "community_definitions", ["word_id"]
    )
    op.create_index(
        "idx_community_definitions_user_id", "community_definitions", ["user_id"]
    )

    # ========================================================================
    # COMMUNITY_VOTES table
    # ========================================================================
    op.create_table(
        "community_votes",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("definition_id", sa.UUID(), nullable=False),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column(
            "vote_type",
            postgresql.ENUM(name="vote_type", create_type=False),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.ForeignKeyConstraint(
            ["definition_id"], ["community_definitions.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("definition_id", "user_id", name="unique_community_vote"),
    )
    op.create_index("idx_community_votes_user_id", "community_votes", ["user_id"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("idx_community_votes_user_id", table_name="community_votes")
    op.drop_table("community_votes")

    op.drop_index(
        "idx_community_definitions_user_id", table_name="community_definitions"
    )
    op.drop_index(
        "idx_community_definitions_word_id", table_name="community_definitions"
    )
    op.drop_table("community_definitions")

    op.execute("DROP TYPE IF EXISTS vote_type")
    op.execute("DROP TYPE IF EXISTS content_status")
