"""SQLAlchemy table definitions for the community voting core.

They match the schema defined in Alembic migrations.
"""

from sqlalchemy import (
    Column,
    Enum,
    ForeignKey,
    Index,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import ARRAY, TIMESTAMP, UUID

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# COMMUNITY DEFINITIONS TABLE
# ============================================================================
community_definitions_table = Table(
    "community_definitions",
    metadata,
    Column("id", UUID, primary_key=True, server_default="gen_random_uuid()"),
    Column("word_id", String(255), nullable=False),  # Dictionary entry key
    Column("user_id", UUID, nullable=False),  # Author
    Column("definition", Text, nullable=False),
    Column("usage_example", Text, nullable=True),
    Column("tags", ARRAY(Text), nullable=False, server_default="{}"),
    Column("context", Text, nullable=True),
    Column(
        "status",
        Enum(
            "pending",
            "approved",
            "rejected",
            "hidden",
            name="content_status",
            create_type=False,
        ),
        nullable=False,
        server_default="pending",
    ),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
)

Index("idx_community_definitions_word_id", community_definitions_table.c.word_id)
Index("idx_community_definitions_user_id", community_definitions_table.c.user_id)

# ============================================================================
# COMMUNITY VOTES TABLE
# ============================================================================
community_votes_table = Table(
    "community_votes",
    metadata,
    Column("id", UUID, primary_key=True, server_default="gen_random_uuid()"),
    Column(
        "definition_id",
        UUID,
        ForeignKey("community_definitions.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("user_id", UUID, nullable=False),
    Column(
        "vote_type",
        Enum("upvote", "downvote", name="vote_type", create_type=False),
        nullable=False,
    ),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    UniqueConstraint("definition_id", "user_id", name="unique_community_vote"),
)

Index("idx_community_votes_user_id", community_votes_table.c.user_id)
