"""Initial library schema

Revision ID: 3f9c2a1d7b44
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "3f9c2a1d7b44"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "user",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("name", sa.String, nullable=False),
        sa.Column("email", sa.String, nullable=True),
        sa.Column("media_items", sa.JSON, nullable=False),
        sa.Column("lists", sa.JSON, nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "media_item",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("title", sa.String, nullable=False),
        sa.Column("media_type", sa.String, nullable=False),
        sa.Column("categories", sa.JSON, nullable=False),
        sa.Column("author", sa.String, nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("cover_photo", sa.String, nullable=True),
        sa.Column("language", sa.String, nullable=True),
        sa.Column("published_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ratings", sa.JSON, nullable=True),
        sa.Column("rating_count", sa.Float, nullable=True),
        sa.Column("status", sa.String, nullable=False),
        sa.Column("my_rating", sa.Float, nullable=True),
        sa.Column("progress", sa.Float, nullable=False),
        sa.Column("personal_notes", sa.Text, nullable=False),
        sa.Column("lists", sa.JSON, nullable=False),
        sa.Column("isbn", sa.String, nullable=True),
        sa.Column("page_count", sa.Integer, nullable=True),
        sa.Column("publisher", sa.String, nullable=True),
        sa.Column("actors", sa.JSON, nullable=True),
        sa.Column("awards", sa.String, nullable=True),
        sa.Column("runtime", sa.Float, nullable=True),
        sa.Column("director", sa.String, nullable=True),
        sa.Column("imdb_id", sa.String, nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_media_item_title", "media_item", ["title"])
    op.create_index("ix_media_item_media_type", "media_item", ["media_type"])

    op.create_table(
        "media_list",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column(
            "owner_id",
            sa.Integer,
            sa.ForeignKey("user.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String, nullable=False),
        sa.Column("color", sa.String, nullable=False),
        sa.Column("media_type", sa.String, nullable=False),
        sa.Column("items", sa.JSON, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_media_list_owner_id", "media_list", ["owner_id"])
    op.create_index("ix_media_list_media_type", "media_list", ["media_type"])


def downgrade() -> None:
    op.drop_index("ix_media_list_media_type", table_name="media_list")
    op.drop_index("ix_media_list_owner_id", table_name="media_list")
    op.drop_table("media_list")
    op.drop_index("ix_media_item_media_type", table_name="media_item")
    op.drop_index("ix_media_item_title", table_name="media_item")
    op.drop_table("media_item")
    op.drop_table("user")
