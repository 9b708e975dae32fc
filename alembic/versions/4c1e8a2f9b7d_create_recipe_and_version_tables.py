"""create users, devices, recipes and recipe versions

Revision ID: 4c1e8a2f9b7d
Revises:
Create Date: 2026-10-18

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "4c1e8a2f9b7d"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

STEP0_PAIR_CHECK = "(step0_summary IS NULL) = (step0_audio_url IS NULL)"


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
            onupdate=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True, index=True),
        sa.Column("name", sa.String(255), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "user_devices",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("device_token", sa.String(255), nullable=False),
        sa.Column("platform", sa.String(20), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "device_token", name="uq_user_device_token"),
    )

    op.create_table(
        "recipes",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("ingredients", sa.JSON(), nullable=False),
        sa.Column("instructions", sa.JSON(), nullable=False),
        sa.Column("thumbnail_url", sa.String(2048), nullable=True),
        sa.Column("source_url", sa.String(2048), nullable=True),
        sa.Column("creator_username", sa.String(255), nullable=True),
        sa.Column("embedding", sa.JSON(), nullable=False),
        sa.Column("step0_summary", sa.Text(), nullable=True),
        sa.Column("step0_audio_url", sa.String(2048), nullable=True),
        sa.Column("step_preparations", sa.JSON(), nullable=True),
        sa.Column("chefs_note", sa.Text(), nullable=True),
        sa.Column("difficulty", sa.String(10), nullable=True),
        sa.Column("cooking_time", sa.Integer(), nullable=True),
        sa.Column("is_favorite", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "parent_recipe_id",
            sa.Integer(),
            sa.ForeignKey("recipes.id", ondelete="SET NULL"),
            nullable=True,
        ),
        *_timestamps(),
        sa.CheckConstraint(STEP0_PAIR_CHECK, name="ck_recipes_step0_pair"),
    )

    op.create_table(
        "recipe_versions",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column(
            "recipe_id",
            sa.Integer(),
            sa.ForeignKey("recipes.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("version_number", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("ingredients", sa.JSON(), nullable=False),
        sa.Column("instructions", sa.JSON(), nullable=False),
        sa.Column("chefs_note", sa.Text(), nullable=True),
        sa.Column("changed_ingredients", sa.JSON(), nullable=False),
        sa.Column("step0_summary", sa.Text(), nullable=True),
        sa.Column("step0_audio_url", sa.String(2048), nullable=True),
        sa.Column("difficulty", sa.String(10), nullable=True),
        sa.Column("cooking_time", sa.Integer(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint("recipe_id", "version_number", name="uq_recipe_version_number"),
        sa.CheckConstraint(STEP0_PAIR_CHECK, name="ck_recipe_versions_step0_pair"),
    )


def downgrade() -> None:
    op.drop_table("recipe_versions")
    op.drop_table("recipes")
    op.drop_table("user_devices")
    op.drop_table("users")
