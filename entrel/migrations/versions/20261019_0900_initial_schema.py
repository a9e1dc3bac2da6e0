"""initial schema

Revision ID: 3f6a1c2e9b70
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3f6a1c2e9b70"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "entities",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("shortname", sa.String(length=255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("parentid", sa.Integer(), nullable=True),
        sa.Column("pricefactor", sa.Float(), nullable=False),
        sa.Column("openinghours", sa.Text(), nullable=True),
        sa.Column("status", sa.Integer(), nullable=False),
        sa.Column("createdby", sa.Integer(), nullable=False),
        sa.Column("sortorder", sa.Integer(), nullable=False),
        sa.Column("maxallocation", sa.Integer(), nullable=False),
        sa.Column("timecreated", sa.DateTime(timezone=True), nullable=False),
        sa.Column("timemodified", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["parentid"], ["entities.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_entities_name", "entities", ["name"])
    op.create_index("ix_entities_shortname", "entities", ["shortname"])
    op.create_index("ix_entities_parentid", "entities", ["parentid"])

    op.create_table(
        "entities_address",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("entityidto", sa.Integer(), nullable=False),
        sa.Column("country", sa.String(length=255), nullable=True),
        sa.Column("city", sa.String(length=255), nullable=True),
        sa.Column("postcode", sa.String(length=64), nullable=True),
        sa.Column("streetname", sa.String(length=255), nullable=True),
        sa.Column("streetnumber", sa.String(length=64), nullable=True),
        sa.Column("maplink", sa.Text(), nullable=True),
        sa.Column("mapembed", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["entityidto"], ["entities.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_entities_address_entityidto", "entities_address", ["entityidto"]
    )

    op.create_table(
        "entities_relations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("component", sa.String(length=100), nullable=False),
        sa.Column("area", sa.String(length=100), nullable=False),
        sa.Column("instanceid", sa.Integer(), nullable=False),
        sa.Column("entityid", sa.Integer(), nullable=False),
        sa.Column("timecreated", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["entityid"], ["entities.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "component", "area", "instanceid", name="uq_entities_relations_address"
        ),
    )
    op.create_index(
        "ix_entities_relations_entityid", "entities_relations", ["entityid"]
    )
    op.create_index(
        "ix_entities_relations_area_entity", "entities_relations", ["area", "entityid"]
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_entities_relations_area_entity", table_name="entities_relations")
    op.drop_index("ix_entities_relations_entityid", table_name="entities_relations")
    op.drop_table("entities_relations")
    op.drop_index("ix_entities_address_entityidto", table_name="entities_address")
    op.drop_table("entities_address")
    op.drop_index("ix_entities_parentid", table_name="entities")
    op.drop_index("ix_entities_shortname", table_name="entities")
    op.drop_index("ix_entities_name", table_name="entities")
    op.drop_table("entities")
