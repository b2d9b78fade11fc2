"""create properties table with coordinates

Revision ID: 3c1d9e7a2b40
Revises: 
Create Date: 2026-10-19 09:12:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3c1d9e7a2b40"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "properties",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("deposit", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("address", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("city", sa.String(length=120), nullable=False, server_default=""),
        sa.Column("neighborhood", sa.String(length=120), nullable=False, server_default=""),
        # Nullable: listings without coordinates are simply not geotagged
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("bedrooms", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("bathrooms", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("area", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("furnished", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("air_conditioned", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("parking", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("security", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("internet", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("water", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("electricity", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_premium", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_properties_id", "properties", ["id"])
    op.create_index("ix_properties_type", "properties", ["type"])
    op.create_index("ix_properties_city", "properties", ["city"])
    op.create_index("ix_properties_lat_lng", "properties", ["latitude", "longitude"])
    op.create_index("ix_properties_status_available", "properties", ["status", "is_available"])


def downgrade() -> None:
    op.drop_index("ix_properties_status_available", table_name="properties")
    op.drop_index("ix_properties_lat_lng", table_name="properties")
    op.drop_index("ix_properties_city", table_name="properties")
    op.drop_index("ix_properties_type", table_name="properties")
    op.drop_index("ix_properties_id", table_name="properties")
    op.drop_table("properties")
