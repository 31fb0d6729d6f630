"""Equipment and movements tables

Revision ID: 0001
Revises:
Create Date: 2026-10-17 00:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "equipment",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("asset_id", sa.String(64), nullable=False),
        sa.Column("qr_code", sa.String(128), nullable=False, server_default=""),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("category", sa.String(100), nullable=False, server_default="General"),
        sa.Column("condition", sa.String(20), nullable=False, server_default="Good"),
        sa.Column("notes", sa.Text(), nullable=False, server_default=""),
        sa.Column("photo_url", sa.Text(), nullable=False, server_default=""),
        sa.Column("test_tag_done_date", sa.Date(), nullable=True),
        sa.Column("test_tag_next_due", sa.Date(), nullable=True),
        sa.Column("tag_threshold_days", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("current_status", sa.String(20), nullable=False, server_default="Available"),
        sa.Column("assigned_to", sa.String(200), nullable=False, server_default=""),
        sa.Column("assigned_site", sa.String(200), nullable=False, server_default=""),
        sa.Column("assigned_job", sa.String(200), nullable=False, server_default=""),
        sa.Column("expected_return_date", sa.Date(), nullable=True),
        sa.Column("created_by", sa.String(200), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_equipment_asset_id", "equipment", ["asset_id"], unique=True)

    op.create_table(
        "movements",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "equipment_id",
            sa.String(36),
            sa.ForeignKey("equipment.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("event_type", sa.String(20), nullable=False),
        sa.Column("event_timestamp", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("assigned_to", sa.String(200), nullable=False, server_default=""),
        sa.Column("site", sa.String(200), nullable=False, server_default=""),
        sa.Column("job_reference", sa.String(200), nullable=False, server_default=""),
        sa.Column("notes", sa.Text(), nullable=False, server_default=""),
        sa.Column("pickup_photo_url", sa.Text(), nullable=False, server_default=""),
        sa.Column("return_photo_url", sa.Text(), nullable=False, server_default=""),
        sa.Column("expected_return_date", sa.Date(), nullable=True),
        sa.Column("return_condition", sa.String(20), nullable=True),
        sa.Column("has_new_issues", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("issue_description", sa.Text(), nullable=False, server_default=""),
        sa.Column("requires_service", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("requires_repair", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_by", sa.String(200), nullable=False, server_default="system"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_movements_equipment_id", "movements", ["equipment_id"])
    op.create_index("ix_movements_event_timestamp", "movements", ["event_timestamp"])


def downgrade() -> None:
    op.drop_index("ix_movements_event_timestamp", table_name="movements")
    op.drop_index("ix_movements_equipment_id", table_name="movements")
    op.drop_table("movements")
    op.drop_index("ix_equipment_asset_id", table_name="equipment")
    op.drop_table("equipment")
