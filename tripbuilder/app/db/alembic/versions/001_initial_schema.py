"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-18

Creates the sales and fulfillment tables:
- sales_client, itinerary_version, follow_up_history
- operations_person, package_assignment, booking_checklist_item
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    """Create all tables."""
    # sales_client table
    op.create_table(
        "sales_client",
        sa.Column("client_id", sa.Uuid(), primary_key=True),
        sa.Column("sales_person_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("country_code", sa.Text(), nullable=False),
        sa.Column("whatsapp", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("travel_date", sa.Date(), nullable=False),
        sa.Column("number_of_days", sa.Integer(), nullable=False),
        sa.Column("number_of_adults", sa.Integer(), nullable=False),
        sa.Column("number_of_children", sa.Integer(), nullable=False),
        sa.Column("transportation_mode", sa.Text(), nullable=False),
        sa.Column("total_cost", sa.Numeric(12, 2), nullable=False),
        sa.Column("current_status", sa.Text(), nullable=False),
        sa.Column("next_follow_up_date", sa.Date(), nullable=True),
        sa.Column("next_follow_up_time", sa.Time(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint(
            "sales_person_id", "country_code", "whatsapp", "travel_date",
            name="uq_sales_client_natural_key",
        ),
    )
    op.create_index(
        "idx_sales_client_follow_up", "sales_client", ["sales_person_id", "next_follow_up_date"]
    )

    # itinerary_version table
    op.create_table(
        "itinerary_version",
        sa.Column("version_id", sa.Uuid(), primary_key=True),
        sa.Column("client_id", sa.Uuid(), nullable=False),
        sa.Column("version_number", sa.Integer(), nullable=False),
        sa.Column("itinerary_data", JSONType, nullable=False),
        sa.Column("total_cost", sa.Numeric(12, 2), nullable=False),
        sa.Column("change_description", sa.Text(), nullable=False),
        sa.Column("follow_up_status", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("created_by", sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(["client_id"], ["sales_client.client_id"]),
        sa.UniqueConstraint("client_id", "version_number", name="uq_itinerary_version_number"),
    )

    # follow_up_history table
    op.create_table(
        "follow_up_history",
        sa.Column("entry_id", sa.Uuid(), primary_key=True),
        sa.Column("client_id", sa.Uuid(), nullable=False),
        sa.Column("sales_person_id", sa.Uuid(), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("status", sa.Text(), nullable=False),
        sa.Column("remarks", sa.Text(), nullable=False),
        sa.Column("next_follow_up_date", sa.Date(), nullable=True),
        sa.Column("next_follow_up_time", sa.Time(), nullable=True),
        sa.Column("itinerary_version_number", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("created_by", sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(["client_id"], ["sales_client.client_id"]),
        sa.UniqueConstraint("client_id", "sequence", name="uq_follow_up_history_sequence"),
    )

    # operations_person table
    op.create_table(
        "operations_person",
        sa.Column("person_id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
    )

    # package_assignment table
    op.create_table(
        "package_assignment",
        sa.Column("assignment_id", sa.Uuid(), primary_key=True),
        sa.Column("client_id", sa.Uuid(), nullable=False),
        sa.Column("sales_person_id", sa.Uuid(), nullable=False),
        sa.Column("operations_person_id", sa.Uuid(), nullable=False),
        sa.Column("version_number", sa.Integer(), nullable=False),
        sa.Column("status", sa.Text(), server_default="pending", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("created_by", sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(["client_id"], ["sales_client.client_id"]),
        sa.ForeignKeyConstraint(["operations_person_id"], ["operations_person.person_id"]),
        sa.UniqueConstraint("client_id", name="uq_package_assignment_client"),
    )

    # booking_checklist_item table
    op.create_table(
        "booking_checklist_item",
        sa.Column("item_id", sa.Uuid(), primary_key=True),
        sa.Column("client_id", sa.Uuid(), nullable=False),
        sa.Column("assignment_id", sa.Uuid(), nullable=False),
        sa.Column("item_type", sa.Text(), nullable=False),
        sa.Column("item_ref", sa.Text(), nullable=False),
        sa.Column("item_name", sa.Text(), nullable=False),
        sa.Column("day_number", sa.Integer(), nullable=True),
        sa.Column("is_booked", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("booked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("booked_by", sa.Uuid(), nullable=True),
        sa.Column("booking_notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["client_id"], ["sales_client.client_id"]),
        sa.ForeignKeyConstraint(
            ["assignment_id"], ["package_assignment.assignment_id"], ondelete="CASCADE"
        ),
    )
    op.create_index(
        "idx_checklist_client_day", "booking_checklist_item", ["client_id", "day_number"]
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("booking_checklist_item")
    op.drop_table("package_assignment")
    op.drop_table("operations_person")
    op.drop_table("follow_up_history")
    op.drop_table("itinerary_version")
    op.drop_table("sales_client")
