"""create group_registrations table

Revision ID: 4c1e7a9b2d30
Revises:
Create Date: 2026-10-18 09:12:44.518302

Group names are globally unique and never released, so the unique index on
group_name is the reservation. Sub-statuses live in their own columns and
the overall status is never stored.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "4c1e7a9b2d30"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_STATUS_VALUES = "('PENDING', 'PROCESSING', 'COMPLETE', 'FAILED')"
_SUB_PROCESS_COLUMNS = ("directory", "owner", "app_config")


def upgrade() -> None:
    """Create group_registrations with its unique name index."""
    status_columns = []
    for prefix in _SUB_PROCESS_COLUMNS:
        status_columns.append(
            sa.Column(f"{prefix}_status", sa.String(length=16), nullable=False)
        )
        status_columns.append(
            sa.Column(
                f"{prefix}_transitioned_at",
                sa.DateTime(timezone=True),
                nullable=False,
            )
        )

    op.create_table(
        "group_registrations",
        sa.Column("id", sa.String(length=26), nullable=False),  # ULID
        sa.Column("group_name", sa.String(length=256), nullable=False),
        sa.Column("owner_id", sa.String(length=255), nullable=False),
        sa.Column("owner_email", sa.String(length=320), nullable=False),
        sa.Column("target_app", sa.String(length=255), nullable=False),
        *status_columns,
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_group_registrations")),
        *(
            sa.CheckConstraint(
                f"{prefix}_status IN {_STATUS_VALUES}",
                name=op.f(f"ck_group_registrations_{prefix}_status"),
            )
            for prefix in _SUB_PROCESS_COLUMNS
        ),
    )
    # Reservation: concurrent inserts of the same name cannot both succeed
    op.create_index(
        op.f("ix_group_registrations_group_name"),
        "group_registrations",
        ["group_name"],
        unique=True,
    )
    op.create_index(
        op.f("ix_group_registrations_target_app"),
        "group_registrations",
        ["target_app"],
        unique=False,
    )


def downgrade() -> None:
    """Drop group_registrations."""
    op.drop_index(
        op.f("ix_group_registrations_target_app"), table_name="group_registrations"
    )
    op.drop_index(
        op.f("ix_group_registrations_group_name"), table_name="group_registrations"
    )
    op.drop_table("group_registrations")
