"""SQLAlchemy ORM model for the group_registrations table.

Each row holds one registration and the three sub-statuses as separate
columns, so a transition of one sub-process only ever writes its own
columns.
"""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base

_STATUS_VALUES = "('PENDING', 'PROCESSING', 'COMPLETE', 'FAILED')"


class GroupRegistrationModel(Base):
    """ORM model for the group_registrations table.

    Note: group names are globally unique. The unique index
    ix_group_registrations_group_name is what makes name reservation
    atomic under concurrent registration requests.

    The overall status is not stored; it is projected from the three
    sub-status columns when the aggregate is reconstituted.
    """

    __tablename__ = "group_registrations"
    __table_args__ = (
        CheckConstraint(f"directory_status IN {_STATUS_VALUES}", name="directory_status"),
        CheckConstraint(f"owner_status IN {_STATUS_VALUES}", name="owner_status"),
        CheckConstraint(
            f"app_config_status IN {_STATUS_VALUES}", name="app_config_status"
        ),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    group_name: Mapped[str] = mapped_column(
        String(256), nullable=False, unique=True, index=True
    )
    owner_id: Mapped[str] = mapped_column(String(255), nullable=False)
    owner_email: Mapped[str] = mapped_column(String(320), nullable=False)
    target_app: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    directory_status: Mapped[str] = mapped_column(String(16), nullable=False)
    directory_transitioned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    owner_status: Mapped[str] = mapped_column(String(16), nullable=False)
    owner_transitioned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    app_config_status: Mapped[str] = mapped_column(String(16), nullable=False)
    app_config_transitioned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<GroupRegistrationModel(id={self.id}, group_name={self.group_name}, "
            f"target_app={self.target_app})>"
        )
