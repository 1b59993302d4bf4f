"""Booking model — a guest's reservation of a property for a date range."""

import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stayfinder.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

# Statuses that hold the dates of a property.
BLOCKING_STATUSES = ("pending", "confirmed")


class Booking(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A reservation linking a guest to a property for ``[check_in, check_out)``.

    ``host_id`` and the ``guest_*`` contact fields are snapshots taken at
    creation time. ``total_price`` is never recomputed.
    """

    __tablename__ = "bookings"

    property_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    guest_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    host_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    check_in: Mapped[date] = mapped_column(Date, nullable=False)
    check_out: Mapped[date] = mapped_column(Date, nullable=False)
    num_guests: Mapped[int] = mapped_column(Integer, default=1)
    total_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="pending", index=True)  # pending, confirmed, completed, cancelled
    payment_status: Mapped[str] = mapped_column(String(20), default="pending")  # pending, completed, failed
    special_requests: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Guest contact snapshot
    guest_name: Mapped[str] = mapped_column(String(255), nullable=False)
    guest_email: Mapped[str] = mapped_column(String(255), nullable=False)
    guest_phone: Mapped[str] = mapped_column(String(50), nullable=False)
    guest_address: Mapped[str | None] = mapped_column(String(512), nullable=True)
    guest_id_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    guest_id_number: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Relationships
    property: Mapped["Property"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (
        CheckConstraint("check_out > check_in", name="ck_bookings_dates"),
        CheckConstraint("num_guests > 0", name="ck_bookings_num_guests_positive"),
        Index("ix_bookings_property_dates", "property_id", "check_in", "check_out"),
    )

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, property_id={self.property_id}, guest_id={self.guest_id}, status={self.status})>"
        )
