"""Review model — one guest review per completed booking."""

import uuid

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer, SmallInteger, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stayfinder.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

CATEGORY_FIELDS = ("cleanliness", "communication", "check_in", "accuracy", "location", "value")


class Review(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A guest's rating of a stay. Immutable once written."""

    __tablename__ = "reviews"

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
    )
    # unique=True is the storage-level guard for one review per booking
    booking_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str] = mapped_column(String(1000), nullable=False)

    cleanliness: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    communication: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    check_in: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    accuracy: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    location: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    value: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)

    is_verified: Mapped[bool] = mapped_column(Boolean, default=False)

    # Relationships
    guest: Mapped["User"] = relationship(foreign_keys=[guest_id], lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating_range"),)

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, booking_id={self.booking_id}, rating={self.rating})>"
