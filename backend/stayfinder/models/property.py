"""Property model — listings offered by hosts."""

import uuid
from decimal import Decimal

from sqlalchemy import JSON, Boolean, Float, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from stayfinder.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Property(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A rentable listing owned by a host.

    ``rating`` is a cached aggregate. Only the review write path updates it;
    the property endpoints never accept it as input.
    """

    __tablename__ = "properties"

    host_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    base_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)  # nights 1-7
    weekly_discount_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)  # night 8 onwards
    tax_percent: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    max_guests: Mapped[int | None] = mapped_column(default=None)
    amenities: Mapped[list] = mapped_column(JSON, default=list)
    cover_photo: Mapped[str] = mapped_column(String(512), nullable=False)
    images: Mapped[list] = mapped_column(JSON, default=list)
    rating: Mapped[Decimal] = mapped_column(Numeric(3, 2), default=Decimal("0"), server_default="0")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, title={self.title!r}, host_id={self.host_id})>"
