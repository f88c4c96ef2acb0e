"""SQLAlchemy models mirroring the reservation and user wire records."""

from sqlalchemy import Index, MetaData, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base; constraint names follow a fixed convention."""

    metadata = MetaData(naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_name)s",
        "pk": "pk_%(table_name)s",
    })


class ReservationRow(Base):
    """Reservation table model. Rows are deleted on cancel; there is no status column."""

    __tablename__ = "reservations"

    reservation_id: Mapped[str] = mapped_column(
        String(100),
        primary_key=True,
    )

    user_id: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
    )

    # Holds the seat ID ("A1"), not a table key
    table_id: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )

    date: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        index=True,
    )

    slot_type: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
    )

    created_at: Mapped[str] = mapped_column(
        String(40),
        nullable=False,
        default="",
    )

    __table_args__ = (
        Index("ix_reservations_table_id_date", "table_id", "date"),
    )

    def __repr__(self) -> str:
        return (
            f"<ReservationRow(id={self.reservation_id}, user={self.user_id}, "
            f"seat={self.table_id}, date={self.date}, slot={self.slot_type})>"
        )


class UserRow(Base):
    """User directory table model."""

    __tablename__ = "users"

    user_id: Mapped[str] = mapped_column(
        String(100),
        primary_key=True,
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<UserRow(user_id={self.user_id}, email={self.email})>"
