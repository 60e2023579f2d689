"""Reservation model definitions."""

from datetime import datetime

from sqlalchemy import Column, Integer, DateTime, ForeignKey, Index, String, text
from sqlalchemy.orm import relationship
from clinic_scheduler.database import ACTIVE_SLOT_INDEX_NAME, Base

STATUS_PENDING = "Pending"
STATUS_CONFIRMED = "Confirmed"
STATUS_CANCELLED = "Cancelled"
RESERVATION_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED, STATUS_CANCELLED)

_ACTIVE_ONLY = text("status != 'Cancelled'")


class Reservation(Base):
    """Represents a booked slot."""
    __tablename__ = "reservations"
    __table_args__ = (
        Index(
            ACTIVE_SLOT_INDEX_NAME,
            "owner_id",
            "scheduled_at",
            unique=True,
            sqlite_where=_ACTIVE_ONLY,
            postgresql_where=_ACTIVE_ONLY,
        ),
    )

    id = Column(Integer, primary_key=True)
    owner_id = Column(Integer, ForeignKey("owners.id"), nullable=False, index=True)
    requester_name = Column(String, nullable=False)
    requester_contact = Column(String, nullable=False)
    scheduled_at = Column(DateTime, nullable=False)
    status = Column(String, nullable=False, default=STATUS_PENDING)
    cancellation_secret = Column(String, unique=True, nullable=False)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    owner = relationship("Owner")

    @property
    def owner_name(self):
        return self.owner.name if self.owner is not None else None
