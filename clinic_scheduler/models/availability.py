"""Availability model definitions."""

from sqlalchemy import Column, Integer, Time, ForeignKey, CheckConstraint
from clinic_scheduler.database import Base


class AvailabilityWindow(Base):
    """Represents a recurring weekly block of bookable time."""
    __tablename__ = "availability_windows"
    __table_args__ = (
        CheckConstraint("weekday >= 0 AND weekday <= 6", name="ck_availability_weekday"),
        CheckConstraint("start_time < end_time", name="ck_availability_time_order"),
    )

    id = Column(Integer, primary_key=True)
    owner_id = Column(Integer, ForeignKey("owners.id"), nullable=False, index=True)
    weekday = Column(Integer, nullable=False)  # 0 = Sunday
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
