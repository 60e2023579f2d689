"""Owner model definitions."""

from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime
from clinic_scheduler.database import Base


class Owner(Base):
    """Represents a practitioner whose schedule is managed."""
    __tablename__ = "owners"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    specialization = Column(String)
    experience = Column(Integer, default=0)
    contact_info = Column(String)
    email = Column(String, unique=True, index=True, nullable=True)
    hashed_password = Column(String, nullable=True)
    management_token = Column(String, unique=True, index=True, nullable=False)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)
