import os
import secrets
from datetime import time

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from clinic_scheduler.database import Base  # noqa: E402
from clinic_scheduler.models.availability import AvailabilityWindow  # noqa: E402
from clinic_scheduler.models.owner import Owner  # noqa: E402
from clinic_scheduler.models.reservation import Reservation  # noqa: E402, F401

MONDAY_HOURS = ((1, time(9, 0), time(10, 0)),)


@pytest.fixture
def db_engine():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_owner(db):
    def _make_owner(name: str = 'Dr. Rivera', windows=MONDAY_HOURS, token: str | None = None) -> Owner:
        owner = Owner(
            name=name,
            specialization='General Practice',
            experience=5,
            contact_info='front-desk@example.com',
            management_token=token or secrets.token_hex(16),
        )
        db.add(owner)
        db.flush()
        for weekday, start, end in windows:
            db.add(AvailabilityWindow(owner_id=owner.id, weekday=weekday, start_time=start, end_time=end))
        db.commit()
        db.refresh(owner)
        return owner

    return _make_owner
