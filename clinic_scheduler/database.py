from contextlib import contextmanager
from dotenv import load_dotenv
from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker


load_dotenv()

from clinic_scheduler.core import config  # noqa: E402

DATABASE_URL = config.DATABASE_URL

engine = create_engine(
    DATABASE_URL,
    connect_args={'check_same_thread': False} if DATABASE_URL.startswith('sqlite') else {},
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

ACTIVE_SLOT_INDEX_NAME = 'uq_reservations_active_slot'

_schema_lock = Lock()
_reservation_schema_checked = False


@contextmanager
def session_scope(factory=SessionLocal):
    """Acquire a session for one unit of work and always release it."""
    db = factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def ensure_reservation_schema(bind=None) -> None:
    global _reservation_schema_checked

    if _reservation_schema_checked:
        return

    bind = bind or engine

    with _schema_lock:
        if _reservation_schema_checked:
            return

        inspector = inspect(bind)

        if 'reservations' not in inspector.get_table_names():
            _reservation_schema_checked = True
            return

        with bind.begin() as connection:
            # Final authority against double booking: one live reservation per owner and instant.
            connection.execute(
                text(
                    f'CREATE UNIQUE INDEX IF NOT EXISTS {ACTIVE_SLOT_INDEX_NAME} '
                    "ON reservations(owner_id, scheduled_at) WHERE status != 'Cancelled'"
                )
            )
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_reservations_owner_start ON reservations(owner_id, scheduled_at)')
            )

        _reservation_schema_checked = True
