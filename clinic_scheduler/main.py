import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from clinic_scheduler.core import config
from clinic_scheduler.database import Base, engine, ensure_reservation_schema
from clinic_scheduler.models import availability, owner, reservation  # noqa: F401
from clinic_scheduler.routes import (
    auth_routes,
    availability_routes,
    owner_routes,
    reservation_routes,
    slot_routes,
)

logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s [%(name)s] %(message)s')

config.validate_runtime_config()

app = FastAPI(title='Clinic Scheduler API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    try:
        Base.metadata.create_all(bind=engine)
        ensure_reservation_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'status': 'Clinic Scheduler API Running'}


app.include_router(auth_routes.router, prefix='/auth')
app.include_router(owner_routes.router, prefix='/owners')
app.include_router(availability_routes.router, prefix='/availability')
app.include_router(slot_routes.router, prefix='/slots')
app.include_router(reservation_routes.router, prefix='/reservations')
