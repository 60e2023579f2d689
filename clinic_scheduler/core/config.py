import os



def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_list(value: str | None, default: list[int]) -> list[int]:
    if not value:
        return default
    return [int(part) for part in value.split(",") if part.strip()]

APP_ENV = os.getenv("APP_ENV", "development")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./clinic_scheduler.db")

SLOT_DURATION_MINUTES = int(os.getenv("SLOT_DURATION_MINUTES", "30"))
CANCELLATION_SECRET_BYTES = int(os.getenv("CANCELLATION_SECRET_BYTES", "16"))
MANAGEMENT_TOKEN_BYTES = int(os.getenv("MANAGEMENT_TOKEN_BYTES", "16"))

# Windows created for every newly registered owner. Weekdays use 0 = Sunday.
DEFAULT_WINDOW_START = os.getenv("DEFAULT_WINDOW_START", "09:00")
DEFAULT_WINDOW_END = os.getenv("DEFAULT_WINDOW_END", "17:00")
DEFAULT_WINDOW_WEEKDAYS = _get_int_list(os.getenv("DEFAULT_WINDOW_WEEKDAYS"), [1, 2, 3, 4, 5, 6])

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "60"))

CORS_ALLOW_ORIGINS = os.getenv("CORS_ALLOW_ORIGINS", "http://localhost:4200").split(",")

NOTIFICATIONS_ENABLED = _get_bool(os.getenv("NOTIFICATIONS_ENABLED"), default=True)

def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and JWT_SECRET_KEY == "change-me":
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
    if SLOT_DURATION_MINUTES <= 0:
        raise RuntimeError("SLOT_DURATION_MINUTES must be a positive number of minutes.")
