import os

from dotenv import load_dotenv

load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]

APP_ENV = os.getenv("APP_ENV", "development")
APP_NAME = os.getenv("APP_NAME", "MediCare Hospital")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./hospital.db")
DATABASE_ECHO = _get_bool(os.getenv("DATABASE_ECHO"), default=False)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CORS_ALLOWED_ORIGINS = _get_list(os.getenv("CORS_ALLOWED_ORIGINS"), ["http://localhost:4200"])

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "60"))

# Daily slot grid shown on the availability page.
SLOT_GRID_START = os.getenv("SLOT_GRID_START", "09:00")
SLOT_GRID_END = os.getenv("SLOT_GRID_END", "17:00")
SLOT_GRID_STEP_MINUTES = int(os.getenv("SLOT_GRID_STEP_MINUTES", "30"))

APPOINTMENTS_PER_PAGE = int(os.getenv("APPOINTMENTS_PER_PAGE", "10"))


def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and JWT_SECRET_KEY == "change-me":
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
    if SLOT_GRID_STEP_MINUTES <= 0:
        raise RuntimeError("SLOT_GRID_STEP_MINUTES must be a positive number of minutes.")
