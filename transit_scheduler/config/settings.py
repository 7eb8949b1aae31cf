"""
Application settings and configuration
"""
import os
from dotenv import load_dotenv

load_dotenv()


def _to_int(val, default: int) -> int:
    try:
        return int(val) if val is not None else default
    except ValueError:
        return default


class Settings:
    # Application
    APP_NAME = os.getenv("APP_NAME", "Transit Scheduler")
    VERSION = "1.0.0"
    DEBUG = os.getenv("DEBUG", "True") == "True"

    # Security
    SECRET_KEY = os.getenv("SECRET_KEY", "your-secret-key-change-in-production")
    ALGORITHM = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24  # 24 hours

    # CORS
    ALLOWED_ORIGINS = [
        origin.strip()
        for origin in os.getenv(
            "ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:5173"
        ).split(",")
        if origin.strip()
    ]

    # Timestamps are returned in this zone
    APP_TIMEZONE = os.getenv("APP_TIMEZONE", "UTC")

    # Trips
    # Assumed length of a trip with no arrival time when checking overlaps.
    # This is an approximation, not a measured transit time.
    DEFAULT_TRIP_DURATION_MINUTES = _to_int(os.getenv("DEFAULT_TRIP_DURATION_MINUTES"), 120)
    DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "USD")
    TRIP_CODE_PREFIX = "TRP"
    MAX_TRIPS_LISTED = 200
    # Longest window one preview or generation request may cover
    MAX_GENERATION_DAYS = _to_int(os.getenv("MAX_GENERATION_DAYS"), 366)

    # Pagination
    DEFAULT_PAGE_SIZE = 20
    MAX_PAGE_SIZE = 100

settings = Settings()
