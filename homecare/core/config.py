import os
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    PROJECT_NAME: str = "Home Care Back Office"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./homecare.db")

    # Day-of-week rules are resolved in this civil timezone, not the server's
    REFERENCE_TIMEZONE: str = os.getenv("REFERENCE_TIMEZONE", "America/New_York")
    # Show duties whose days_of_week cannot be understood
    DUTY_DAYS_FAIL_OPEN: bool = True

    DAILY_LOGS_PAGE_SIZE: int = 25
    DAILY_LOGS_MAX_PAGE_SIZE: int = 200

    @property
    def USE_SQLITE(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

settings = Settings()
