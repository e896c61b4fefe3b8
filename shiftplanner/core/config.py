from datetime import time

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./shiftplanner.db"

    # Store defaults, used when an establishment has no settings row
    DEFAULT_MORNING_START: time = time(10, 0)
    DEFAULT_MORNING_END: time = time(14, 0)
    DEFAULT_AFTERNOON_START: time = time(17, 0)
    DEFAULT_AFTERNOON_END: time = time(21, 0)
    EARLY_MORNING_START: time = time(9, 0)
    EARLY_MORNING_END: time = time(14, 0)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
