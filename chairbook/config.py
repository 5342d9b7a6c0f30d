# chairbook/config.py

import pytz
from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./chairbook.db"
    TIMEZONE: str = "America/New_York"
    LOG_LEVEL: str = "INFO"
    SEED_DEMO_DATA: bool = False
    SQL_ECHO: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @field_validator("TIMEZONE")
    @classmethod
    def known_timezone(cls, value: str) -> str:
        if value not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {value!r}")
        return value

    @field_validator("LOG_LEVEL")
    @classmethod
    def upper_log_level(cls, value: str) -> str:
        return value.upper()


settings = Settings()
