from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Media Tracker"
    secret_key: str = "dev-secret-change-me"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7
    database_url: str = "sqlite:///./database.db"

    # Profile pictures
    upload_dir: str = "uploads"
    max_upload_bytes: int = 5 * 1024 * 1024

    # "Today" and "this year" for the aggregates follow the server's local
    # clock unless this is set.
    use_utc_day: bool = False

    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"

    class Config:
        env_prefix = "MEDIATRACKER_"
        env_file = ".env"


settings = Settings()
