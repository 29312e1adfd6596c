from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_prefix="ACADEMY_",
        extra="ignore",
    )

    PROJECT_NAME: str = "Academy Scheduler"
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"
    # Include exception text in 500 responses.
    DEBUG: bool = False
    # Refuse to save a schedule that double-books an instructor or classroom.
    REJECT_CONFLICTING_SCHEDULES: bool = True
    SEED_DEMO_DATA: bool = False


settings = Settings()
