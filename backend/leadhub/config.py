from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # --- Runtime ---
    ENV: str = "dev"  # dev|prod
    LEADHUB_DB_URL: str = "sqlite+aiosqlite:///./leadhub.db"
    LOG_LEVEL: str = "INFO"

    # --- Minimal B2B Auth (API key) ---
    # Send: X-API-Key: <key>
    API_KEY: str | None = None

    # --- Scheduler tuning ---
    SCHEDULER_ENABLED: bool = True
    CONNECTOR_TICK_SECONDS: int = 60

    # --- Outbound transports ---
    # None => no timeout (a hung source only blocks its own connector)
    HTTP_TIMEOUT_S: float | None = None
    # False skips known_hosts checks (local test servers only)
    SFTP_VERIFY_HOST_KEYS: bool = True

    # --- Lead queries / manual import ---
    DEFAULT_BATCH_SIZE: int = 5000
    MANUAL_IMPORT_PROVIDER: str = "Manual Import"


settings = Settings()
