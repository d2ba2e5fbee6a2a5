"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database (durable key/value storage for the notification store)
    database_url: str = "sqlite+aiosqlite:///cropalert_local.db"

    # Redis fan-out for notification events (empty = disabled)
    redis_url: str = ""

    # CORS
    cors_allowed_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "info"
    json_logs: bool = False

    # Store
    store_capacity: int = 100
    persist_limit: int = 50
    storage_schema_version: str = "1"

    # Poll periods per event source, in seconds
    weather_poll_seconds: int = 300
    price_poll_seconds: int = 600
    seasonal_poll_seconds: int = 3600
    government_poll_seconds: int = 1800
    cleanup_interval_seconds: int = 3600

    scheduler_enabled: bool = True
    simulated_sources_enabled: bool = True

    # Push channel
    push_supported: bool = True
    push_permission_response: str = "granted"  # "granted", "denied", "default"
    push_icon: str = "/favicon.ico"
    push_badge: str = "/badge-72x72.png"

    # Timezone used to evaluate users' quiet hours
    local_timezone: str = "UTC"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "CROPALERT_",
    }

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def poll_periods(self) -> dict[str, int]:
        """Return the poll period in seconds keyed by source type."""
        return {
            "weather": self.weather_poll_seconds,
            "price": self.price_poll_seconds,
            "seasonal": self.seasonal_poll_seconds,
            "government": self.government_poll_seconds,
        }


settings = Settings()
