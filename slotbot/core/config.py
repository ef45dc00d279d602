from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    AUTO_REPLY_ENABLED: bool = False

    STORE_PROVIDER: str = "memory"  # "memory", "json", "redis"
    DATA_DIR: str = "./data"
    REDIS_URL: str = "redis://localhost:6379/0"

    SESSION_TTL_SECONDS: int = 3600
    SLOT_LOCK_TTL_SECONDS: int = 30
    MAX_LIST_ROWS: int = 10

    TENANTS_FILE: str | None = None
    DEFAULT_TENANT_ID: str | None = None

    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL_CLASSIFY: str = "gpt-4o-mini"
    OPENAI_TEMPERATURE_CLASSIFY: float = 0.0

    META_VERIFY_TOKEN: str = ""
    META_APP_SECRET: str | None = None
    META_GRAPH_API_VERSION: str = "v21.0"
    META_ACCESS_TOKEN: str | None = None
    META_PHONE_NUMBER_ID: str | None = None

    WATI_API_URL: str | None = None
    WATI_API_TOKEN: str | None = None


settings = Settings()
