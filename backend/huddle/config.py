from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440  # 24h

    # Snapshot persistence
    data_dir: str = "/data/huddle"
    snapshot_file: str = "workspace.db"
    snapshot_interval_seconds: int = 30

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_prefix": "HUDDLE_"}


settings = Settings()
