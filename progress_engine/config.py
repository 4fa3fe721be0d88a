from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PROGRESS_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_permission: str = "employee"
    default_currency: str = "BRL"
    log_level: str = "INFO"
    log_path: Optional[str] = None
    output_dir: str = "outputs"


settings = Settings()
