"""Application settings for the DOCX numbering API."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "wordnumbering-server"
    api_prefix: str = "/v1"
    environment: str = "local"
    log_level: str = "INFO"

    max_upload_bytes: int = 20 * 1024 * 1024
    allow_user_options: bool = True
    expose_contexts: bool = False

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
