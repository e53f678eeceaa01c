"""Settings for numbering resolution and rendering."""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class NumberingSettings(BaseSettings):
    counter_prefix: str = "docx-counter"
    numbering_mode: Literal["counter", "text"] = "counter"
    malformed_policy: Literal["abort", "unnumbered"] = "abort"
    level_layout: bool = True

    log_level: str = "INFO"
    html_title: str = "Document"

    model_config = SettingsConfigDict(env_prefix="WORDNUMBERING_", env_file=".env", extra="ignore")


settings = NumberingSettings()
