import os
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsError


class Settings(BaseSettings):
    openai_api_key: Optional[str] = Field(None, alias="OPENAI_API_KEY")
    openai_base_url: Optional[str] = Field(None, alias="OPENAI_BASE_URL")
    model: str = Field("gpt-4o-mini", alias="COURSE_WIZARD_MODEL")
    eval_temperature: float = Field(0.3, ge=0.0, le=2.0, alias="COURSE_WIZARD_EVAL_TEMPERATURE")
    eval_max_tokens: int = Field(2000, ge=1, alias="COURSE_WIZARD_EVAL_MAX_TOKENS")
    generation_temperature: float = Field(0.7, ge=0.0, le=2.0, alias="COURSE_WIZARD_GENERATION_TEMPERATURE")
    generation_max_tokens: int = Field(8000, ge=1, alias="COURSE_WIZARD_GENERATION_MAX_TOKENS")
    state_path: Optional[str] = Field(None, alias="COURSE_WIZARD_STATE_PATH")
    cors_origins_value: str = Field("*", alias="COURSE_WIZARD_CORS_ORIGINS")

    class Config:
        env_file = os.getenv("ENV_FILE", ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"
        populate_by_name = True

    @property
    def cors_origins(self) -> List[str]:
        """Comma-separated ``COURSE_WIZARD_CORS_ORIGINS`` as a list."""
        origins = [origin.strip() for origin in self.cors_origins_value.split(",") if origin.strip()]
        return origins or ["*"]


@lru_cache
def get_settings() -> Settings:
    try:
        settings = Settings()  # type: ignore[call-arg]
        if settings.openai_api_key and not os.getenv("OPENAI_API_KEY"):
            os.environ["OPENAI_API_KEY"] = settings.openai_api_key
        return settings
    except (ValidationError, SettingsError) as exc:
        raise RuntimeError(f"Invalid backend configuration: {exc}") from exc
