from typing import List, Literal, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .prompt import code_only_prompt

class Settings(BaseSettings):

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Core
    service_name: str = "codegen-service"
    environment: str = "local"
    log_level: str = "INFO"

    # Provider
    gemini_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    )
    provider_base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    provider_timeout_s: float = 60.0

    # Ordered fallback list, tried front to back when a model is overloaded
    default_models: List[str] = [
        "gemini-2.0-flash-lite-preview-02-05",
        "gemini-2.5-flash",
        "gemini-2.5-pro",
    ]
    extra_transient_patterns: List[str] = []

    # Output shaping
    code_language: str = "lua"
    wrap_prompt: bool = True
    prompt_template: str = code_only_prompt

    # HTTP
    cors_allow_origins: List[str] = ["*"]

    # Tracing
    trace_exporter: Literal["cloud", "console", "none"] = "none"

settings = Settings() # type: ignore
