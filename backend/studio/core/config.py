from typing import Annotated, Any, Literal

from pydantic import AliasChoices, AnyUrl, BeforeValidator, Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_cors(v: Any) -> list[str] | str:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",") if i.strip()]
    elif isinstance(v, list | str):
        return v
    raise ValueError(v)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )
    PROJECT_NAME: str = "Story Studio"
    API_V1_STR: str = "/api"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    LOG_LEVEL: str = "INFO"

    BACKEND_CORS_ORIGINS: Annotated[
        list[AnyUrl] | str, BeforeValidator(parse_cors)
    ] = []
    PUBLIC_BASE_URL: str = Field(
        default="http://localhost:8000",
        validation_alias=AliasChoices("PUBLIC_BASE_URL", "NEXT_PUBLIC_BASE_URL"),
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def all_cors_origins(self) -> list[str]:
        return [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS]

    # Storage
    DB_PATH: str = "./database/studio.db"
    DATABASE_URL: str | None = None
    MEDIA_DIR: str = "./media"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        return self.DATABASE_URL or f"sqlite:///{self.DB_PATH}"

    # Provider credentials. An empty value means the provider is unavailable.
    GROQ_API_KEY: str | None = None
    GEMINI_API_KEY: str | None = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_AI_API_KEY"),
    )
    ANTHROPIC_API_KEY: str | None = None
    OPENAI_API_KEY: str | None = None
    LEONARDO_API_KEY: str | None = None
    ELEVENLABS_API_KEY: str | None = None
    OLLAMA_BASE_URL: str = "http://localhost:11434"
    OLLAMA_MODEL: str = "llama3.2"

    # Provider endpoints and model identifiers
    GROQ_BASE_URL: str = "https://api.groq.com/openai/v1"
    GROQ_MODEL: str = "llama-3.3-70b-versatile"
    GROQ_VISION_MODEL: str = "meta-llama/llama-4-maverick-17b-128e-instruct"
    OPENAI_MODEL: str = "gpt-4o-mini"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_MODEL: str = "gemini-2.0-flash"
    GEMINI_VISION_MODEL: str = "gemini-2.0-flash"
    CLAUDE_BASE_URL: str = "https://api.anthropic.com/v1"
    CLAUDE_MODEL: str = "claude-3-5-sonnet-latest"
    LEONARDO_BASE_URL: str = "https://cloud.leonardo.ai/api/rest/v1"
    LEONARDO_MODEL_ID: str = "de7d3faf-762f-48e0-b3b7-9d0ac3a3fcf3"
    ELEVENLABS_BASE_URL: str = "https://api.elevenlabs.io/v1"
    ELEVENLABS_VOICE_ID: str = "Og9r1xtrwAAzZwUkNjhz"
    ELEVENLABS_MODEL_ID: str = "eleven_v3"

    # None leaves httpx at its own default.
    PROVIDER_HTTP_TIMEOUT_SECONDS: float | None = 60.0
    ASSET_ANALYSIS_TIMEOUT_SECONDS: float = 120.0


settings = Settings()  # type: ignore
