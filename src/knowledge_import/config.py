"""Configuration management using pydantic-settings."""

from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class EmptyExtractionPolicy(str, Enum):
    """What the DOCX extractor does when no readable text was recovered."""

    PLACEHOLDER = "placeholder"
    ERROR = "error"


class ParserSettings(BaseSettings):
    """Document parsing configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PARSER_", case_sensitive=False, populate_by_name=True
    )

    version: str = Field(
        default="1.0.0", description="Parser version stamped on extraction metadata. Env var: PARSER_VERSION"
    )
    placeholder_text: str = Field(
        default="Document content extracted (basic parsing)",
        description="Text returned when DOCX extraction recovers nothing. Env var: PARSER_PLACEHOLDER_TEXT",
    )
    empty_extraction: EmptyExtractionPolicy = Field(
        default=EmptyExtractionPolicy.PLACEHOLDER,
        description="placeholder or error. Env var: PARSER_EMPTY_EXTRACTION",
    )
    implicit_headings: bool = Field(
        default=True,
        validation_alias="SEGMENTER_IMPLICIT_HEADINGS",
        description="Treat all-caps lines as level-2 headings. Env var: SEGMENTER_IMPLICIT_HEADINGS",
    )

    @field_validator("empty_extraction", mode="before")
    @classmethod
    def parse_empty_extraction(cls, v):
        """Accept the policy name in any case."""
        if isinstance(v, str):
            return v.strip().lower()
        return v


class TestGenerationSettings(BaseSettings):
    """Completion provider configuration for test generation."""

    __test__ = False

    model_config = SettingsConfigDict(env_prefix="GROK_", case_sensitive=False)

    api_key: Optional[str] = Field(
        default=None, description="Provider API key. Env var: GROK_API_KEY"
    )
    base_url: str = Field(
        default="https://api.x.ai/v1",
        description="OpenAI-compatible API base URL. Env var: GROK_BASE_URL",
    )
    model: str = Field(default="grok-beta", description="Model name. Env var: GROK_MODEL")
    max_tokens: int = Field(
        default=4000, description="Maximum tokens to generate. Env var: GROK_MAX_TOKENS"
    )
    temperature: float = Field(
        default=0.7, description="Sampling temperature. Env var: GROK_TEMPERATURE"
    )
    timeout: float = Field(
        default=60.0, description="Request timeout in seconds. Env var: GROK_TIMEOUT"
    )

    @property
    def is_configured(self) -> bool:
        """Check if an API key is available."""
        return bool(self.api_key)


class ServerSettings(BaseSettings):
    """Server configuration."""

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False)

    host: str = Field(default="0.0.0.0", description="Server host. Env var: HOST")
    port: int = Field(default=8004, description="HTTP server port. Env var: PORT")
    reload: bool = Field(
        default=False, description="Enable auto-reload (development only). Env var: RELOAD"
    )


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    app_name: str = Field(
        default="knowledge-import", description="Application name. Env var: APP_NAME"
    )
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment. Env var: ENVIRONMENT",
    )
    debug: bool = Field(default=False, description="Enable debug mode. Env var: DEBUG")
    log_level: str = Field(
        default="INFO", description="Logging level. Env var: LOG_LEVEL"
    )

    # Supported file types (stored as string, parsed to list)
    allowed_file_types_str: Optional[str] = Field(
        default="docx,xlsx",
        validation_alias="ALLOWED_FILE_TYPES",
        description="Allowed file types for parsing (comma-separated). Env var: ALLOWED_FILE_TYPES",
    )
    max_upload_size_mb: int = Field(
        default=20, description="Maximum accepted upload size. Env var: MAX_UPLOAD_SIZE_MB"
    )
    cors_origins_str: str = Field(
        default="*",
        validation_alias="CORS_ORIGINS",
        description="Allowed CORS origins (comma-separated). Env var: CORS_ORIGINS",
    )

    # Sub-settings
    parser: Optional[ParserSettings] = None
    test_generation: Optional[TestGenerationSettings] = None
    server: Optional[ServerSettings] = None

    @model_validator(mode="after")
    def initialize_nested_settings(self) -> "Settings":
        """Initialize nested settings to ensure they read from environment."""
        if self.parser is None:
            self.parser = ParserSettings()
        if self.test_generation is None:
            self.test_generation = TestGenerationSettings()
        if self.server is None:
            self.server = ServerSettings()
        return self

    @field_validator("environment", mode="before")
    @classmethod
    def parse_environment(cls, v):
        """Parse environment from string."""
        if isinstance(v, str):
            try:
                return Environment(v.lower())
            except ValueError:
                return Environment.DEVELOPMENT
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @property
    def allowed_file_types(self) -> List[str]:
        """Get allowed file types as a list."""
        if not self.allowed_file_types_str:
            return ["docx", "xlsx"]
        return [
            ft.strip().lower().lstrip(".")
            for ft in self.allowed_file_types_str.split(",")
            if ft.strip()
        ]

    @property
    def cors_origins(self) -> List[str]:
        """Allowed CORS origins as a list; ``*`` when none are given."""
        origins = [o.strip() for o in self.cors_origins_str.split(",") if o.strip()]
        return origins or ["*"]

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION

    def validate_production_settings(self) -> None:
        """Validate that production settings are secure."""
        if self.is_production and self.debug:
            raise ValueError("DEBUG must be False in production")


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
        try:
            _settings.validate_production_settings()
        except ValueError as e:
            import logging

            logging.error(f"Configuration validation failed: {e}")
            raise
    return _settings
