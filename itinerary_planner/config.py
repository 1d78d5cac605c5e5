"""
Configuration management for the Itinerary Planner service.

This module handles loading and managing configuration for the service,
including environment variables, upstream API keys, LLM provider selection
and HTTP server settings.
"""

import os
from dataclasses import dataclass, field
from enum import Enum

from dotenv import load_dotenv
from loguru import logger
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()

DEFAULT_GROQ_MODEL = "llama-3.3-70b-versatile"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"


class LogLevel(str, Enum):
    """Log levels supported by the system."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LLMProvider(str, Enum):
    """Chat completion backends able to stream an itinerary."""

    GROQ = "groq"
    GEMINI = "gemini"


class APIConfig(BaseModel):
    """Configuration for external APIs."""

    groq_api_key: str = Field(default="", description="Groq Cloud API key")
    groq_model: str = Field(default=DEFAULT_GROQ_MODEL, description="Groq model")
    groq_base_url: str = Field(
        default="https://api.groq.com/openai/v1",
        description="OpenAI-compatible base URL for Groq",
    )
    tomtom_api_key: str | None = Field(default=None, description="TomTom API key")
    serpapi_api_key: str | None = Field(default=None, description="SerpApi key")
    gemini_api_key: str | None = Field(default=None, description="Gemini API key")
    gemini_model: str = Field(default=DEFAULT_GEMINI_MODEL, description="Gemini model")

    class ValidationError(Exception):
        """Exception raised for API configuration validation errors."""

        def __init__(
            self, missing_keys: list[str], optional_missing: list[str] | None = None
        ):
            self.missing_keys = missing_keys
            self.optional_missing = optional_missing or []
            message = f"Missing required API keys: {', '.join(missing_keys)}"
            if optional_missing:
                message += f". Optional keys missing: {', '.join(optional_missing)}"
            super().__init__(message)

    @classmethod
    def from_env(cls) -> "APIConfig":
        """Create an APIConfig from environment variables."""
        return cls(
            groq_api_key=os.getenv("GROQ_API_KEY", ""),
            groq_model=os.getenv("GROQ_MODEL") or DEFAULT_GROQ_MODEL,
            groq_base_url=os.getenv(
                "GROQ_BASE_URL", "https://api.groq.com/openai/v1"
            ),
            tomtom_api_key=os.getenv("TOMTOM_API_KEY"),
            serpapi_api_key=os.getenv("SERPAPI_API_KEY"),
            gemini_api_key=os.getenv("GEMINI_API_KEY"),
            gemini_model=os.getenv("GEMINI_MODEL") or DEFAULT_GEMINI_MODEL,
        )

    def validate(
        self, provider: LLMProvider = LLMProvider.GROQ, raise_error: bool = False
    ) -> bool:
        """
        Validate that required API keys are present.

        Only the key of the selected LLM provider is required. Data source
        keys are optional because the pipeline degrades without them.

        Args:
            provider: LLM provider whose key is required
            raise_error: If True, raise ValidationError instead of returning False

        Returns:
            True if all required keys are present, False otherwise

        Raises:
            ValidationError: If raise_error is True and validation fails
        """
        missing_keys = []
        optional_missing = []

        if provider == LLMProvider.GROQ and not self.groq_api_key:
            missing_keys.append("GROQ_API_KEY")
        if provider == LLMProvider.GEMINI and not self.gemini_api_key:
            missing_keys.append("GEMINI_API_KEY")

        if not self.tomtom_api_key:
            optional_missing.append("TOMTOM_API_KEY")
        if not self.serpapi_api_key:
            optional_missing.append("SERPAPI_API_KEY")

        if optional_missing:
            logger.warning(
                f"Optional API keys missing: {', '.join(optional_missing)}. "
                f"Travel data will fall back to partial results."
            )

        if missing_keys:
            logger.error(f"Missing required API keys: {', '.join(missing_keys)}")
            if raise_error:
                raise self.ValidationError(missing_keys, optional_missing)
            return False

        return True


class LLMConfig(BaseModel):
    """Configuration for the itinerary generating model."""

    provider: LLMProvider = Field(default=LLMProvider.GROQ)
    temperature: float = Field(default=0.7, description="Sampling temperature")

    @field_validator("temperature")
    @classmethod
    def validate_temperature(cls, value: float) -> float:
        """Validate temperature is within the range accepted upstream."""
        if not (0.0 <= value <= 2.0):
            raise ValueError(f"Temperature must be between 0.0 and 2.0, got {value}")
        return value

    @classmethod
    def from_env(cls) -> "LLMConfig":
        """Create an LLMConfig from environment variables."""
        return cls(
            provider=LLMProvider(os.getenv("LLM_PROVIDER", "groq").lower()),
            temperature=float(os.getenv("LLM_TEMPERATURE", "0.7")),
        )


class ServerConfig(BaseModel):
    """Configuration for the HTTP server."""

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Create a ServerConfig from environment variables."""
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )


class SystemConfig(BaseModel):
    """System-wide configuration."""

    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    environment: str = Field(
        default="development",
        description="Environment (development, staging, production)",
    )
    http_timeout: float = Field(
        default=30.0, description="Timeout in seconds for upstream data requests"
    )

    @classmethod
    def from_env(cls) -> "SystemConfig":
        """Create a SystemConfig from environment variables."""
        return cls(
            log_level=LogLevel(os.getenv("LOG_LEVEL", "INFO").upper()),
            environment=os.getenv("ENVIRONMENT", "development"),
            http_timeout=float(os.getenv("HTTP_TIMEOUT", "30")),
        )


@dataclass
class ItineraryPlannerConfig:
    """Main configuration class for the Itinerary Planner service."""

    api: APIConfig = field(default_factory=APIConfig.from_env)
    llm: LLMConfig = field(default_factory=LLMConfig.from_env)
    server: ServerConfig = field(default_factory=ServerConfig.from_env)
    system: SystemConfig = field(default_factory=SystemConfig.from_env)

    class ConfigurationError(Exception):
        """Exception raised for configuration validation errors."""

        pass

    def validate(self, raise_error: bool = False) -> bool:
        """
        Validate the entire configuration.

        Args:
            raise_error: If True, raise ConfigurationError instead of returning False

        Returns:
            True if configuration is valid, False otherwise

        Raises:
            ConfigurationError: If raise_error is True and validation fails
        """
        try:
            self.api.validate(provider=self.llm.provider, raise_error=True)

            if self.system.http_timeout <= 0:
                raise ValueError("HTTP timeout must be positive")

            return True

        except Exception as e:
            if not isinstance(e, self.api.ValidationError):
                logger.error(f"Configuration validation failed: {e!s}")

            if raise_error:
                raise self.ConfigurationError(
                    f"Configuration validation failed: {e!s}"
                ) from e

            return False


# Global configuration instance
config = ItineraryPlannerConfig()


def warn_if_llm_unconfigured(cfg: ItineraryPlannerConfig | None = None) -> None:
    """Log a startup warning when the LLM key is absent."""
    cfg = cfg or config
    if cfg.llm.provider == LLMProvider.GROQ and not cfg.api.groq_api_key:
        logger.warning(
            "GROQ_API_KEY is not set. Itinerary generation via Groq will fail "
            "until this is configured."
        )
    elif cfg.llm.provider == LLMProvider.GEMINI and not cfg.api.gemini_api_key:
        logger.warning(
            "GEMINI_API_KEY is not set. Itinerary generation via Gemini will fail "
            "until this is configured."
        )


def initialize_config(
    custom_config_path: str | None = None,
    validate: bool = True,
    raise_on_error: bool = False,
) -> ItineraryPlannerConfig:
    """
    Initialize and validate the configuration.

    Args:
        custom_config_path: Path to a custom .env file to load
        validate: Whether to validate the configuration
        raise_on_error: Whether to raise an exception on validation failure

    Returns:
        Initialized and validated configuration object

    Raises:
        ItineraryPlannerConfig.ConfigurationError: If validation fails and
            raise_on_error is True
        FileNotFoundError: If custom_config_path is provided but does not exist
    """
    if custom_config_path:
        if not os.path.exists(custom_config_path):
            error_msg = f"Custom configuration file not found: {custom_config_path}"
            logger.error(error_msg)
            raise FileNotFoundError(error_msg)

        logger.info(f"Loading custom configuration from {custom_config_path}")
        load_dotenv(custom_config_path, override=True)

        # Reload into the existing global so importers see the updates
        config.api = APIConfig.from_env()
        config.llm = LLMConfig.from_env()
        config.server = ServerConfig.from_env()
        config.system = SystemConfig.from_env()

    if validate:
        is_valid = config.validate(raise_error=raise_on_error)
        if not is_valid:
            logger.warning(
                "Configuration validation failed. Itinerary generation will not "
                "work until the required API keys are set."
            )
            logger.info(
                "Required environment variables: GROQ_API_KEY "
                "(or GEMINI_API_KEY with LLM_PROVIDER=gemini)"
            )
            logger.info(
                "Optional environment variables: TOMTOM_API_KEY, SERPAPI_API_KEY"
            )

    return config
