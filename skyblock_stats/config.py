"""Configuration management for the Skyblock Stats banner service."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from decouple import Choices
from decouple import config


class Environment(Enum):
    """Supported deployment environments."""

    DEVELOPMENT = "development"
    CI = "CI"
    PRODUCTION = "production"


LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class Config:
    """Configuration for the Skyblock Stats banner service."""

    # Required fields
    profiles_api_key: str
    weight_api_key: str

    # Environment configuration
    environment: Environment = Environment.DEVELOPMENT

    # Upstream services
    directory_api_url: str = "https://api.mojang.com"
    profiles_api_url: str = "https://api.altpapier.dev"
    # The worker host is required when the banner is served from our own domain,
    # the public one is lily.antonio32a.com
    weight_api_url: str = "https://lilyweight.antonio32a.workers.dev"
    avatar_api_url: str = "https://crafthead.net"
    avatar_size: int = 50
    upstream_timeout_seconds: float = 10.0

    # HTTP server configuration
    http_host: str = "0.0.0.0"
    http_port: int = 8080
    project_url: str = "https://github.com/Antonio32A/skyblock-stats-banner"

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"

    # OpenTelemetry configuration
    otel_enabled: bool = False
    otel_service_name: str = "skyblock-stats"
    otel_exporter_type: str = "none"
    otel_otlp_endpoint: str = "http://localhost:4317"
    otel_export_interval_millis: int = 60000
    otel_export_timeout_millis: int = 30000

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from environment variables."""
        # Helper function to simplify config calls
        def get_config(key: str, default=None, cast=None):
            if default is not None:
                if cast is not None:
                    return config(key, default=default, cast=cast)
                else:
                    return config(key, default=default)
            else:
                return config(key)

        env = Environment(
            get_config("ENVIRONMENT", "development", Choices(["development", "CI", "production"]))
        )

        return cls(
            # Required
            profiles_api_key=get_config("PROFILES_KEY"),
            weight_api_key=get_config("WEIGHT_KEY"),
            # Environment
            environment=env,
            # Upstream services
            directory_api_url=get_config("DIRECTORY_API_URL", "https://api.mojang.com"),
            profiles_api_url=get_config("PROFILES_API_URL", "https://api.altpapier.dev"),
            weight_api_url=get_config("WEIGHT_API_URL", "https://lilyweight.antonio32a.workers.dev"),
            avatar_api_url=get_config("AVATAR_API_URL", "https://crafthead.net"),
            avatar_size=get_config("AVATAR_SIZE", 50, int),
            upstream_timeout_seconds=get_config("UPSTREAM_TIMEOUT_SECONDS", 10.0, float),
            # HTTP server
            http_host=get_config("HTTP_HOST", "0.0.0.0"),
            http_port=get_config("HTTP_PORT", 8080, int),
            project_url=get_config(
                "PROJECT_URL", "https://github.com/Antonio32A/skyblock-stats-banner"
            ),
            # Logging
            log_level=get_config("LOG_LEVEL", "INFO", Choices(LOG_LEVELS)),
            log_format=get_config("LOG_FORMAT", "json", Choices(["json", "text"])),
            # OpenTelemetry
            otel_enabled=get_config("OTEL_ENABLED", False, bool),
            otel_service_name=get_config("OTEL_SERVICE_NAME", "skyblock-stats"),
            otel_exporter_type=get_config(
                "OTEL_EXPORTER_TYPE", "none", Choices(["console", "otlp", "none"])
            ),
            otel_otlp_endpoint=get_config("OTEL_OTLP_ENDPOINT", "http://localhost:4317"),
            otel_export_interval_millis=get_config("OTEL_EXPORT_INTERVAL_MILLIS", 60000, int),
            otel_export_timeout_millis=get_config("OTEL_EXPORT_TIMEOUT_MILLIS", 30000, int),
        )

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == Environment.DEVELOPMENT


# Global configuration instance
_config: Optional[Config] = None


def init_config() -> Config:
    """Load the configuration from the environment and store it globally."""
    global _config
    _config = Config.from_env()
    return _config


def get_config() -> Config:
    """Get the global configuration, loading it on first use."""
    if _config is None:
        return init_config()
    return _config


def reset_config() -> None:
    """Forget the global configuration so the next access reloads it."""
    global _config
    _config = None
