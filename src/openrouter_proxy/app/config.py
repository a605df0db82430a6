from dataclasses import dataclass, field

from openrouter_proxy.infrastructure.data_models import ModelMapping
from openrouter_proxy.infrastructure.local_platform_manager import get_parameters

# Constants that don't change
OPENROUTER_API_BASE = "https://openrouter.ai/api/v1"
SERVICE_NAME = "OpenAI to OpenRouter Proxy"

DEFAULT_PORT = 3000
DEFAULT_HOST = "0.0.0.0"
DEFAULT_APP_NAME = "OpenAI-OpenRouter-Proxy"
DEFAULT_APP_URL = "https://github.com/yourusername/openai-openrouter-proxy"
DEFAULT_LOG_LEVEL = "INFO"

# All OpenAI model names route to the same OpenRouter model
MODEL_MAPPING = {
    "gpt-3.5-turbo": "openrouter/aurora-alpha",
    "gpt-4": "openrouter/aurora-alpha",
    "gpt-4-turbo": "openrouter/aurora-alpha",
    "gpt-4o": "openrouter/aurora-alpha",
}


@dataclass(frozen=True)
class ProxySettings:
    """Proxy configuration settings loaded from the environment."""

    # Server settings
    port: int = DEFAULT_PORT
    host: str = DEFAULT_HOST

    # Upstream settings
    openrouter_api_key: str = ""
    api_base: str = OPENROUTER_API_BASE
    model_mapping: ModelMapping = field(default_factory=lambda: ModelMapping(MODEL_MAPPING))

    # Identification headers sent to OpenRouter
    app_name: str = DEFAULT_APP_NAME
    app_url: str = DEFAULT_APP_URL

    # Logging settings
    log_level: str = DEFAULT_LOG_LEVEL
    log_dir: str | None = None

    @property
    def api_connected(self) -> bool:
        return bool(self.openrouter_api_key)


def load_settings() -> ProxySettings:
    """Load settings from environment variables."""
    parameters = get_parameters(
        ["port", "host", "openrouter_api_key", "app_name", "app_url", "log_level", "log_dir"]
    )

    port = parameters["port"] or str(DEFAULT_PORT)
    try:
        port_number = int(port)
    except ValueError as e:
        raise ValueError(f"Configuration value is invalid: PORT={port!r}") from e

    settings = ProxySettings(
        port=port_number,
        host=parameters["host"] or DEFAULT_HOST,
        openrouter_api_key=parameters["openrouter_api_key"] or "",
        app_name=parameters["app_name"] or DEFAULT_APP_NAME,
        app_url=parameters["app_url"] or DEFAULT_APP_URL,
        log_level=parameters["log_level"] or DEFAULT_LOG_LEVEL,
        log_dir=parameters["log_dir"] or None,
    )

    _validate_settings(settings)
    return settings


def _validate_settings(settings: ProxySettings) -> None:
    """Validate that settings have usable values."""
    if not 0 < settings.port < 65536:
        raise ValueError(f"Configuration value is invalid: PORT={settings.port}")
    if settings.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ValueError(f"Configuration value is invalid: LOG_LEVEL={settings.log_level!r}")


class Config:
    """Singleton configuration manager for the proxy."""

    _instance = None
    _settings = None

    def __new__(cls) -> "Config":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def get_settings(self) -> ProxySettings:
        """Get proxy settings, loading from the environment if not already cached."""
        if self._settings is None:
            self._settings = load_settings()
        return self._settings


# Create singleton instance
config = Config()


# Convenience functions
def get_settings() -> ProxySettings:
    """Get proxy settings from the singleton config."""
    return config.get_settings()
