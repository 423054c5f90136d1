import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

EXTENSION_MODES = ("external", "internal")


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration loaded from environment variables."""

    # --- Required Variables ---
    service_name: str
    environment: str

    # --- Optional Variables with Defaults ---
    log_level: str
    greeting_message: str

    # --- Shutdown Extension Configuration ---
    shutdown_extension_mode: str
    extension_name: str
    extension_http_timeout_seconds: int
    runtime_api: str | None

    # --- Derived Properties ---
    @property
    def uses_internal_extension(self) -> bool:
        return self.shutdown_extension_mode == "internal"

    @classmethod
    def load_from_env(cls) -> "AppConfig":
        """
        Loads configuration from environment variables, performing validation and type casting.
        Fails fast with a ConfigurationError if anything is invalid.
        """
        try:
            # --- Handle required string variables ---
            service_name = os.environ["SERVICE_NAME"]
            environment = os.environ["ENVIRONMENT"]
            if not service_name.strip() or not environment.strip():
                raise ValueError("SERVICE_NAME and ENVIRONMENT must not be empty.")

            # --- Handle special-case variables like log level ---
            log_level = os.getenv("LOG_LEVEL", "INFO").upper()
            allowed_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
            if log_level not in allowed_log_levels:
                raise ValueError(
                    f"LOG_LEVEL must be one of {allowed_log_levels}, not '{log_level}'"
                )

            greeting_message = os.getenv("GREETING_MESSAGE", "hello python")
            if not greeting_message.strip():
                raise ValueError("GREETING_MESSAGE must not be empty.")

            # --- Handle shutdown extension configuration ---
            shutdown_extension_mode = os.getenv(
                "SHUTDOWN_EXTENSION_MODE", "external"
            ).lower()
            if shutdown_extension_mode not in EXTENSION_MODES:
                raise ValueError(
                    f"SHUTDOWN_EXTENSION_MODE must be one of {list(EXTENSION_MODES)}, "
                    f"not '{shutdown_extension_mode}'"
                )

            extension_name = os.getenv("EXTENSION_NAME", "no-op")
            if not extension_name.strip():
                raise ValueError("EXTENSION_NAME must not be empty.")

            extension_http_timeout_seconds = int(
                os.getenv("EXTENSION_HTTP_TIMEOUT_SECONDS", "5")
            )
            if extension_http_timeout_seconds <= 0:
                raise ValueError(
                    "EXTENSION_HTTP_TIMEOUT_SECONDS must be a positive integer."
                )

            # Only the internal extension talks to the Extensions API itself.
            runtime_api = os.getenv("AWS_LAMBDA_RUNTIME_API")
            if shutdown_extension_mode == "internal":
                if not runtime_api:
                    raise KeyError("AWS_LAMBDA_RUNTIME_API")
                host, _, port = runtime_api.rpartition(":")
                if not host or not port.isdigit():
                    raise ValueError(
                        f"AWS_LAMBDA_RUNTIME_API must be 'host:port', not '{runtime_api}'"
                    )

        except KeyError as e:
            raise ConfigurationError(
                f"Missing required environment variable: {e.args[0]}"
            ) from e
        except (ValueError, TypeError) as e:
            raise ConfigurationError(
                f"Invalid value for an environment variable: {e}"
            ) from e

        return cls(
            service_name=service_name,
            environment=environment,
            log_level=log_level,
            greeting_message=greeting_message,
            shutdown_extension_mode=shutdown_extension_mode,
            extension_name=extension_name,
            extension_http_timeout_seconds=extension_http_timeout_seconds,
            runtime_api=runtime_api,
        )


# --- Singleton Factory Function (Lazy-loaded and Cached) ---
@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """
    Loads the application configuration from environment variables.
    The result is cached using lru_cache, so the environment is only read once
    on the first call. This avoids import-time side effects.
    """
    logger.info("Loading application configuration from environment...")
    return AppConfig.load_from_env()
