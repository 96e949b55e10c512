"""FastNetMon Exporter - Configuration management."""

import os
from pathlib import Path
from typing import Mapping, Optional, Tuple, Type, Union

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError

DEFAULT_LISTEN_ADDRESS = ":9898"
DEFAULT_SCRAPE_INTERVAL_SECONDS = 60
DEFAULT_REQUEST_TIMEOUT_SECONDS = 10.0

REQUIRED_ENV_VARS = ("EXPORTER_API_URL", "EXPORTER_USER", "EXPORTER_PASSWORD")
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def parse_listen_address(address: str) -> Tuple[str, int]:
    """
    Split a listen address into host and port.

    Accepts ``host:port``, ``:port`` (all interfaces), ``[v6addr]:port``
    and a bare ``port``.
    """
    host, _, port = address.strip().rpartition(':')
    host = host.strip('[]') or '0.0.0.0'

    try:
        port_number = int(port)
    except ValueError:
        raise ValueError(f"Invalid port in listen address: {address!r}")

    if not 0 <= port_number <= 65535:
        raise ValueError(f"Port out of range in listen address: {address!r}")

    return host, port_number


def positive_or_default(raw: Optional[str], default: Union[int, float],
                        cast: Type[Union[int, float]] = int) -> Union[int, float]:
    """Parse a positive number, falling back to default when unset, unparseable or <= 0."""
    try:
        value = cast(raw)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


class ExporterConfig(BaseModel):
    """Process configuration, loaded once at startup and never changed."""

    model_config = ConfigDict(extra='forbid', frozen=True)

    api_url: str = Field(..., min_length=1, description="FastNetMon blackhole API URL")
    user: str = Field(..., min_length=1, description="API basic auth user")
    password: str = Field(..., min_length=1, repr=False, description="API basic auth password")
    listen_address: str = Field(default=DEFAULT_LISTEN_ADDRESS, description="Exporter listen address")
    scrape_interval_seconds: int = Field(default=DEFAULT_SCRAPE_INTERVAL_SECONDS, gt=0)
    request_timeout_seconds: float = Field(default=DEFAULT_REQUEST_TIMEOUT_SECONDS, gt=0)
    log_level: str = Field(default="INFO", description="Logging level name")

    @field_validator('listen_address')
    @classmethod
    def validate_listen_address(cls, value: str) -> str:
        parse_listen_address(value)
        return value

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level == "WARN":
            level = "WARNING"
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level {value!r}, expected one of {', '.join(LOG_LEVELS)}")
        return level

    @property
    def listen_host(self) -> str:
        return parse_listen_address(self.listen_address)[0]

    @property
    def listen_port(self) -> int:
        return parse_listen_address(self.listen_address)[1]

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ExporterConfig":
        """
        Build the configuration from environment variables.

        Raises:
            ConfigError: a required variable is missing or a value is invalid
        """
        env = os.environ if environ is None else environ

        missing = [name for name in REQUIRED_ENV_VARS if not env.get(name)]
        if missing:
            raise ConfigError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

        try:
            return cls(
                api_url=env["EXPORTER_API_URL"],
                user=env["EXPORTER_USER"],
                password=env["EXPORTER_PASSWORD"],
                listen_address=env.get("EXPORTER_PORT") or DEFAULT_LISTEN_ADDRESS,
                scrape_interval_seconds=positive_or_default(
                    env.get("EXPORTER_SCRAPE_INTERVAL_SECONDS"), DEFAULT_SCRAPE_INTERVAL_SECONDS
                ),
                request_timeout_seconds=positive_or_default(
                    env.get("EXPORTER_REQUEST_TIMEOUT_SECONDS"), DEFAULT_REQUEST_TIMEOUT_SECONDS, cast=float
                ),
                log_level=env.get("LOG_LEVEL") or "INFO",
            )
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}")


def load_env_file(path: str = ".env") -> bool:
    """Seed the environment from a .env file. Existing variables win."""
    env_path = Path(path)
    if not env_path.is_file():
        return False
    load_dotenv(dotenv_path=env_path, override=False)
    return True
