"""
Configuration loader for environment variables
"""
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from ..errors import ConfigError


# Defaults for every recognised environment variable.
DEFAULT_CONFIG: Dict[str, Any] = {
    "SKIP": False,
    "WORK_ROOT": "/tmp",
    "POLL_INTERVAL_SECONDS": 1.0,
    "INVALIDATION_MAX_WAIT_SECONDS": 600.0,
    "MAX_WORKERS": 8,
    "CALLBACK_TIMEOUT_SECONDS": 30.0,
    "LOG_LEVEL": "INFO",
    "LOG_COLOUR": False,
    "AWS_REGION": None,
}

_TRUTHY = ("1", "true", "yes")


@dataclass(frozen=True)
class Settings:
    """Runtime settings for one handler process.

    Attributes:
        skip: Report SUCCESS without touching the bucket
        work_root: Ephemeral directory holding per-request staging areas
        poll_interval: Seconds between invalidation status polls
        max_wait: Polling budget per invalidation in seconds (0 = unbounded)
        max_workers: Thread pool size for concurrent contributors and actions
        callback_timeout: HTTP timeout for the status callback
        log_level: DEBUG, INFO or WARNING
        log_colour: Colour the log level tags
        region: AWS region for the boto3 session
    """

    skip: bool = DEFAULT_CONFIG["SKIP"]
    work_root: str = DEFAULT_CONFIG["WORK_ROOT"]
    poll_interval: float = DEFAULT_CONFIG["POLL_INTERVAL_SECONDS"]
    max_wait: float = DEFAULT_CONFIG["INVALIDATION_MAX_WAIT_SECONDS"]
    max_workers: int = DEFAULT_CONFIG["MAX_WORKERS"]
    callback_timeout: float = DEFAULT_CONFIG["CALLBACK_TIMEOUT_SECONDS"]
    log_level: str = DEFAULT_CONFIG["LOG_LEVEL"]
    log_colour: bool = DEFAULT_CONFIG["LOG_COLOUR"]
    region: Optional[str] = DEFAULT_CONFIG["AWS_REGION"]


class ConfigLoader:
    """Builds :class:`Settings` from the process environment."""

    @staticmethod
    def _flag(environ, name):
        value = environ.get(name)
        if value is None:
            return DEFAULT_CONFIG[name]
        return value.strip().lower() in _TRUTHY

    @staticmethod
    def _number(environ, name, cast):
        value = environ.get(name)
        if value is None or value.strip() == "":
            return DEFAULT_CONFIG[name]
        try:
            number = cast(value)
        except ValueError as exc:
            raise ConfigError(f"Environment variable {name} must be numeric, got {value!r}") from exc
        if number < 0:
            raise ConfigError(f"Environment variable {name} must not be negative")
        return number

    @staticmethod
    def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
        """
        Load settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)

        Returns:
            Settings instance with defaults applied
        """
        if environ is None:
            environ = os.environ

        max_workers = ConfigLoader._number(environ, "MAX_WORKERS", int)

        return Settings(
            skip=ConfigLoader._flag(environ, "SKIP"),
            work_root=environ.get("WORK_ROOT") or DEFAULT_CONFIG["WORK_ROOT"],
            poll_interval=ConfigLoader._number(environ, "POLL_INTERVAL_SECONDS", float),
            max_wait=ConfigLoader._number(environ, "INVALIDATION_MAX_WAIT_SECONDS", float),
            max_workers=max(1, max_workers),
            callback_timeout=ConfigLoader._number(environ, "CALLBACK_TIMEOUT_SECONDS", float),
            log_level=(environ.get("LOG_LEVEL") or DEFAULT_CONFIG["LOG_LEVEL"]).upper(),
            log_colour=ConfigLoader._flag(environ, "LOG_COLOUR"),
            region=environ.get("AWS_REGION") or DEFAULT_CONFIG["AWS_REGION"],
        )
