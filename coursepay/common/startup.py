"""Startup-time config summary with secret fields redacted."""

from typing import Any

from pydantic import SecretStr

from coursepay.common.config import Settings, settings
from coursepay.common.logging import logger


def startup_config(fields: list[str], source: Settings = settings) -> dict[str, Any]:
    """Selected settings keyed by env name; `SecretStr` values never appear."""

    config: dict[str, Any] = {}
    for field in fields:
        value = getattr(source, field)
        if isinstance(value, SecretStr):
            value = "<redacted>" if value.get_secret_value() else "<unset>"
        config[field.upper()] = value
    return config


def log_startup_config(service_name: str, fields: list[str]) -> None:
    """Log selected settings for quick troubleshooting."""

    logger.info("startup_config=%s", {"service": service_name, **startup_config(fields)})
