"""
=============================================================================
FACADE CONFIGURATION
=============================================================================

Settings shared by every request facade of an application.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION GROUPS                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   PROXIES       trust_proxy                                         │
    │   HOSTNAMES     subdomain_offset                                    │
    │   UPLOADS       upload_size_limit, upload_extensions                │
    │   LOGGING       log_level, log_format                               │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Sources, highest priority first:

    1. Values passed to FacadeConfig(...)
    2. Environment variables via FacadeConfig.from_env()
    3. Defaults below

=============================================================================
"""

from dataclasses import dataclass
from typing import List, Optional, Union
import json
import logging
import os

from .exceptions import ConfigError


@dataclass
class FacadeConfig:
    """
    Configuration for request facades.

    Development:
        FacadeConfig(log_level="DEBUG")

    Behind a load balancer on a private network:
        FacadeConfig(trust_proxy=["10.0.0.0/8"], subdomain_offset=3)
    """

    # ─────────────────────────────────────────────────────────────────────
    # PROXIES
    # ─────────────────────────────────────────────────────────────────────

    trust_proxy: Union[bool, List[str]] = False
    """
    Whether X-Forwarded-* headers are believed.
    - False: never (ip() is the socket peer)
    - True: always
    - ["10.0.0.0/8", "127.0.0.1"]: only when reported by these addresses
    """

    # ─────────────────────────────────────────────────────────────────────
    # HOSTNAMES
    # ─────────────────────────────────────────────────────────────────────

    subdomain_offset: int = 2
    """
    Number of trailing hostname labels forming the base domain.
    2 for "abc.com", 3 for "abc.co.uk".
    """

    # ─────────────────────────────────────────────────────────────────────
    # UPLOADS
    # ─────────────────────────────────────────────────────────────────────

    upload_size_limit: Optional[int] = None
    """Default per-file size ceiling in bytes (None = unlimited)."""

    upload_extensions: Optional[List[str]] = None
    """Default allowed extensions (None = any)."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """DEBUG shows every dropped malformed header value."""

    log_format: str = "text"
    """'text' for humans, 'json' for log aggregators."""

    @classmethod
    def from_env(cls) -> "FacadeConfig":
        """
        Create configuration from environment variables.

        HTTP_TRUST_PROXY         "true", "false" or comma-separated CIDRs
        HTTP_SUBDOMAIN_OFFSET    integer (default: 2)
        HTTP_UPLOAD_SIZE_LIMIT   bytes (default: unlimited)
        HTTP_UPLOAD_EXTENSIONS   comma-separated, e.g. "png,jpg"
        HTTP_LOG_LEVEL           DEBUG, INFO, ... (default: INFO)
        HTTP_LOG_FORMAT          text or json (default: text)
        """
        size_limit = os.getenv("HTTP_UPLOAD_SIZE_LIMIT")
        extensions = os.getenv("HTTP_UPLOAD_EXTENSIONS")

        try:
            return cls(
                trust_proxy=_parse_trust_proxy(os.getenv("HTTP_TRUST_PROXY", "false")),
                subdomain_offset=int(os.getenv("HTTP_SUBDOMAIN_OFFSET", "2")),
                upload_size_limit=int(size_limit) if size_limit else None,
                upload_extensions=_split_list(extensions) if extensions else None,
                log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
                log_format=os.getenv("HTTP_LOG_FORMAT", "text"),
            )
        except ValueError as e:
            raise ConfigError(f"Invalid environment configuration: {e}") from e

    def validate(self) -> None:
        """Fail fast on values that would misbehave later."""
        if self.subdomain_offset < 0:
            raise ConfigError("subdomain_offset must be >= 0")

        if self.upload_size_limit is not None and self.upload_size_limit < 0:
            raise ConfigError("upload_size_limit must be >= 0")

        if self.log_format not in ("text", "json"):
            raise ConfigError(f"Invalid log_format: {self.log_format}. Must be 'text' or 'json'.")

        if not isinstance(getattr(logging, self.log_level.upper(), None), int):
            raise ConfigError(f"Invalid log_level: {self.log_level}")


def _split_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_trust_proxy(value: str) -> Union[bool, List[str]]:
    lowered = value.strip().lower()
    if lowered in ("", "0", "false", "no", "off"):
        return False
    if lowered in ("1", "true", "yes", "on"):
        return True
    return _split_list(value)


# =============================================================================
# LOGGING SETUP
# =============================================================================

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class JsonFormatter(logging.Formatter):
    """One JSON object per line with a stable key order."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, sort_keys=True)


def configure_logging(config: FacadeConfig) -> logging.Logger:
    """
    Configure the `httpfacade` logger from the config.

    Replaces handlers installed by a previous call, so it is safe to call
    again after changing the config.

    Returns:
        The package logger.
    """
    level = getattr(logging, config.log_level.upper(), logging.INFO)

    handler = logging.StreamHandler()
    if config.log_format == "json":
        handler.setFormatter(JsonFormatter(datefmt=DATE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, DATE_FORMAT))

    logger = logging.getLogger("httpfacade")
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger
