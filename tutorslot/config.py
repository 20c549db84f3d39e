"""
Centralized configuration with environment variable overrides.

Booking policy values (lead time, pending dwell time, bookable business
hours) live here so that engine and service code never hardcode them.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from tutorslot.logging_context import RequestIdFilter

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_BUSINESS_HOURS = "08:00-12:00,13:00-17:00"
LOG_FORMAT = "%(asctime)s [%(name)s] [%(request_id)s] %(levelname)s: %(message)s"


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _parse_clock(value: str) -> int:
    hours, minutes = value.strip().split(":")
    return int(hours) * 60 + int(minutes)


def _parse_blocks(env_var: str, default: str) -> tuple[tuple[int, int], ...]:
    """Parse ``HH:MM-HH:MM`` comma-separated blocks into minute pairs."""
    raw = os.getenv(env_var, default)
    blocks = []
    try:
        for chunk in raw.split(","):
            if not chunk.strip():
                continue
            start, end = chunk.split("-")
            blocks.append((_parse_clock(start), _parse_clock(end)))
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid business hours for {env_var}: {raw!r}"
        ) from None
    return tuple(blocks)


@dataclass(frozen=True)
class BookingPolicyConfig:
    """Rules every booking request is checked against."""

    lead_days: int = _safe_int("BOOKING_LEAD_DAYS", "3")
    pending_expiry_hours: int = _safe_int("PENDING_EXPIRY_HOURS", "14")
    business_hours: tuple[tuple[int, int], ...] = _parse_blocks(
        "BUSINESS_HOURS", DEFAULT_BUSINESS_HOURS
    )


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    policy: BookingPolicyConfig = field(default_factory=BookingPolicyConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "tutorslot")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    policy = config.policy
    if policy.lead_days < 0:
        raise ValueError(
            f"BOOKING_LEAD_DAYS must be >= 0, got {policy.lead_days}"
        )
    if policy.pending_expiry_hours < 1:
        raise ValueError(
            f"PENDING_EXPIRY_HOURS must be >= 1, got {policy.pending_expiry_hours}"
        )
    if not policy.business_hours:
        raise ValueError("BUSINESS_HOURS must define at least one block")

    previous_end = -1
    for start, end in policy.business_hours:
        if not 0 <= start < end <= 24 * 60:
            raise ValueError(
                f"BUSINESS_HOURS block {start}-{end} must satisfy 0 <= start < end <= 1440"
            )
        if start < previous_end:
            raise ValueError("BUSINESS_HOURS blocks must be ordered and disjoint")
        previous_end = end


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())
    logger.info("Configuration loaded for '%s'", config.app_name)
    return config


# Singleton instance
settings = load_config()
