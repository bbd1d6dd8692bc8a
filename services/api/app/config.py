"""Environment-driven settings.

Defaults keep local dev and tests deterministic. Production sets these explicitly.
"""

from __future__ import annotations

import logging
import os

_TRUTHY = {"1", "true", "yes", "y"}


def env_flag(name: str, *, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def env_int(name: str, *, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


def atomic_order_create() -> bool:
    """Whether create_order runs in a single transaction.

    Off by default: order items are committed one by one before the order itself, so a failure
    partway through leaves orphaned item rows.
    """

    return env_flag("EATS_ATOMIC_ORDER_CREATE", default=False)


def promotion_days() -> int:
    return env_int("EATS_PROMOTION_DAYS", default=7)


def configure_logging() -> None:
    level = os.getenv("EATS_LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
