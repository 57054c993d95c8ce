"""Logging configuration helpers."""

from __future__ import annotations

import logging

from hookwire.config import RegistryConfig


def configure_logging(level: str | RegistryConfig = "INFO") -> None:
    if isinstance(level, RegistryConfig):
        level = level.log_level
    normalized = level.upper()
    logging.basicConfig(
        level=getattr(logging, normalized, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
