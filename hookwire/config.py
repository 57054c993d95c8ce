"""Configuration models and loading for hookwire."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

from hookwire.models import ALL_HOOK, DEFAULT_ACCEPTED_ARGS, DEFAULT_PRIORITY

CONFIG_FILENAME = ".hookwire.yaml"


class RegistryConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    default_priority: int = DEFAULT_PRIORITY
    default_accepted_args: int = Field(default=DEFAULT_ACCEPTED_ARGS, ge=0)
    all_hook: str = Field(default=ALL_HOOK, min_length=1)
    # Pop the current-hook stack even when a callback raises.
    pop_stack_on_error: bool = True
    thread_safe: bool = True
    log_level: str = "INFO"


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    data = yaml.safe_load(path.read_text())
    return data or {}


def load_effective_config(
    base_path: str | Path | None = None,
    system_defaults: dict[str, Any] | None = None,
    runtime_override: dict[str, Any] | None = None,
) -> RegistryConfig:
    """Load config with precedence runtime > .hookwire.yaml in base_path > system."""
    file_config = _load_yaml(Path(base_path) / CONFIG_FILENAME) if base_path is not None else {}

    merged: dict[str, Any] = {}
    if system_defaults:
        merged = _deep_merge(merged, system_defaults)
    if file_config:
        merged = _deep_merge(merged, file_config)
    if runtime_override:
        merged = _deep_merge(merged, runtime_override)

    return RegistryConfig.model_validate(merged)
