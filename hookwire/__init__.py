"""Priority-ordered filter and action hooks."""

from hookwire.config import RegistryConfig, load_effective_config
from hookwire.models import ALL_HOOK, CallbackEntry, CallbackKind
from hookwire.registry import HookRegistry

__all__ = [
    "ALL_HOOK",
    "CallbackEntry",
    "CallbackKind",
    "HookRegistry",
    "RegistryConfig",
    "load_effective_config",
]
