"""Process-wide hook registry and module-level shortcuts.

Usage::

    from hookwire.shortcuts import add_filter, apply_filters, on_action, do_action

    add_filter("post_title", str.strip)
    title = apply_filters("post_title", "  Hello  ")

    @on_action("post_saved", accepted_args=2)
    def notify(post, user):
        ...

    do_action("post_saved", post, user)
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from hookwire.registry import HookRegistry

F = TypeVar("F", bound=Callable[..., Any])

hooks = HookRegistry()


def get_registry() -> HookRegistry:
    return hooks


def add_filter(hook_name: str, callback: Any, priority: int | None = None, accepted_args: int | None = None) -> bool:
    return hooks.add_filter(hook_name, callback, priority, accepted_args)


def add_action(hook_name: str, callback: Any, priority: int | None = None, accepted_args: int | None = None) -> bool:
    return hooks.add_action(hook_name, callback, priority, accepted_args)


def has_filter(hook_name: str, callback: Any = None) -> bool | int:
    return hooks.has_filter(hook_name, callback)


def has_action(hook_name: str, callback: Any = None) -> bool | int:
    return hooks.has_action(hook_name, callback)


def remove_filter(hook_name: str, callback: Any, priority: int | None = None) -> bool:
    return hooks.remove_filter(hook_name, callback, priority)


def remove_action(hook_name: str, callback: Any, priority: int | None = None) -> bool:
    return hooks.remove_action(hook_name, callback, priority)


def remove_all_filters(hook_name: str, priority: int | None = None) -> bool:
    return hooks.remove_all_filters(hook_name, priority)


def remove_all_actions(hook_name: str, priority: int | None = None) -> bool:
    return hooks.remove_all_actions(hook_name, priority)


def apply_filters(hook_name: str, value: Any, *args: Any) -> Any:
    return hooks.apply_filters(hook_name, value, *args)


def apply_filters_with_args(hook_name: str, args: Sequence[Any]) -> Any:
    return hooks.apply_filters_with_args(hook_name, args)


def do_action(hook_name: str, *args: Any) -> None:
    hooks.do_action(hook_name, *args)


def do_action_with_args(hook_name: str, args: Sequence[Any]) -> None:
    hooks.do_action_with_args(hook_name, args)


def did_action(hook_name: str) -> int:
    return hooks.did_action(hook_name)


def current_hook() -> str | None:
    return hooks.current_hook()


def doing_filter(hook_name: str | None = None) -> bool:
    return hooks.doing_filter(hook_name)


def doing_action(hook_name: str | None = None) -> bool:
    return hooks.doing_action(hook_name)


def on_filter(
    hook_name: str,
    priority: int | None = None,
    accepted_args: int | None = None,
    *,
    registry: HookRegistry | None = None,
) -> Callable[[F], F]:
    """Decorator registering a function as a filter callback.

    The function is returned unchanged, so it can still be removed later by
    passing it to ``remove_filter``.
    """

    def decorator(func: F) -> F:
        (registry or hooks).add_filter(hook_name, func, priority, accepted_args)
        return func

    return decorator


def on_action(
    hook_name: str,
    priority: int | None = None,
    accepted_args: int | None = None,
    *,
    registry: HookRegistry | None = None,
) -> Callable[[F], F]:
    """Decorator registering a function as an action callback."""

    def decorator(func: F) -> F:
        (registry or hooks).add_action(hook_name, func, priority, accepted_args)
        return func

    return decorator
