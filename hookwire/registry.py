"""Hook registry with priority-ordered filter and action dispatch."""

from __future__ import annotations

import contextlib
import logging
import threading
from bisect import bisect_right
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Any

from hookwire.config import RegistryConfig, load_effective_config
from hookwire.identity import ObjectTokens, build_unique_id, callback_kind, identify, resolve_callable
from hookwire.models import CallbackEntry

logger = logging.getLogger(__name__)

PriorityBucket = dict[str, CallbackEntry]


class HookRegistry:
    """Named filter and action hooks with priority ordering and reentrant dispatch.

    Callbacks run in ascending priority, and in registration order within one
    priority. Filters thread a value through the chain; actions discard return
    values and count how often they fired. Callbacks registered under the
    ``all`` hook run before every other dispatch and receive the hook name
    followed by the full argument list.

    Callbacks may register, remove or trigger hooks while a dispatch is in
    progress, including the hook being dispatched. Iteration is live: entries
    added at priorities not yet visited run in the current pass, entries
    removed before being reached are skipped, and entries added at priorities
    already visited wait for the next dispatch.
    """

    def __init__(self, config: RegistryConfig | None = None) -> None:
        self.config = config or RegistryConfig()
        self._filters: dict[str, dict[int, PriorityBucket]] = {}
        self._merged: set[str] = set()
        self._revision = 0
        self._actions: dict[str, int] = {}
        self._current: list[str] = []
        self._tokens = ObjectTokens()
        self._lock: contextlib.AbstractContextManager[Any] = (
            threading.RLock() if self.config.thread_safe else contextlib.nullcontext()
        )

    @classmethod
    def from_config(
        cls,
        base_path: str | Path | None = None,
        system_defaults: dict[str, Any] | None = None,
        runtime_override: dict[str, Any] | None = None,
    ) -> HookRegistry:
        config = load_effective_config(
            base_path=base_path,
            system_defaults=system_defaults,
            runtime_override=runtime_override,
        )
        return cls(config=config)

    # Registration

    def add_filter(
        self,
        hook_name: str,
        callback: Any,
        priority: int | None = None,
        accepted_args: int | None = None,
    ) -> bool:
        """Hook ``callback`` onto ``hook_name``; always returns ``True``.

        ``(target, "attribute")`` pairs are resolved here and the resolved
        callable is stored. Registering the same callback again at the same
        hook and priority replaces the stored arity in place.
        """
        priority = self._priority(priority)
        if accepted_args is None:
            accepted_args = self.config.default_accepted_args
        accepted_args = max(0, int(accepted_args))

        with self._lock:
            resolved = resolve_callable(callback)
            identity, token = identify(resolved, self._tokens, create=True)
            bucket = self._filters.setdefault(hook_name, {}).setdefault(priority, {})
            if identity not in bucket and token is not None:
                self._tokens.retain(token)
            bucket[identity] = CallbackEntry(
                identity=identity,
                callback=resolved,
                accepted_args=accepted_args,
                kind=callback_kind(resolved),
                token=token,
            )
            self._mutated(hook_name)

        logger.debug("Added %s to %r at priority %s (accepted_args=%s)", identity, hook_name, priority, accepted_args)
        return True

    def add_action(
        self,
        hook_name: str,
        callback: Any,
        priority: int | None = None,
        accepted_args: int | None = None,
    ) -> bool:
        return self.add_filter(hook_name, callback, priority, accepted_args)

    def has_filter(self, hook_name: str, callback: Any = None) -> bool | int:
        """Check whether ``hook_name`` has callbacks, or where ``callback`` sits.

        Without ``callback`` this returns a bool. With one it returns the
        lowest priority the callback is registered at, or ``False``. Priority
        ``0`` is falsy, so compare the result with ``is False``.
        """
        with self._lock:
            if not self._has_registrants(hook_name):
                return False
            if callback is None:
                return True

            identity = build_unique_id(callback, self._tokens, create=False)
            if identity is None:
                return False

            table = self._filters[hook_name]
            for priority in sorted(table):
                if identity in table[priority]:
                    return priority
            return False

    def has_action(self, hook_name: str, callback: Any = None) -> bool | int:
        return self.has_filter(hook_name, callback)

    def remove_filter(self, hook_name: str, callback: Any, priority: int | None = None) -> bool:
        """Remove ``callback`` from ``hook_name`` at ``priority``; return whether it was there."""
        priority = self._priority(priority)

        with self._lock:
            identity = build_unique_id(callback, self._tokens, create=False)
            table = self._filters.get(hook_name)
            if identity is None or table is None:
                return False

            bucket = table.get(priority)
            if bucket is None or identity not in bucket:
                return False

            self._release(bucket.pop(identity))
            if not bucket:
                del table[priority]
            self._mutated(hook_name)

        logger.debug("Removed %s from %r at priority %s", identity, hook_name, priority)
        return True

    def remove_action(self, hook_name: str, callback: Any, priority: int | None = None) -> bool:
        return self.remove_filter(hook_name, callback, priority)

    def remove_all_filters(self, hook_name: str, priority: int | None = None) -> bool:
        """Clear every callback on ``hook_name``, or only those at ``priority``."""
        with self._lock:
            table = self._filters.get(hook_name)
            if table is not None:
                if priority is None:
                    cleared = [entry for bucket in table.values() for entry in bucket.values()]
                    table.clear()
                elif priority in table:
                    cleared = list(table[priority].values())
                    table[priority] = {}
                else:
                    cleared = []
                for entry in cleared:
                    self._release(entry)
            self._mutated(hook_name)

        logger.debug("Removed all callbacks from %r (priority=%s)", hook_name, priority)
        return True

    def remove_all_actions(self, hook_name: str, priority: int | None = None) -> bool:
        return self.remove_all_filters(hook_name, priority)

    # Dispatch

    def apply_filters(self, hook_name: str, value: Any, *args: Any) -> Any:
        """Pass ``value`` through every callback on ``hook_name`` and return the result."""
        with self._lock:
            return self._dispatch(hook_name, [value, *args], [hook_name, value, *args], filtering=True)

    def apply_filters_with_args(self, hook_name: str, args: Sequence[Any]) -> Any:
        """Like :meth:`apply_filters`, with ``args[0]`` as the value and the rest as extras."""
        values = list(args) or [None]
        with self._lock:
            return self._dispatch(hook_name, values, [hook_name, *args], filtering=True)

    def do_action(self, hook_name: str, *args: Any) -> None:
        """Run every callback on ``hook_name`` for its side effects.

        The action counter is bumped even when nothing is registered. Objects
        are passed by reference, so callbacks see and may mutate the caller's
        instances.
        """
        with self._lock:
            self._actions[hook_name] = self._actions.get(hook_name, 0) + 1
            self._dispatch(hook_name, list(args), [hook_name, *args], filtering=False)

    def do_action_with_args(self, hook_name: str, args: Sequence[Any]) -> None:
        with self._lock:
            self._actions[hook_name] = self._actions.get(hook_name, 0) + 1
            self._dispatch(hook_name, list(args), [hook_name, *args], filtering=False)

    def did_action(self, hook_name: str) -> int:
        with self._lock:
            return self._actions.get(hook_name, 0)

    # Introspection

    def current_hook(self) -> str | None:
        with self._lock:
            return self._current[-1] if self._current else None

    def current_filter(self) -> str | None:
        return self.current_hook()

    def doing_filter(self, hook_name: str | None = None) -> bool:
        with self._lock:
            if hook_name is None:
                return bool(self._current)
            return hook_name in self._current

    def doing_action(self, hook_name: str | None = None) -> bool:
        return self.doing_filter(hook_name)

    def callbacks(self, hook_name: str) -> list[tuple[int, CallbackEntry]]:
        """Registered entries for ``hook_name`` in execution order."""
        with self._lock:
            table = self._filters.get(hook_name)
            if not table:
                return []
            self._resolve_order(hook_name)
            return [(priority, entry) for priority, bucket in table.items() for entry in bucket.values()]

    def hook_names(self) -> list[str]:
        with self._lock:
            return [name for name in self._filters if self._has_registrants(name)]

    # Internals

    def _priority(self, priority: int | None) -> int:
        return self.config.default_priority if priority is None else priority

    def _mutated(self, hook_name: str) -> None:
        self._merged.discard(hook_name)
        self._revision += 1

    def _release(self, entry: CallbackEntry) -> None:
        if entry.token is not None:
            self._tokens.release(entry.token)

    def _has_registrants(self, hook_name: str) -> bool:
        table = self._filters.get(hook_name)
        return bool(table) and any(table.values())

    def _resolve_order(self, hook_name: str) -> None:
        if hook_name in self._merged:
            return
        table = self._filters[hook_name]
        ordered = sorted(table.items(), key=lambda item: item[0])
        table.clear()
        table.update(ordered)
        self._merged.add(hook_name)
        logger.debug("Sorted %s priorities for %r", len(ordered), hook_name)

    def _iter_entries(self, hook_name: str) -> Iterator[CallbackEntry]:
        # Cursor over the live table: after each bucket, move to the smallest
        # priority greater than the last one visited.
        last_priority: int | None = None
        while True:
            table = self._filters.get(hook_name)
            if not table:
                return
            self._resolve_order(hook_name)
            priorities = list(table)
            index = 0 if last_priority is None else bisect_right(priorities, last_priority)
            if index >= len(priorities):
                return
            last_priority = priorities[index]

            # Pending identities are recomputed only when the registry changed
            # since the previous step.
            visited: set[str] = set()
            pending: list[str] = []
            position = 0
            revision = -1
            while True:
                bucket = table.get(last_priority)
                if not bucket:
                    break
                if revision != self._revision:
                    revision = self._revision
                    pending = [key for key in bucket if key not in visited]
                    position = 0
                if position >= len(pending):
                    break
                identity = pending[position]
                position += 1
                visited.add(identity)
                yield bucket[identity]

    def _dispatch(self, hook_name: str, args: list[Any], all_args: list[Any], *, filtering: bool) -> Any:
        depth = len(self._current)
        completed = False
        try:
            if self._has_registrants(self.config.all_hook):
                self._current.append(hook_name)
                for entry in self._iter_entries(self.config.all_hook):
                    if entry.callback is not None:
                        entry.callback(*all_args)

            if self._has_registrants(hook_name):
                if len(self._current) == depth:
                    self._current.append(hook_name)
                for entry in self._iter_entries(hook_name):
                    if entry.callback is None:
                        continue
                    result = entry.callback(*entry.slice_args(args))
                    if filtering:
                        args[0] = result
            completed = True
        finally:
            if not completed:
                logger.debug("Callback raised while dispatching %r (stack=%s)", hook_name, self._current)
            if completed or self.config.pop_stack_on_error:
                del self._current[depth:]

        return args[0] if filtering else None
