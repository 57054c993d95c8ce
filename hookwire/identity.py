"""Deterministic identity keys for hook callbacks.

Every registered callback is stored under a string key so that registering the
same callback twice at one hook and priority overwrites rather than duplicates,
and so that a later ``remove_filter`` / ``has_filter`` call can find it again.

Keys by callback kind:

* ``FUNCTION``: module-level functions, builtins, classes and method
  descriptors map to ``"{module}.{qualname}"``.
* ``STATIC_METHOD``: functions defined in a class body (staticmethods) and
  methods bound to a class (classmethods) map to
  ``"{module}.{cls qualname}.{name}"``.
* ``BOUND_METHOD``: methods bound to an instance map to
  ``"obj#{token}::{name}"``.
* ``CLOSURE``: lambdas, functions nested in functions, callable instances,
  partials and anything else map to ``"obj#{token}::"``.

``(target, "name")`` references are resolved to the attribute first and keyed
like the resolved callable.

Object tokens are handed out by :class:`ObjectTokens`. A token is only created
when registering; lookups for an object that holds none resolve to ``None``.
"""

from __future__ import annotations

import inspect
import itertools
import logging
from typing import Any

from hookwire.models import CallbackKind

logger = logging.getLogger(__name__)


class ObjectTokens:
    """Per-object integer tokens, counted by the registry entries that use them.

    A token keeps a strong reference to its object, so ``id()`` cannot be
    reused while the token exists. The token is dropped once the last entry
    using it is removed.
    """

    def __init__(self) -> None:
        self._counter = itertools.count()
        self._tokens: dict[int, int] = {}
        self._objects: dict[int, Any] = {}
        self._refs: dict[int, int] = {}

    def __len__(self) -> int:
        return len(self._tokens)

    def get(self, obj: Any, *, create: bool) -> int | None:
        token = self._tokens.get(id(obj))
        if token is not None or not create:
            return token

        token = next(self._counter)
        self._tokens[id(obj)] = token
        self._objects[token] = obj
        self._refs[token] = 0
        logger.debug("Assigned identity token %s to %s object", token, type(obj).__name__)
        return token

    def retain(self, token: int) -> None:
        self._refs[token] += 1

    def release(self, token: int) -> None:
        remaining = self._refs[token] - 1
        if remaining > 0:
            self._refs[token] = remaining
            return
        obj = self._objects.pop(token)
        del self._refs[token]
        del self._tokens[id(obj)]
        logger.debug("Released identity token %s", token)


def is_method_reference(callback: Any) -> bool:
    """True for ``(target, "attribute")`` pairs."""
    return (
        isinstance(callback, tuple)
        and len(callback) == 2
        and isinstance(callback[1], str)
    )


def resolve_callable(callback: Any) -> Any:
    if is_method_reference(callback):
        target, attribute = callback
        return getattr(target, attribute)
    return callback


def _qualified_name(obj: Any) -> str:
    module = getattr(obj, "__module__", None)
    if module is None and hasattr(obj, "__objclass__"):
        module = obj.__objclass__.__module__
    qualname = getattr(obj, "__qualname__", None) or getattr(obj, "__name__", None) or repr(obj)
    return f"{module}.{qualname}" if module else qualname


def _defined_in_class(func: Any) -> bool:
    # "f.<locals>.Local.shout" sits in a class body, "f.<locals>.helper" does not.
    tail = func.__qualname__.rsplit("<locals>.", 1)[-1]
    return "." in tail and "<lambda>" not in tail


def _is_anonymous(func: Any) -> bool:
    qualname = func.__qualname__
    if "<lambda>" in qualname:
        return True
    return "<locals>" in qualname and not _defined_in_class(func)


def classify(callback: Any) -> tuple[CallbackKind, Any, str]:
    """Return ``(kind, owner, name)`` for a callback.

    ``(target, "attribute")`` references are resolved first, so both spellings
    of a method land on the same key. ``owner`` is the object a token is
    needed for (only meaningful for ``BOUND_METHOD`` and ``CLOSURE``).
    """
    callback = resolve_callable(callback)

    if inspect.ismethod(callback) or (inspect.isbuiltin(callback) and not inspect.ismodule(callback.__self__)):
        owner = callback.__self__
        if owner is None:
            return CallbackKind.FUNCTION, None, _qualified_name(callback)
        if inspect.isclass(owner):
            return CallbackKind.STATIC_METHOD, None, f"{_qualified_name(owner)}.{callback.__name__}"
        return CallbackKind.BOUND_METHOD, owner, callback.__name__

    if inspect.isfunction(callback):
        if _is_anonymous(callback):
            return CallbackKind.CLOSURE, callback, ""
        if _defined_in_class(callback):
            return CallbackKind.STATIC_METHOD, None, _qualified_name(callback)
        return CallbackKind.FUNCTION, None, _qualified_name(callback)

    if inspect.isbuiltin(callback) or inspect.isclass(callback) or inspect.ismethoddescriptor(callback):
        return CallbackKind.FUNCTION, None, _qualified_name(callback)

    return CallbackKind.CLOSURE, callback, ""


def identify(callback: Any, tokens: ObjectTokens, *, create: bool = True) -> tuple[str | None, int | None]:
    """Return ``(key, token)``; ``token`` is ``None`` for name-based keys.

    With ``create=False`` (lookup-only) an object that holds no token, or a
    method reference naming a missing attribute, yields ``(None, None)``.
    """
    try:
        kind, owner, name = classify(callback)
    except AttributeError:
        if create:
            raise
        return None, None

    if kind in (CallbackKind.FUNCTION, CallbackKind.STATIC_METHOD):
        return name, None

    token = tokens.get(owner, create=create)
    if token is None:
        return None, None
    return f"obj#{token}::{name}", token


def build_unique_id(callback: Any, tokens: ObjectTokens, *, create: bool = True) -> str | None:
    return identify(callback, tokens, create=create)[0]


def callback_kind(callback: Any) -> CallbackKind:
    return classify(callback)[0]
