"""Core models for registered hook callbacks."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

ALL_HOOK = "all"
DEFAULT_PRIORITY = 10
DEFAULT_ACCEPTED_ARGS = 1


class CallbackKind(str, Enum):
    FUNCTION = "function"
    BOUND_METHOD = "bound_method"
    STATIC_METHOD = "static_method"
    CLOSURE = "closure"


class CallbackEntry(BaseModel):
    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    identity: str
    callback: Any = None
    accepted_args: int = Field(default=DEFAULT_ACCEPTED_ARGS, ge=0)
    kind: CallbackKind = CallbackKind.FUNCTION
    token: int | None = None

    def slice_args(self, args: list[Any] | tuple[Any, ...]) -> list[Any]:
        return list(args[: self.accepted_args])
