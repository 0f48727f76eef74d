"""Invariant markers for engine-internal states."""

from __future__ import annotations

from typing import NoReturn, TypeVar

from semantium.exceptions import NeverThrown

T = TypeVar("T")


def never(reason: str = "", **env: object) -> NoReturn:
    """Mark a code path as intentionally unreachable.

    The env payload is diagnostic metadata attached to the raised error.
    """
    raise NeverThrown(reason or "never() marker reached", **env)


def require_not_none(value: T | None, *, reason: str = "", **env: object) -> T:
    if value is None:
        never(reason or "required value is None", **env)
    return value
