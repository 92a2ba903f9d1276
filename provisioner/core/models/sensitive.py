"""
Sensitive values — explicit secrecy for anything that may end up in a trigger.

A value wrapped in ``Sensitive`` never prints its contents. Every boundary
that derives a trigger token from a value must either hash it or refuse to
pass it through raw. ``is_sensitive`` answers the question conservatively:
when secrecy cannot be determined, the answer is "yes".
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

T = TypeVar("T")

_PLAIN_SCALARS = (str, int, float, bool, type(None))

REDACTED = "Sensitive(****)"


class Sensitive(Generic[T]):
    """An immutable wrapper marking a value as secret."""

    __slots__ = ("_value",)

    def __init__(self, value: T):
        object.__setattr__(self, "_value", value)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Sensitive values are immutable")

    def reveal(self) -> T:
        """Return the raw wrapped value."""
        return self._value

    def map(self, fn) -> Sensitive:
        """Apply ``fn`` to the raw value and keep the result secret."""
        return Sensitive(fn(self._value))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Sensitive):
            return self._value == other._value
        return NotImplemented

    def __hash__(self) -> int:
        return hash(("sensitive", repr(self._value)))

    def __repr__(self) -> str:
        return REDACTED

    __str__ = __repr__


def is_sensitive(value: Any) -> bool:
    """Whether ``value`` is, or contains, a secret.

    Plain scalars, lists, tuples and dicts are inspected recursively.
    Any other object is opaque and therefore treated as sensitive.
    """
    if isinstance(value, Sensitive):
        return True
    if isinstance(value, _PLAIN_SCALARS):
        return False
    if isinstance(value, (list, tuple)):
        return any(is_sensitive(v) for v in value)
    if isinstance(value, dict):
        return any(is_sensitive(k) or is_sensitive(v) for k, v in value.items())
    return True


def reveal(value: Any) -> Any:
    """Deep-unwrap every ``Sensitive`` inside ``value``."""
    if isinstance(value, Sensitive):
        return reveal(value.reveal())
    if isinstance(value, list):
        return [reveal(v) for v in value]
    if isinstance(value, tuple):
        return tuple(reveal(v) for v in value)
    if isinstance(value, dict):
        return {reveal(k): reveal(v) for k, v in value.items()}
    return value


def redact(value: Any) -> Any:
    """Replace every ``Sensitive`` inside ``value`` with a placeholder string."""
    if isinstance(value, Sensitive):
        return REDACTED
    if isinstance(value, list):
        return [redact(v) for v in value]
    if isinstance(value, tuple):
        return tuple(redact(v) for v in value)
    if isinstance(value, dict):
        return {k: redact(v) for k, v in value.items()}
    return value
