"""
Read-only named variable stores.

Two independent stores feed the templates: a text store read by the `text`
instruction and a binary store read by the `bin` instruction. Writing to the
stores is not part of this package; a store is built once from a mapping and
only ever queried.
"""

from collections.abc import Callable, Iterator, Mapping
from typing import Generic, TypeVar

from payloadsmith.lib.config import Config

T = TypeVar("T")


class VariableStore(Generic[T]):
    """
    Immutable snapshot of a name -> value mapping.

    The input mapping is copied on construction, so later changes made by
    the caller are never observed while a template is being evaluated.
    """

    def __init__(self, values: Mapping[str, T] | None = None):
        self._values: dict[str, T] = dict(values or {})

    def get(self, name: str) -> T | None:
        """Return the value stored under `name`, or None if absent."""

        return self._values.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def layered(self, overrides: Mapping[str, T]) -> "VariableStore[T]":
        """Return a new store with `overrides` taking precedence over this one."""

        return VariableStore({**self._values, **overrides})

    @classmethod
    def from_config(cls, section: str, decode: Callable[[str], T] | None = None) -> "VariableStore[T]":
        """
        Build a store from a free-form configuration section.

        Args:
            section (str): Config section name, e.g. "texts" or "bins".
            decode (Callable, optional): Converts each raw value, e.g. hex to bytes.

        Returns:
            VariableStore: The populated store.
        """

        raw = Config.section(section)
        if decode is None:
            return cls(raw)
        return cls({name: decode(value) for name, value in raw.items()})
