"""Case-insensitive, ordered, multi-valued HTTP header map."""
from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Union

HeadersInit = Union[Mapping[str, str], Iterable[tuple[str, str]], "HttpHeaders", None]


class HttpHeaders:
    """Ordered header collection keyed by case-folded name.

    Each name keeps the casing it was first inserted with and may hold
    several values.
    """

    def __init__(self, headers: HeadersInit = None) -> None:
        self._entries: dict[str, tuple[str, list[str]]] = {}
        if headers is None:
            return
        items = headers.items() if isinstance(headers, (Mapping, HttpHeaders)) else headers
        for name, value in items:
            self.add(name, value)

    def set(self, name: str, value: str | int) -> None:
        """Replace every value of *name* with *value*."""
        key = name.lower()
        original = self._entries[key][0] if key in self._entries else name
        self._entries[key] = (original, [str(value)])

    def add(self, name: str, value: str | int) -> None:
        """Append *value* to the values of *name*."""
        key = name.lower()
        if key in self._entries:
            self._entries[key][1].append(str(value))
        else:
            self._entries[key] = (name, [str(value)])

    def get(self, name: str) -> str | None:
        """Return the values of *name* joined with ``", "``, or None."""
        entry = self._entries.get(name.lower())
        if entry is None:
            return None
        return ", ".join(entry[1])

    def get_all(self, name: str) -> list[str]:
        entry = self._entries.get(name.lower())
        return list(entry[1]) if entry else []

    def has(self, name: str) -> bool:
        return name.lower() in self._entries

    def delete(self, name: str) -> None:
        self._entries.pop(name.lower(), None)

    def items(self) -> Iterator[tuple[str, str]]:
        """Yield ``(name, value)`` pairs in insertion order."""
        for name, values in self._entries.values():
            for value in values:
                yield name, value

    def to_dict(self) -> dict[str, str]:
        return {name: ", ".join(values) for name, values in self._entries.values()}

    def copy(self) -> HttpHeaders:
        return HttpHeaders(self.items())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return self.items()

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HttpHeaders):
            return NotImplemented
        return list(self.items()) == list(other.items())

    def __repr__(self) -> str:
        return f"HttpHeaders({self.to_dict()!r})"
