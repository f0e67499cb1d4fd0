"""Case-insensitive, read-only request headers.

Names are lowercased once, at construction; values keep their order so
repeated headers (``Accept``, ``Cookie``) stay available via ``get_list``.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping


class Headers(Mapping[str, str]):
    """Read-only header collection keyed by lowercase name.

    ``headers["X-Token"]`` returns the first value; ``get_list`` returns
    every value in arrival order.
    """

    __slots__ = ("_index", "_pairs")

    def __init__(self, pairs: Iterable[tuple[str, str]] = ()) -> None:
        normalized = tuple((name.lower(), value) for name, value in pairs)
        index: dict[str, list[str]] = {}
        for name, value in normalized:
            index.setdefault(name, []).append(value)
        self._pairs = normalized
        self._index = index

    @classmethod
    def from_raw(cls, raw: Iterable[tuple[bytes, bytes]]) -> Headers:
        """Decode ASGI ``(name, value)`` byte pairs."""
        return cls((name.decode("latin-1"), value.decode("latin-1")) for name, value in raw)

    @classmethod
    def from_mapping(cls, headers: Mapping[str, object] | None = None) -> Headers:
        """Build headers from a plain ``{name: value}`` mapping."""
        return cls((name, str(value)) for name, value in (headers or {}).items())

    def __getitem__(self, key: str) -> str:
        return self._index[key.lower()][0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self._index)

    def __len__(self) -> int:
        return len(self._index)

    def __repr__(self) -> str:
        return f"Headers({dict(self)!r})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        values = self._index.get(key.lower())
        return values[0] if values else default

    def get_list(self, key: str) -> list[str]:
        """Every value sent for *key*, in order."""
        return list(self._index.get(key.lower(), ()))

    @property
    def pairs(self) -> tuple[tuple[str, str], ...]:
        """All ``(lowercase name, value)`` pairs in arrival order."""
        return self._pairs
