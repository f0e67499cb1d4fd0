"""Read-only query string parameters."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any
from urllib.parse import parse_qsl, urlencode


class QueryParams(Mapping[str, str]):
    """Parsed query string.

    Indexing returns the first value for a key; ``get_list`` returns all
    of them. Blank values (``?q=``) are kept. The undecoded string stays
    available as ``raw`` so ``Request.url`` can echo it back unchanged.
    """

    __slots__ = ("_raw", "_values")

    def __init__(self, query_string: bytes | str = "") -> None:
        if isinstance(query_string, bytes):
            query_string = query_string.decode("latin-1")
        values: dict[str, list[str]] = {}
        for key, value in parse_qsl(query_string, keep_blank_values=True):
            values.setdefault(key, []).append(value)
        self._raw = query_string
        self._values = values

    @classmethod
    def from_mapping(cls, params: Mapping[str, Any] | None = None) -> QueryParams:
        """Encode ``{key: value}`` and parse it back."""
        return cls(urlencode({k: str(v) for k, v in (params or {}).items()}))

    def __getitem__(self, key: str) -> str:
        return self._values[key][0]

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"QueryParams({self._raw!r})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        values = self._values.get(key)
        return values[0] if values else default

    def get_list(self, key: str) -> list[str]:
        return list(self._values.get(key, ()))

    def get_int(self, key: str, default: int | None = None) -> int | None:
        """First value as an int; *default* when missing or not numeric."""
        value = self.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default

    @property
    def raw(self) -> str:
        """The query string as received, without the leading ``?``."""
        return self._raw
