from __future__ import annotations

from typing import Mapping, Optional, Sequence


class AttributeLookup:
    """Exact-then-case-insensitive attribute access for one XML element."""

    def __init__(self, attrs: Mapping[str, str]) -> None:
        self._exact = dict(attrs)
        self._lower: dict[str, str] = {}
        for name, value in self._exact.items():
            self._lower.setdefault(name.lower(), value)

    def get(self, name: str) -> Optional[str]:
        value = self._exact.get(name)
        if value:
            return value
        return self._lower.get(name.lower()) or None

    def first(self, *names: str) -> Optional[str]:
        for name in names:
            value = self.get(name)
            if value:
                return value
        return None

    def as_dict(self) -> dict[str, str]:
        return dict(self._exact)


class ColumnIndex:
    """
    Header -> position index for a semicolon CSV, built once per file.

    Exact header names win; a pre-lowercased index is the fallback for
    accent-preserving case variants ("Código" vs "CÓDIGO").
    """

    def __init__(self, headers: Sequence[str]) -> None:
        self.headers = [h.strip() for h in headers]
        self._exact: dict[str, int] = {}
        self._lower: dict[str, int] = {}
        for i, header in enumerate(self.headers):
            self._exact[header] = i
            self._lower.setdefault(header.lower(), i)

    @staticmethod
    def _at(values: Sequence[str], index: Optional[int]) -> Optional[str]:
        if index is None or index >= len(values):
            return None
        return values[index] or None

    def get(self, values: Sequence[str], name: str) -> Optional[str]:
        value = self._at(values, self._exact.get(name))
        if value:
            return value
        return self._at(values, self._lower.get(name.lower()))

    def first(self, values: Sequence[str], *names: str) -> Optional[str]:
        for name in names:
            value = self.get(values, name)
            if value:
                return value
        return None

    def row_dict(self, values: Sequence[str]) -> dict[str, str]:
        return {h: values[i] for i, h in enumerate(self.headers) if h and i < len(values)}
