"""Untyped documents: parsed data.json content before any migration has run.

A saved file may come from any release, so nothing about its shape can be
assumed. Migrators read it through these accessors, which return a default
instead of raising when a key is missing or holds the wrong kind of value.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from slidestate.errors import DocumentError


class Document:
    def __init__(self, data: Mapping[str, Any]) -> None:
        self._data = data

    @classmethod
    def parse(cls, text: str) -> Document:
        """Parse JSON text; the top level must be an object."""
        data = json.loads(text)
        if not isinstance(data, dict):
            raise DocumentError(
                f"Expected a JSON object at the top level, got {type(data).__name__}"
            )
        return cls(data)

    @property
    def raw(self) -> Mapping[str, Any]:
        return self._data

    @property
    def version(self) -> str | None:
        """The schema version marker, or None for pre-versioning saves."""
        value = self._data.get("version")
        return value if isinstance(value, str) else None

    def has(self, key: str) -> bool:
        return self._data.get(key) is not None

    def get(self, key: str, default: Any = None) -> Any:
        value = self._data.get(key)
        return default if value is None else value

    def get_str(self, key: str, default: str | None = None) -> str | None:
        value = self._data.get(key)
        return value if isinstance(value, str) else default

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self._data.get(key)
        return value if isinstance(value, bool) else default

    def get_int(self, key: str, default: int = 0) -> int:
        value = self._data.get(key)
        if isinstance(value, bool) or not isinstance(value, int):
            return default
        return value

    def get_list(self, key: str) -> list[Any]:
        value = self._data.get(key)
        return list(value) if isinstance(value, list) else []

    def get_mapping(self, key: str) -> dict[str, Any]:
        value = self._data.get(key)
        return dict(value) if isinstance(value, Mapping) else {}

    def get_documents(self, key: str) -> list[Document]:
        """Items of a list field that are objects, each wrapped as a Document."""
        return [Document(item) for item in self.get_list(key) if isinstance(item, Mapping)]

    def require_list(self, key: str) -> list[Any]:
        """Like get_list, but a missing or non-list value is a shape error."""
        value = self._data.get(key)
        if not isinstance(value, list):
            raise DocumentError(f"Expected '{key}' to be a list")
        return list(value)
