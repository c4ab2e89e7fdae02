import copy
from typing import Any, Optional

from .base import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    def __init__(self, data: Optional[dict] = None):
        self._data: dict[str, Any] = {}
        for k, v in (data or {}).items():
            self.put(k, v)

    def get(self, key: str) -> Optional[Any]:
        if key not in self._data:
            return None
        # hand out copies so callers can't mutate stored JSON in place
        return copy.deepcopy(self._data[key])

    def put(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def list(self, prefix: str = "") -> list[str]:
        return sorted(k for k in self._data if k.startswith(prefix))

    def delete(self, key: str) -> None:
        self._data.pop(key, None)
