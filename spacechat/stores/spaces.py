import logging
import re
import time
from typing import Any

from spacechat.providers.base import KeyValueStore

logger = logging.getLogger(__name__)

RECORD_PREFIX = "space_"
_SUFFIX_RE = re.compile(r"(\d+)$")


class SpaceRepository:
    """
    Finalized space records, keyed by their id (RECORD_PREFIX + number).
    """

    def __init__(self, kv: KeyValueStore, prefix: str = RECORD_PREFIX):
        self.kv = kv
        self.prefix = prefix

    def generate_id(self) -> str:
        """
        Next id = prefix + (max numeric suffix + 1).
        Not atomic: two concurrent finalizations may compute the same id,
        in which case the later write overwrites the earlier one.
        """
        try:
            keys = self.kv.list(self.prefix)
        except Exception:
            logger.exception("id scan failed, falling back to time-based id")
            return f"{self.prefix}{int(time.time() * 1000)}"

        highest = 0
        for key in keys:
            m = _SUFFIX_RE.search(key[len(self.prefix):])
            if m:
                highest = max(highest, int(m.group(1)))
        return f"{self.prefix}{highest + 1}"

    def save(self, record: dict[str, Any]) -> None:
        self.kv.put(record["id"], record)

    def all(self) -> list[dict]:
        out = []
        for key in self.kv.list(self.prefix):
            doc = self.kv.get(key)
            if isinstance(doc, dict):
                out.append(doc)
        return out
