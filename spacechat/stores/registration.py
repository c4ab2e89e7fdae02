from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from spacechat.providers.base import KeyValueStore

KEY_PREFIX = "registration:"


@dataclass
class RegistrationState:
    step: int = 1
    collected: dict[str, Any] = field(default_factory=dict)
    required_fields: list[str] = field(default_factory=list)
    updated_at: float = field(default_factory=time.time)

    # record id reserved on the first finalization attempt
    space_id: Optional[str] = None

    @classmethod
    def from_dict(cls, d: dict) -> "RegistrationState":
        return cls(
            step=int(d.get("step") or 1),
            collected=dict(d.get("collected") or {}),
            required_fields=list(d.get("required_fields") or []),
            updated_at=float(d.get("updated_at") or 0.0),
            space_id=d.get("space_id"),
        )

    def to_dict(self) -> dict:
        return asdict(self)


class RegistrationStateStore:
    """One in-progress registration per session id."""

    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    @staticmethod
    def _key(session_id: str) -> str:
        return f"{KEY_PREFIX}{session_id}"

    def load(self, session_id: str) -> Optional[RegistrationState]:
        doc = self.kv.get(self._key(session_id))
        return RegistrationState.from_dict(doc) if doc else None

    def save(self, session_id: str, state: RegistrationState) -> None:
        state.updated_at = time.time()
        self.kv.put(self._key(session_id), state.to_dict())

    def delete(self, session_id: str) -> None:
        self.kv.delete(self._key(session_id))
