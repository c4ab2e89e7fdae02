"""
spacechat/stores/conversation.py

Per-session turn history on top of a KeyValueStore.

- Append-only; every write keeps only the newest HISTORY_MAX_TURNS turns.
- Timestamps never go backwards within a session.
- Sessions are created lazily on first append and never deleted.
"""
from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from spacechat.config import CONTEXT_TURNS, HISTORY_MAX_TURNS
from spacechat.providers.base import KeyValueStore

KEY_PREFIX = "conversation:"


@dataclass
class Turn:
    role: str                       # "user" | "assistant"
    content: str
    created_at: float = field(default_factory=time.time)
    intent: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: dict) -> "Turn":
        return cls(
            role=d.get("role", "user"),
            content=d.get("content", ""),
            created_at=float(d.get("created_at") or 0.0),
            intent=d.get("intent"),
            metadata=d.get("metadata") or {},
        )


class ConversationStore:
    def __init__(self, kv: KeyValueStore, max_turns: int = HISTORY_MAX_TURNS):
        self.kv = kv
        self.max_turns = max_turns

    @staticmethod
    def _key(session_id: str) -> str:
        return f"{KEY_PREFIX}{session_id}"

    def load(self, session_id: str) -> list[Turn]:
        doc = self.kv.get(self._key(session_id)) or {}
        return [Turn.from_dict(t) for t in doc.get("turns") or []]

    def append(self, session_id: str, turn: Turn) -> list[Turn]:
        turns = self.load(session_id)
        if turns and turn.created_at < turns[-1].created_at:
            turn.created_at = turns[-1].created_at
        turns.append(turn)
        turns = turns[-self.max_turns:]
        self.kv.put(self._key(session_id), {
            "session_id": session_id,
            "turns": [asdict(t) for t in turns],
        })
        return turns

    def recent(self, session_id: str, limit: int = CONTEXT_TURNS) -> list[Turn]:
        """Return the last `limit` turns, oldest first."""
        if limit <= 0:
            return []
        return self.load(session_id)[-limit:]
