from typing import Sequence

from spacechat.stores.conversation import Turn

ROLE_LABELS = {"user": "사용자", "assistant": "어시스턴트"}


def format_context(turns: Sequence[Turn]) -> str:
    if not turns:
        return "(이전 대화 없음)"
    return "\n".join(f"{ROLE_LABELS.get(t.role, t.role)}: {t.content}" for t in turns)
