from typing import Any, Optional, TypedDict

from spacechat.stores.conversation import Turn


class ChatState(TypedDict, total=False):
    session_id: str
    message: str

    # prior turns, oldest first (at most CONTEXT_TURNS)
    context: list[Turn]

    # classifier output
    intent: str

    # outputs
    reply: str
    search_results: Optional[dict[str, Any]]
    registration: Optional[dict[str, Any]]
