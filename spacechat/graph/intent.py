from enum import Enum


class Intent(str, Enum):
    SEARCH_SPACE = "SEARCH_SPACE"
    ADD_SPACE = "ADD_SPACE"
    CREATE_USER_PROFILE = "CREATE_USER_PROFILE"


# containment is checked in this order; first hit wins
INTENT_PRIORITY = [Intent.SEARCH_SPACE, Intent.ADD_SPACE, Intent.CREATE_USER_PROFILE]
DEFAULT_INTENT = Intent.SEARCH_SPACE


def normalize_intent(raw: str | None) -> Intent | None:
    """
    Map raw model output to an Intent, or None when no label is present.
    """
    t = (raw or "").strip().upper()
    for intent in INTENT_PRIORITY:
        if intent.value in t:
            return intent
    return None


def intent_or_default(raw: str | None) -> Intent:
    return normalize_intent(raw) or DEFAULT_INTENT
