# spacechat/agents/search.py
import logging
from typing import Any, Dict, List, Sequence

from spacechat.agents.catalog import to_display
from spacechat.llm.synthesizer import KIND_SEARCH, ResponseSynthesizer
from spacechat.stores.conversation import Turn
from spacechat.stores.spaces import SpaceRepository

logger = logging.getLogger(__name__)

CITY_KEYWORDS = ["서울", "인천", "부산", "대구", "대전", "광주", "수원", "성남", "판교", "홍대", "강남", "송도"]
AMENITY_KEYWORDS = [
    "오디오", "audio",
    "마이크", "microphone",
    "프로젝터", "projector",
    "실내", "indoor",
    "실외", "outdoor",
]
KEYWORDS = CITY_KEYWORDS + AMENITY_KEYWORDS

SEARCH_MODE_KEYWORD = "KEYWORD"
SEARCH_MODE_ERROR = "ERROR"

ERROR_REPLY = "죄송해요, 공간을 검색하는 중에 문제가 발생했어요. 잠시 후 다시 시도해 주세요."


def find_keywords(message: str) -> List[str]:
    t = (message or "").lower()
    return [k for k in KEYWORDS if k.lower() in t]


def matches(record: Dict[str, Any], keywords: Sequence[str]) -> bool:
    haystack = [str(record.get("address") or "")]
    haystack += [str(a) for a in (record.get("amenities") or [])]
    haystack = [h.lower() for h in haystack]
    return any(k.lower() in h for k in keywords for h in haystack)


def filter_spaces(records: Sequence[Dict[str, Any]], message: str) -> List[Dict[str, Any]]:
    """Records whose address or amenities contain a keyword from the message. No keyword, no results."""
    keywords = find_keywords(message)
    if not keywords:
        return []
    return [to_display(r) for r in records if matches(r, keywords)]


class SearchAgent:
    def __init__(self, spaces: SpaceRepository, synthesizer: ResponseSynthesizer):
        self.spaces = spaces
        self.synthesizer = synthesizer

    def handle(self, message: str, context: Sequence[Turn] = ()) -> Dict[str, Any]:
        try:
            found = filter_spaces(self.spaces.all(), message)
        except Exception:
            logger.exception("space search failed")
            return {
                "spaces": [],
                "total_count": 0,
                "search_mode": SEARCH_MODE_ERROR,
                "reply": ERROR_REPLY,
            }

        reply = self.synthesizer.synthesize(KIND_SEARCH, {"message": message, "spaces": found}, context)
        return {
            "spaces": found,
            "total_count": len(found),
            "search_mode": SEARCH_MODE_KEYWORD,
            "reply": reply,
        }
