# spacechat/llm/classifier.py
import logging
from typing import Sequence

from spacechat.config import CONTEXT_TURNS
from spacechat.graph.intent import DEFAULT_INTENT, Intent, normalize_intent
from spacechat.llm.context import format_context
from spacechat.providers.base import TextCompletionGateway
from spacechat.stores.conversation import Turn

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "당신은 의도 분석 전문가입니다. 주어진 메시지를 정확히 분류하여 응답해주세요."

INTENT_PROMPT = """
당신은 사용자의 메시지를 분석하여 의도를 파악하는 AI입니다.
다음 3가지 의도 중 하나로 분류해주세요:

1. SEARCH_SPACE: 공간을 찾거나 검색하려는 의도 (예: "홍대 근처 카페 찾아줘", "4명이서 갈 수 있는 식당")
2. ADD_SPACE: 새로운 공간을 등록하거나 추가하려는 의도 (예: "우리 카페 등록하고 싶어", "새로운 장소 추가")
   어시스턴트가 공간 등록 정보를 묻고 있고 사용자가 그 질문에 답하는 경우도 ADD_SPACE 입니다.
3. CREATE_USER_PROFILE: 사용자 프로필을 생성하거나 수정하려는 의도 (예: "프로필 만들기", "내 정보 수정")

이전 대화:
{context}

사용자 메시지: "{message}"

위 메시지를 분석하여 SEARCH_SPACE, ADD_SPACE, CREATE_USER_PROFILE 중 하나만 응답해주세요. 다른 텍스트는 포함하지 마세요.
"""


class IntentClassifier:
    def __init__(self, gateway: TextCompletionGateway):
        self.gateway = gateway

    def classify(self, message: str, context: Sequence[Turn] = ()) -> Intent:
        """
        Label `message` using the recent conversation.
        Fails open to SEARCH_SPACE on an unclear label or any gateway error; never retries.
        """
        prompt = INTENT_PROMPT.format(
            context=format_context(list(context)[-CONTEXT_TURNS:]),
            message=message,
        )
        try:
            raw = self.gateway.complete(prompt, max_tokens=50, temperature=0.1, system=SYSTEM_PROMPT)
        except Exception:
            logger.exception("intent classification failed, defaulting to %s", DEFAULT_INTENT.value)
            return DEFAULT_INTENT

        intent = normalize_intent(raw)
        if intent is None:
            logger.warning("Unclear intent classification: %r, defaulting to %s", raw, DEFAULT_INTENT.value)
            return DEFAULT_INTENT
        return intent
