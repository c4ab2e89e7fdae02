# spacechat/llm/synthesizer.py
"""
Natural-language replies from structured results.

Each reply kind has a prompt for the gateway and a deterministic fallback
sentence used when the gateway fails or returns nothing. Fallbacks are never empty.
"""
import logging
from typing import Any, Dict, Optional, Sequence

from spacechat.agents.catalog import RegistrationStep
from spacechat.llm.context import format_context
from spacechat.providers.base import TextCompletionGateway
from spacechat.stores.conversation import Turn

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "당신은 공간 대여 플랫폼의 친절한 상담원입니다. 한국어로 간결하게 답하세요."

SEARCH_PROMPT = """
사용자가 공간을 검색했습니다.

이전 대화:
{context}

사용자 메시지: "{message}"

검색 결과 ({count}개):
{listing}

검색 결과를 바탕으로 자연스럽게 답변해주세요. 결과에 없는 공간을 지어내지 마세요.
"""

NOT_FOUND_PROMPT = """
사용자가 공간을 검색했지만 조건에 맞는 공간을 찾지 못했습니다.

이전 대화:
{context}

사용자 메시지: "{message}"

정중하게 사과하고, 지역(예: 인천, 서울)이나 편의 시설(예: 오디오, 프로젝터)을 포함해 다시 검색해 보도록 안내해주세요.
"""

ADD_SPACE_PROMPT = """
사용자가 새 공간 등록을 시작하려고 합니다.

이전 대화:
{context}

사용자 메시지: "{message}"

등록을 시작한다고 반갑게 안내하고, 첫 번째 항목인 "{description}" 을(를) 물어보세요. 예시: {example}
"""

PROFILE_PROMPT = """
사용자가 프로필을 만들거나 수정하려고 합니다.

이전 대화:
{context}

사용자 메시지: "{message}"

프로필 작성을 돕겠다고 안내하고, 이름과 선호하는 공간 유형을 물어보세요.
"""

KIND_SEARCH = "search"
KIND_ADD_SPACE = "add_space"
KIND_PROFILE = "create_user_profile"


def _listing(spaces: Sequence[Dict[str, Any]]) -> str:
    lines = []
    for i, s in enumerate(spaces, 1):
        amenities = ", ".join(s.get("amenities") or []) or "없음"
        lines.append(f"{i}. {s.get('name')} | 주소: {s.get('address')} | 편의 시설: {amenities}")
    return "\n".join(lines)


def fallback_text(kind: str, result: Dict[str, Any]) -> str:
    if kind == KIND_SEARCH:
        spaces = result.get("spaces") or []
        if spaces:
            first = spaces[0].get("name") or "공간"
            if len(spaces) == 1:
                return f"'{first}' 공간을 찾았어요."
            return f"'{first}' 외 {len(spaces) - 1}개의 공간을 찾았어요."
        return "죄송해요, 조건에 맞는 공간을 찾지 못했어요. 지역이나 편의 시설을 바꿔서 다시 검색해 보세요."
    if kind == KIND_ADD_SPACE:
        step: Optional[RegistrationStep] = result.get("step")
        if step:
            return f"새 공간 등록을 시작할게요! 먼저 {step.description}을(를) 알려주세요. (예: {step.example})"
        return "새 공간 등록을 시작할게요!"
    if kind == KIND_PROFILE:
        return "프로필 작성을 도와드릴게요. 이름과 선호하는 공간 유형을 알려주세요."
    return "죄송해요, 요청을 처리하지 못했어요. 다시 말씀해 주세요."


class ResponseSynthesizer:
    def __init__(self, gateway: TextCompletionGateway):
        self.gateway = gateway

    def _prompt(self, kind: str, result: Dict[str, Any], context: Sequence[Turn]) -> str:
        ctx = format_context(context)
        message = result.get("message", "")
        if kind == KIND_SEARCH:
            spaces = result.get("spaces") or []
            if not spaces:
                return NOT_FOUND_PROMPT.format(context=ctx, message=message)
            return SEARCH_PROMPT.format(context=ctx, message=message, count=len(spaces), listing=_listing(spaces))
        if kind == KIND_ADD_SPACE:
            step: RegistrationStep = result["step"]
            return ADD_SPACE_PROMPT.format(
                context=ctx, message=message, description=step.description, example=step.example
            )
        if kind == KIND_PROFILE:
            return PROFILE_PROMPT.format(context=ctx, message=message)
        raise ValueError(f"unknown reply kind {kind!r}")

    def synthesize(self, kind: str, result: Dict[str, Any], context: Sequence[Turn] = ()) -> str:
        try:
            text = self.gateway.complete(
                self._prompt(kind, result, context),
                max_tokens=512,
                temperature=0.7,
                system=SYSTEM_PROMPT,
            )
        except Exception:
            logger.exception("reply synthesis (%s) failed, using fallback", kind)
            return fallback_text(kind, result)

        text = (text or "").strip()
        return text or fallback_text(kind, result)
