# spacechat/llm/extractor.py
import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from spacechat.agents.catalog import (
    SKIP_MARKER,
    FieldKind,
    InvalidFieldValue,
    RegistrationStep,
    coerce_value,
    is_empty,
)
from spacechat.llm.context import format_context
from spacechat.llm.jsonparse import safe_json_parse
from spacechat.providers.base import TextCompletionGateway
from spacechat.stores.conversation import Turn

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "당신은 공간 등록 정보를 추출하는 도우미입니다. 반드시 JSON 만 출력하세요."

KIND_HINTS = {
    FieldKind.TEXT: "문자열",
    FieldKind.NUMBER: "숫자 (단위 없이, 예: 20)",
    FieldKind.TEXT_LIST: "문자열 배열 (예: [\"오디오\", \"마이크\"])",
    FieldKind.HOURS: (
        "요일별 객체. 키는 mon,tue,wed,thu,fri,sat,sun 이고 값은 "
        "{\"open\": \"HH:MM\", \"close\": \"HH:MM\"} 또는 {\"closed\": true}"
    ),
}

EXTRACT_PROMPT = """
공간 등록 중입니다. 사용자의 답변에서 아래 항목의 값을 추출하세요.

항목: {field} ({description})
값 형식: {kind_hint}
예시 답변: {example}
{skip_rule}
이전 대화:
{context}

사용자 답변: "{message}"

다음 JSON 형식으로만 응답하세요:
{{"extracted_value": <값 또는 null>, "is_valid": true|false, "error_message": "<유효하지 않은 이유 또는 null>"}}
"""

SKIP_RULE = "이 항목은 선택 사항입니다. 사용자가 없다고 하거나 건너뛰려 하면 extracted_value 를 \"{marker}\" 로 하고 is_valid 를 true 로 하세요.\n"


@dataclass
class ExtractionResult:
    extracted_value: Any
    is_valid: bool
    error_message: Optional[str] = None


class FieldExtractor:
    def __init__(self, gateway: TextCompletionGateway):
        self.gateway = gateway

    def build_prompt(self, message: str, step: RegistrationStep, context: Sequence[Turn]) -> str:
        return EXTRACT_PROMPT.format(
            field=step.field,
            description=step.description,
            kind_hint=KIND_HINTS[step.kind],
            example=step.example,
            skip_rule="" if step.required else SKIP_RULE.format(marker=SKIP_MARKER),
            context=format_context(context),
            message=message,
        )

    def extract(self, message: str, step: RegistrationStep, context: Sequence[Turn] = ()) -> ExtractionResult:
        """
        Gateway errors propagate to the caller.
        An unparseable or ill-typed reply comes back as is_valid=False.
        """
        raw = self.gateway.complete(
            self.build_prompt(message, step, context),
            max_tokens=256,
            temperature=0.0,
            system=SYSTEM_PROMPT,
        )
        data = safe_json_parse(raw)
        if not data:
            logger.warning("extraction reply for %s was not JSON: %r", step.field, raw)
            return ExtractionResult(None, False, "응답을 이해하지 못했어요.")

        value = data.get("extracted_value")
        is_valid = data.get("is_valid") is True
        error = data.get("error_message")
        if not is_valid or is_empty(value):
            return ExtractionResult(value, False, error)

        try:
            value = coerce_value(step.field, value)
        except InvalidFieldValue as e:
            logger.info("extracted %s=%s rejected: %s", step.field, json.dumps(value, ensure_ascii=False), e)
            return ExtractionResult(value, False, str(e))

        if is_empty(value):
            return ExtractionResult(value, False, error)
        return ExtractionResult(value, True, None)
