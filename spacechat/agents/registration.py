# spacechat/agents/registration.py
"""
Step-by-step space registration.

One call per inbound ADD_SPACE message:
  - no saved state      -> create it at step 1 and ask for the first field
  - step 1..N           -> extract the current field; advance on a valid value,
                           stay on the same step otherwise (no retry limit)
  - step passes N       -> build the SpaceRecord, store it, drop the draft

Steps are strictly sequential. Any exception leaves the stored draft on the
step it was on and produces a generic apology. A failed finalization keeps only
the record id reserved on the draft; the resend writes under that same id.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

from spacechat.agents.catalog import (
    DAYS,
    SKIP_MARKER,
    TOTAL_STEPS,
    RegistrationStep,
    build_space_record,
    get_step,
    required_fields,
)
from spacechat.llm.extractor import FieldExtractor
from spacechat.llm.synthesizer import KIND_ADD_SPACE, ResponseSynthesizer
from spacechat.stores.conversation import Turn
from spacechat.stores.registration import RegistrationState, RegistrationStateStore
from spacechat.stores.spaces import SpaceRepository

logger = logging.getLogger(__name__)

ERROR_REPLY = "죄송해요, 처리 중 문제가 발생했어요. 잠시 후 다시 시도해 주세요."
START_OVER_REPLY = "죄송해요, 등록 진행 상태에 문제가 생겼어요. 처음부터 다시 시작해 주세요."

DAY_LABELS = {"mon": "월", "tue": "화", "wed": "수", "thu": "목", "fri": "금", "sat": "토", "sun": "일"}

STATUS_STARTED = "started"
STATUS_ADVANCED = "advanced"
STATUS_RETRY = "retry"
STATUS_COMPLETED = "completed"
STATUS_ERROR = "error"


def format_value(value: Any) -> str:
    if value == SKIP_MARKER:
        return "없음"
    if isinstance(value, list):
        return ", ".join(str(x) for x in value) or "없음"
    if isinstance(value, dict) and set(value) <= set(DAYS):
        parts = []
        for day in DAYS:
            slot = value.get(day) or {"closed": True}
            hours = "휴무" if slot.get("closed") else f"{slot['open']}-{slot['close']}"
            parts.append(f"{DAY_LABELS[day]} {hours}")
        return ", ".join(parts)
    return str(value)


def ask_text(step: RegistrationStep) -> str:
    text = f"{step.description}을(를) 알려주세요. (예: {step.example})"
    if not step.required:
        text += f" 선택 사항이라 없으면 '{SKIP_MARKER}'이라고 답해주세요."
    return text


def summary_text(record: Dict[str, Any]) -> str:
    lines = [f"공간 등록이 완료되었어요! 등록 번호: {record['id']}"]
    for i in range(1, TOTAL_STEPS + 1):
        step = get_step(i)
        lines.append(f"- {step.description}: {format_value(record.get(step.field))}")
    return "\n".join(lines)


class RegistrationAgent:
    def __init__(
        self,
        states: RegistrationStateStore,
        spaces: SpaceRepository,
        extractor: FieldExtractor,
        synthesizer: ResponseSynthesizer,
    ):
        self.states = states
        self.spaces = spaces
        self.extractor = extractor
        self.synthesizer = synthesizer

    @staticmethod
    def _outcome(status: str, reply: str, step: int, space_id: Optional[str] = None) -> Dict[str, Any]:
        return {
            "status": status,
            "reply": reply,
            "step": step,
            "total_steps": TOTAL_STEPS,
            "completed": status == STATUS_COMPLETED,
            "space_id": space_id,
        }

    def handle(self, session_id: str, message: str, context: Sequence[Turn] = ()) -> Dict[str, Any]:
        try:
            state = self.states.load(session_id)
            if state is None:
                return self._start(session_id, message, context)
            return self._advance(session_id, message, state, context)
        except Exception:
            logger.exception("registration failed for session %s", session_id)
            return self._outcome(STATUS_ERROR, ERROR_REPLY, 0)

    def _start(self, session_id: str, message: str, context: Sequence[Turn]) -> Dict[str, Any]:
        state = RegistrationState(step=1, collected={}, required_fields=required_fields())
        self.states.save(session_id, state)
        logger.info("registration started for session %s", session_id)

        first = get_step(1)
        reply = self.synthesizer.synthesize(KIND_ADD_SPACE, {"message": message, "step": first}, context)
        return self._outcome(STATUS_STARTED, reply, 1)

    def _advance(
        self, session_id: str, message: str, state: RegistrationState, context: Sequence[Turn]
    ) -> Dict[str, Any]:
        step = get_step(state.step)
        if step is None:
            logger.error("session %s is on step %s which is not in the catalogue", session_id, state.step)
            return self._outcome(STATUS_ERROR, START_OVER_REPLY, state.step)

        result = self.extractor.extract(message, step, context)

        if not result.is_valid:
            # same step; previously collected fields untouched
            self.states.save(session_id, state)
            prefix = f"{result.error_message} " if result.error_message else "입력하신 내용을 확인하지 못했어요. "
            return self._outcome(STATUS_RETRY, prefix + ask_text(step), state.step)

        collected = dict(state.collected)
        collected[step.field] = result.extracted_value
        next_step = state.step + 1

        if next_step > TOTAL_STEPS:
            return self._finalize(session_id, state, collected)

        self.states.save(
            session_id,
            RegistrationState(
                step=next_step,
                collected=collected,
                required_fields=state.required_fields,
                space_id=state.space_id,
            ),
        )
        logger.info("session %s: collected %s, now on step %d", session_id, step.field, next_step)

        reply = (
            f"{step.description}: {format_value(result.extracted_value)} 저장했어요. "
            f"({state.step}/{TOTAL_STEPS})\n다음으로 {ask_text(get_step(next_step))}"
        )
        return self._outcome(STATUS_ADVANCED, reply, next_step)

    def _finalize(
        self, session_id: str, state: RegistrationState, collected: Dict[str, Any]
    ) -> Dict[str, Any]:
        space_id = state.space_id
        if space_id is None:
            # id lives on the draft before any record write
            space_id = self.spaces.generate_id()
            state.space_id = space_id
            self.states.save(session_id, state)

        record = build_space_record(space_id, collected)
        self.spaces.save(record)
        self.states.delete(session_id)
        logger.info("session %s: registered %s", session_id, space_id)
        return self._outcome(STATUS_COMPLETED, summary_text(record), TOTAL_STEPS + 1, space_id)
