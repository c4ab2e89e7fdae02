# spacechat/agents/catalog.py
"""
Registration step catalogue and per-field value handling.

Every collectable field has a closed FieldKind. Values coming back from the
extractor are coerced by kind before they are stored; anything that does not
fit is rejected so the user is asked again.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional


class FieldKind(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    TEXT_LIST = "text_list"
    HOURS = "hours"


# Answer an optional step may be given to skip it. Replaced by the default at finalization.
SKIP_MARKER = "없음"

DAYS = ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]


@dataclass(frozen=True)
class RegistrationStep:
    step: int
    field: str
    kind: FieldKind
    description: str
    required: bool
    example: str


REGISTRATION_STEPS: List[RegistrationStep] = [
    RegistrationStep(1, "name", FieldKind.TEXT, "공간 이름", True, "스튜디오 A"),
    RegistrationStep(2, "address", FieldKind.TEXT, "공간 주소", True, "인천광역시 연수구 송도과학로 32"),
    RegistrationStep(3, "space_type", FieldKind.TEXT, "공간 유형 (실내/실외)", True, "실내"),
    RegistrationStep(4, "capacity", FieldKind.NUMBER, "최대 수용 인원", True, "20명"),
    RegistrationStep(5, "amenities", FieldKind.TEXT_LIST, "편의 시설", False, "오디오, 마이크, 프로젝터"),
    RegistrationStep(6, "opening_hours", FieldKind.HOURS, "운영 시간", False, "평일 09:00-18:00, 주말 휴무"),
    RegistrationStep(7, "price_per_hour", FieldKind.NUMBER, "시간당 요금 (원)", True, "30000"),
    RegistrationStep(8, "description", FieldKind.TEXT, "공간 소개", False, "조용하고 채광이 좋은 녹음 스튜디오입니다."),
]

TOTAL_STEPS = len(REGISTRATION_STEPS)
FIELD_KINDS: Dict[str, FieldKind] = {s.field: s.kind for s in REGISTRATION_STEPS}
REQUIRED_FIELDS = frozenset(s.field for s in REGISTRATION_STEPS if s.required)


def get_step(step: int) -> Optional[RegistrationStep]:
    for s in REGISTRATION_STEPS:
        if s.step == step:
            return s
    return None


def required_fields() -> List[str]:
    return [s.field for s in REGISTRATION_STEPS if s.required]


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict)):
        return len(value) == 0
    return False


# ---------------------------
# Coercion
# ---------------------------
class InvalidFieldValue(ValueError):
    pass


_TIME_RE = re.compile(r"^([01]?\d|2[0-4]):([0-5]\d)$")
_THOUSANDS_RE = re.compile(r"(?<=\d),(?=\d{3})")
_MULTIPLIER_RE = re.compile(r"\d\s*[만천억]")
_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")


def _coerce_text(value: Any) -> str:
    if isinstance(value, (dict, list)):
        raise InvalidFieldValue("글자로 입력해 주세요.")
    return str(value).strip()


def _coerce_number(value: Any) -> float | int:
    if isinstance(value, bool):
        raise InvalidFieldValue("숫자로 입력해 주세요.")
    if isinstance(value, (int, float)):
        n = value
    else:
        text = _THOUSANDS_RE.sub("", str(value).strip())
        if _MULTIPLIER_RE.search(text):
            raise InvalidFieldValue("만/천 단위 없이 전체 숫자로 입력해 주세요.")
        groups = _NUMBER_RE.findall(text)
        if len(groups) != 1:
            raise InvalidFieldValue("숫자 하나만 입력해 주세요.")
        n = float(groups[0])
    if n < 0:
        raise InvalidFieldValue("0 이상의 숫자로 입력해 주세요.")
    return int(n) if float(n).is_integer() else n


def _coerce_text_list(value: Any) -> List[str]:
    if isinstance(value, str):
        items = re.split(r"[,/·\n]", value)
    elif isinstance(value, list):
        items = [str(x) for x in value]
    else:
        raise InvalidFieldValue("쉼표로 구분해 입력해 주세요.")
    return [x.strip() for x in items if x and x.strip()]


def _coerce_hours(value: Any) -> Dict[str, dict]:
    if not isinstance(value, dict):
        raise InvalidFieldValue("요일별 운영 시간을 알려주세요.")
    out: Dict[str, dict] = {}
    for day in DAYS:
        slot = value.get(day)
        if slot and not isinstance(slot, dict):
            raise InvalidFieldValue("운영 시간 형식을 확인해 주세요.")
        if not slot or slot.get("closed"):
            out[day] = {"closed": True}
            continue
        opens, closes = str(slot.get("open", "")), str(slot.get("close", ""))
        if not (_TIME_RE.match(opens) and _TIME_RE.match(closes)):
            raise InvalidFieldValue("시간은 09:00-18:00 형식으로 입력해 주세요.")
        out[day] = {"open": opens, "close": closes}
    return out


_COERCERS = {
    FieldKind.TEXT: _coerce_text,
    FieldKind.NUMBER: _coerce_number,
    FieldKind.TEXT_LIST: _coerce_text_list,
    FieldKind.HOURS: _coerce_hours,
}


def coerce_value(field: str, value: Any) -> Any:
    """Coerce an extracted value for `field` into its kind. Raises InvalidFieldValue."""
    kind = FIELD_KINDS.get(field)
    if kind is None:
        raise InvalidFieldValue(f"unknown field {field!r}")
    if isinstance(value, str) and value.strip() == SKIP_MARKER:
        if field in REQUIRED_FIELDS:
            raise InvalidFieldValue("필수 항목이라 건너뛸 수 없어요.")
        return SKIP_MARKER
    return _COERCERS[kind](value)


# ---------------------------
# Defaults / record shaping
# ---------------------------
def closed_all_week() -> Dict[str, dict]:
    return {day: {"closed": True} for day in DAYS}


def default_for(field: str) -> Any:
    kind = FIELD_KINDS[field]
    if kind is FieldKind.TEXT:
        return ""
    if kind is FieldKind.NUMBER:
        return 0
    if kind is FieldKind.TEXT_LIST:
        return []
    if kind is FieldKind.HOURS:
        return closed_all_week()
    raise AssertionError(kind)


def default_booking_policy() -> dict:
    return {"cancellable": False, "modifiable": False, "deposit_required": False}


def default_sensors() -> dict:
    return {"noise": False, "occupancy": False, "temperature": False}


def build_space_record(space_id: str, collected: Dict[str, Any]) -> dict:
    """Collected values plus defaults for every field the dialogue skipped or never asks."""
    record: Dict[str, Any] = {"id": space_id}
    for s in REGISTRATION_STEPS:
        value = collected.get(s.field)
        if is_empty(value) or value == SKIP_MARKER:
            value = default_for(s.field)
        record[s.field] = value
    record["booking_policy"] = default_booking_policy()
    record["sensors"] = default_sensors()
    return record


def to_display(record: dict) -> dict:
    """Search-result shape; every nested field present."""
    sensors = {**default_sensors(), **(record.get("sensors") or {})}
    policy = {**default_booking_policy(), **(record.get("booking_policy") or {})}
    hours = {**closed_all_week(), **(record.get("opening_hours") or {})}
    return {
        "id": record.get("id", ""),
        "name": record.get("name") or "",
        "address": record.get("address") or "",
        "space_type": record.get("space_type") or "",
        "capacity": record.get("capacity") or 0,
        "amenities": list(record.get("amenities") or []),
        "opening_hours": hours,
        "price_per_hour": record.get("price_per_hour") or 0,
        "description": record.get("description") or "",
        "booking_policy": policy,
        "sensors": sensors,
    }
