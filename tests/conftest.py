"""Shared pytest fixtures for testing."""

import json
from typing import Callable, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from spacechat import init_db
from spacechat.providers.base import GatewayError, TextCompletionGateway
from spacechat.providers.memory_store import InMemoryKeyValueStore


class FakeGateway(TextCompletionGateway):
    """
    Scripted gateway. `responder(prompt)` returns the completion text;
    returning an Exception instance raises it.
    """

    def __init__(self, responder: Optional[Callable[[str], object]] = None):
        self.responder = responder or (lambda prompt: "")
        self.calls = []

    def complete(self, prompt, max_tokens=256, temperature=0.3, system=None):
        self.calls.append({"prompt": prompt, "max_tokens": max_tokens, "temperature": temperature, "system": system})
        out = self.responder(prompt)
        if isinstance(out, Exception):
            raise out
        return out


def extraction(value, valid=True, error=None) -> str:
    return json.dumps({"extracted_value": value, "is_valid": valid, "error_message": error}, ensure_ascii=False)


def routed(intent: str, extract: Optional[str] = None, reply: str = "안내 드릴게요."):
    """Responder that answers classification with `intent`, extraction with `extract`, anything else with `reply`."""

    def responder(prompt: str):
        if "의도를 파악하는 AI" in prompt:
            return intent
        if "extracted_value" in prompt:
            return extract if extract is not None else extraction(None, False)
        return reply

    return responder


@pytest.fixture
def kv():
    return InMemoryKeyValueStore()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def failing_gateway():
    return FakeGateway(lambda prompt: GatewayError("provider down"))


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autoflush=False, autocommit=False)


@pytest.fixture
def sample_space():
    return {
        "id": "space_1",
        "name": "송도 녹음 스튜디오",
        "address": "인천광역시 연수구 송도과학로 32",
        "space_type": "실내",
        "capacity": 8,
        "amenities": ["오디오", "마이크"],
        "price_per_hour": 30000,
    }
