"""End-to-end tests for the orchestrator graph."""

from unittest.mock import MagicMock

from conftest import FakeGateway, extraction, routed
from spacechat.agents.catalog import get_step
from spacechat.graph.graph import Orchestrator, build_orchestrator
from spacechat.providers.sql_store import SqlKeyValueStore
from spacechat.stores.conversation import ConversationStore
from spacechat.stores.registration import RegistrationState, RegistrationStateStore
from spacechat.stores.spaces import SpaceRepository


class TestOrchestrator:
    def test_register_request_on_fresh_session(self, kv):
        gw = FakeGateway(routed("ADD_SPACE", reply="새 공간 등록을 시작할게요! 공간 이름을 알려주세요."))
        out = build_orchestrator(kv, gw).handle_message("s1", "우리 카페 등록하고 싶어")

        assert out["status"] == "SUCCESS"
        assert out["intent_type"] == "ADD_SPACE"
        assert out["registration"]["step"] == 1
        assert "공간 이름" in out["reply"]
        assert RegistrationStateStore(kv).load("s1").step == 1

    def test_name_answer_moves_to_address(self, kv):
        RegistrationStateStore(kv).save("s1", RegistrationState(step=1))
        gw = FakeGateway(routed("ADD_SPACE", extract=extraction("스튜디오 A")))

        out = build_orchestrator(kv, gw).handle_message("s1", "스튜디오 A")

        assert out["registration"]["step"] == 2
        assert get_step(2).description in out["reply"]
        assert RegistrationStateStore(kv).load("s1").collected == {"name": "스튜디오 A"}

    def test_search_finds_matching_space(self, kv, sample_space):
        SpaceRepository(kv).save(sample_space)
        gw = FakeGateway(routed("SEARCH_SPACE", reply="송도 녹음 스튜디오를 찾았어요."))

        out = build_orchestrator(kv, gw).handle_message("s1", "인천 오디오 있는 공간")

        assert out["intent_type"] == "SEARCH_SPACE"
        assert out["search_results"]["total_count"] == 1
        assert out["search_results"]["spaces"][0]["name"] == sample_space["name"]
        assert out["reply"]

    def test_search_without_keywords(self, kv, sample_space):
        SpaceRepository(kv).save(sample_space)
        gw = FakeGateway(routed("SEARCH_SPACE", reply=""))

        out = build_orchestrator(kv, gw).handle_message("s1", "괜찮은 곳 있어?")

        assert out["search_results"]["total_count"] == 0
        assert out["reply"]

    def test_unclear_classification_searches(self, kv):
        gw = FakeGateway(routed("음... 잘 모르겠네요", reply="검색 결과가 없어요."))

        out = build_orchestrator(kv, gw).handle_message("s1", "흠")

        assert out["intent_type"] == "SEARCH_SPACE"
        assert "search_results" in out

    def test_profile_intent(self, kv):
        gw = FakeGateway(routed("CREATE_USER_PROFILE", reply="프로필을 만들어 볼까요?"))

        out = build_orchestrator(kv, gw).handle_message("s1", "프로필 만들기")

        assert out["intent_type"] == "CREATE_USER_PROFILE"
        assert out["reply"] == "프로필을 만들어 볼까요?"
        assert "search_results" not in out
        assert "registration" not in out

    def test_turns_are_recorded(self, kv):
        gw = FakeGateway(routed("ADD_SPACE", reply="공간 이름을 알려주세요."))
        build_orchestrator(kv, gw).handle_message("s1", "등록할래")

        turns = ConversationStore(kv).load("s1")
        assert [t.role for t in turns] == ["user", "assistant"]
        assert turns[1].intent == "ADD_SPACE"
        assert turns[1].metadata["registration"]["status"] == "started"

    def test_context_excludes_current_message_and_is_capped(self, kv):
        gw = FakeGateway(routed("SEARCH_SPACE"))
        orch = build_orchestrator(kv, gw)
        for i in range(12):
            orch.handle_message("s1", f"질문{i:02d}")

        assert len(ConversationStore(kv).load("s1")) == 20
        classify_prompt = [c for c in gw.calls if "의도를 파악하는 AI" in c["prompt"]][-1]["prompt"]
        assert classify_prompt.count("질문11") == 1
        assert "질문05" not in classify_prompt
        assert "질문06" in classify_prompt

    def test_abandoned_registration_resumes(self, kv):
        intents = iter(["ADD_SPACE", "SEARCH_SPACE", "ADD_SPACE"])

        def responder(prompt):
            if "의도를 파악하는 AI" in prompt:
                return next(intents)
            if "extracted_value" in prompt:
                return extraction("스튜디오 A")
            return "안내"

        orch = build_orchestrator(kv, FakeGateway(responder))
        orch.handle_message("s1", "등록할래")
        orch.handle_message("s1", "인천 공간 찾아줘")
        out = orch.handle_message("s1", "스튜디오 A")

        assert out["registration"]["step"] == 2

    def test_conversation_store_failure_does_not_break_reply(self, kv):
        conversations = MagicMock(spec=ConversationStore)
        conversations.append.side_effect = RuntimeError("db down")
        graph = MagicMock()
        graph.invoke.return_value = {"intent": "SEARCH_SPACE", "reply": "안내", "search_results": {"total_count": 0, "spaces": []}}

        out = Orchestrator(conversations, graph).handle_message("s1", "hi")

        assert out["reply"] == "안내"
        assert graph.invoke.call_args[0][0]["context"] == []

    def test_runs_on_sql_store(self, session_factory, sample_space):
        kv = SqlKeyValueStore(session_factory)
        SpaceRepository(kv).save(sample_space)
        gw = FakeGateway(routed("SEARCH_SPACE", reply="찾았어요."))

        out = build_orchestrator(kv, gw).handle_message("s1", "인천 오디오 있는 공간")

        assert out["search_results"]["total_count"] == 1
        assert len(ConversationStore(kv).load("s1")) == 2
