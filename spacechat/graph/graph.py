import logging
from typing import Any, Dict

from langgraph.graph import END, StateGraph

from spacechat.agents.registration import RegistrationAgent
from spacechat.agents.search import SearchAgent
from spacechat.config import CONTEXT_TURNS
from spacechat.graph.intent import Intent, intent_or_default
from spacechat.graph.state import ChatState
from spacechat.llm.classifier import IntentClassifier
from spacechat.llm.extractor import FieldExtractor
from spacechat.llm.synthesizer import KIND_PROFILE, ResponseSynthesizer
from spacechat.providers.base import KeyValueStore, TextCompletionGateway
from spacechat.stores.conversation import ConversationStore, Turn
from spacechat.stores.registration import RegistrationStateStore
from spacechat.stores.spaces import SpaceRepository

logger = logging.getLogger(__name__)


# ---------------------------
# Build graph
# ---------------------------
def build_graph(
    classifier: IntentClassifier,
    search: SearchAgent,
    registration: RegistrationAgent,
    synthesizer: ResponseSynthesizer,
):
    def node_classify(state: ChatState) -> ChatState:
        intent = classifier.classify(state["message"], state.get("context") or [])
        return {"intent": intent.value}

    def node_route(state: ChatState) -> str:
        return intent_or_default(state.get("intent")).value

    def node_search_space(state: ChatState) -> ChatState:
        out = search.handle(state["message"], state.get("context") or [])
        reply = out.pop("reply")
        return {"reply": reply, "search_results": out}

    def node_add_space(state: ChatState) -> ChatState:
        out = registration.handle(state["session_id"], state["message"], state.get("context") or [])
        reply = out.pop("reply")
        return {"reply": reply, "registration": out}

    def node_create_user_profile(state: ChatState) -> ChatState:
        reply = synthesizer.synthesize(KIND_PROFILE, {"message": state["message"]}, state.get("context") or [])
        return {"reply": reply}

    g = StateGraph(ChatState)

    g.add_node("classify", node_classify)
    g.add_node("search_space", node_search_space)
    g.add_node("add_space", node_add_space)
    g.add_node("create_user_profile", node_create_user_profile)

    g.set_entry_point("classify")

    g.add_conditional_edges("classify", node_route, {
        Intent.SEARCH_SPACE.value: "search_space",
        Intent.ADD_SPACE.value: "add_space",
        Intent.CREATE_USER_PROFILE.value: "create_user_profile",
    })

    g.add_edge("search_space", END)
    g.add_edge("add_space", END)
    g.add_edge("create_user_profile", END)

    return g.compile()


# ---------------------------
# Orchestrator
# ---------------------------
class Orchestrator:
    """
    Per inbound message: record the user turn, run the graph, record the
    assistant turn, return the payload.
    """

    def __init__(self, conversations: ConversationStore, graph):
        self.conversations = conversations
        self.graph = graph

    def _append(self, session_id: str, turn: Turn) -> list[Turn]:
        try:
            return self.conversations.append(session_id, turn)
        except Exception:
            logger.exception("could not store %s turn for session %s", turn.role, session_id)
            return []

    def handle_message(self, session_id: str, message: str) -> Dict[str, Any]:
        turns = self._append(session_id, Turn(role="user", content=message))
        context = turns[:-1][-CONTEXT_TURNS:]

        out = self.graph.invoke({
            "session_id": session_id,
            "message": message,
            "context": context,
        })

        intent = out.get("intent", Intent.SEARCH_SPACE.value)
        reply = out.get("reply", "") or ""

        meta: Dict[str, Any] = {}
        payload: Dict[str, Any] = {
            "status": "SUCCESS",
            "intent_type": intent,
            "session_id": session_id,
            "reply": reply,
        }
        if out.get("search_results") is not None:
            results = out["search_results"]
            payload["search_results"] = results
            meta["search_results"] = {
                "total_count": results.get("total_count", 0),
                "search_mode": results.get("search_mode"),
                "space_ids": [s.get("id") for s in results.get("spaces") or []],
            }
        if out.get("registration") is not None:
            payload["registration"] = out["registration"]
            meta["registration"] = out["registration"]

        self._append(session_id, Turn(role="assistant", content=reply, intent=intent, metadata=meta))
        return payload


def build_orchestrator(kv: KeyValueStore, gateway: TextCompletionGateway) -> Orchestrator:
    """Wire every component onto one key-value store and one gateway."""
    conversations = ConversationStore(kv)
    spaces = SpaceRepository(kv)
    synthesizer = ResponseSynthesizer(gateway)

    graph = build_graph(
        classifier=IntentClassifier(gateway),
        search=SearchAgent(spaces, synthesizer),
        registration=RegistrationAgent(
            RegistrationStateStore(kv), spaces, FieldExtractor(gateway), synthesizer
        ),
        synthesizer=synthesizer,
    )
    return Orchestrator(conversations, graph)
