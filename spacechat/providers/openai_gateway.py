# spacechat/providers/openai_gateway.py
import logging
from typing import Optional

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from spacechat.config import OPENAI_MODEL
from spacechat.providers.base import GatewayError, TextCompletionGateway

logger = logging.getLogger(__name__)


class ChatOpenAIGateway(TextCompletionGateway):
    """
    Text completion through langchain-openai.
    Per-call max_tokens/temperature are bound onto the chat model.
    No retries: a provider fault surfaces as GatewayError on the first attempt.
    """

    def __init__(self, model: Optional[str] = None, llm: Optional[ChatOpenAI] = None):
        self._llm = llm or ChatOpenAI(model=model or OPENAI_MODEL, temperature=0, max_retries=0)

    def complete(
        self,
        prompt: str,
        max_tokens: int = 256,
        temperature: float = 0.3,
        system: Optional[str] = None,
    ) -> str:
        messages = []
        if system:
            messages.append(SystemMessage(content=system))
        messages.append(HumanMessage(content=prompt))

        try:
            resp = self._llm.bind(max_tokens=max_tokens, temperature=temperature).invoke(messages)
        except Exception as e:
            logger.warning("completion call failed: %s", e)
            raise GatewayError(str(e)) from e

        content = resp.content
        if not isinstance(content, str):
            # content blocks -> plain text
            content = "".join(
                b.get("text", "") if isinstance(b, dict) else str(b) for b in (content or [])
            )
        return content.strip()
