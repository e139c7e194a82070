"""
Tutor Agent - streams conversational replies from the language model.

The agent is stateless apart from its chat clients: callers pass the
composed system prompt and the conversation history for every turn.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Iterator, Optional, Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from ..config import config
from ..errors import OracleError, OracleTimeoutError
from ..models.session import ConversationMessage, MessageRole
from .llm import build_chat_model, chunk_text, record_usage

logger = logging.getLogger(__name__)


def to_chat_messages(
    system_prompt: str, history: Sequence[ConversationMessage]
) -> list[BaseMessage]:
    """System prompt followed by the history as human/AI messages."""
    messages: list[BaseMessage] = [SystemMessage(content=system_prompt)]
    for message in history:
        if message.role == MessageRole.USER:
            messages.append(HumanMessage(content=message.content))
        else:
            messages.append(AIMessage(content=message.content))
    return messages


class TutorAgent:
    """
    Streams tutor replies.

    Each call yields text deltas as they arrive. The whole call is bounded by
    `timeout` seconds; exceeding it raises OracleTimeoutError. Nothing is
    retried here.
    """

    def __init__(
        self,
        llm: Optional[BaseChatModel] = None,
        temperature: Optional[float] = None,
        timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize tutor agent.

        Args:
            llm: Chat model to use for every call (built from config per model if None)
            temperature: Sampling temperature for built clients
            timeout: Overall wait bound per reply in seconds
            clock: Monotonic time source
        """
        self._llm = llm
        self.temperature = (
            config.model.conversation_temperature if temperature is None else temperature
        )
        self.timeout = config.model.request_timeout if timeout is None else timeout
        self.clock = clock
        self._clients: dict[str, BaseChatModel] = {}

    def llm_for(self, model_name: Optional[str] = None) -> BaseChatModel:
        if self._llm is not None:
            return self._llm
        name = model_name or config.model.conversation_model
        if name not in self._clients:
            self._clients[name] = build_chat_model(name, self.temperature, streaming=True)
        return self._clients[name]

    def stream_reply(
        self,
        system_prompt: str,
        history: Sequence[ConversationMessage],
        model_name: Optional[str] = None,
    ) -> Iterator[str]:
        """
        Yield reply text deltas for one turn.

        Args:
            system_prompt: Composed system prompt
            history: Conversation so far, ending with the learner's message
            model_name: Model for this session type

        Yields:
            Non-empty text deltas

        Raises:
            OracleTimeoutError: The reply took longer than the timeout
            OracleError: The model call failed
        """
        messages = to_chat_messages(system_prompt, history)
        llm = self.llm_for(model_name)
        deadline = self.clock() + self.timeout
        produced: list[str] = []

        stream = llm.stream(messages)
        try:
            for chunk in stream:
                if self.clock() > deadline:
                    logger.warning("Tutor reply exceeded %.1fs", self.timeout)
                    raise OracleTimeoutError(f"Reply exceeded {self.timeout}s")
                text = chunk_text(chunk.content)
                if text:
                    produced.append(text)
                    yield text
        except OracleError:
            raise
        except Exception as e:
            logger.error("Tutor stream failed after %d chunks: %s", len(produced), e, exc_info=True)
            raise OracleError(f"Tutor stream failed: {e}") from e
        finally:
            close = getattr(stream, "close", None)
            if close is not None:
                close()

        record_usage(
            system_prompt + "".join(m.content for m in history),
            "".join(produced),
        )
