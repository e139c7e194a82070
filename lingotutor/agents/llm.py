"""
Shared language-model plumbing for the tutor agents.

- Chat model construction from config (no automatic retries, bounded timeout)
- Text extraction from message chunks
- Analytical calls: invoke, pull the JSON object out, validate it
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI

from ..config import config, token_tracker
from ..errors import AnalysisParseError, OracleError
from ..prompts import estimate_tokens
from ..utils.validation import SchemaValidator, parse_json_object

logger = logging.getLogger(__name__)


def build_chat_model(
    model_name: Optional[str] = None,
    temperature: Optional[float] = None,
    streaming: bool = False,
) -> ChatOpenAI:
    """
    Create a ChatOpenAI client from config.

    Args:
        model_name: Model to use (defaults to the conversation model)
        temperature: Sampling temperature (defaults to the conversation temperature)
        streaming: Whether the client streams by default

    Returns:
        Configured ChatOpenAI instance
    """
    return ChatOpenAI(
        model=model_name or config.model.conversation_model,
        temperature=(
            config.model.conversation_temperature if temperature is None else temperature
        ),
        api_key=config.model.api_key or None,
        base_url=config.model.base_url,
        max_tokens=config.model.max_tokens,
        max_retries=config.model.max_retries,
        timeout=config.model.request_timeout,
        streaming=streaming,
    )


def chunk_text(content: Any) -> str:
    """Text of a message/chunk content, which may be a string or a list of parts."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(
            part if isinstance(part, str) else part.get("text", "")
            for part in content
            if isinstance(part, (str, dict))
        )
    return ""


def record_usage(prompt_text: str, response_text: str) -> None:
    """Add estimated token usage of one call to the global tracker."""
    if config.logging.log_tokens:
        token_tracker.add_tokens(
            input_tokens=estimate_tokens(prompt_text),
            output_tokens=estimate_tokens(response_text),
        )


def invoke_for_json(
    llm: BaseChatModel,
    prompt: str,
    validator: SchemaValidator,
    public_message: str,
    label: str,
) -> dict:
    """
    Run an analytical call and return the validated JSON object.

    Args:
        llm: Chat model
        prompt: Full prompt text
        validator: Schema validator for the expected object
        public_message: Generic message for callers on failure
        label: Short name of the call, for logs

    Raises:
        OracleError: The model call itself failed
        AnalysisParseError: No JSON, bad JSON, or JSON violating the schema
    """
    try:
        response = chunk_text(llm.invoke(prompt).content)
    except Exception as e:
        logger.error("%s call failed: %s", label, e, exc_info=True)
        raise OracleError(f"{label} call failed: {e}", public_message) from e

    record_usage(prompt, response)

    try:
        data = parse_json_object(response)
    except ValueError as e:
        logger.error("Failed to parse %s: %s\nRaw response: %s", label, e, response)
        raise AnalysisParseError(f"{label}: {e}", public_message) from e

    result = validator.validate(data)
    if not result.valid:
        logger.error(
            "%s failed schema validation:\n%s\nRaw response: %s",
            label,
            "\n".join(result.errors),
            response,
        )
        raise AnalysisParseError(f"{label}: schema validation failed", public_message)
    if result.repairs:
        logger.warning("%s repaired: %s", label, "; ".join(result.repairs))

    return result.data
