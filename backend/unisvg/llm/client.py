"""LangChain ChatAnthropic wrapper used as the upstream generator."""

from __future__ import annotations

import json
import logging

from unisvg.config import settings
from unisvg.generation.errors import TierFailure
from unisvg.layout import canvas
from unisvg.llm.prompts import build_system_prompt, build_user_prompt
from unisvg.models.requests import GenerationRequest

logger = logging.getLogger(__name__)


def extract_json(text: str) -> dict:
    """Parse the first JSON object in a model reply, tolerating code fences."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise TierFailure("JSON parse error: no object in model response")
    try:
        data = json.loads(text[start:end + 1])
    except json.JSONDecodeError as exc:
        raise TierFailure(f"JSON parse error: {exc.msg} at line {exc.lineno}") from exc
    if not isinstance(data, dict):
        raise TierFailure("JSON parse error: top-level value is not an object")
    return data


async def generate_document(request: GenerationRequest, feedback: list[str] | None = None) -> dict:
    """Ask the model for a unified-layered document; returns the raw JSON dict."""
    if not settings.anthropic_api_key:
        raise TierFailure("Anthropic API key not configured")

    from langchain_anthropic import ChatAnthropic
    from langchain_core.messages import HumanMessage, SystemMessage

    config = canvas.get_config(request.resolved_aspect_ratio())
    llm = ChatAnthropic(
        model=settings.model_generator,
        api_key=settings.anthropic_api_key,
        max_tokens=settings.generator_max_tokens,
    )
    messages = [
        SystemMessage(content=build_system_prompt(config.width, config.height, config.ratio_tag)),
        HumanMessage(content=build_user_prompt(request.prompt, request.palette, feedback)),
    ]

    logger.debug("Requesting document from %s (feedback items: %d)", settings.model_generator, len(feedback or []))
    response = await llm.ainvoke(messages)
    return extract_json(str(response.content))
