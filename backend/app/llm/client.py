"""LangChain ChatAnthropic wrapper."""

from __future__ import annotations

import asyncio
import logging

from app.config import settings
from app.engine.plan_parser import parse_drawing_plan
from app.llm.model_router import get_model_for_task
from app.llm.prompts import VISION_SUFFIX, build_draw_user_prompt, get_prompt_template
from app.models.drawing import DrawingPlan

logger = logging.getLogger(__name__)


class TransportError(RuntimeError):
    """The model call failed (provider error, timeout, empty reply)."""


class TransportUnavailable(TransportError):
    """No model is configured; callers take the heuristic path."""


def _image_block(image_data_url: str) -> dict:
    _, _, payload = image_data_url.partition(",")
    return {
        "type": "image",
        "source": {
            "type": "base64",
            "media_type": "image/png",
            "data": payload or image_data_url,
        },
    }


def _build_llm(task: str, max_tokens: int, temperature: float | None = None):
    from langchain_anthropic import ChatAnthropic

    kwargs = {}
    if temperature is not None:
        kwargs["temperature"] = temperature
    return ChatAnthropic(
        model=get_model_for_task(task),
        api_key=settings.anthropic_api_key,
        max_tokens=max_tokens,
        **kwargs,
    )


async def _invoke(llm, messages: list, task: str) -> str:
    try:
        response = await asyncio.wait_for(llm.ainvoke(messages), timeout=settings.llm_timeout_s)
    except asyncio.TimeoutError as e:
        raise TransportError(f"{task} request timed out after {settings.llm_timeout_s}s") from e
    except Exception as e:
        raise TransportError(f"{task} request failed: {e}") from e

    content = response.content
    if isinstance(content, list):
        content = "".join(
            block.get("text", "") if isinstance(block, dict) else str(block) for block in content
        )
    text = str(content).strip()
    if not text:
        raise TransportError(f"{task} request returned an empty reply")
    return text


async def get_chat_response(
    history: list[dict[str, str]],
    message: str,
    image_data_url: str | None = None,
    task: str = "chat",
    width: int = 800,
    height: int = 600,
    canvas_summary: str = "",
) -> str:
    """Get a conversational reply, optionally looking at the canvas."""
    if not settings.anthropic_api_key:
        raise TransportUnavailable("LLM not configured — set ANTHROPIC_API_KEY in .env")

    from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

    if image_data_url is not None:
        task = "vision"
    llm = _build_llm(task, max_tokens=1024)

    system_msg = get_prompt_template(task).format(
        width=width,
        height=height,
        canvas_summary=f"\n{canvas_summary}" if canvas_summary else "",
    )

    messages: list = [SystemMessage(content=system_msg)]
    for msg in history:
        if msg.get("role") == "user":
            messages.append(HumanMessage(content=msg["content"]))
        elif msg.get("role") == "assistant":
            messages.append(AIMessage(content=msg["content"]))

    if image_data_url is not None:
        messages.append(HumanMessage(content=[
            _image_block(image_data_url),
            {"type": "text", "text": message + VISION_SUFFIX},
        ]))
    else:
        messages.append(HumanMessage(content=message))

    return await _invoke(llm, messages, task)


async def request_drawing_plan(
    prompt: str,
    image_data_url: str | None = None,
    width: int = 800,
    height: int = 600,
) -> DrawingPlan:
    """Ask the model for a drawing plan. Unparseable output becomes a description-only plan."""
    if not settings.anthropic_api_key:
        raise TransportUnavailable("LLM not configured — set ANTHROPIC_API_KEY in .env")

    from langchain_core.messages import HumanMessage, SystemMessage

    llm = _build_llm("draw", max_tokens=1000, temperature=0.8)

    content: list[dict] = [{"type": "text", "text": build_draw_user_prompt(prompt)}]
    if image_data_url is not None:
        content.append(_image_block(image_data_url))

    messages = [
        SystemMessage(content=get_prompt_template("draw").format(width=width, height=height)),
        HumanMessage(content=content),
    ]

    text = await _invoke(llm, messages, "draw")
    plan = parse_drawing_plan(text)
    logger.info("Drawing plan received: %d commands", len(plan.commands))
    return plan


class LLMTransport:
    """Seam between the session handler and the model provider."""

    @property
    def configured(self) -> bool:
        return bool(settings.anthropic_api_key)

    async def chat(
        self,
        history: list[dict[str, str]],
        message: str,
        image_data_url: str | None = None,
        *,
        width: int = 800,
        height: int = 600,
        canvas_summary: str = "",
    ) -> str:
        return await get_chat_response(
            history, message, image_data_url,
            width=width, height=height, canvas_summary=canvas_summary,
        )

    async def request_drawing_plan(
        self,
        prompt: str,
        image_data_url: str | None = None,
        *,
        width: int = 800,
        height: int = 600,
    ) -> DrawingPlan:
        return await request_drawing_plan(prompt, image_data_url, width=width, height=height)
