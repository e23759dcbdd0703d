from __future__ import annotations

from typing import Any, List, Optional

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from assistant.core.models import ProviderMessage
from assistant.dispatcher import GENERATION_CONFIG
from config.settings import Settings, get_settings


def build_llm(settings: Optional[Settings] = None) -> ChatGoogleGenerativeAI:
    settings = settings or get_settings()
    api_key = settings.require_api_key()

    return ChatGoogleGenerativeAI(
        model=settings.gemini_model,
        google_api_key=api_key,
        **GENERATION_CONFIG,
    )


def to_lc_messages(history: List[ProviderMessage]) -> List[BaseMessage]:
    messages: List[BaseMessage] = []
    for item in history or []:
        if item.role == "model":
            messages.append(AIMessage(content=item.text))
        else:
            messages.append(HumanMessage(content=item.text))
    return messages


class GeminiResponse:
    """Adapts a LangChain `AIMessage` to the dispatcher's response contract."""

    def __init__(self, message: AIMessage) -> None:
        self.message = message

    def text(self) -> str:
        content: Any = self.message.content
        if isinstance(content, str):
            return content
        pieces: List[str] = []
        for part in content or []:
            if isinstance(part, str):
                pieces.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                pieces.append(part.get("text") or "")
        return "".join(pieces)

    @property
    def block_reason(self) -> Optional[str]:
        metadata = self.message.response_metadata or {}
        feedback = metadata.get("prompt_feedback") or {}
        reason = feedback.get("block_reason")
        if reason and reason != "BLOCK_REASON_UNSPECIFIED":
            return str(reason)
        finish_reason = metadata.get("finish_reason")
        if finish_reason and finish_reason != "STOP":
            return str(finish_reason)
        return None


class GeminiBackend:
    def __init__(self, llm: BaseChatModel) -> None:
        self.llm = llm

    async def generate(self, prompt: str) -> GeminiResponse:
        result = await self.llm.ainvoke(prompt)
        return GeminiResponse(result)

    async def chat(self, history: List[ProviderMessage], message: str) -> GeminiResponse:
        messages = to_lc_messages(history)
        messages.append(HumanMessage(content=message))
        result = await self.llm.ainvoke(messages)
        return GeminiResponse(result)


def build_backend(settings: Optional[Settings] = None) -> GeminiBackend:
    return GeminiBackend(build_llm(settings))
