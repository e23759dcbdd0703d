from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Dict, List, Optional, Protocol, Sequence

from assistant.core.conversation import check_leading_role
from assistant.core.errors import AssistantError, ProviderError, ValidationError
from assistant.core.models import ProviderMessage


logger = logging.getLogger(__name__)


# Fixed for every request; not client-configurable.
GENERATION_CONFIG: Dict[str, Any] = {
    "max_output_tokens": 2048,
    "temperature": 0.7,
    "top_p": 0.8,
    "top_k": 40,
}

UNKNOWN_BLOCK_REASON = "Unknown reason."


class GenerationResponse(Protocol):
    block_reason: Optional[str]

    def text(self) -> str: ...


class GenerationBackend(Protocol):
    async def generate(self, prompt: str) -> GenerationResponse: ...

    async def chat(
        self, history: List[ProviderMessage], message: str
    ) -> GenerationResponse: ...


def _blocked(response: GenerationResponse) -> ProviderError:
    reason = getattr(response, "block_reason", None) or UNKNOWN_BLOCK_REASON
    return ProviderError("empty or blocked response", details=f"Block Reason: {reason}")


def extract_text(response: GenerationResponse) -> str:
    try:
        text = response.text()
    except Exception as exc:
        logger.error("Error extracting text from response: %s", exc)
        raise _blocked(response) from exc

    if not text or not text.strip():
        logger.warning(
            "Gemini response did not contain usable text (block_reason=%s)",
            getattr(response, "block_reason", None),
        )
        raise _blocked(response)
    return text


class Dispatcher:
    """Sends a normalized turn sequence to the generation backend.

    A lone instruction goes out as a single-shot prompt; anything longer is
    sent as chat history plus the final turn.
    """

    def __init__(self, backend: GenerationBackend, timeout: Optional[float] = None) -> None:
        self.backend = backend
        self.timeout = timeout

    async def dispatch(self, sequence: Sequence[ProviderMessage]) -> str:
        if not sequence:
            raise ValidationError("messages required")

        if len(sequence) == 1:
            logger.info("Using single-shot generation for a lone instruction")
            call = self.backend.generate(sequence[0].text)
        else:
            check_leading_role(sequence)
            logger.info("Using chat for multi-turn conversation (%s history turns)", len(sequence) - 1)
            call = self.backend.chat(list(sequence[:-1]), sequence[-1].text)

        response = await self._await(call)
        text = extract_text(response)
        logger.info("Received response from Gemini (length: %s)", len(text))
        return text

    async def _await(self, call: Awaitable[GenerationResponse]) -> GenerationResponse:
        try:
            if self.timeout:
                return await asyncio.wait_for(call, timeout=self.timeout)
            return await call
        except asyncio.TimeoutError as exc:
            logger.error("Gemini call exceeded %ss", self.timeout)
            raise ProviderError(
                "provider request timed out",
                details=f"No response within {self.timeout} seconds",
            ) from exc
        except AssistantError:
            raise
        except Exception as exc:
            logger.exception("Gemini call failed: %s", exc)
            raise ProviderError("provider request failed", details=str(exc)) from exc
