from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from assistant.core.errors import ValidationError
from assistant.core.models import ChatMessage, ProviderMessage


logger = logging.getLogger(__name__)


def to_provider_role(role: str) -> Optional[str]:
    """Map a client role onto the provider's; `None` means the message is dropped."""
    if role == "system":
        return None
    if role == "assistant":
        return "model"
    return "user"


def check_leading_role(sequence: Sequence[ProviderMessage]) -> None:
    # Chat history sent to Gemini must open with a user turn.
    if len(sequence) > 1 and sequence[0].role != "user":
        raise ValidationError(
            "first message must be user",
            details=f"First message has role: {sequence[0].role}",
        )


def find_role_repeats(sequence: Sequence[ProviderMessage]) -> List[int]:
    """Indexes `i` where turns `i` and `i + 1` share a role."""
    return [
        idx
        for idx in range(len(sequence) - 1)
        if sequence[idx].role == sequence[idx + 1].role
    ]


def normalize(
    instruction: str, messages: Optional[Sequence[ChatMessage]]
) -> List[ProviderMessage]:
    """Turn the client's chat history into a provider-ready turn sequence.

    The instruction always becomes the leading `user` turn. System messages
    are dropped since their content is already part of the instruction.
    """
    if not messages:
        raise ValidationError("messages required")

    contents: List[ProviderMessage] = [ProviderMessage(role="user", parts=[instruction])]
    for message in messages:
        role = to_provider_role(message.role)
        if role is None:
            continue
        contents.append(ProviderMessage(role=role, parts=[message.content]))

    if len(contents) == 1:
        raise ValidationError(
            "no usable messages",
            details="No user or assistant messages found after processing.",
        )

    check_leading_role(contents)

    for idx in find_role_repeats(contents):
        logger.warning("Consecutive %s messages at index %s", contents[idx].role, idx)

    return contents
