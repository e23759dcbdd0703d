import logging

import pydantic
import pytest

from assistant.core.conversation import (
    check_leading_role,
    find_role_repeats,
    normalize,
    to_provider_role,
)
from assistant.core.errors import ValidationError
from assistant.core.models import ChatMessage, ProviderMessage


def _msgs(*pairs):
    return [ChatMessage(role=role, content=content) for role, content in pairs]


def _turns(*roles):
    return [ProviderMessage(role=role, parts=[f"turn {i}"]) for i, role in enumerate(roles)]


class TestNormalize:
    @pytest.mark.parametrize("messages", [[], None])
    def test_empty_or_missing(self, messages):
        with pytest.raises(ValidationError) as exc_info:
            normalize("instruction", messages)
        assert exc_info.value.message == "messages required"
        assert exc_info.value.status_code == 400

    def test_only_system_messages(self):
        with pytest.raises(ValidationError) as exc_info:
            normalize("instruction", _msgs(("system", "be nice"), ("system", "really")))
        assert exc_info.value.message == "no usable messages"

    def test_instruction_leads(self):
        result = normalize("You are Fetchr", _msgs(("user", "Hi")))
        assert result[0] == ProviderMessage(role="user", parts=["You are Fetchr"])
        assert result[1] == ProviderMessage(role="user", parts=["Hi"])

    def test_role_mapping_keeps_order(self):
        result = normalize(
            "instruction",
            _msgs(
                ("assistant", "Hello! How is Buddy?"),
                ("user", "He is limping"),
                ("system", "ignored"),
                ("assistant", "Check his paw"),
                ("user", "Thanks"),
            ),
        )
        assert [m.role for m in result] == ["user", "model", "user", "model", "user"]
        assert [m.text for m in result[1:]] == [
            "Hello! How is Buddy?",
            "He is limping",
            "Check his paw",
            "Thanks",
        ]

    def test_leading_assistant_history_still_starts_with_user(self):
        result = normalize("instruction", _msgs(("assistant", "Welcome back")))
        assert result[0].role == "user"
        assert result[1].role == "model"

    def test_role_repeats_are_logged_not_fatal(self, caplog):
        caplog.set_level(logging.WARNING, logger="assistant.core.conversation")
        result = normalize("instruction", _msgs(("user", "Hi"), ("user", "Anyone there?")))
        assert len(result) == 3
        assert "Consecutive user messages at index 0" in caplog.text
        assert "Consecutive user messages at index 1" in caplog.text


def test_role_mapping():
    assert to_provider_role("assistant") == "model"
    assert to_provider_role("user") == "user"
    assert to_provider_role("system") is None


def test_check_leading_role_rejects_model_first():
    with pytest.raises(ValidationError) as exc_info:
        check_leading_role(_turns("model", "user"))
    assert exc_info.value.message == "first message must be user"
    assert exc_info.value.details == "First message has role: model"


def test_check_leading_role_ignores_single_turn():
    check_leading_role(_turns("model"))
    check_leading_role([])


def test_find_role_repeats():
    assert find_role_repeats(_turns("user", "user", "model", "model", "user")) == [0, 2]
    assert find_role_repeats(_turns("user", "model", "user")) == []


def test_chat_message_rejects_unknown_role():
    with pytest.raises(pydantic.ValidationError):
        ChatMessage(role="tool", content="x")


def test_error_payload():
    err = ValidationError("first message must be user", details="First message has role: model")
    assert err.to_payload() == {
        "error": "first message must be user",
        "details": "First message has role: model",
    }
    assert ValidationError("messages required").to_payload() == {"error": "messages required"}
