"""Unit tests for ChatGateway."""
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import threading
import pytest
from unittest.mock import Mock, patch
from config import GatewayConfig
from models.conversation import Conversation, Role
from services.chat_gateway import ChatGateway, ValidationError
from services.chat_store import ChatStoreError, InMemoryChatStore
from services.llm_client import LLMClient, LLMClientError, LLMError, LLMResponse


def _llm_response(text):
    return LLMResponse(text=text, tokens_input=10, tokens_output=5, latency_ms=42, model_used="llama-3.1-8b-instant")


@pytest.fixture
def config():
    return GatewayConfig(system_prompt="You are a garden assistant.", store_backend="memory")


@pytest.fixture
def store():
    return InMemoryChatStore()


@pytest.fixture
def llm_client():
    client = Mock(spec=LLMClient)
    client.generate.return_value = _llm_response("Plant garlic between October and November.")
    return client


@pytest.fixture
def gateway(config, store, llm_client):
    return ChatGateway(config, store=store, llm_client=llm_client)


class TestSendMessage:
    """Test suite for ChatGateway.send_message."""

    def test_first_message_creates_conversation(self, gateway, store):
        reply = gateway.send_message("s1", "When to plant garlic in India?")

        assert reply == "Plant garlic between October and November."
        stored = store.get("s1")
        assert [(t.role, t.content) for t in stored.turns] == [
            (Role.USER, "When to plant garlic in India?"),
            (Role.ASSISTANT, "Plant garlic between October and November."),
        ]

    def test_successful_send_appends_exactly_two_turns(self, gateway, store, llm_client):
        gateway.send_message("s1", "first")
        llm_client.generate.return_value = _llm_response("second reply")

        gateway.send_message("s1", "second")

        turns = store.get("s1").turns
        assert len(turns) == 4
        assert [t.role for t in turns[2:]] == [Role.USER, Role.ASSISTANT]
        assert [t.content for t in turns[2:]] == ["second", "second reply"]
        assert turns[0].timestamp <= turns[1].timestamp <= turns[2].timestamp <= turns[3].timestamp

    @pytest.mark.parametrize("session_id,text", [
        (None, "hello"),
        ("", "hello"),
        ("s1", None),
        ("s1", ""),
    ])
    def test_missing_fields_fail_validation(self, gateway, llm_client, store, session_id, text):
        with pytest.raises(ValidationError, match="Message and sessionId required"):
            gateway.send_message(session_id, text)

        llm_client.generate.assert_not_called()
        assert len(store) == 0

    def test_failed_completion_leaves_history_unchanged(self, gateway, store, llm_client):
        gateway.send_message("s1", "first")
        before = [(t.role, t.content) for t in store.get("s1").turns]

        llm_client.generate.side_effect = LLMClientError(
            LLMError(code="API_ERROR", message="Groq API error: 503", details={})
        )
        with pytest.raises(LLMClientError):
            gateway.send_message("s1", "lost message")

        assert [(t.role, t.content) for t in store.get("s1").turns] == before

    def test_failed_first_completion_creates_nothing(self, gateway, store, llm_client):
        llm_client.generate.side_effect = LLMClientError(
            LLMError(code="CONFIGURATION_ERROR", message="Groq API key not configured", details={})
        )

        with pytest.raises(LLMClientError):
            gateway.send_message("s1", "hello")

        assert store.get("s1") is None

    def test_context_is_system_prompt_plus_recent_turns(self, gateway, llm_client):
        gateway.send_message("s1", "hello")

        messages = llm_client.generate.call_args[0][0]
        assert messages == [
            {"role": "system", "content": "You are a garden assistant."},
            {"role": "user", "content": "hello"},
        ]

    def test_context_is_capped_at_ten_turns(self, gateway, store, llm_client):
        conversation = Conversation(session_id="s1")
        for i in range(15):
            conversation.append(Role.USER if i % 2 == 0 else Role.ASSISTANT, f"turn {i}")
        store.save(conversation)

        gateway.send_message("s1", "newest")

        messages = llm_client.generate.call_args[0][0]
        context = messages[1:]
        assert len(context) == 10
        assert context[-1] == {"role": "user", "content": "newest"}
        assert context[0]["content"] == "turn 6"

    def test_context_window_is_configurable(self, store, llm_client):
        gateway = ChatGateway(GatewayConfig(context_turns=2, store_backend="memory"), store=store, llm_client=llm_client)
        gateway.send_message("s1", "one")
        gateway.send_message("s1", "two")

        context = llm_client.generate.call_args[0][0][1:]
        assert [m["content"] for m in context] == ["Plant garlic between October and November.", "two"]

    def test_store_failure_propagates(self, config, llm_client):
        store = Mock()
        store.get.side_effect = ChatStoreError("store unavailable")
        gateway = ChatGateway(config, store=store, llm_client=llm_client)

        with pytest.raises(ChatStoreError):
            gateway.send_message("s1", "hello")

        llm_client.generate.assert_not_called()

    def test_persists_once_per_send(self, config, llm_client):
        store = Mock()
        store.get.return_value = None
        gateway = ChatGateway(config, store=store, llm_client=llm_client)

        gateway.send_message("s1", "hello")

        store.save.assert_called_once()
        saved = store.save.call_args[0][0]
        assert len(saved.turns) == 2

    def test_concurrent_sends_for_one_session_keep_all_turns(self, gateway, store, llm_client):
        """Test sends for the same session are serialized so no turns are lost."""
        llm_client.generate.side_effect = lambda messages: _llm_response("reply to " + messages[-1]["content"])

        threads = [
            threading.Thread(target=gateway.send_message, args=("s1", f"message {i}"))
            for i in range(8)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        turns = store.get("s1").turns
        assert len(turns) == 16
        for user_turn, assistant_turn in zip(turns[::2], turns[1::2]):
            assert user_turn.role == Role.USER
            assert assistant_turn.content == "reply to " + user_turn.content


class TestHistory:
    """Test suite for history retrieval and clearing."""

    def test_unknown_session_has_empty_history(self, gateway):
        assert gateway.get_history("never-used") == []
        assert gateway.get_conversation("never-used") is None

    def test_history_after_send(self, gateway):
        gateway.send_message("s1", "hello")

        history = gateway.get_history("s1")

        assert [t.role for t in history] == [Role.USER, Role.ASSISTANT]

    def test_clear_removes_history(self, gateway):
        gateway.send_message("s1", "hello")

        gateway.clear_history("s1")

        assert gateway.get_history("s1") == []

    def test_clear_unknown_session_succeeds(self, gateway):
        gateway.clear_history("never-used")

        assert gateway.get_history("never-used") == []

    def test_clear_only_touches_its_session(self, gateway):
        gateway.send_message("s1", "hello")
        gateway.send_message("s2", "hello")

        gateway.clear_history("s1")

        assert gateway.get_history("s1") == []
        assert len(gateway.get_history("s2")) == 2


class TestConstruction:

    @patch('services.chat_gateway.LLMClient')
    def test_builds_collaborators_from_config(self, mock_llm_class):
        config = GatewayConfig(
            groq_api_key="test_key",
            model="llama-3.3-70b-versatile",
            temperature=0.3,
            max_tokens=100,
            llm_timeout=30.0,
            store_backend="memory",
        )

        gateway = ChatGateway(config)

        assert isinstance(gateway.store, InMemoryChatStore)
        mock_llm_class.assert_called_once_with(
            api_key="test_key",
            model="llama-3.3-70b-versatile",
            temperature=0.3,
            max_tokens=100,
            timeout=30.0,
        )
