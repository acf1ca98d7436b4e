"""
Chat gateway: the send / history / clear operations behind the HTTP API.

A send loads (or starts) the session's conversation, appends the user turn,
asks the completion API for a reply using the most recent turns as context,
appends the reply and writes the conversation back once. Nothing is written
when the completion call fails, so an unanswered user message never reaches
the store.
"""
import logging
import threading
from typing import Dict, List, Optional

from config import GatewayConfig
from models.conversation import Conversation, Role, Turn
from services.chat_store import ChatStore, create_chat_store
from services.llm_client import LLMClient

logger = logging.getLogger(__name__)


class ValidationError(ValueError):
    """A required request field is missing or empty."""


class ChatGateway:
    """Owns the conversation store and the completion client."""

    def __init__(
        self,
        config: GatewayConfig,
        store: Optional[ChatStore] = None,
        llm_client: Optional[LLMClient] = None
    ):
        """
        Args:
            config: Gateway settings; also used to build missing collaborators
            store: Conversation store (built from ``config`` when omitted)
            llm_client: Completion client (built from ``config`` when omitted)
        """
        self.config = config
        if store is None:
            store = create_chat_store(
                config.store_backend,
                supabase_url=config.supabase_url,
                supabase_key=config.supabase_key,
                table_name=config.chat_table,
            )
        if llm_client is None:
            llm_client = LLMClient(
                api_key=config.groq_api_key,
                model=config.model,
                temperature=config.temperature,
                max_tokens=config.max_tokens,
                timeout=config.llm_timeout,
            )
        self.store = store
        self.llm_client = llm_client
        self._session_locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def get_conversation(self, session_id: str) -> Optional[Conversation]:
        return self.store.get(session_id)

    def get_history(self, session_id: str) -> List[Turn]:
        """Turns for ``session_id``, or an empty list for an unknown session."""
        conversation = self.store.get(session_id)
        return conversation.turns if conversation else []

    def send_message(self, session_id: Optional[str], text: Optional[str]) -> str:
        """
        Record ``text`` from the user, get the assistant's reply, and persist both.

        Raises:
            ValidationError: ``session_id`` or ``text`` is missing or empty
            LLMClientError: The completion call failed; nothing was persisted
            ChatStoreError: The store could not be read or written
        """
        if not text or not session_id:
            raise ValidationError("Message and sessionId required")

        logger.info(f"Message received for session {session_id}: {text[:100]}",
                    extra={"session_id": session_id})

        # Concurrent sends for one session would otherwise overwrite each other's turns
        with self._lock_for(session_id):
            conversation = self.store.get(session_id)
            if conversation is None:
                conversation = Conversation(session_id=session_id)
                logger.info(f"Starting new chat for session {session_id}", extra={"session_id": session_id})

            conversation.append(Role.USER, text)

            context = conversation.recent(self.config.context_turns)
            messages = LLMClient.build_messages(self.config.system_prompt, context)
            llm_response = self.llm_client.generate(messages)

            conversation.append(Role.ASSISTANT, llm_response.text)
            self.store.save(conversation)

        logger.info(f"Response sent for session {session_id}", extra={"session_id": session_id})
        return llm_response.text

    def clear_history(self, session_id: str) -> None:
        """Delete the session's conversation; succeeds when there is none."""
        with self._lock_for(session_id):
            self.store.delete(session_id)
        logger.info(f"Cleared chat for session {session_id}", extra={"session_id": session_id})

    def _lock_for(self, session_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._session_locks.get(session_id)
            if lock is None:
                lock = self._session_locks[session_id] = threading.Lock()
            return lock
