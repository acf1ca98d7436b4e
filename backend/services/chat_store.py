"""Conversation persistence: Supabase table storage and an in-process store."""
import copy
import logging
import threading
from typing import Dict, Optional
from supabase import create_client, Client

from models.conversation import Conversation

logger = logging.getLogger(__name__)


class ChatStoreError(Exception):
    """Raised when the backing store cannot be read or written."""


class ChatStore:
    """Interface shared by the conversation stores."""

    def get(self, session_id: str) -> Optional[Conversation]:
        """Return the stored conversation, or None if the session has none."""
        raise NotImplementedError

    def save(self, conversation: Conversation) -> None:
        """Write the whole conversation, replacing whatever is stored."""
        raise NotImplementedError

    def delete(self, session_id: str) -> None:
        """Remove the conversation; a missing session is not an error."""
        raise NotImplementedError


class SupabaseChatStore(ChatStore):
    """
    Store each conversation as one row of the ``chats`` table.

    Expected schema::

        create table chats (
            session_id text primary key,
            messages jsonb not null default '[]'::jsonb,
            created_at timestamptz not null default now()
        );
    """

    def __init__(
        self,
        supabase_url: Optional[str],
        supabase_key: Optional[str],
        table_name: str = "chats"
    ):
        """
        Initialize the store with a Supabase client.

        Missing credentials are not an error here; every read or write then
        raises ``ChatStoreError`` so the gateway still starts and answers
        health checks.
        """
        self.table_name = table_name
        self.client: Optional[Client] = None

        if supabase_url and supabase_key:
            self.client = create_client(supabase_url, supabase_key)
            logger.info(f"SupabaseChatStore initialized with table: {table_name}")
        else:
            logger.warning("SUPABASE_URL and SUPABASE_KEY are not set; chat history requests will fail until they are")

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    def get(self, session_id: str) -> Optional[Conversation]:
        client = self._require_client()
        try:
            result = (
                client.table(self.table_name)
                .select("*")
                .eq("session_id", session_id)
                .limit(1)
                .execute()
            )
            if not result.data:
                return None
            conversation = Conversation.from_record(result.data[0])
        except Exception as e:
            logger.error(f"Error retrieving chat {session_id}: {e}", extra={"session_id": session_id})
            raise ChatStoreError(str(e)) from e

        logger.debug(f"Loaded chat {session_id} with {len(conversation.turns)} turns")
        return conversation

    def save(self, conversation: Conversation) -> None:
        client = self._require_client()
        try:
            client.table(self.table_name).upsert(
                conversation.to_record(), on_conflict="session_id"
            ).execute()
        except Exception as e:
            logger.error(
                f"Error saving chat {conversation.session_id}: {e}",
                extra={"session_id": conversation.session_id}
            )
            raise ChatStoreError(str(e)) from e

        logger.info(f"Saved chat {conversation.session_id} ({len(conversation.turns)} turns)")

    def delete(self, session_id: str) -> None:
        client = self._require_client()
        try:
            client.table(self.table_name).delete().eq("session_id", session_id).execute()
        except Exception as e:
            logger.error(f"Error deleting chat {session_id}: {e}", extra={"session_id": session_id})
            raise ChatStoreError(str(e)) from e

        logger.info(f"Deleted chat {session_id}")

    def _require_client(self) -> Client:
        if self.client is None:
            logger.error("Supabase chat store not configured")
            raise ChatStoreError("Supabase chat store not configured")
        return self.client


class InMemoryChatStore(ChatStore):
    """Naive in-process store keyed by session id, for local runs and tests."""

    def __init__(self):
        self._chats: Dict[str, Conversation] = {}
        self._lock = threading.Lock()

    def get(self, session_id: str) -> Optional[Conversation]:
        with self._lock:
            conversation = self._chats.get(session_id)
            # Callers mutate what they load; hand out copies like a real store would
            return copy.deepcopy(conversation) if conversation else None

    def save(self, conversation: Conversation) -> None:
        with self._lock:
            self._chats[conversation.session_id] = copy.deepcopy(conversation)

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._chats.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._chats)


def create_chat_store(
    backend: str,
    supabase_url: Optional[str] = None,
    supabase_key: Optional[str] = None,
    table_name: str = "chats"
) -> ChatStore:
    """
    Build the store named by ``backend`` ("supabase" or "memory").

    Raises:
        ValueError: For an unknown backend
    """
    if backend == "memory":
        logger.info("Using in-memory chat store; history is lost on restart")
        return InMemoryChatStore()
    if backend == "supabase":
        return SupabaseChatStore(supabase_url, supabase_key, table_name)
    raise ValueError(f"Unknown chat store backend: {backend!r}")
