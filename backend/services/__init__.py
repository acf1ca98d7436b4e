"""Services for the Garden Assistant chat gateway."""
from .llm_client import LLMClient, LLMResponse, LLMError, LLMClientError
from .chat_store import ChatStore, ChatStoreError, SupabaseChatStore, InMemoryChatStore, create_chat_store
from .chat_gateway import ChatGateway, ValidationError
from .chat_client import ChatClient, ChatClientError
from .product_catalog import list_products

__all__ = ['LLMClient', 'LLMResponse', 'LLMError', 'LLMClientError', 'ChatStore', 'ChatStoreError', 'SupabaseChatStore', 'InMemoryChatStore', 'create_chat_store', 'ChatGateway', 'ValidationError', 'ChatClient', 'ChatClientError', 'list_products']
