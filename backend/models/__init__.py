"""Data models for the Garden Assistant chat gateway."""
from .conversation import Conversation, Turn, Role
from .api import (
    ChatRequest,
    ChatResponse,
    HealthResponse,
    RootResponse,
    ClearResponse,
    ErrorResponse,
    Product,
)

__all__ = [
    "Conversation",
    "Turn",
    "Role",
    "ChatRequest",
    "ChatResponse",
    "HealthResponse",
    "RootResponse",
    "ClearResponse",
    "ErrorResponse",
    "Product",
]
