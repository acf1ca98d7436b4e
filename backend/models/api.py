"""Request and response schemas for the chat gateway HTTP API."""
from typing import Dict, Optional
from pydantic import BaseModel


class ChatRequest(BaseModel):
    """
    Body of ``POST /api/chat``.

    Both fields are optional at the schema level so that a missing field is
    reported by the gateway as a 400, not by pydantic as a 422.
    """
    message: Optional[str] = None
    sessionId: Optional[str] = None


class ChatResponse(BaseModel):
    response: str
    sessionId: str


class HealthResponse(BaseModel):
    status: str
    message: str


class RootResponse(HealthResponse):
    endpoints: Dict[str, str]


class ClearResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None


class Product(BaseModel):
    name: str
    price: int
    description: str
