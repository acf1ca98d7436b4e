"""Main entry point for the Garden Assistant chat gateway API."""
import logging
from typing import List
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from config import PORT, LOG_LEVEL, LOG_FORMAT, GatewayConfig
from logger import setup_logging
from models.api import ChatRequest, ChatResponse, HealthResponse, RootResponse, ClearResponse, ErrorResponse, Product
from services.chat_gateway import ChatGateway, ValidationError
from services.chat_store import ChatStoreError
from services.llm_client import LLMClientError
from services.product_catalog import list_products

# Initialize logging
logger = logging.getLogger(__name__)

SERVICE_MESSAGE = "Garden AI Agent API running"

STORE_ERROR_RESPONSES = {500: {"model": ErrorResponse, "description": "Chat store failure"}}
SEND_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Message and sessionId required"},
    500: {"model": ErrorResponse, "description": "Store or completion API failure"},
}

# Initialize FastAPI app
app = FastAPI(
    title="Garden Assistant AI",
    description="Chat gateway for organic gardening advice backed by Groq",
    version="1.0.0"
)

# Initialized on startup
chat_gateway: ChatGateway = None


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup."""
    global chat_gateway

    if LOG_FORMAT == "json":
        setup_logging(LOG_LEVEL, LOG_FORMAT)

    logger.info("Initializing Garden Assistant chat gateway...")

    try:
        chat_gateway = ChatGateway(GatewayConfig.from_env())
        logger.info(f"ChatGateway initialized with {type(chat_gateway.store).__name__}")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}", exc_info=True)
        raise


@app.get("/", response_model=RootResponse)
async def root():
    """Service banner listing the API endpoints."""
    return {
        "status": "OK",
        "message": SERVICE_MESSAGE,
        "endpoints": {
            "health": "/api/health",
            "chat": "/api/chat",
            "products": "/api/products"
        }
    }


@app.get("/api/health", response_model=HealthResponse)
async def health():
    """Health check."""
    return {"status": "OK", "message": SERVICE_MESSAGE}


@app.get("/api/chat/{session_id}", responses=STORE_ERROR_RESPONSES)
def get_chat(session_id: str):
    """Stored conversation for a session, or an empty message list."""
    try:
        conversation = chat_gateway.get_conversation(session_id)
    except ChatStoreError as e:
        logger.error(f"Error loading chat {session_id}: {e}", exc_info=True)
        return JSONResponse(status_code=500, content=ErrorResponse(error=str(e)).model_dump(exclude_none=True))

    if conversation is None:
        return {"messages": []}
    return conversation.to_document()


@app.post("/api/chat", response_model=ChatResponse, responses=SEND_ERROR_RESPONSES)
def send_chat(request: ChatRequest):
    """
    Send a user message and return the assistant's reply.

    Returns 400 when ``message`` or ``sessionId`` is missing and 500 for any
    store or completion failure; the two downstream kinds share one body.
    """
    try:
        reply = chat_gateway.send_message(request.sessionId, request.message)
    except ValidationError as e:
        return JSONResponse(status_code=400, content=ErrorResponse(error=str(e)).model_dump(exclude_none=True))
    except (LLMClientError, ChatStoreError) as e:
        logger.error(f"Error in /api/chat: {e}", extra={"session_id": request.sessionId})
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error="Failed to get AI response", details=str(e)).model_dump()
        )
    except Exception as e:
        logger.error(f"Error in /api/chat: {e}", exc_info=True, extra={"session_id": request.sessionId})
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error="Failed to get AI response", details=str(e)).model_dump()
        )

    return ChatResponse(response=reply, sessionId=request.sessionId)


@app.delete("/api/chat/{session_id}", response_model=ClearResponse, responses=STORE_ERROR_RESPONSES)
def clear_chat(session_id: str):
    """Delete a session's history; succeeds for unknown sessions."""
    try:
        chat_gateway.clear_history(session_id)
    except ChatStoreError as e:
        logger.error(f"Error clearing chat {session_id}: {e}", exc_info=True)
        return JSONResponse(status_code=500, content=ErrorResponse(error=str(e)).model_dump(exclude_none=True))

    return {"message": "Chat cleared"}


@app.get("/api/products", response_model=List[Product])
async def products():
    """Static product recommendations."""
    return list_products()


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting Garden Assistant API on port {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
