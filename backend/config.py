"""Configuration management for the Garden Assistant chat gateway."""
import os
import logging
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _optional_float(name: str) -> Optional[float]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return float(value)


# API Keys
GROQ_API_KEY = os.getenv("GROQ_API_KEY")
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")

# Server Configuration
PORT = int(os.getenv("PORT", "5000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "text")

# Model Configuration
GROQ_MODEL = os.getenv("GROQ_MODEL", "llama-3.1-8b-instant")
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.7"))
LLM_MAX_TOKENS = int(os.getenv("LLM_MAX_TOKENS", "512"))
LLM_TIMEOUT = _optional_float("LLM_TIMEOUT")

# Conversation Configuration
CONTEXT_TURNS = int(os.getenv("CONTEXT_TURNS", "10"))

# Store Configuration
CHAT_STORE = os.getenv("CHAT_STORE", "supabase").lower()
CHAT_TABLE = os.getenv("CHAT_TABLE", "chats")

# Client Configuration
GATEWAY_URL = os.getenv("GATEWAY_URL", f"http://localhost:{PORT}")

SYSTEM_PROMPT = """You are a helpful Garden Assistant AI for organic gardening advice in India.
Provide organic gardening advice for Indian climate.
Recommend sustainable practices.
Help beginners start their gardening journey.
Suggest pest control, watering schedules, soil care.
Be friendly, encouraging, and use simple language."""

# Logging Configuration
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


@dataclass
class GatewayConfig:
    """
    Everything the chat gateway needs, gathered in one place.

    The gateway never reads the environment itself; build one of these
    (usually with ``from_env``) and hand it to ``ChatGateway``.
    """
    groq_api_key: Optional[str] = None
    model: str = "llama-3.1-8b-instant"
    temperature: float = 0.7
    max_tokens: int = 512
    llm_timeout: Optional[float] = None
    system_prompt: str = SYSTEM_PROMPT
    context_turns: int = 10
    store_backend: str = "supabase"
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    chat_table: str = "chats"

    @classmethod
    def from_env(cls) -> "GatewayConfig":
        """Build a config from the values loaded at import time."""
        return cls(
            groq_api_key=GROQ_API_KEY,
            model=GROQ_MODEL,
            temperature=LLM_TEMPERATURE,
            max_tokens=LLM_MAX_TOKENS,
            llm_timeout=LLM_TIMEOUT,
            system_prompt=SYSTEM_PROMPT,
            context_turns=CONTEXT_TURNS,
            store_backend=CHAT_STORE,
            supabase_url=SUPABASE_URL,
            supabase_key=SUPABASE_KEY,
            chat_table=CHAT_TABLE,
        )
