"""Tests for GatewayConfig and structured logging."""
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import json
import logging
from unittest.mock import patch
import config
from config import GatewayConfig
from logger import JSONFormatter, setup_logging


def test_defaults():
    gateway_config = GatewayConfig()

    assert gateway_config.model == "llama-3.1-8b-instant"
    assert gateway_config.temperature == 0.7
    assert gateway_config.max_tokens == 512
    assert gateway_config.context_turns == 10
    assert gateway_config.llm_timeout is None
    assert "Garden Assistant" in gateway_config.system_prompt


def test_from_env_uses_module_settings():
    with patch.object(config, "GROQ_API_KEY", "env_key"), \
            patch.object(config, "CHAT_STORE", "memory"), \
            patch.object(config, "CONTEXT_TURNS", 6):
        gateway_config = GatewayConfig.from_env()

    assert gateway_config.groq_api_key == "env_key"
    assert gateway_config.store_backend == "memory"
    assert gateway_config.context_turns == 6


def test_json_formatter_includes_session_id():
    record = logging.LogRecord(
        name="services.chat_gateway",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Response sent for session %s",
        args=("s1",),
        exc_info=None
    )
    record.session_id = "s1"

    data = json.loads(JSONFormatter().format(record))

    assert data["level"] == "INFO"
    assert data["logger"] == "services.chat_gateway"
    assert data["message"] == "Response sent for session s1"
    assert data["session_id"] == "s1"
    assert data["timestamp"].endswith("Z")


def test_setup_logging_replaces_handlers():
    root_logger = logging.getLogger()
    saved_handlers = list(root_logger.handlers)
    saved_level = root_logger.level
    try:
        setup_logging("DEBUG", "json")

        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0].formatter, JSONFormatter)
        assert root_logger.level == logging.DEBUG
    finally:
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
        for handler in saved_handlers:
            root_logger.addHandler(handler)
        root_logger.setLevel(saved_level)
