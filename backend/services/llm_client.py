"""LLM Client for Groq API integration."""
import time
from dataclasses import dataclass
from typing import List, Optional, Dict, Any, Sequence
from groq import Groq
from groq import RateLimitError, AuthenticationError, APIError, APITimeoutError, APIConnectionError
import logging

from models.conversation import Turn

logger = logging.getLogger(__name__)

PLACEHOLDER_KEY_MARKER = "your-key"


@dataclass
class LLMResponse:
    """Response from LLM generation."""
    text: str
    tokens_input: int
    tokens_output: int
    latency_ms: int
    model_used: str


@dataclass
class LLMError:
    """Structured error response from LLM operations."""
    code: str
    message: str
    details: Dict[str, Any]


class LLMClientError(Exception):
    """Custom exception for LLM client errors with structured error information."""

    def __init__(self, error: LLMError):
        self.error = error
        super().__init__(error.message)


class LLMClient:
    """Client for the Groq chat completions API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "llama-3.1-8b-instant",
        temperature: float = 0.7,
        max_tokens: int = 512,
        timeout: Optional[float] = None
    ):
        """
        Initialize LLM client.

        A missing or placeholder API key is not an error here; it is reported
        by ``generate`` so the gateway can start and answer health checks
        without credentials.

        Args:
            api_key: Groq API key
            model: Completion model name
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            timeout: Request timeout in seconds (SDK default when None)
        """
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.client: Optional[Groq] = None

        if self.is_configured:
            kwargs: Dict[str, Any] = {"api_key": self.api_key, "max_retries": 0}
            if timeout is not None:
                kwargs["timeout"] = timeout
            self.client = Groq(**kwargs)
            logger.info(f"LLMClient initialized with model: {model}")
        else:
            logger.warning("GROQ_API_KEY is not configured; chat requests will fail until it is set")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key) and PLACEHOLDER_KEY_MARKER not in self.api_key

    def generate(self, messages: List[Dict[str, str]]) -> LLMResponse:
        """
        Generate a reply for a prepared list of chat messages.

        Args:
            messages: ``[{"role": ..., "content": ...}, ...]`` including the system message

        Returns:
            LLMResponse with text, token counts, and latency

        Raises:
            LLMClientError: Structured error with code, message, and details
        """
        model = self.model

        if self.client is None:
            error = LLMError(
                code="CONFIGURATION_ERROR",
                message="Groq API key not configured",
                details={"model": model}
            )
            logger.error(error.message, extra={"error_code": error.code})
            raise LLMClientError(error)

        start_time = time.time()

        try:
            logger.info(f"Calling Groq API: model={model}, messages={len(messages)}")

            response = self.client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens
            )

            latency_ms = int((time.time() - start_time) * 1000)

            if not response.choices or response.choices[0].message.content is None:
                error = LLMError(
                    code="EMPTY_RESPONSE",
                    message="Groq API returned no completion text",
                    details={"model": model, "latency_ms": latency_ms}
                )
                logger.error(error.message, extra={"error_code": error.code, "error_details": error.details})
                raise LLMClientError(error)

            text = response.choices[0].message.content

            usage = getattr(response, "usage", None)
            tokens_input = getattr(usage, "prompt_tokens", 0) or 0
            tokens_output = getattr(usage, "completion_tokens", 0) or 0

            logger.info(
                f"Generated response: model={model}, "
                f"input_tokens={tokens_input}, output_tokens={tokens_output}, "
                f"latency={latency_ms}ms"
            )

            return LLMResponse(
                text=text,
                tokens_input=tokens_input,
                tokens_output=tokens_output,
                latency_ms=latency_ms,
                model_used=model
            )

        except LLMClientError:
            raise

        except RateLimitError as e:
            raise self._error(
                "RATE_LIMIT_ERROR",
                "Rate limit exceeded. Please try again in a few moments.",
                model, start_time, e
            )

        except AuthenticationError as e:
            raise self._error(
                "AUTHENTICATION_ERROR",
                "Authentication failed. Please check your API key.",
                model, start_time, e
            )

        except APITimeoutError as e:
            raise self._error(
                "TIMEOUT_ERROR",
                "Request timed out. Please try again.",
                model, start_time, e
            )

        except APIConnectionError as e:
            raise self._error(
                "API_ERROR",
                f"Could not reach Groq API: {str(e)}",
                model, start_time, e
            )

        except APIError as e:
            raise self._error(
                "API_ERROR",
                f"Groq API error: {str(e)}",
                model, start_time, e
            )

        except Exception as e:
            raise self._error(
                "UNKNOWN_ERROR",
                f"Unexpected error during generation: {str(e)}",
                model, start_time, e,
                error_type=type(e).__name__
            )

    def _error(
        self,
        code: str,
        message: str,
        model: str,
        start_time: float,
        original: Exception,
        **extra: Any
    ) -> LLMClientError:
        latency_ms = int((time.time() - start_time) * 1000)
        details: Dict[str, Any] = {
            "model": model,
            "latency_ms": latency_ms,
            "original_error": str(original),
            **extra
        }
        logger.error(
            f"{code}: model={model}, latency={latency_ms}ms, error={original}",
            exc_info=True,
            extra={"error_code": code, "error_details": details}
        )
        return LLMClientError(LLMError(code=code, message=message, details=details))

    @staticmethod
    def build_messages(system_prompt: str, context: Sequence[Turn]) -> List[Dict[str, str]]:
        """
        Build the chat message list: the system instruction followed by the context turns.

        Args:
            system_prompt: Fixed system instruction
            context: Recent turns, oldest first, ending with the new user turn

        Returns:
            Message dicts ready for ``generate``
        """
        messages = [{"role": "system", "content": system_prompt}]
        messages.extend(turn.to_message() for turn in context)
        return messages
