"""HTTP client for the chat gateway, keeping the list of turns shown to the user."""
import logging
import time
from typing import Any, Dict, List, Optional
import httpx

from models.conversation import Role, Turn

logger = logging.getLogger(__name__)

GREETING = (
    "Hello! 🌱 I'm your Garden Assistant powered by Groq AI (Llama 3.1). "
    "I can help you with plant care tips, organic gardening advice, and product "
    "recommendations. What would you like to know?"
)

ERROR_TEMPLATE = (
    "❌ Error: Could not get response.\n\n"
    "Make sure:\n"
    "1. Backend is running on {base_url}\n"
    "2. GROQ_API_KEY is set in backend/.env\n"
    "3. The chat store is reachable\n\n"
    "Error: {error}"
)


class ChatClientError(Exception):
    """The gateway could not be reached or answered with an error status."""


def new_session_id() -> str:
    return f"user-{int(time.time() * 1000)}"


class ChatClient:
    """
    Talks to the gateway and tracks the conversation as displayed.

    ``messages`` is updated optimistically: the user turn is shown before the
    gateway answers, and a failed send shows a diagnostic assistant turn
    instead of a reply. The gateway discards a failed user turn, so the
    displayed list and the stored history can differ after an error.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:5000",
        session_id: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
        timeout: Optional[float] = None
    ):
        """
        Args:
            base_url: Gateway base URL
            session_id: Session key (generated when omitted)
            http_client: Preconfigured httpx client, mainly for tests
            timeout: Seconds to wait for the gateway; None waits as long as the gateway does
        """
        self.base_url = base_url.rstrip("/")
        self.session_id = session_id or new_session_id()
        self.http = http_client or httpx.Client(base_url=self.base_url, timeout=timeout)
        self.messages: List[Turn] = [self._greeting()]

    def submit(self, text: str) -> Optional[Turn]:
        """
        Send user input and record the outcome in ``messages``.

        Returns:
            The assistant turn that was appended, or None for blank input
        """
        if not text or not text.strip():
            return None

        user_message = text.strip()
        self.messages.append(Turn(role=Role.USER, content=user_message))

        try:
            reply = self.send(user_message)
        except ChatClientError as e:
            logger.error(f"Error calling API: {e}")
            reply = ERROR_TEMPLATE.format(base_url=self.base_url, error=str(e))

        turn = Turn(role=Role.ASSISTANT, content=reply)
        self.messages.append(turn)
        return turn

    def send(self, message: str) -> str:
        """POST one message and return the assistant's text."""
        data = self._request("POST", "/api/chat", json={"message": message, "sessionId": self.session_id})
        try:
            return data["response"]
        except (KeyError, TypeError) as e:
            raise ChatClientError(f"Unexpected response from gateway: {data!r}") from e

    def clear(self, sync_server: bool = False) -> None:
        """
        Reset the displayed conversation to the greeting.

        Server-side history is left alone unless ``sync_server`` is set.
        """
        if sync_server:
            self.clear_server_history()
        self.messages = [self._greeting()]

    def fetch_history(self) -> List[Turn]:
        data = self._request("GET", f"/api/chat/{self.session_id}")
        try:
            return [Turn.from_dict(message) for message in data.get("messages", [])]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ChatClientError(f"Unexpected history from gateway: {e}") from e

    def clear_server_history(self) -> None:
        self._request("DELETE", f"/api/chat/{self.session_id}")

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/api/health")

    def products(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/products")

    def close(self) -> None:
        self.http.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = self.http.request(method, path, **kwargs)
        except httpx.RequestError as e:
            raise ChatClientError(f"Network error: {e}") from e

        if response.is_error:
            raise ChatClientError(f"API error: {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise ChatClientError(f"Invalid JSON from gateway (status {response.status_code})") from e

    @staticmethod
    def _greeting() -> Turn:
        return Turn(role=Role.ASSISTANT, content=GREETING)
