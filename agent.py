"""
Gemini conversation engine.

Wraps the google-generativeai chat API behind a two-method capability:
``start_conversation()`` returns a handle, ``handle.send(message)`` returns the
reply text. The session store and the HTTP layer only ever see that surface.
"""

import os
import time
from typing import Optional, Protocol

import google.generativeai as genai

from config import get_config
from logger import get_logger

logger = get_logger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
EMPTY_REPLY = "No response."


class EngineError(Exception):
    """Raised when the engine cannot be configured."""
    pass


class ConversationHandle(Protocol):
    def send(self, message: str) -> str:
        ...


class GeminiConversation:
    """One Gemini chat; the SDK keeps the turn history inside ``chat``."""

    def __init__(self, chat, model: str):
        self._chat = chat
        self.model = model

    def send(self, message: str) -> str:
        """
        Send a user message and return the model's reply text.

        SDK exceptions propagate unchanged; use upstream_status() to map them.
        """
        start_time = time.time()
        try:
            response = self._chat.send_message(message)
        except Exception:
            logger.llm_call(
                model=self.model,
                duration_ms=(time.time() - start_time) * 1000,
                success=False
            )
            raise

        logger.llm_call(
            model=self.model,
            duration_ms=(time.time() - start_time) * 1000,
            message_length=len(message)
        )
        return _response_text(response) or EMPTY_REPLY


def _response_text(response) -> Optional[str]:
    """Extract reply text; the SDK raises ValueError when a response has no text part."""
    if response is None:
        return None
    try:
        return response.text
    except ValueError:
        logger.warning("Gemini response carried no text part")
        return None


class GeminiConversationEngine:
    """Creates Gemini conversations for a single configured model."""

    def __init__(self, model: Optional[str] = None, api_key: Optional[str] = None):
        """
        Configure the Gemini SDK.

        Args:
            model: Model name (default: GEMINI_MODEL_NAME env var or gemini-2.5-flash)
            api_key: API key (default: GEMINI_API_KEY env var)
        """
        self.model = model or os.getenv("GEMINI_MODEL_NAME", DEFAULT_MODEL)

        api_key = (api_key or os.getenv("GEMINI_API_KEY", "")).strip()
        if not api_key:
            logger.error("GEMINI_API_KEY not configured")
            raise EngineError("GEMINI_API_KEY environment variable is required")

        try:
            genai.configure(api_key=api_key)
        except Exception as e:
            logger.error(f"Failed to configure Gemini: {str(e)}")
            raise EngineError(f"Failed to configure Gemini API: {str(e)}") from e

        logger.info("Conversation engine initialized", model=self.model)

    def start_conversation(self, system_instruction: Optional[str] = None) -> GeminiConversation:
        """Start a new chat, seeded with ``system_instruction`` when given."""
        model = genai.GenerativeModel(
            model_name=self.model,
            system_instruction=system_instruction or None
        )
        return GeminiConversation(model.start_chat(), self.model)


def upstream_status(exc: BaseException) -> int:
    """
    Map an engine exception to the HTTP status to return.

    google.api_core errors carry the HTTP status in ``code``; other clients use
    ``status_code`` or ``status``. Anything that is not a 4xx/5xx int becomes 500.
    """
    for attr in ("code", "status_code", "status"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool) and 400 <= value <= 599:
            return value
    return 500


# Global engine instance (singleton pattern)
_engine_instance: Optional[GeminiConversationEngine] = None


def get_engine() -> GeminiConversationEngine:
    """
    Get or create the global conversation engine.

    Raises:
        EngineError: If the engine cannot be configured
    """
    global _engine_instance

    if _engine_instance is None:
        config = get_config()
        _engine_instance = GeminiConversationEngine(
            model=config.gemini_model_name,
            api_key=config.gemini_api_key
        )

    return _engine_instance


def reset_engine() -> None:
    """Reset the global engine instance (useful for testing or reloading config)."""
    global _engine_instance
    _engine_instance = None
    logger.info("Engine instance reset")
