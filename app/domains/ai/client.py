"""Text-generation client abstraction and its Google Gemini implementation.

The AI service only needs one capability: submit a list of chat turns and get
free-form text back. Everything provider specific (SDK configuration, safety
settings, finish reasons, error strings) stays in this module.
"""

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from enum import Enum

import google.generativeai as genai
from google.generativeai.types import HarmBlockThreshold, HarmCategory
from pydantic import Field

from app.core.config import settings
from app.exceptions.ai import (
    AIConfigurationError,
    AIContentFilterError,
    AIInvalidRequestError,
    AIQuotaExceededError,
    AIRateLimitError,
    AIServiceError,
    AIServiceUnavailableError,
    AITimeoutError,
)
from app.schemas.base import BaseSchema

logger = logging.getLogger(__name__)

DEFAULT_RETRY_AFTER = 60

# Gemini finish reasons: 1 = STOP, 2 = MAX_TOKENS, 3 = SAFETY, 4 = RECITATION, 5 = OTHER
FINISH_REASON_MAX_TOKENS = 2
FINISH_REASON_SAFETY = 3


class ChatRole(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ChatTurn(BaseSchema):
    role: ChatRole
    content: str


class ChatCompletionRequest(BaseSchema):
    """A structured chat request: ordered turns plus optional sampling knobs."""

    messages: list[ChatTurn] = Field(..., min_length=1)
    temperature: float | None = Field(None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(None, ge=1)


class TextGenerationClient(ABC):
    """Submit a structured chat request, receive free-form text."""

    @abstractmethod
    async def complete(self, request: ChatCompletionRequest) -> str:
        """Return the model's text; raise an ``AIServiceError`` subclass on failure."""


def extract_retry_delay(error_message: str, default: int = DEFAULT_RETRY_AFTER) -> int:
    """Extract retry delay from a Gemini API error message.

    Args:
        error_message: Error message from Gemini API
        default: Value returned when the message names no delay

    Returns:
        Retry delay in seconds
    """
    # Pattern: "Please retry in 32.984803332s"
    match = re.search(r"retry in (\d+(?:\.\d+)?)s", error_message)
    if match:
        return int(float(match.group(1))) + 1  # Add 1 second buffer
    return default


class GeminiTextClient(TextGenerationClient):
    """Google Gemini backed client.

    The SDK call is blocking and runs in the default thread pool. There is no
    retry and no timeout other than the transport timeout passed to the SDK.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model_name: str | None = None,
        timeout: int | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self.model_name = model_name or settings.gemini_model
        self.timeout = timeout or settings.ai_request_timeout
        self._configured = False

    def _ensure_configured(self) -> None:
        if not self.api_key:
            raise AIConfigurationError("Gemini API key not configured")
        if not self._configured:
            try:
                genai.configure(api_key=self.api_key)
            except Exception as e:
                logger.error(f"Failed to initialize Gemini client: {str(e)}")
                raise AIConfigurationError(f"Failed to initialize AI service: {str(e)}") from e
            self._configured = True
            logger.info(f"Google Gemini client initialized, model: {self.model_name}")

    def _build_model(self, system_instruction: str | None, request: ChatCompletionRequest):
        return genai.GenerativeModel(
            model_name=self.model_name,
            system_instruction=system_instruction,
            safety_settings={
                HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
                HarmCategory.HARM_CATEGORY_HATE_SPEECH: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
                HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
                HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
            },
            generation_config=genai.types.GenerationConfig(
                candidate_count=1,
                max_output_tokens=request.max_tokens or settings.gemini_max_tokens,
                temperature=(
                    request.temperature
                    if request.temperature is not None
                    else settings.gemini_temperature
                ),
            ),
        )

    @staticmethod
    def _to_contents(request: ChatCompletionRequest) -> tuple[str | None, list[dict]]:
        """Split system turns into the system instruction; map the rest to Gemini roles."""
        system_parts = [t.content for t in request.messages if t.role == ChatRole.SYSTEM]
        contents = [
            {
                "role": "model" if turn.role == ChatRole.ASSISTANT else "user",
                "parts": [turn.content],
            }
            for turn in request.messages
            if turn.role != ChatRole.SYSTEM
        ]
        system_instruction = "\n\n".join(system_parts) if system_parts else None
        return system_instruction, contents

    async def complete(self, request: ChatCompletionRequest) -> str:
        self._ensure_configured()
        system_instruction, contents = self._to_contents(request)
        if not contents:
            contents = [{"role": "user", "parts": [system_instruction or ""]}]
            system_instruction = None

        try:
            model = self._build_model(system_instruction, request)
            loop = asyncio.get_running_loop()
            response = await loop.run_in_executor(
                None,
                lambda: model.generate_content(
                    contents, request_options={"timeout": self.timeout}
                ),
            )
            return self._extract_text(response)

        except AIServiceError:
            raise
        except Exception as e:
            raise self._map_exception(e) from e

    def _extract_text(self, response) -> str:
        if not response:
            raise AIServiceError("Empty response from AI service")

        if not getattr(response, "candidates", None):
            logger.error("AI response has no candidates - content may be blocked")
            if hasattr(response, "prompt_feedback"):
                logger.error(f"Prompt feedback: {response.prompt_feedback}")
            raise AIContentFilterError(
                "Content was blocked by AI safety filters. Please rephrase your request."
            )

        candidate = response.candidates[0]
        finish_reason = getattr(candidate, "finish_reason", None)
        if finish_reason == FINISH_REASON_SAFETY:
            logger.error(f"Content blocked by safety filters. Finish reason: {finish_reason}")
            raise AIContentFilterError(
                "Content was blocked by AI safety filters. Please rephrase your request."
            )
        if finish_reason == FINISH_REASON_MAX_TOKENS:
            logger.warning(
                f"Response truncated at {settings.gemini_max_tokens} tokens; using partial text"
            )

        if not candidate.content or not candidate.content.parts:
            logger.error("AI response candidate has no content")
            raise AIServiceError("AI returned empty content")

        try:
            text = response.text
        except (IndexError, ValueError) as e:
            logger.error(f"Could not read response text: {str(e)}")
            raise AIServiceError(f"AI response structure was invalid: {str(e)}") from e

        if not text or not text.strip():
            raise AIServiceError("AI returned empty text response")
        return text

    def _map_exception(self, e: Exception) -> AIServiceError:
        error_msg = str(e).lower()
        full_error_msg = str(e)

        # Quota first; quota errors often carry "429" as well
        if "quota" in error_msg:
            retry_delay = extract_retry_delay(full_error_msg)
            logger.error(f"Quota exceeded. Retry after {retry_delay}s. Error: {full_error_msg}")
            return AIQuotaExceededError(
                f"API quota exceeded. Please try again in {retry_delay} seconds",
                details={"retry_after": retry_delay, "error": full_error_msg},
            )
        if "429" in full_error_msg or ("rate" in error_msg and "limit" in error_msg):
            retry_delay = extract_retry_delay(full_error_msg)
            logger.warning(f"Rate limit hit. Retry after {retry_delay}s")
            return AIRateLimitError(
                f"Rate limit exceeded. Retry after {retry_delay} seconds",
                retry_after=retry_delay,
            )
        if isinstance(e, TimeoutError) or "deadline" in error_msg or "timed out" in error_msg:
            logger.error(f"Gemini API call timed out: {full_error_msg}")
            return AITimeoutError(f"AI service request timed out: {full_error_msg}")
        if "safety" in error_msg or "blocked" in error_msg:
            return AIContentFilterError("Content blocked by safety filters")
        if "503" in full_error_msg or "unavailable" in error_msg or "overloaded" in error_msg:
            logger.error(f"Gemini API unavailable: {full_error_msg}")
            return AIServiceUnavailableError(f"AI service is temporarily unavailable: {full_error_msg}")
        if "400" in full_error_msg or "invalid argument" in error_msg:
            logger.error(f"Gemini API rejected the request: {full_error_msg}")
            return AIInvalidRequestError(f"Invalid request to AI service: {full_error_msg}")

        logger.error(f"Gemini API call failed: {full_error_msg}")
        return AIServiceError(f"AI generation failed: {full_error_msg}")
