"""
Gemini Vision adapter
=====================
Sends one chart image plus the style-specific system prompt to Gemini and
returns the raw text of the reply. One ChartAnalyzer serves the whole process;
it holds only configuration and is safe to share between requests.
"""

import base64
import logging
from typing import Any, Callable, Dict, List, Optional

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from .config import Settings, get_settings
from .errors import UpstreamAuthError, UpstreamError
from .uploads import ChartImage

logger = logging.getLogger(__name__)

ModelFactory = Callable[[str], Any]


def encode_image(image: ChartImage) -> Dict[str, str]:
    """Inline blob for the request: MIME type plus base64 payload."""
    return {
        "mime_type": image.mime_type,
        "data": base64.b64encode(image.data).decode("utf-8"),
    }


def build_contents(image: ChartImage, instruction: str) -> List[Dict[str, Any]]:
    return [
        {
            "role": "user",
            "parts": [
                {"inline_data": encode_image(image)},
                {"text": instruction},
            ],
        }
    ]


def is_auth_failure(error: Exception) -> bool:
    """True when the provider rejected our credentials."""
    if isinstance(error, (google_exceptions.Unauthenticated, google_exceptions.PermissionDenied)):
        return True
    if getattr(error, "code", None) == 401:
        return True
    # Gemini reports a bad key as 400 API_KEY_INVALID
    if isinstance(error, google_exceptions.InvalidArgument):
        text = str(error).lower()
        return "api key" in text or "api_key_invalid" in text
    return False


def first_text(response: Any) -> str:
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        feedback = getattr(response, "prompt_feedback", None)
        reason = getattr(feedback, "block_reason", None)
        if reason:
            raise UpstreamError(f"Model returned no analysis (blocked: {reason})")
        raise UpstreamError("Model returned no analysis")

    parts = getattr(candidates[0].content, "parts", None) or []
    if not parts or not getattr(parts[0], "text", None):
        raise UpstreamError("Model returned an empty response")
    return parts[0].text.strip()


class ChartAnalyzer:
    """Thin wrapper over google-generativeai for chart analysis calls."""

    def __init__(self, settings: Settings, model_factory: Optional[ModelFactory] = None):
        self.settings = settings
        self._model_factory = model_factory
        self._models: Dict[str, Any] = {}
        self._configured = False

    @property
    def model_name(self) -> str:
        return self.settings.model_name

    def _ensure_configured(self) -> None:
        if not self.settings.has_api_key:
            logger.error("GEMINI_API_KEY not set. AI analysis will fail.")
            raise UpstreamAuthError()
        if not self._configured and self._model_factory is None:
            genai.configure(api_key=self.settings.api_key)
            self._configured = True

    def _model_for(self, system_prompt: str) -> Any:
        # At most one model per trading style prompt
        model = self._models.get(system_prompt)
        if model is None:
            if self._model_factory is not None:
                model = self._model_factory(system_prompt)
            else:
                model = genai.GenerativeModel(
                    self.settings.model_name,
                    system_instruction=system_prompt,
                )
            self._models[system_prompt] = model
        return model

    def generation_config(self) -> genai.types.GenerationConfig:
        return genai.types.GenerationConfig(
            max_output_tokens=self.settings.max_output_tokens,
            temperature=self.settings.temperature,
        )

    async def analyze(self, image: ChartImage, system_prompt: str, instruction: str) -> str:
        """Run one analysis call and return the model's raw reply text.

        Raises:
            UpstreamAuthError: missing or rejected API key
            UpstreamError: any other failure talking to the model
        """
        self._ensure_configured()
        model = self._model_for(system_prompt)

        logger.info(
            f"Calling {self.model_name} with {image.mime_type} chart "
            f"({image.width}x{image.height}, {image.size} bytes)"
        )
        try:
            response = await model.generate_content_async(
                build_contents(image, instruction),
                generation_config=self.generation_config(),
                request_options={"timeout": self.settings.request_timeout},
            )
        except Exception as e:
            if is_auth_failure(e):
                logger.error(f"Gemini rejected credentials: {e}")
                raise UpstreamAuthError() from e
            logger.exception("Gemini request failed")
            raise UpstreamError(str(e)) from e

        text = first_text(response)
        logger.debug(f"Gemini returned {len(text)} characters")
        return text


_analyzer: Optional[ChartAnalyzer] = None


def get_analyzer() -> ChartAnalyzer:
    """Process-wide analyzer, built on first use."""
    global _analyzer
    if _analyzer is None:
        _analyzer = ChartAnalyzer(get_settings())
    return _analyzer
