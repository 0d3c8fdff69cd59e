"""
Model reply normalization: fence stripping, JSON parsing, schema validation.
"""

import json
import logging
import re
from typing import Any, Dict

from pydantic import ValidationError

from .errors import ResponseParseError, ResponseSchemaError
from .schemas import AnalysisResult

logger = logging.getLogger(__name__)

_LEADING_JSON_FENCE = re.compile(r"^```json\s*", re.IGNORECASE)
_LEADING_FENCE = re.compile(r"^```\s*")
_TRAILING_FENCE = re.compile(r"\s*```$")


def strip_code_fences(text: str) -> str:
    """Remove a markdown code fence wrapped around the model output."""
    cleaned = text.strip()
    cleaned = _LEADING_JSON_FENCE.sub("", cleaned)
    cleaned = _LEADING_FENCE.sub("", cleaned)
    cleaned = _TRAILING_FENCE.sub("", cleaned)
    return cleaned.strip()


def parse_analysis(text: str) -> Any:
    """Parse the model reply as JSON after fence stripping.

    The raw text is logged on failure but never placed in the raised error.
    """
    cleaned = strip_code_fences(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(f"JSON parse error: {e}")
        logger.error(f"Raw response: {text}")
        raise ResponseParseError() from e


def validate_analysis(payload: Any) -> AnalysisResult:
    if not isinstance(payload, dict):
        logger.error(f"Analysis payload is {type(payload).__name__}, expected an object")
        raise ResponseSchemaError()
    try:
        return AnalysisResult.model_validate(payload)
    except ValidationError as e:
        logger.error(f"Analysis failed schema validation: {e.errors(include_url=False)}")
        raise ResponseSchemaError() from e


def normalize_analysis(text: str) -> Dict[str, Any]:
    """Raw model text -> validated analysis dict keyed by camelCase names."""
    return validate_analysis(parse_analysis(text)).to_response()
