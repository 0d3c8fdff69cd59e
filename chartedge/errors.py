"""
Error taxonomy for the analysis API.

Every failure the service reports to a caller is a ChartEdgeError carrying
the HTTP status and the short message placed in the ``{"error": ...}`` body.
"""

from typing import Optional


class ChartEdgeError(Exception):
    status_code = 500
    message = "Analysis failed"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


# ============================================================
# CLIENT INPUT ERRORS
# ============================================================

class UploadError(ChartEdgeError):
    status_code = 400
    message = "Invalid upload"


class MissingImageError(UploadError):
    message = "No image file provided"


class UnsupportedImageTypeError(UploadError):
    message = "Only PNG and JPG files are allowed"


class InvalidImageError(UploadError):
    message = "Uploaded file is not a readable image"


class ImageTooLargeError(UploadError):
    status_code = 413
    message = "File too large. Maximum size is 10MB"


class ImageDimensionsError(UploadError):
    message = "Image dimensions are too large"


# ============================================================
# UPSTREAM MODEL ERRORS
# ============================================================

class UpstreamAuthError(ChartEdgeError):
    status_code = 401
    message = "Invalid API key. Please set GEMINI_API_KEY environment variable."


class UpstreamError(ChartEdgeError):
    status_code = 500
    message = "Analysis failed"


class ResponseParseError(ChartEdgeError):
    """Model replied, but not with JSON."""

    status_code = 500
    message = "Failed to parse AI analysis response"


class ResponseSchemaError(ChartEdgeError):
    """Model replied with JSON that is missing or mistyping required fields."""

    status_code = 500
    message = "AI analysis response did not match the expected format"
