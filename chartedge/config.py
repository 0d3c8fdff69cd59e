"""
ChartEdge - Runtime Configuration
=================================
Environment-driven settings. A .env file next to the working directory is
loaded first, then every value is read from the process environment.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

load_dotenv()

# ============================================================
# CONSTANTS
# ============================================================

DEFAULT_PORT = 3001
DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_MAX_OUTPUT_TOKENS = 2048
DEFAULT_TIMEOUT_SECONDS = 60.0
MAX_UPLOAD_BYTES = 10 * 1024 * 1024

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseModel):
    """Process-wide configuration snapshot."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    api_key: Optional[str] = None
    model_name: str = DEFAULT_MODEL
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS
    temperature: float = 0.1
    request_timeout: float = DEFAULT_TIMEOUT_SECONDS
    max_upload_bytes: int = MAX_UPLOAD_BYTES
    static_dir: Path = PROJECT_ROOT / "dist"
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)


def _split_origins(raw: str) -> List[str]:
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return origins or ["*"]


def load_settings() -> Settings:
    """Build settings from the current environment."""
    return Settings(
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", DEFAULT_PORT)),
        api_key=os.getenv("GEMINI_API_KEY") or None,
        model_name=os.getenv("GEMINI_MODEL", DEFAULT_MODEL),
        max_output_tokens=int(os.getenv("MAX_OUTPUT_TOKENS", DEFAULT_MAX_OUTPUT_TOKENS)),
        temperature=float(os.getenv("MODEL_TEMPERATURE", 0.1)),
        request_timeout=float(os.getenv("MODEL_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)),
        static_dir=Path(os.getenv("STATIC_DIR", str(PROJECT_ROOT / "dist"))),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        cors_origins=_split_origins(os.getenv("CORS_ORIGINS", "*")),
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()
