import io
import json
import struct
import zlib
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from chartedge.analyzer import ChartAnalyzer, get_analyzer
from chartedge.config import Settings, get_settings
from chartedge.main import app


SAMPLE_ANALYSIS = {
    "rating": "Buy",
    "confidence": 68,
    "entryPrice": 101.25,
    "takeProfit": 103.5,
    "stopLoss": 100.4,
    "riskRewardRatio": "2.6:1",
    "percentageGain": 2.22,
    "percentageRisk": 0.84,
    "trendDirection": "Uptrend",
    "keyLevels": {"support": [100.4, 99.1], "resistance": [103.5, 105.0]},
    "patterns": ["Bullish engulfing", "Higher lows"],
    "indicators": {
        "rsi": "RSI near 58, room to run",
        "macd": "MACD crossed above signal",
        "volume": None,
    },
    "analysis": {
        "trendExplanation": "Price is making higher highs and higher lows.",
        "reasonForRating": "Clean pullback to support inside an uptrend.",
        "keyLevelsExplanation": "100.4 held twice; 103.5 capped the last rally.",
        "riskWarnings": ["Volume is not visible on the chart"],
        "setupQuality": "Decent, not textbook.",
    },
    "ticker": "AAPL",
    "timeframe": "1h",
}


def make_image(fmt: str = "PNG", size=(64, 32)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color=(20, 120, 60)).save(buf, format=fmt)
    return buf.getvalue()


def gemini_response(text: str):
    """Minimal stand-in for a GenerateContentResponse."""
    part = SimpleNamespace(text=text)
    candidate = SimpleNamespace(content=SimpleNamespace(parts=[part]))
    return SimpleNamespace(candidates=[candidate], prompt_feedback=None)


@pytest.fixture
def png_bytes():
    return make_image("PNG")


@pytest.fixture
def jpeg_bytes():
    return make_image("JPEG")


@pytest.fixture
def fake_model():
    model = SimpleNamespace()
    model.generate_content_async = AsyncMock(return_value=gemini_response(json.dumps(SAMPLE_ANALYSIS)))
    return model


@pytest.fixture
def test_settings(tmp_path):
    return Settings(api_key="test-key", model_name="gemini-test", static_dir=tmp_path / "dist")


@pytest.fixture
def analyzer(test_settings, fake_model):
    prompts = []

    def factory(system_prompt):
        prompts.append(system_prompt)
        return fake_model

    instance = ChartAnalyzer(test_settings, model_factory=factory)
    instance.system_prompts = prompts
    return instance


@pytest.fixture
def client(analyzer, test_settings):
    app.dependency_overrides[get_analyzer] = lambda: analyzer
    app.dependency_overrides[get_settings] = lambda: test_settings
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def png_header_only(width: int, height: int) -> bytes:
    """PNG signature, IHDR and IEND: enough for Pillow to read dimensions."""

    def chunk(kind: bytes, body: bytes) -> bytes:
        return struct.pack(">I", len(body)) + kind + body + struct.pack(">I", zlib.crc32(kind + body))

    ihdr = struct.pack(">IIBBBBB", width, height, 1, 0, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", ihdr) + chunk(b"IEND", b"")
