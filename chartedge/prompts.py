"""
Prompt construction for Gemini Vision chart analysis.

The system prompt is the whole contract handed to the model: output JSON
schema, confidence calibration and the pattern/indicator checklist. Keep its
wording stable; output quality depends on it.
"""

from enum import Enum
from typing import Dict, Optional


class TradingStyle(str, Enum):
    SCALPING = "scalping"
    DAYTRADING = "daytrading"
    SWINGTRADING = "swingtrading"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Optional[str]) -> "TradingStyle":
        """Map a raw form value onto a style. Blank means day trading.

        Matching is exact; "unknown" itself is not a valid input.
        """
        if not value:
            return cls.DAYTRADING
        if value == cls.UNKNOWN.value:
            return cls.UNKNOWN
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


DEFAULT_STYLE = TradingStyle.DAYTRADING

STYLE_GUIDES: Dict[TradingStyle, str] = {
    TradingStyle.SCALPING: (
        "Focus on very short-term setups (minutes to hours). "
        "TP should be 0.5-1.5% from entry, SL should be 0.2-0.5% from entry."
    ),
    TradingStyle.DAYTRADING: (
        "Focus on intraday setups (hours). "
        "TP should be 1-3% from entry, SL should be 0.5-1% from entry."
    ),
    TradingStyle.SWINGTRADING: (
        "Focus on multi-day to multi-week setups. "
        "TP should be 5-15% from entry, SL should be 2-5% from entry."
    ),
}


def style_guide(style: TradingStyle) -> str:
    # UNKNOWN and anything unmapped use the day trading ranges
    return STYLE_GUIDES.get(style, STYLE_GUIDES[DEFAULT_STYLE])


def build_system_prompt(style: TradingStyle) -> str:
    """Build the system prompt for one trading style."""
    return f"""You are an expert technical analyst and professional stock/crypto trader with 20+ years of experience analyzing chart patterns.

Trading style context: {style_guide(style)}

Analyze the provided chart image thoroughly and respond ONLY with a valid JSON object (no markdown, no extra text) in this exact format:

{{
  "rating": "Strong Buy" | "Buy" | "Neutral" | "Sell" | "Strong Sell",
  "confidence": <number 0-100>,
  "entryPrice": <estimated numeric price based on chart>,
  "takeProfit": <estimated numeric TP price>,
  "stopLoss": <estimated numeric SL price>,
  "riskRewardRatio": "<X:1 format>",
  "percentageGain": <numeric percentage>,
  "percentageRisk": <numeric percentage>,
  "trendDirection": "Uptrend" | "Downtrend" | "Sideways",
  "keyLevels": {{
    "support": [<price1>, <price2>],
    "resistance": [<price1>, <price2>]
  }},
  "patterns": ["<pattern1>", "<pattern2>"],
  "indicators": {{
    "rsi": "<RSI observation or null>",
    "macd": "<MACD observation or null>",
    "volume": "<Volume observation or null>"
  }},
  "analysis": {{
    "trendExplanation": "<detailed trend analysis>",
    "reasonForRating": "<why this rating was given>",
    "keyLevelsExplanation": "<explanation of support/resistance>",
    "riskWarnings": ["<warning1>", "<warning2>"],
    "setupQuality": "<description of the overall setup quality>"
  }},
  "ticker": "<stock ticker if visible, else null>",
  "timeframe": "<timeframe if visible, else estimated>"
}}

Important instructions:
- Base all price estimates on actual visible price levels in the chart
- If exact prices aren't visible, estimate relative percentages from the current price area
- Be conservative with confidence scores (50-75 is typical, 76-90 for very clear setups, 91-100 only for textbook perfect setups)
- Always identify at least one risk warning
- Analyze all visible indicators (RSI, MACD, volume bars if present)
- Look for candlestick patterns: doji, hammer, engulfing, shooting star, morning/evening star
- Identify trend structure: higher highs/higher lows for uptrend, lower highs/lower lows for downtrend"""


def build_user_instruction(style_label: str) -> str:
    """Short text sent next to the image, echoing the caller's style value."""
    return (
        "Analyze this stock chart image and provide your complete technical analysis. "
        f"Trading style: {style_label}. Return ONLY valid JSON, no other text."
    )
