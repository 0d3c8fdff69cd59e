"""Pydantic models for the analysis result returned by the model."""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Rating = Literal["Strong Buy", "Buy", "Neutral", "Sell", "Strong Sell"]
TrendDirection = Literal["Uptrend", "Downtrend", "Sideways"]


class _CamelModel(BaseModel):
    # Extra keys the model adds are kept so the caller still sees them
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class KeyLevels(_CamelModel):
    support: List[float] = Field(default_factory=list)
    resistance: List[float] = Field(default_factory=list)


class IndicatorNotes(_CamelModel):
    rsi: Optional[str] = None
    macd: Optional[str] = None
    volume: Optional[str] = None


class AnalysisNarrative(_CamelModel):
    trend_explanation: str
    reason_for_rating: str
    key_levels_explanation: str
    risk_warnings: List[str] = Field(default_factory=list)
    setup_quality: str


class AnalysisResult(_CamelModel):
    """Structured verdict for one chart."""

    rating: Rating
    confidence: float = Field(ge=0, le=100)
    entry_price: float
    take_profit: float
    stop_loss: float
    risk_reward_ratio: str
    percentage_gain: float
    percentage_risk: float
    trend_direction: TrendDirection
    key_levels: KeyLevels
    patterns: List[str] = Field(default_factory=list)
    indicators: IndicatorNotes = Field(default_factory=IndicatorNotes)
    analysis: AnalysisNarrative
    ticker: Optional[str] = None
    timeframe: str

    def to_response(self) -> dict:
        return self.model_dump(by_alias=True)


class AnalyzeResponse(BaseModel):
    success: bool = True
    analysis: dict


class HealthResponse(BaseModel):
    status: str = "ok"
    model: str
    timestamp: str


class ErrorResponse(BaseModel):
    error: str
