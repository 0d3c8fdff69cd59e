import pytest

from chartedge.prompts import (
    STYLE_GUIDES,
    TradingStyle,
    build_system_prompt,
    build_user_instruction,
)


class TestTradingStyleParse:

    @pytest.mark.parametrize("raw,expected", [
        ("scalping", TradingStyle.SCALPING),
        ("daytrading", TradingStyle.DAYTRADING),
        ("swingtrading", TradingStyle.SWINGTRADING),
        (None, TradingStyle.DAYTRADING),
        ("", TradingStyle.DAYTRADING),
        ("positiontrading", TradingStyle.UNKNOWN),
        ("SCALPING", TradingStyle.UNKNOWN),
        ("unknown", TradingStyle.UNKNOWN),
    ])
    def test_parse(self, raw, expected):
        assert TradingStyle.parse(raw) is expected


class TestSystemPrompt:

    @pytest.mark.parametrize("style,tp,sl", [
        (TradingStyle.SCALPING, "TP should be 0.5-1.5% from entry", "SL should be 0.2-0.5% from entry"),
        (TradingStyle.DAYTRADING, "TP should be 1-3% from entry", "SL should be 0.5-1% from entry"),
        (TradingStyle.SWINGTRADING, "TP should be 5-15% from entry", "SL should be 2-5% from entry"),
    ])
    def test_style_ranges_in_prompt(self, style, tp, sl):
        prompt = build_system_prompt(style)
        assert tp in prompt
        assert sl in prompt
        assert f"Trading style context: {STYLE_GUIDES[style]}" in prompt

    def test_unknown_style_falls_back_to_day_trading(self):
        assert build_system_prompt(TradingStyle.UNKNOWN) == build_system_prompt(TradingStyle.DAYTRADING)

    @pytest.mark.parametrize("raw", [None, "", "hodl", "Swing"])
    def test_unrecognised_input_gives_day_trading_prompt(self, raw):
        prompt = build_system_prompt(TradingStyle.parse(raw))
        assert prompt == build_system_prompt(TradingStyle.DAYTRADING)

    def test_prompts_differ_between_styles(self):
        prompts = {build_system_prompt(s) for s in STYLE_GUIDES}
        assert len(prompts) == 3

    def test_prompt_describes_output_schema(self):
        prompt = build_system_prompt(TradingStyle.DAYTRADING)
        for field in (
            '"rating": "Strong Buy" | "Buy" | "Neutral" | "Sell" | "Strong Sell"',
            '"confidence": <number 0-100>',
            '"riskRewardRatio"',
            '"trendDirection": "Uptrend" | "Downtrend" | "Sideways"',
            '"keyLevels"',
            '"riskWarnings"',
            '"ticker"',
            '"timeframe"',
        ):
            assert field in prompt

    def test_prompt_carries_analysis_checklist(self):
        prompt = build_system_prompt(TradingStyle.SWINGTRADING)
        assert "Be conservative with confidence scores" in prompt
        assert "Always identify at least one risk warning" in prompt
        assert "doji, hammer, engulfing, shooting star, morning/evening star" in prompt


def test_user_instruction_echoes_style():
    text = build_user_instruction("swingtrading")
    assert "Trading style: swingtrading." in text
    assert "Return ONLY valid JSON" in text
