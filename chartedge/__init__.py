"""ChartEdge AI: chart image trading analysis backed by Gemini Vision."""

__version__ = "1.0.0"
