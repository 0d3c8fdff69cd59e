"""
ChartEdge - Chart Image Trading Analysis API
============================================
Implements: upload validation + Gemini Vision analysis + JSON normalization,
plus the single-page frontend fallback.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from .analyzer import ChartAnalyzer, get_analyzer
from .config import Settings, get_settings
from .errors import ChartEdgeError, MissingImageError, UploadError
from .logging_config import setup_logging
from .normalizer import normalize_analysis
from .prompts import TradingStyle, build_system_prompt, build_user_instruction
from .schemas import AnalyzeResponse, HealthResponse
from .uploads import read_chart_upload

settings = get_settings()
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    current = get_settings()
    if not current.has_api_key:
        logger.warning("GEMINI_API_KEY not set. AI analysis will fail.")
    logger.info(f"Using Gemini model: {current.model_name}")
    yield


# ============================================================
# APP CONFIGURATION
# ============================================================

app = FastAPI(title="ChartEdge AI API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================
# ERROR HANDLERS
# ============================================================

def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(ChartEdgeError)
async def chartedge_error_handler(request: Request, exc: ChartEdgeError):
    if isinstance(exc, UploadError):
        logger.info(f"{request.url.path}: {exc.message}")
    return error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    fields = {str(loc) for err in exc.errors() for loc in err.get("loc", ())}
    if "chart" in fields:
        return error_response(400, MissingImageError.message)
    logger.info(f"{request.url.path}: invalid request {exc.errors()}")
    return error_response(400, "Invalid request")


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.url.path}")
    return error_response(500, "Internal server error")


# ============================================================
# ANALYSIS ENDPOINT
# ============================================================

@app.post("/api/analyze", response_model=AnalyzeResponse)
async def analyze_chart(
    chart: Optional[UploadFile] = File(default=None),
    trading_style: Optional[str] = Form(default=None, alias="tradingStyle"),
    analyzer: ChartAnalyzer = Depends(get_analyzer),
    config: Settings = Depends(get_settings),
):
    """POST /api/analyze - Gemini Vision analysis of one chart image"""
    image = await read_chart_upload(chart, config.max_upload_bytes)

    style_label = trading_style or TradingStyle.DAYTRADING.value
    style = TradingStyle.parse(trading_style)
    if style is TradingStyle.UNKNOWN:
        logger.info(f"Unknown trading style {trading_style!r}, using day trading guidance")

    logger.info(f"/api/analyze: {image.filename!r} ({image.mime_type}), style={style_label}")

    raw_text = await analyzer.analyze(
        image,
        build_system_prompt(style),
        build_user_instruction(style_label),
    )
    analysis = normalize_analysis(raw_text)

    logger.info(f"/api/analyze: rating={analysis.get('rating')} confidence={analysis.get('confidence')}")
    return AnalyzeResponse(success=True, analysis=analysis)


# ============================================================
# HEALTH CHECK
# ============================================================

@app.get("/api/health", response_model=HealthResponse)
async def health_check(config: Settings = Depends(get_settings)):
    """Liveness only; never touches the model."""
    return HealthResponse(
        status="ok",
        model=config.model_name,
        timestamp=datetime.now().isoformat(),
    )


# ============================================================
# FRONTEND (SPA FALLBACK)
# ============================================================

def resolve_static_file(static_dir: Path, path: str) -> Optional[Path]:
    """Return the file under static_dir named by path, if any. No traversal."""
    if not path:
        return None
    root = static_dir.resolve()
    candidate = (root / path).resolve()
    if root not in candidate.parents or not candidate.is_file():
        return None
    return candidate


@app.get("/{full_path:path}", include_in_schema=False)
async def serve_frontend(full_path: str, config: Settings = Depends(get_settings)):
    if full_path == "api" or full_path.startswith("api/"):
        return error_response(404, "Not found")

    asset = resolve_static_file(config.static_dir, full_path)
    if asset is not None:
        return FileResponse(asset)

    index = config.static_dir / "index.html"
    if not index.is_file():
        return error_response(404, "Frontend not built")
    return FileResponse(index)


def run() -> None:
    import uvicorn

    current = get_settings()
    logger.info(f"ChartEdge AI running on http://localhost:{current.port}")
    uvicorn.run(app, host=current.host, port=current.port, log_level=current.log_level.lower())


if __name__ == "__main__":
    run()
