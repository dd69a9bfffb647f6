"""
redline API - Main FastAPI application.

Exposes the parser to the presentation layer over HTTP.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from redline import __version__
from redline.config import get_settings
from redline.core.errors import ParserError
from redline.core.models import TelemetrySnapshot, segment_to_wire
from redline.engine import ResponseParser

logger = logging.getLogger(__name__)

settings = get_settings()

# Global instances
parser = ResponseParser(settings=settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - setup and teardown."""
    logging.basicConfig(level=settings.log_level.upper())
    logger.info(f"{settings.app_name} {__version__} ready")

    yield


app = FastAPI(
    title="redline API",
    description="Fault-tolerant parser for LLM edit suggestions",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Request/Response Models
# =============================================================================


class ParseRequest(BaseModel):
    """Request body for /v1/parse."""
    text: str


class PrognosisResponse(BaseModel):
    """Recoverability estimate attached to fallback parses."""
    recoverability_score: int
    identified_issues: list[str]
    recommended_approach: str


class ParseResponse(BaseModel):
    """Response model for a successful parse."""
    segments: list[Any]
    outcome: str
    stage: str
    normalization_steps: list[str]
    repairs_applied: list[str]
    prognosis: PrognosisResponse | None = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str


# =============================================================================
# Error Handling
# =============================================================================


@app.exception_handler(ParserError)
async def parser_error_handler(request: Request, exc: ParserError) -> JSONResponse:
    """Render a parser failure as a tiered error payload."""
    return JSONResponse(
        status_code=422,
        content={"error": exc.to_display(include_debug=settings.debug)},
    )


# =============================================================================
# Endpoints
# =============================================================================


@app.get("/health")
async def health() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="ok", version=__version__)


@app.post("/v1/parse")
def parse_v1(request: ParseRequest) -> ParseResponse:
    """
    Parse a raw model response into segments.

    Runs synchronously in the threadpool; parsing is CPU-bound.
    """
    report = parser.parse_detailed(request.text)

    prognosis = None
    if report.prognosis:
        prognosis = PrognosisResponse(
            recoverability_score=report.prognosis.recoverability_score,
            identified_issues=report.prognosis.identified_issues,
            recommended_approach=report.prognosis.recommended_approach.value,
        )

    return ParseResponse(
        segments=[segment_to_wire(s) for s in report.segments],
        outcome=report.outcome.value,
        stage=report.stage.value,
        normalization_steps=report.normalization_steps,
        repairs_applied=report.repairs_applied,
        prognosis=prognosis,
    )


@app.get("/v1/telemetry")
async def telemetry_v1() -> TelemetrySnapshot:
    """Parser success/fallback/failure counters."""
    return parser.get_telemetry()
