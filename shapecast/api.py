# shapecast/api.py
"""
SHAPECAST API - FastAPI Server

REST boundary for shape-guided extraction.

Structure:
- POST /api/json: Convert free-form ``data`` into JSON shaped like ``format``
- GET  /health:   Liveness and configured model

Error responses:
- 422: request body is not ``{"data": str, "format": object}``
- 400: ``format`` contains an unsupported type (no model call is made)
- 502: every extraction attempt failed

Usage:
    uvicorn shapecast.api:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, StrictStr

from . import __version__
from .config import ShapecastConfig, get_config
from .extractor import RetryBudgetExhausted, extract
from .generation import OpenAIChatGenerator, TextGenerator
from .schemas.shape_compiler import UnsupportedShapeType, synthesize
from .utils.logging import get_logger, is_logging_initialised, setup_logging

_logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class ExtractionRequest(BaseModel):
    data: StrictStr = Field(..., description="Free-form source text")
    format: Dict[str, Any] = Field(..., description="Shape description of the desired JSON")


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def create_app(
    *,
    generator: Optional[TextGenerator] = None,
    config: Optional[ShapecastConfig] = None,
    init_logging: bool = False,
) -> FastAPI:
    """Build the API.

    ``generator`` defaults to an :class:`OpenAIChatGenerator` built from
    ``config`` on first use.  ``init_logging`` starts a session log file when
    the app starts.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if init_logging and not is_logging_initialised():
            cfg = app.state.config or get_config()
            setup_logging(cfg, console_output=True)
        _logger.info("SHAPECAST API starting")
        yield
        _logger.info("SHAPECAST API shutting down")

    app = FastAPI(
        title="SHAPECAST API",
        description="Convert free-form text into JSON of a caller-defined shape.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.generator = generator

    def _config() -> ShapecastConfig:
        return app.state.config or get_config()

    def _generator() -> TextGenerator:
        if app.state.generator is None:
            app.state.generator = OpenAIChatGenerator.from_config(_config())
        return app.state.generator

    @app.exception_handler(UnsupportedShapeType)
    async def _unsupported_shape(request: Request, exc: UnsupportedShapeType) -> JSONResponse:
        _logger.info(f"Rejected shape: {exc}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "unsupported_shape_type", "detail": str(exc)},
        )

    @app.exception_handler(RetryBudgetExhausted)
    async def _extraction_failed(request: Request, exc: RetryBudgetExhausted) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"error": "extraction_failed", "detail": str(exc)},
        )

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        """Health check endpoint"""
        return {"status": "healthy", "version": __version__, "model": _config().lm}

    @app.post("/api/json")
    async def extract_json(request: ExtractionRequest) -> JSONResponse:
        """Convert ``data`` into JSON matching ``format``."""
        validator = synthesize(request.format)
        result = await extract(
            request.data,
            validator,
            request.format,
            retries=_config().max_retries,
            generator=_generator(),
        )
        return JSONResponse(status_code=status.HTTP_200_OK, content=result)

    return app


app = create_app(init_logging=True)
