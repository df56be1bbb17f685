"""
FastAPI application for market analysis.

Endpoints:
- GET  /api/analyze     - providers that currently have credentials
- POST /api/analyze     - segment breakdown for a market (or raw text with rawResponse)
- POST /api/population  - estimate how many of something exist
- GET  /health          - health check
"""

import json
import logging
import time
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tam.analysis.errors import AnalysisError, AnalysisFailed, InvalidInput
from tam.analysis.pipeline import AnalysisPipeline
from tam.core.config import TamConfig

logger = logging.getLogger(__name__)


def _error_response(error: AnalysisError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content=error.to_response())


async def _read_body(request: Request) -> Dict[str, Any]:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise InvalidInput("Request body must be JSON")
    if not isinstance(body, dict):
        raise InvalidInput("Request body must be a JSON object")
    return body


def create_app(
    config: Optional[TamConfig] = None,
    pipeline: Optional[AnalysisPipeline] = None
) -> FastAPI:
    """Build the app. Config is read from the environment when not given."""
    if pipeline is None:
        pipeline = AnalysisPipeline.from_config(config or TamConfig.from_env())

    app = FastAPI(
        title="TAM Visualizer API",
        description="AI-assisted total addressable market segmentation",
        version="1.0.0"
    )
    app.state.pipeline = pipeline

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        t0 = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - t0) * 1000.0
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms)")
        return response

    @app.get("/health")
    async def health_check():
        """Health check."""
        return {"status": "healthy", "timestamp": datetime.now().isoformat()}

    @app.get("/api/analyze")
    async def list_providers():
        """Providers with credentials, without any model selection state."""
        return {"providers": [p.to_dict() for p in pipeline.registry.available()]}

    @app.post("/api/analyze")
    async def analyze(request: Request):
        """
        Body: {query, population?, provider?, model?, rawResponse?}

        Returns {totalPopulation, segments, provider, model}, or {rawText}
        when rawResponse is set. Failures return {error, categories?}.
        """
        try:
            body = await _read_body(request)

            if body.get("rawResponse"):
                text = await pipeline.estimate_population(
                    body.get("query"),
                    provider=body.get("provider"),
                    model=body.get("model"),
                )
                return {"rawText": text}

            result = await pipeline.analyze_market(
                body.get("query"),
                population=body.get("population"),
                provider=body.get("provider"),
                model=body.get("model"),
            )
            return result.to_response()

        except AnalysisError as e:
            logger.warning(f"Analysis rejected ({e.status_code}): {e.message}")
            return _error_response(e)
        except Exception as e:
            logger.exception(f"Analysis error: {e}")
            return _error_response(AnalysisFailed())

    @app.post("/api/population")
    async def population(request: Request):
        """Body: {description, provider?, model?}. Returns {label, value}."""
        try:
            body = await _read_body(request)
            estimate = await pipeline.resolve_population(
                body.get("description"),
                provider=body.get("provider"),
                model=body.get("model"),
            )
            return estimate.model_dump()

        except AnalysisError as e:
            logger.warning(f"Population estimate rejected ({e.status_code}): {e.message}")
            return _error_response(e)
        except Exception as e:
            logger.exception(f"Population estimate error: {e}")
            return _error_response(AnalysisFailed())

    return app
