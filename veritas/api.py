"""
HTTP surface: one analysis endpoint plus a health check.

The handler is a plain def, so FastAPI runs each request in its threadpool;
the pipeline is stateless and needs no locking.
"""

from typing import Any, Optional

from fastapi import Body, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .main import VerificationPipeline, ResultCallback
from .error_mapper import map_error
from .exceptions import InputError

ANALYZE_PATH = "/api/analyze"
HEALTH_PATH = "/health"


def create_app(
    pipeline: Optional[VerificationPipeline] = None,
    on_result: Optional[ResultCallback] = None
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        pipeline: Pre-built pipeline (tests inject one with fake collaborators)
        on_result: History hook, used only when no pipeline is passed

    Returns:
        Configured FastAPI app
    """
    pipeline = pipeline or VerificationPipeline(on_result=on_result)
    app = FastAPI(title="Veritas", description="Article authenticity analysis")

    @app.exception_handler(RequestValidationError)
    async def malformed_body_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        # Unparseable JSON gets the same {error} shape as every other failure
        response, status = map_error(InputError("Malformed request body", details={"kind": "missing"}))
        return JSONResponse(status_code=status, content=response.model_dump())

    @app.post(ANALYZE_PATH)
    def analyze(payload: Any = Body(default=None)) -> JSONResponse:
        body, status = pipeline.handle(payload)
        return JSONResponse(status_code=status, content=body)

    @app.get(HEALTH_PATH)
    def health() -> dict:
        return {"status": "ok"}

    return app
