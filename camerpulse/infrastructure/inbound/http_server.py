import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from camerpulse.admin.interfaces.admin_api import build_admin_router
from camerpulse.admin.security.jwt_hmac import AdminTokenVerifier
from camerpulse.core.logging.structured_event_logger import StructuredEventLogger
from camerpulse.generation.errors import PipelineError
from camerpulse.generation.services.generation_pipeline import GenerationPipeline
from camerpulse.review.services.poll_review_service import PollReviewService

GENERATOR_PATH = "/functions/v1/autonomous-poll-generator"

# Any caller method triggers a run; OPTIONS is the CORS preflight.
TRIGGER_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def build_app(
    pipeline: GenerationPipeline,
    review_service: Optional[PollReviewService] = None,
    verifier: Optional[AdminTokenVerifier] = None,
    logger: Optional[StructuredEventLogger] = None,
) -> FastAPI:
    runtime_logger = logger or StructuredEventLogger()
    app = FastAPI(title="CamerPulse autonomous poll engine")

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.api_route(GENERATOR_PATH, methods=TRIGGER_METHODS)
    def trigger_generation(request: Request):
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)

        try:
            result = pipeline.run(trigger="http")
        except PipelineError as exc:
            return JSONResponse(
                status_code=500,
                content={"error": exc.public_message, "details": str(exc)},
                headers=CORS_HEADERS,
            )
        except Exception as exc:
            runtime_logger.emit(
                "PIPELINE_CRASHED",
                level=logging.ERROR,
                error_type=exc.__class__.__name__,
                error=str(exc),
            )
            return JSONResponse(
                status_code=500,
                content={"error": PipelineError.public_message, "details": str(exc)},
                headers=CORS_HEADERS,
            )
        return JSONResponse(status_code=200, content=result.to_response(), headers=CORS_HEADERS)

    if review_service is not None and verifier is not None:
        app.include_router(build_admin_router(review_service, verifier))

    return app


def run_server(app: FastAPI, host: str = "0.0.0.0", port: int = 8000) -> None:
    uvicorn.run(app, host=host, port=port)
