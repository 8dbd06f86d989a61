import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from trace_frames.exceptions import (
    BadRequestException,
    MalformedDocumentException,
    MissingAggregationDataException,
)

logger = logging.getLogger(__name__)

def setup_exception_handlers(app: FastAPI):
    @app.exception_handler(BadRequestException)
    async def bad_request_handler(request: Request, exc: BadRequestException):
        return JSONResponse(
            status_code=400,
            content={"detail": str(exc)}
        )

    @app.exception_handler(MalformedDocumentException)
    async def malformed_document_handler(request: Request, exc: MalformedDocumentException):
        logger.error(f"Span documents could not be normalized: {exc}")
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc)}
        )

    @app.exception_handler(MissingAggregationDataException)
    async def missing_aggregation_handler(request: Request, exc: MissingAggregationDataException):
        logger.error(f"Trace list aggregation is incomplete: {exc}")
        return JSONResponse(
            status_code=502,
            content={"detail": str(exc)}
        )
