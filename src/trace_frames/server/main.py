import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from trace_frames.config import settings
from trace_frames.logger import setup_logger
from trace_frames.runtime.search_client import TraceSearchExecutor, create_db_client
from trace_frames.server.exceptions_handlers import setup_exception_handlers
from trace_frames.server.trace_routes import traces_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    db_client = create_db_client(settings)
    app.state.executor = TraceSearchExecutor(
        db_client,
        index=settings.TRACE_INDEX_PATTERN,
        datasource_uid=settings.DATASOURCE_UID,
        datasource_name=settings.DATASOURCE_NAME
    )
    logger.info(f"Serving traces from {settings.STORE_TYPE} index {settings.TRACE_INDEX_PATTERN}")
    try:
        yield
    finally:
        try:
            await db_client.close()
        except Exception as e:
            logger.error(f"Error closing DB client: {e}")


def create_app() -> FastAPI:
    setup_logger()
    app = FastAPI(title="trace-frames", lifespan=lifespan)
    setup_exception_handlers(app)
    app.include_router(traces_router)
    return app


def main():
    app = create_app()
    uvicorn.run(app, host="0.0.0.0", port=9001)

if __name__ == "__main__":
    main()
