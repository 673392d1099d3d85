import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from mindspace.api.endpoints import router
from mindspace.api.routes import enrichment
from mindspace.core.config import settings
from mindspace.core.tracing import instrument_app, setup_tracing, shutdown_tracing
from mindspace.services.background import background_task_manager
from mindspace.services.http_client import http_client_manager
from mindspace.shared.correlation import CorrelationMiddleware
from mindspace.shared.errors import JournalError, get_correlation_id, journal_error_response
from mindspace.shared.logging_config import setup_logging

setup_logging(service_name=settings.SERVICE_NAME)
logger = logging.getLogger("MindSpace.Main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_tracing(settings.SERVICE_NAME)
    await http_client_manager.startup()
    yield
    await background_task_manager.shutdown()
    await http_client_manager.shutdown()
    shutdown_tracing()


app = FastAPI(
    title="MindSpace Journal Service",
    description="Mood journal with AI reflections and analytics",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(CorrelationMiddleware)
instrument_app(app)


@app.exception_handler(JournalError)
async def journal_error_handler(request: Request, exc: JournalError):
    if exc.status_code >= 500:
        logger.error("Request failed: %s", exc.message, extra={"error_code": exc.code.value})
    return journal_error_response(exc, get_correlation_id(request))


# Serverless-style enrichment endpoint lives at the root; the journal API is versioned
app.include_router(enrichment.router)
app.include_router(router, prefix="/api/v1")


@app.get("/")
async def root():
    return {"message": "MindSpace Journal Service Running"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
