from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import settings
from .log import configure_logging, get_logger
from .routers import tracer
from .services.tracer import TracerService
from .storage.documents import DocumentStore
from .storage.queues import QueueStore

log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level)
    store = DocumentStore.from_url(settings.redis_url, settings.document_prefix,
                                   timeout=settings.store_timeout_seconds)
    queues = QueueStore.from_url(settings.queue_redis_url, timeout=settings.store_timeout_seconds)
    app.state.tracer_service = TracerService(store, queues)
    log.info("tracer_api_started", redis_url=settings.redis_url)
    try:
        yield
    finally:
        store.r.close()
        queues.r.close()


def create_app(service: TracerService | None = None) -> FastAPI:
    if service is None:
        app = FastAPI(title="Crawl Tracer API", version="1.0.0", lifespan=lifespan)
    else:
        app = FastAPI(title="Crawl Tracer API", version="1.0.0")
        app.state.tracer_service = service
    app.include_router(tracer.router)
    return app


app = create_app()
