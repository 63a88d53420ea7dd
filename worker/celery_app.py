from celery import Celery, Task
from celery.signals import worker_process_init

from app.config import settings
from app.log import configure_logging, get_logger
from app.storage.documents import DocumentStore
from worker.tracing import TracerWriter

log = get_logger(__name__)

celery_app = Celery(
    "tracer",
    broker=settings.celery_broker_url,
    backend=settings.celery_broker_url,
)


class TracedTask(Task):
    """Base class for crawl tasks that report themselves in the tracer collection.

    The celery task id doubles as the tracer record id. ``tracer_class`` is the
    className shown on the dashboard.
    """

    tracer_class = "SpiderTask"
    _writer = None

    @property
    def writer(self) -> TracerWriter:
        if self._writer is None:
            store = DocumentStore.from_url(settings.redis_url, settings.document_prefix,
                                           timeout=settings.store_timeout_seconds)
            self._writer = TracerWriter(store)
        return self._writer

    def before_start(self, task_id, args, kwargs):
        self.writer.start(self.tracer_class, tracer_id=task_id)
        log.info("tracer_started", task_id=task_id, class_name=self.tracer_class)

    def trace_progress(self, crawled: int = 1, task_id: str | None = None):
        self.writer.progress(task_id or self.request.id, crawled)

    def on_success(self, retval, task_id, args, kwargs):
        self.writer.finish(task_id)

    def on_failure(self, exc, task_id, args, kwargs, einfo):
        log.error("tracer_task_failed", task_id=task_id, error=str(exc))
        self.writer.fail(task_id, str(exc))


@worker_process_init.connect
def _configure_worker_logging(**kwargs):
    configure_logging(settings.log_level)
