from typing import Any, Optional, Tuple

from ..models import SliceMode, TaskStatus
from ..storage import schema
from ..storage.documents import DocumentStore
from ..storage.queues import QueueStore
from ..storage.repo import TracerRepo
from .dashboard import DashboardAggregator
from .queue_status import QueueStatusReporter

OK = 200


class TracerService:
    """Entry point for the tracing views. Every call returns ``(payload, status_code)``."""

    def __init__(self, store: DocumentStore, queues: QueueStore, timeout: Optional[float] = None):
        self.tracers = TracerRepo(store)
        self.queue_status = QueueStatusReporter(queues)
        self.dashboard = DashboardAggregator(store, timeout=timeout)

    def get_author_queue_status(self) -> Tuple[Any, int]:
        return self.queue_status.get_author_queue_length(), OK

    def get_video_queue_status(self) -> Tuple[Any, int]:
        return self.queue_status.get_video_queue_length(), OK

    def slice_exists_task(self, page: int, page_size: int) -> Tuple[Any, int]:
        """Scheduler and spider liveness reports, newest update first."""
        return self.tracers.find_by_class(schema.EXISTS_TASK, page, page_size), OK

    def slice_progress_task(self, page: int, page_size: int) -> Tuple[Any, int]:
        """Link generation progress reports, newest update first."""
        return self.tracers.find_by_class(schema.PROGRESS_TASK, page, page_size), OK

    def slice_spider_task(self, page: int, page_size: int, mode: Any = SliceMode.GET_ALL) -> Tuple[Any, int]:
        if not isinstance(mode, SliceMode):
            mode = SliceMode.parse(mode)
        if mode is SliceMode.GET_RUNNING:
            return self.tracers.find_by_class_and_status(
                schema.SPIDER_TASK, TaskStatus.ALIVE, page, page_size), OK
        return self.tracers.find_by_class(schema.SPIDER_TASK, page, page_size), OK

    async def get_dashboard_data(self) -> Tuple[Any, int]:
        return await self.dashboard.collect(), OK
