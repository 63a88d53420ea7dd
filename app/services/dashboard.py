"""Dashboard aggregation.

Six independent read-only queries are fanned out concurrently, each in a
worker thread under its own timeout, and joined into one ``DashboardData``.
A query that fails or times out leaves its key null and is listed in
``failed``; the others still populate.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import ValidationError

from ..config import settings
from ..exceptions import AggregationError, StoreUnavailableError
from ..log import get_logger
from ..models import BucketCount, DashboardData, TaskStatus
from ..storage import schema
from ..storage.documents import DocumentStore
from ..storage.repo import TracerRepo

log = get_logger(__name__)


class DashboardAggregator:
    def __init__(self, store: DocumentStore, timeout: Optional[float] = None):
        self.store = store
        self.tracers = TracerRepo(store)
        self.timeout = settings.store_timeout_seconds if timeout is None else timeout

    def sum_crawl_count(self) -> int:
        return self.tracers.sum_crawl_count(schema.SPIDER_TASK)

    def sum_spider_count(self) -> int:
        return self.tracers.count_by_class_and_status(schema.SPIDER_TASK, TaskStatus.ALIVE)

    def user_bucket_result(self) -> List[BucketCount]:
        buckets = self.store.bucket(schema.USER, schema.EXP, schema.USER_EXP_BOUNDARIES,
                                    schema.NOT_CHECKED_IN_BUCKET)
        return [BucketCount(bucket_lower_bound=lower, count=count) for lower, count in buckets]

    def checked_in_count(self) -> int:
        return self.store.count(schema.CHECK_IN)

    def user_count(self) -> int:
        return self.store.count(schema.USER)

    def latest_progress_task(self):
        return self.tracers.latest_by_start_time(schema.PROGRESS_TASK)

    def queries(self) -> Dict[str, Callable[[], Any]]:
        return {
            "sumCrawlCount": self.sum_crawl_count,
            "sumSpiderCount": self.sum_spider_count,
            "userBucketResult": self.user_bucket_result,
            "checkedInCount": self.checked_in_count,
            "userCount": self.user_count,
            "latestProgressTask": self.latest_progress_task,
        }

    async def _run(self, key: str, query: Callable[[], Any]) -> Tuple[str, Any, bool]:
        try:
            value = await asyncio.wait_for(asyncio.to_thread(self._call, key, query),
                                           timeout=self.timeout)
            return key, value, True
        except asyncio.TimeoutError:
            log.warning("dashboard_subquery_timeout", key=key, timeout=self.timeout)
        except (StoreUnavailableError, AggregationError) as exc:
            log.warning("dashboard_subquery_failed", key=key, error=exc.message)
        except Exception as exc:
            log.error("dashboard_subquery_error", key=key, error=str(exc), exc_info=True)
        return key, None, False

    @staticmethod
    def _call(key: str, query: Callable[[], Any]) -> Any:
        try:
            return query()
        except (ValidationError, TypeError, ValueError) as exc:
            raise AggregationError(key, str(exc)) from exc

    async def collect(self) -> DashboardData:
        results = await asyncio.gather(*(self._run(k, q) for k, q in self.queries().items()))
        values = {key: value for key, value, ok in results if ok}
        failed = [key for key, _, ok in results if not ok]
        if failed:
            log.info("dashboard_partial", failed=failed)
        return DashboardData(**values, partial=bool(failed), failed=failed)
