from typing import Optional

from ..exceptions import InvalidPaginationError
from ..models import TaskStatus, TracerPage, TracerRecord
from . import schema
from .documents import DocumentStore


def check_page(page: int, page_size: int) -> None:
    if page is None or page_size is None or page < 0 or page_size < 0:
        raise InvalidPaginationError(page, page_size)


class TracerRepo:
    """Read side of the tracer collection."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def _page(self, where: dict, page: int, page_size: int) -> TracerPage:
        check_page(page, page_size)
        docs = self.store.find(schema.TRACER, where, sort=schema.UPDATE_TIME,
                               skip=page * page_size, limit=page_size)
        content = [TracerRecord.model_validate(d) for d in docs]
        return TracerPage(content=content, page=page, page_size=page_size,
                          number_of_elements=len(content))

    def find_by_class(self, class_name: str, page: int, page_size: int) -> TracerPage:
        return self._page({schema.CLASS_NAME: class_name}, page, page_size)

    def find_by_class_and_status(self, class_name: str, status: TaskStatus,
                                 page: int, page_size: int) -> TracerPage:
        where = {schema.CLASS_NAME: class_name, schema.STATUS: TaskStatus(status).value}
        return self._page(where, page, page_size)

    def count_by_class_and_status(self, class_name: str, status: TaskStatus) -> int:
        return self.store.count(schema.TRACER, {schema.CLASS_NAME: class_name,
                                                schema.STATUS: TaskStatus(status).value})

    def sum_crawl_count(self, class_name: str) -> int:
        totals = self.store.sum_by_group(schema.TRACER, schema.CLASS_NAME, schema.CRAWL_COUNT,
                                         where={schema.CLASS_NAME: class_name})
        return int(totals.get(class_name, 0))

    def latest_by_start_time(self, class_name: str) -> Optional[TracerRecord]:
        doc = self.store.find_one(schema.TRACER, {schema.CLASS_NAME: class_name},
                                  sort=schema.START_TIME)
        return TracerRecord.model_validate(doc) if doc else None
