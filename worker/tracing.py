from datetime import datetime, timezone
from typing import Optional

from app.models import TaskStatus
from app.storage import schema
from app.storage.documents import DocumentStore


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TracerWriter:
    """Write side of the tracer collection, used by the task that owns a record.

    A record has a single writer, so updates are plain read-modify-write.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    def start(self, class_name: str, tracer_id: Optional[str] = None) -> str:
        """Create the record, or revive it when a retried task starts again.

        A revived record keeps its crawl_count and start_time.
        """
        existing = self.store.get(schema.TRACER, tracer_id) if tracer_id else None
        if existing is not None:
            existing[schema.STATUS] = TaskStatus.ALIVE.value
            existing.pop(schema.MSG, None)
            self._save(tracer_id, existing)
            return tracer_id
        now = utcnow().isoformat()
        return self.store.insert_one(schema.TRACER, {
            schema.ID: tracer_id,
            schema.CLASS_NAME: class_name,
            schema.STATUS: TaskStatus.ALIVE.value,
            schema.CRAWL_COUNT: 0,
            schema.START_TIME: now,
            schema.UPDATE_TIME: now,
        })

    def _load(self, tracer_id: str) -> dict:
        doc = self.store.get(schema.TRACER, tracer_id)
        if doc is None:
            raise KeyError(tracer_id)
        return doc

    def _save(self, tracer_id: str, doc: dict) -> None:
        doc[schema.UPDATE_TIME] = utcnow().isoformat()
        self.store.replace_one(schema.TRACER, tracer_id, doc)

    def progress(self, tracer_id: str, crawled: int = 1) -> None:
        if crawled < 0:
            raise ValueError("crawl_count never decreases")
        doc = self._load(tracer_id)
        doc[schema.CRAWL_COUNT] = doc.get(schema.CRAWL_COUNT, 0) + crawled
        self._save(tracer_id, doc)

    def finish(self, tracer_id: str) -> None:
        doc = self._load(tracer_id)
        doc[schema.STATUS] = TaskStatus.FINISHED.value
        self._save(tracer_id, doc)

    def fail(self, tracer_id: str, msg: str) -> None:
        doc = self._load(tracer_id)
        doc[schema.STATUS] = TaskStatus.ERROR.value
        doc[schema.MSG] = msg
        self._save(tracer_id, doc)
