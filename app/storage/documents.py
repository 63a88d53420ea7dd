"""Document collections kept in Redis.

Each collection is a hash ``{prefix}:{collection}`` mapping a document id to
its orjson-encoded body. Queries load the collection and filter, sort, group
or bucket in process, which is what the tracing views need: equality filters,
a single sort key, offset pagination and two aggregation shapes.
"""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from numbers import Real
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import orjson
import redis

from ..exceptions import AggregationError, StoreUnavailableError
from ..log import get_logger
from . import schema

log = get_logger(__name__)


@contextmanager
def store_errors(store: str) -> Iterator[None]:
    try:
        yield
    except redis.RedisError as exc:
        log.error("store_unavailable", store=store, error=str(exc))
        raise StoreUnavailableError(f"{store} store unavailable: {exc}") from exc


def _matches(doc: Dict[str, Any], where: Optional[Dict[str, Any]]) -> bool:
    if not where:
        return True
    return all(doc.get(k) == v for k, v in where.items())


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _sort_value(value: Any) -> Any:
    # ISO timestamps compare as instants, whatever their offset spelling.
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    return value


class DocumentStore:
    def __init__(self, r: redis.Redis, prefix: str = "biliob"):
        self.r = r
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str, timeout: Optional[float] = None) -> "DocumentStore":
        r = redis.from_url(url, decode_responses=True, socket_timeout=timeout,
                           socket_connect_timeout=timeout)
        return cls(r, prefix)

    def _key(self, collection: str) -> str:
        return f"{self.prefix}:{collection}"

    def _load(self, collection: str) -> List[Dict[str, Any]]:
        with store_errors("document"):
            raw = self.r.hgetall(self._key(collection))
        return [self._decode(collection, doc_id, body) for doc_id, body in raw.items()]

    @staticmethod
    def _decode(collection: str, doc_id: str, body: Any) -> Dict[str, Any]:
        try:
            doc = orjson.loads(body)
        except orjson.JSONDecodeError as exc:
            raise AggregationError(collection, f"document {doc_id} is not JSON: {exc}") from exc
        if not isinstance(doc, dict):
            raise AggregationError(collection, f"document {doc_id} is not an object")
        doc.setdefault(schema.ID, doc_id)
        return doc

    def find(
        self,
        collection: str,
        where: Optional[Dict[str, Any]] = None,
        sort: Optional[str] = None,
        descending: bool = True,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        docs = [d for d in self._load(collection) if _matches(d, where)]
        if sort:
            # Documents missing the sort key go last in either direction.
            present = [d for d in docs if d.get(sort) is not None]
            missing = [d for d in docs if d.get(sort) is None]
            present.sort(key=lambda d: (_sort_value(d[sort]), d[schema.ID]), reverse=descending)
            docs = present + missing
        end = None if limit is None else skip + limit
        return docs[skip:end]

    def find_one(
        self,
        collection: str,
        where: Optional[Dict[str, Any]] = None,
        sort: Optional[str] = None,
        descending: bool = True,
    ) -> Optional[Dict[str, Any]]:
        docs = self.find(collection, where, sort=sort, descending=descending, limit=1)
        return docs[0] if docs else None

    def count(self, collection: str, where: Optional[Dict[str, Any]] = None) -> int:
        if not where:
            with store_errors("document"):
                return int(self.r.hlen(self._key(collection)))
        return sum(1 for d in self._load(collection) if _matches(d, where))

    def sum_by_group(
        self,
        collection: str,
        group_by: str,
        field: str,
        where: Optional[Dict[str, Any]] = None,
    ) -> Dict[Any, int]:
        totals: Dict[Any, int] = {}
        for doc in self._load(collection):
            if not _matches(doc, where):
                continue
            value = doc.get(field)
            group = doc.get(group_by)
            totals[group] = totals.get(group, 0) + (value if _is_number(value) else 0)
        return totals

    def bucket(
        self,
        collection: str,
        field: str,
        boundaries: Sequence[int],
        default: str,
    ) -> List[Tuple[Any, int]]:
        """Histogram of ``field`` over ``[b0, b1), [b1, b2), ...``.

        Values outside every range, missing or non-numeric are counted in the
        ``default`` bucket, which always comes last.
        """
        lowers = list(boundaries[:-1])
        counts = {b: 0 for b in lowers}
        overflow = 0
        for doc in self._load(collection):
            value = doc.get(field)
            slot = None
            if _is_number(value):
                for lo, hi in zip(boundaries, boundaries[1:]):
                    if lo <= value < hi:
                        slot = lo
                        break
            if slot is None:
                overflow += 1
            else:
                counts[slot] += 1
        return [(b, counts[b]) for b in lowers] + [(default, overflow)]

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        with store_errors("document"):
            body = self.r.hget(self._key(collection), doc_id)
        if body is None:
            return None
        return self._decode(collection, doc_id, body)

    def insert_one(self, collection: str, doc: Dict[str, Any]) -> str:
        doc_id = str(doc.get(schema.ID) or uuid.uuid4().hex)
        body = dict(doc, **{schema.ID: doc_id})
        with store_errors("document"):
            self.r.hset(self._key(collection), doc_id, orjson.dumps(body).decode())
        return doc_id

    def replace_one(self, collection: str, doc_id: str, doc: Dict[str, Any]) -> None:
        body = dict(doc, **{schema.ID: doc_id})
        with store_errors("document"):
            self.r.hset(self._key(collection), doc_id, orjson.dumps(body).decode())
