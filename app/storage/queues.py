from typing import Optional

import redis

from .documents import store_errors


class QueueStore:
    """Pending work lists pushed by the crawl schedulers."""

    def __init__(self, r: redis.Redis):
        self.r = r

    @classmethod
    def from_url(cls, url: str, timeout: Optional[float] = None) -> "QueueStore":
        return cls(redis.from_url(url, decode_responses=True, socket_timeout=timeout,
                                  socket_connect_timeout=timeout))

    def length(self, name: str) -> int:
        with store_errors("queue"):
            return int(self.r.llen(name))
