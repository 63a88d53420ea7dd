from pathlib import Path
import sys

import pytest
import redis

sys.path.append(str(Path(__file__).resolve().parents[1]))

from app.storage.documents import DocumentStore
from app.storage.queues import QueueStore
from app.services.tracer import TracerService


class FakeRedis:
    """The handful of hash and list commands the stores use."""

    def __init__(self):
        self.hashes = {}
        self.lists = {}

    def hset(self, key, field, value):
        self.hashes.setdefault(key, {})[field] = value
        return 1

    def hget(self, key, field):
        return self.hashes.get(key, {}).get(field)

    def hgetall(self, key):
        return dict(self.hashes.get(key, {}))

    def hlen(self, key):
        return len(self.hashes.get(key, {}))

    def rpush(self, key, *values):
        self.lists.setdefault(key, []).extend(values)
        return len(self.lists[key])

    def llen(self, key):
        return len(self.lists.get(key, []))

    def close(self):
        pass


class DownRedis:
    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise redis.ConnectionError("Connection refused")
        return fail


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def store(fake_redis):
    return DocumentStore(fake_redis, prefix="test")


@pytest.fixture
def queues(fake_redis):
    return QueueStore(fake_redis)


@pytest.fixture
def service(store, queues):
    return TracerService(store, queues, timeout=2)


@pytest.fixture
def add_tracer(store):
    counter = {"n": 0}

    def add(class_name, status="finished", crawl_count=0, start=None, update=None, **extra):
        counter["n"] += 1
        n = counter["n"]
        doc = {
            "_id": f"t{n:03d}",
            "class_name": class_name,
            "status": status,
            "crawl_count": crawl_count,
            "start_time": start or f"2024-01-01T00:{n:02d}:00+00:00",
            "update_time": update or f"2024-01-02T00:{n:02d}:00+00:00",
        }
        doc.update(extra)
        return store.insert_one("tracer", doc)

    return add


@pytest.fixture
def add_doc(store):
    def add(collection, doc):
        return store.insert_one(collection, doc)

    return add
