import pytest

from app.models import TaskStatus, TracerRecord
from app.storage.repo import TracerRepo
from worker.celery_app import TracedTask
from worker.tracing import TracerWriter


@pytest.fixture
def writer(store):
    return TracerWriter(store)


def test_lifecycle_alive_to_finished(store, writer):
    tracer_id = writer.start("SpiderTask")
    writer.progress(tracer_id, 3)
    writer.progress(tracer_id, 2)

    rec = TracerRecord.model_validate(store.get("tracer", tracer_id))
    assert rec.status is TaskStatus.ALIVE
    assert rec.crawl_count == 5
    assert rec.update_time >= rec.start_time
    assert TracerRepo(store).count_by_class_and_status("SpiderTask", TaskStatus.ALIVE) == 1

    writer.finish(tracer_id)
    rec = TracerRecord.model_validate(store.get("tracer", tracer_id))
    assert rec.status is TaskStatus.FINISHED
    assert rec.crawl_count == 5


def test_fail_records_message(store, writer):
    tracer_id = writer.start("ProgressTask", tracer_id="job-1")
    writer.fail(tracer_id, "boom")
    rec = TracerRecord.model_validate(store.get("tracer", "job-1"))
    assert rec.status is TaskStatus.ERROR
    assert rec.msg == "boom"


def test_crawl_count_cannot_decrease(writer):
    tracer_id = writer.start("SpiderTask")
    with pytest.raises(ValueError):
        writer.progress(tracer_id, -1)


def test_unknown_tracer(writer):
    with pytest.raises(KeyError):
        writer.finish("missing")


def test_traced_task_hooks(store, writer):
    class AuthorCrawl(TracedTask):
        name = "tests.author_crawl"
        tracer_class = "SpiderTask"

    task = AuthorCrawl()
    task._writer = writer

    task.before_start("celery-1", (), {})
    task.trace_progress(4, task_id="celery-1")
    task.on_success(None, "celery-1", (), {})

    task.before_start("celery-2", (), {})
    task.on_failure(RuntimeError("banned"), "celery-2", (), {}, None)

    done = TracerRecord.model_validate(store.get("tracer", "celery-1"))
    failed = TracerRecord.model_validate(store.get("tracer", "celery-2"))
    assert (done.status, done.crawl_count) == (TaskStatus.FINISHED, 4)
    assert (failed.status, failed.msg) == (TaskStatus.ERROR, "banned")


def test_retried_task_keeps_its_progress(store, writer):
    writer.start("SpiderTask", tracer_id="celery-1")
    first = TracerRecord.model_validate(store.get("tracer", "celery-1"))
    writer.progress("celery-1", 5)
    writer.fail("celery-1", "timeout")

    writer.start("SpiderTask", tracer_id="celery-1")

    rec = TracerRecord.model_validate(store.get("tracer", "celery-1"))
    assert rec.crawl_count == 5
    assert rec.start_time == first.start_time
    assert rec.status is TaskStatus.ALIVE
    assert rec.msg is None


def test_before_start_twice_with_same_id(store, writer):
    class VideoCrawl(TracedTask):
        name = "tests.video_crawl"

    task = VideoCrawl()
    task._writer = writer
    task.before_start("celery-9", (), {})
    task.trace_progress(7, task_id="celery-9")
    task.before_start("celery-9", (), {})

    rec = TracerRecord.model_validate(store.get("tracer", "celery-9"))
    assert rec.crawl_count == 7
    assert store.count("tracer") == 1
