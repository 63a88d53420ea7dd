from ..config import settings
from ..models import QueueLength
from ..storage.queues import QueueStore


class QueueStatusReporter:
    def __init__(self, queues: QueueStore, author_key: str | None = None, video_key: str | None = None):
        self.queues = queues
        self.author_key = author_key or settings.author_queue_key
        self.video_key = video_key or settings.video_queue_key

    def get_author_queue_length(self) -> QueueLength:
        return QueueLength(length=self.queues.length(self.author_key))

    def get_video_queue_length(self) -> QueueLength:
        return QueueLength(length=self.queues.length(self.video_key))
