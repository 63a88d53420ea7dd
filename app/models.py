from datetime import datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .log import get_logger

log = get_logger(__name__)


class TaskStatus(str, Enum):
    """Status a tracer record can hold. Producers drive the transitions:
    ALIVE -> FINISHED on success, ALIVE -> ERROR on failure."""
    ALIVE = "alive"
    FINISHED = "finished"
    ERROR = "error"


class SliceMode(str, Enum):
    GET_ALL = "all"
    GET_RUNNING = "running"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SliceMode":
        # Unknown modes fall back to listing every task.
        try:
            return cls(value)
        except ValueError:
            log.warning("unknown_slice_mode", mode=value, fallback=cls.GET_ALL.value)
            return cls.GET_ALL


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TracerRecord(CamelModel):
    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("_id", "id"))
    class_name: str
    status: TaskStatus
    crawl_count: int = Field(default=0, ge=0)
    start_time: Optional[datetime] = None
    update_time: Optional[datetime] = None
    msg: Optional[str] = None


class TracerPage(CamelModel):
    content: List[TracerRecord]
    page: int
    page_size: int
    number_of_elements: int


class QueueLength(BaseModel):
    length: int


class BucketCount(CamelModel):
    bucket_lower_bound: Union[int, str]
    count: int


class DashboardData(CamelModel):
    model_config = ConfigDict(frozen=True)

    sum_crawl_count: Optional[int] = None
    sum_spider_count: Optional[int] = None
    user_bucket_result: Optional[List[BucketCount]] = None
    checked_in_count: Optional[int] = None
    user_count: Optional[int] = None
    latest_progress_task: Optional[TracerRecord] = None
    partial: bool = False
    failed: List[str] = Field(default_factory=list)
