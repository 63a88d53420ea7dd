from pydantic import BaseModel
import os

class Settings(BaseModel):
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    queue_redis_url: str = os.getenv("QUEUE_REDIS_URL", os.getenv("REDIS_URL", "redis://localhost:6379/0"))
    document_prefix: str = os.getenv("DOCUMENT_PREFIX", "biliob")
    author_queue_key: str = os.getenv("AUTHOR_QUEUE_KEY", "authorRedis:start_urls")
    video_queue_key: str = os.getenv("VIDEO_QUEUE_KEY", "videoRedis:start_urls")
    store_timeout_seconds: float = float(os.getenv("STORE_TIMEOUT_SECONDS", 5))
    default_page_size: int = int(os.getenv("DEFAULT_PAGE_SIZE", 20))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    celery_broker_url: str = os.getenv("CELERY_BROKER_URL", os.getenv("REDIS_URL", "redis://localhost:6379/0"))

settings = Settings()
