"""Errors raised by the tracing service.

    TracerError
    ├── StoreUnavailableError   document or queue store unreachable / timed out
    ├── AggregationError        a dashboard sub-query failed or returned a bad shape
    └── InvalidPaginationError  negative page or page size
"""


class TracerError(Exception):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class StoreUnavailableError(TracerError):
    pass


UnavailableError = StoreUnavailableError


class AggregationError(TracerError):
    def __init__(self, key: str, message: str) -> None:
        self.key = key
        super().__init__(f"{key}: {message}")


class InvalidPaginationError(TracerError):
    def __init__(self, page: int, page_size: int) -> None:
        self.page = page
        self.page_size = page_size
        super().__init__(f"Invalid pagination: page={page}, pageSize={page_size}")
