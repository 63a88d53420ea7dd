from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from ..config import settings
from ..exceptions import AggregationError, InvalidPaginationError, StoreUnavailableError
from ..log import get_logger
from ..models import DashboardData, QueueLength, TracerPage
from ..services.tracer import TracerService

log = get_logger(__name__)

router = APIRouter()


def get_service(request: Request) -> TracerService:
    return request.app.state.tracer_service


def _call(response: Response, fn, *args):
    try:
        payload, status_code = fn(*args)
    except StoreUnavailableError as e:
        log.error("tracer_query_unavailable", query=fn.__name__, error=e.message)
        raise HTTPException(status_code=503, detail=e.message) from e
    except InvalidPaginationError as e:
        raise HTTPException(status_code=400, detail=e.message) from e
    except AggregationError as e:
        log.error("tracer_query_malformed", query=fn.__name__, error=e.message)
        raise HTTPException(status_code=500, detail=e.message) from e
    response.status_code = status_code
    return payload


@router.get("/queue-status/author", response_model=QueueLength)
def author_queue_status(response: Response, svc: TracerService = Depends(get_service)):
    return _call(response, svc.get_author_queue_status)


@router.get("/queue-status/video", response_model=QueueLength)
def video_queue_status(response: Response, svc: TracerService = Depends(get_service)):
    return _call(response, svc.get_video_queue_status)


@router.get("/tasks/exists", response_model=TracerPage)
def exists_tasks(response: Response, page: int = Query(0, ge=0),
                 page_size: int = Query(settings.default_page_size, ge=0, alias="pageSize"),
                 svc: TracerService = Depends(get_service)):
    return _call(response, svc.slice_exists_task, page, page_size)


@router.get("/tasks/progress", response_model=TracerPage)
def progress_tasks(response: Response, page: int = Query(0, ge=0),
                   page_size: int = Query(settings.default_page_size, ge=0, alias="pageSize"),
                   svc: TracerService = Depends(get_service)):
    return _call(response, svc.slice_progress_task, page, page_size)


@router.get("/tasks/spider", response_model=TracerPage)
def spider_tasks(response: Response, page: int = Query(0, ge=0),
                 page_size: int = Query(settings.default_page_size, ge=0, alias="pageSize"),
                 mode: str = Query("all"),
                 svc: TracerService = Depends(get_service)):
    return _call(response, svc.slice_spider_task, page, page_size, mode)


@router.get("/dashboard", response_model=DashboardData)
async def dashboard(response: Response, svc: TracerService = Depends(get_service)):
    payload, status_code = await svc.get_dashboard_data()
    response.status_code = status_code
    return payload
