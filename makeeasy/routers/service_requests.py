from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from loguru import logger

from makeeasy.crud.bookings import booking_crud
from makeeasy.crud.service_requests import service_request_crud
from makeeasy.crud.users import user_crud
from makeeasy.dates import utcnow
from makeeasy.deps import CurrentUser, get_current_user, get_file_store, require_admin
from makeeasy.lifecycle import (
    SERVICE_REQUEST_TRANSITIONS,
    SERVICEABLE_RENTAL_STATUSES,
    ServiceRequestAction,
    ServiceRequestStatus,
    transition,
)
from makeeasy.models import Priority, ServiceRequestType
from makeeasy.schemas.common import Envelope, Listing, Page, PageParams
from makeeasy.schemas.service_request import (
    AdminServiceRequestFilters,
    AssignRequest,
    RateRequest,
    ResolveRequest,
    ScheduleVisit,
    ServiceRequestFilters,
    ServiceRequestResponse,
    ServiceRequestStats,
)
from makeeasy.storage import FileStore

router = APIRouter(prefix="/service-requests", tags=["service-requests"])

MAX_IMAGES = 5


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail="Service request not found"
    )


async def _get_request(request_id: UUID) -> ServiceRequestResponse:
    request = await service_request_crud.get_by(id=request_id)
    if not request:
        raise _not_found()
    return request


async def _own_request(
    request_id: UUID, current_user: CurrentUser, action: str
) -> ServiceRequestResponse:
    request = await _get_request(request_id)
    if request.user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Not authorized to {action} this service request",
        )
    return request


async def _save(request_id: UUID, **data) -> ServiceRequestResponse:
    request = await service_request_crud.update_by(request_id, **data)
    if not request:
        raise _not_found()
    return request


async def _store_images(files: FileStore, images: list[UploadFile]) -> list[str]:
    if len(images) > MAX_IMAGES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"At most {MAX_IMAGES} images per upload",
        )
    urls: list[str] = []
    try:
        for image in images:
            urls.append(await files.save(image, "service-requests"))
    except Exception:
        for url in urls:
            files.remove(url)
        raise
    return urls


# ---------------------------------------------------------------------------
# Customer endpoints
# ---------------------------------------------------------------------------


@router.post(
    "/",
    response_model=Envelope[ServiceRequestResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_service_request(
    booking_id: UUID = Form(...),
    request_type: ServiceRequestType = Form(..., alias="type"),
    title: str = Form(..., min_length=1, max_length=200),
    description: str = Form(..., min_length=1),
    priority: Priority = Form(Priority.MEDIUM),
    images: list[UploadFile] = File(default=[]),
    current_user: CurrentUser = Depends(get_current_user),
    files: FileStore = Depends(get_file_store),
):
    booking = await booking_crud.get_by(id=booking_id)
    if not booking:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found"
        )
    if booking.user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to create service request for this booking",
        )
    if booking.rental_status not in SERVICEABLE_RENTAL_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Service requests can only be created for active rentals",
        )

    urls = await _store_images(files, images)
    try:
        request = await service_request_crud.create_request(
            booking_id=booking_id,
            user_id=current_user.id,
            product_id=booking.product_id,
            type=request_type,
            title=title,
            description=description,
            priority=priority,
            images=urls,
        )
    except Exception:
        for url in urls:
            files.remove(url)
        raise
    logger.info("Service request created id={} booking_id={}", request.id, booking_id)
    return Envelope(message="Service request created successfully", data=request)


@router.get("/", response_model=Listing[ServiceRequestResponse])
async def list_my_service_requests(
    filters: ServiceRequestFilters = Depends(),
    current_user: CurrentUser = Depends(get_current_user),
):
    requests = await service_request_crud.list_for_user(current_user.id, filters)
    return Listing.of(requests)


# Admin collection routes are declared ahead of /{request_id}.
@router.get(
    "/admin/all",
    response_model=Page[ServiceRequestResponse],
    dependencies=[Depends(require_admin)],
)
async def list_all_service_requests(filters: AdminServiceRequestFilters = Depends()):
    requests, total = await service_request_crud.list_all(filters)
    return Page.of(requests, total, PageParams(page=filters.page, limit=filters.limit))


@router.get(
    "/admin/stats",
    response_model=Envelope[ServiceRequestStats],
    dependencies=[Depends(require_admin)],
)
async def service_request_stats():
    return Envelope(data=await service_request_crud.stats())


@router.get("/{request_id}", response_model=Envelope[ServiceRequestResponse])
async def get_service_request(
    request_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
):
    request = await _get_request(request_id)
    if request.user_id != current_user.id and not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to access this service request",
        )
    return Envelope(data=request)


@router.put("/{request_id}", response_model=Envelope[ServiceRequestResponse])
async def update_service_request(
    request_id: UUID,
    title: str | None = Form(None, min_length=1, max_length=200),
    description: str | None = Form(None, min_length=1),
    priority: Priority | None = Form(None),
    images: list[UploadFile] = File(default=[]),
    current_user: CurrentUser = Depends(get_current_user),
    files: FileStore = Depends(get_file_store),
):
    request = await _own_request(request_id, current_user, "update")
    if request.status != ServiceRequestStatus.OPEN:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Can only update open service requests",
        )

    data: dict = {}
    if title is not None:
        data["title"] = title
    if description is not None:
        data["description"] = description
    if priority is not None:
        data["priority"] = priority
    urls = await _store_images(files, images)
    if urls:
        data["images"] = [*request.images, *urls]

    updated = await _save(request_id, **data)
    return Envelope(message="Service request updated", data=updated)


@router.delete("/{request_id}", response_model=Envelope[ServiceRequestResponse])
async def cancel_service_request(
    request_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
):
    request = await _own_request(request_id, current_user, "cancel")
    target = transition(
        SERVICE_REQUEST_TRANSITIONS, request.status, ServiceRequestAction.CANCEL
    )
    updated = await _save(request_id, status=target, closed_at=utcnow())
    logger.info("Service request cancelled id={}", request_id)
    return Envelope(message="Service request cancelled", data=updated)


@router.post("/{request_id}/rate", response_model=Envelope[ServiceRequestResponse])
async def rate_service_request(
    request_id: UUID,
    payload: RateRequest,
    current_user: CurrentUser = Depends(get_current_user),
):
    if payload.rating is None or not 1 <= payload.rating <= 5:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please provide a valid rating (1-5)",
        )
    request = await _get_request(request_id)
    if request.user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized"
        )
    if request.status != ServiceRequestStatus.RESOLVED:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Can only rate resolved service requests",
        )
    updated = await _save(request_id, rating=payload.rating, feedback=payload.feedback)
    return Envelope(message="Thank you for your feedback", data=updated)


# ---------------------------------------------------------------------------
# Admin workflow
# ---------------------------------------------------------------------------


@router.post(
    "/admin/{request_id}/assign",
    response_model=Envelope[ServiceRequestResponse],
    dependencies=[Depends(require_admin)],
)
async def assign_service_request(request_id: UUID, payload: AssignRequest):
    if payload.assigned_to is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please provide user ID to assign",
        )
    if not await user_crud.exists(id=payload.assigned_to):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Assignee not found"
        )
    request = await _get_request(request_id)
    target = transition(
        SERVICE_REQUEST_TRANSITIONS, request.status, ServiceRequestAction.ASSIGN
    )
    updated = await _save(
        request_id,
        assigned_to_id=payload.assigned_to,
        assigned_at=utcnow(),
        status=target,
    )
    logger.info("Service request assigned id={} to={}", request_id, payload.assigned_to)
    return Envelope(message="Service request assigned successfully", data=updated)


@router.put(
    "/admin/{request_id}/schedule",
    response_model=Envelope[ServiceRequestResponse],
    dependencies=[Depends(require_admin)],
)
async def schedule_visit(request_id: UUID, payload: ScheduleVisit):
    if payload.scheduled_date is None or payload.scheduled_time_slot is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please provide both date and time slot",
        )
    request = await _get_request(request_id)
    target = transition(
        SERVICE_REQUEST_TRANSITIONS, request.status, ServiceRequestAction.SCHEDULE_VISIT
    )
    updated = await _save(
        request_id,
        scheduled_date=payload.scheduled_date,
        scheduled_time_slot=payload.scheduled_time_slot,
        status=target,
    )
    return Envelope(message="Visit scheduled successfully", data=updated)


@router.put(
    "/admin/{request_id}/in-progress",
    response_model=Envelope[ServiceRequestResponse],
    dependencies=[Depends(require_admin)],
)
async def mark_in_progress(request_id: UUID):
    request = await _get_request(request_id)
    target = transition(
        SERVICE_REQUEST_TRANSITIONS, request.status, ServiceRequestAction.START
    )
    updated = await _save(request_id, status=target)
    return Envelope(message="Service request marked as in progress", data=updated)


@router.put(
    "/admin/{request_id}/resolve",
    response_model=Envelope[ServiceRequestResponse],
    dependencies=[Depends(require_admin)],
)
async def resolve_service_request(request_id: UUID, payload: ResolveRequest):
    if not payload.resolution:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please provide resolution details",
        )
    request = await _get_request(request_id)
    target = transition(
        SERVICE_REQUEST_TRANSITIONS, request.status, ServiceRequestAction.RESOLVE
    )
    updated = await _save(
        request_id, resolution=payload.resolution, resolved_at=utcnow(), status=target
    )
    logger.info("Service request resolved id={}", request_id)
    return Envelope(message="Service request resolved", data=updated)


@router.put(
    "/admin/{request_id}/close",
    response_model=Envelope[ServiceRequestResponse],
    dependencies=[Depends(require_admin)],
)
async def close_service_request(request_id: UUID):
    request = await _get_request(request_id)
    target = transition(
        SERVICE_REQUEST_TRANSITIONS, request.status, ServiceRequestAction.CLOSE
    )
    updated = await _save(request_id, status=target, closed_at=utcnow())
    return Envelope(message="Service request closed", data=updated)
