"""API content: public submission and gallery, admin moderation and edits."""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from showcase.container import Services
from showcase.dependencies import get_services, require_admin
from showcase.errors import NotFound, StoreUnavailable, ValidationError
from showcase.logging_config import get_logger
from showcase.schemas.auth import Principal
from showcase.schemas.common import ErrorResponse
from showcase.schemas.content import (
    ContentDeleteResponse,
    ContentItemRecord,
    ContentStatus,
    ContentSubmission,
    ContentSubmitResponse,
    ContentUpdate,
    ContentUpdateResponse,
    ModerationResponse,
    RejectRequest,
    StatusUpdateRequest,
)
from showcase.services.content_repository import validate_submission, validate_update
from showcase.services.moderation_service import ModerationOutcome
from showcase.services.upload_service import PLACEHOLDER_THUMBNAIL

router = APIRouter(
    prefix="/api/content",
    tags=["content"],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
logger = get_logger(__name__)


def _http_error(e: Exception) -> HTTPException:
    """Map a service error to the HTTP status the client sees."""
    if isinstance(e, NotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Content not found")
    if isinstance(e, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Content store unavailable")


async def _store_thumbnail(services: Services, thumbnail: Optional[UploadFile]) -> Optional[str]:
    if thumbnail is None or not thumbnail.filename:
        return None
    data = await thumbnail.read()
    return await services.uploads.save_image(thumbnail.filename, thumbnail.content_type, data)


def _moderation_response(message: str, outcome: ModerationOutcome) -> ModerationResponse:
    return ModerationResponse(message=message, content=outcome.item, statistics=outcome.statistics)


@router.post("/submit", response_model=ContentSubmitResponse, status_code=status.HTTP_201_CREATED)
async def post_content_submit(
    title: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    author: Optional[str] = Form(None),
    url: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    services: Services = Depends(get_services),
) -> ContentSubmitResponse:
    """Public submission; lands in pending. No thumbnail -> placeholder image."""
    try:
        submission = ContentSubmission(title=title, category=category, author=author, url=url)
        validate_submission(submission)
        submission.thumbnail_url = await _store_thumbnail(services, thumbnail) or PLACEHOLDER_THUMBNAIL
        item = await services.repository.create(submission)
    except (ValidationError, StoreUnavailable) as e:
        raise _http_error(e)
    return ContentSubmitResponse(message="Content submitted successfully", content=item)


async def _list(services: Services, content_status: Optional[ContentStatus]) -> List[ContentItemRecord]:
    try:
        return await services.repository.get_by_status(content_status)
    except StoreUnavailable as e:
        raise _http_error(e)


@router.get("/approved", response_model=List[ContentItemRecord])
async def get_content_approved(services: Services = Depends(get_services)) -> List[ContentItemRecord]:
    """Public gallery."""
    return await _list(services, ContentStatus.APPROVED)


@router.get("/pending", response_model=List[ContentItemRecord])
async def get_content_pending(
    services: Services = Depends(get_services),
    _admin: Principal = Depends(require_admin),
) -> List[ContentItemRecord]:
    return await _list(services, ContentStatus.PENDING)


@router.get("/rejected", response_model=List[ContentItemRecord])
async def get_content_rejected(
    services: Services = Depends(get_services),
    _admin: Principal = Depends(require_admin),
) -> List[ContentItemRecord]:
    return await _list(services, ContentStatus.REJECTED)


@router.get("", response_model=List[ContentItemRecord])
async def get_content_all(
    services: Services = Depends(get_services),
    _admin: Principal = Depends(require_admin),
) -> List[ContentItemRecord]:
    """Every item regardless of status, newest first."""
    return await _list(services, None)


@router.get("/{item_id}", response_model=ContentItemRecord)
async def get_content_item(
    item_id: str,
    services: Services = Depends(get_services),
    _admin: Principal = Depends(require_admin),
) -> ContentItemRecord:
    try:
        return await services.repository.get(item_id)
    except (NotFound, StoreUnavailable) as e:
        raise _http_error(e)


@router.put("/{item_id}/approve", response_model=ModerationResponse)
async def put_content_approve(
    item_id: str,
    services: Services = Depends(get_services),
    admin: Principal = Depends(require_admin),
) -> ModerationResponse:
    try:
        outcome = await services.moderation.approve(item_id, actor=admin.username)
    except (NotFound, StoreUnavailable) as e:
        raise _http_error(e)
    return _moderation_response("Content approved successfully", outcome)


@router.put("/{item_id}/reject", response_model=ModerationResponse)
async def put_content_reject(
    item_id: str,
    payload: Optional[RejectRequest] = None,
    services: Services = Depends(get_services),
    admin: Principal = Depends(require_admin),
) -> ModerationResponse:
    reason = payload.reason if payload is not None else None
    try:
        outcome = await services.moderation.reject(item_id, reason=reason, actor=admin.username)
    except (NotFound, StoreUnavailable) as e:
        raise _http_error(e)
    return _moderation_response("Content rejected successfully", outcome)


@router.put("/{item_id}/status", response_model=ModerationResponse)
async def put_content_status(
    item_id: str,
    payload: StatusUpdateRequest,
    services: Services = Depends(get_services),
    admin: Principal = Depends(require_admin),
) -> ModerationResponse:
    """Generic transition; any status may move to any other."""
    try:
        outcome = await services.moderation.set_status(item_id, payload.status, actor=admin.username)
    except (NotFound, ValidationError, StoreUnavailable) as e:
        raise _http_error(e)
    return _moderation_response(f"Content status updated to {outcome.item.status}", outcome)


@router.put("/{item_id}", response_model=ContentUpdateResponse)
async def put_content_item(
    item_id: str,
    title: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    author: Optional[str] = Form(None),
    url: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    services: Services = Depends(get_services),
    admin: Principal = Depends(require_admin),
) -> ContentUpdateResponse:
    """Admin edit; omitted fields keep their value, a new thumbnail replaces the old one."""
    try:
        changes = ContentUpdate(title=title, category=category, author=author, url=url)
        validate_update(changes)
        await services.repository.get(item_id)
        changes.thumbnail_url = await _store_thumbnail(services, thumbnail)
        item = await services.repository.update_fields(item_id, changes)
    except (NotFound, ValidationError, StoreUnavailable) as e:
        raise _http_error(e)
    logger.info("content.edited_by", item_id=item_id, actor=admin.username)
    return ContentUpdateResponse(message="Content updated successfully", content=item)


@router.delete("/{item_id}", response_model=ContentDeleteResponse)
async def delete_content_item(
    item_id: str,
    services: Services = Depends(get_services),
    admin: Principal = Depends(require_admin),
) -> ContentDeleteResponse:
    try:
        item = await services.repository.delete(item_id)
    except (NotFound, StoreUnavailable) as e:
        raise _http_error(e)
    logger.info("content.deleted_by", item_id=item_id, actor=admin.username)
    return ContentDeleteResponse(message="Content deleted successfully", deleted_content=item)
