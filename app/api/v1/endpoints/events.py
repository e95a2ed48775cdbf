from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from typing import Any, Dict, List, Optional
import logging

from app.api.deps import get_event_catalog, get_event_media_coordinator, get_view_tracker
from app.middleware.auth import require_api_key
from app.schemas.event import EventCreateResponse, EventFields, EventStatus, EventViewRequest
from app.utils.validation import read_upload_files
from services.event_catalog import EventCatalog
from services.media_ingestion import MediaIngestionCoordinator
from services.view_tracking import ViewTracker

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/events")
async def list_events(
    status: EventStatus = Query(..., description="ongoing or previous"),
    user_id: Optional[int] = Query(None, description="Viewer to flag already-updated events for"),
    catalog: EventCatalog = Depends(get_event_catalog)
) -> List[Dict[str, Any]]:
    """
    List events by status

    Query params:
    - status: ongoing or previous
    - user_id: when given, each event carries userHasUpdated
    """
    return catalog.list_events(status, viewer_id=user_id)


@router.post("/event_view")
async def mark_event_viewed(
    view: EventViewRequest,
    tracker: ViewTracker = Depends(get_view_tracker)
):
    """
    Mark an event as viewed

    Idempotent: repeating the call for the same user and event is a no-op.
    """
    tracker.record_view(view.event_id, view.user_id)
    return {"success": True}


@router.post(
    "/event_add",
    response_model=EventCreateResponse,
    dependencies=[Depends(require_api_key)]
)
async def add_event(
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    start_date_time: Optional[str] = Form(None),
    end_date_time: Optional[str] = Form(None),
    issue_date: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    type: Optional[str] = Form(None),
    user: Optional[str] = Form(None, description="Broadcast target, e.g. 'all'"),
    photos: Optional[List[UploadFile]] = File(None, description="Up to 10 images"),
    video: Optional[List[UploadFile]] = File(None, description="At most one video"),
    catalog: EventCatalog = Depends(get_event_catalog),
    coordinator: MediaIngestionCoordinator = Depends(get_event_media_coordinator)
):
    """
    Create a new event (admin)

    Workflow:
    1. Validates the text fields
    2. Uploads photos and video to the blob store
    3. Creates the event with its frozen status
    4. Entitles every non-admin user when the target is a broadcast-to-all label
    """
    fields = EventFields(
        name=name,
        description=description,
        start_date_time=start_date_time,
        end_date_time=end_date_time,
        issue_date=issue_date,
        location=location,
        type=type,
    )
    catalog.prepare(fields)

    media = await coordinator.ingest({
        "photos": await read_upload_files(photos, coordinator.max_file_size),
        "video": await read_upload_files(video, coordinator.max_file_size),
    })

    event_id = catalog.create_event(fields, broadcast_target=user, media=media)
    return EventCreateResponse(event_id=event_id)
