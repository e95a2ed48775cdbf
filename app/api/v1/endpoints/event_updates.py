"""
Event update submission endpoint.

Members submit their report on an event as a multipart form: text fields
plus photos, an optional video and media photos.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from app.api.deps import get_event_update_store, get_update_media_coordinator
from app.schemas.event_update import EventUpdateCreate, EventUpdateSubmitResponse
from app.utils.validation import read_upload_files
from services.event_update_store import EventUpdateStore
from services.media_ingestion import MediaIngestionCoordinator

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/event_update", response_model=EventUpdateSubmitResponse)
async def submit_event_update(
    event_id: Optional[int] = Form(None, description="Event ID"),
    user_id: Optional[int] = Form(None, description="Submitting user ID"),
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    start_date_time: Optional[str] = Form(None),
    end_date_time: Optional[str] = Form(None),
    issue_date: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    attendees: Optional[str] = Form(None),
    type: Optional[str] = Form(None),
    photos: Optional[List[UploadFile]] = File(None, description="Up to 10 images"),
    video: Optional[List[UploadFile]] = File(None, description="At most one video"),
    media_photos: Optional[List[UploadFile]] = File(None, description="Up to 5 images"),
    store: EventUpdateStore = Depends(get_event_update_store),
    coordinator: MediaIngestionCoordinator = Depends(get_update_media_coordinator)
) -> EventUpdateSubmitResponse:
    """
    Submit an update for an event

    Workflow:
    1. Validates event_id, user_id and the date fields (nothing uploaded yet)
    2. Validates every file slot, then uploads: the video first, photos concurrently
    3. Appends the update row with the media URLs

    A failed photo upload drops that photo; a failed video upload fails the
    request and no row is written.
    """
    record = EventUpdateCreate(
        event_id=event_id,
        user_id=user_id,
        name=name,
        description=description,
        start_date_time=start_date_time,
        end_date_time=end_date_time,
        issue_date=issue_date,
        location=location,
        attendees=attendees,
        type=type,
    )
    store.prepare(record)

    media = await coordinator.ingest({
        "photos": await read_upload_files(photos, coordinator.max_file_size),
        "video": await read_upload_files(video, coordinator.max_file_size),
        "media_photos": await read_upload_files(media_photos, coordinator.max_file_size),
    })

    update_id = store.submit(record, media)
    logger.info(f"Event update {update_id} accepted")

    return EventUpdateSubmitResponse(
        photos=media.photos,
        video=media.video,
        media_photos=media.media_photos
    )
