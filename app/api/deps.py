"""
API Dependencies
Dependency injection functions for FastAPI endpoints
"""
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from core.config import Settings
from core.database import get_db
from services.auth_service import AuthService
from services.event_catalog import EventCatalog
from services.event_update_store import EventUpdateStore
from services.media_ingestion import (
    EVENT_CREATE_SLOTS,
    EVENT_UPDATE_SLOTS,
    MediaIngestionCoordinator,
)
from services.reporting import ReportAggregator
from services.view_tracking import ViewTracker


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_blob_store(request: Request):
    return request.app.state.blob_store


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(db)


def get_event_catalog(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings)
) -> EventCatalog:
    return EventCatalog(
        db,
        admin_designation=settings.ADMIN_DESIGNATION,
        broadcast_all_targets=settings.get_broadcast_all_targets()
    )


def get_event_update_store(db: Session = Depends(get_db)) -> EventUpdateStore:
    return EventUpdateStore(db)


def get_view_tracker(db: Session = Depends(get_db)) -> ViewTracker:
    return ViewTracker(db)


def get_report_aggregator(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings)
) -> ReportAggregator:
    return ReportAggregator(db, admin_designation=settings.ADMIN_DESIGNATION)


def get_update_media_coordinator(
    blob_store=Depends(get_blob_store),
    settings: Settings = Depends(get_app_settings)
) -> MediaIngestionCoordinator:
    """Coordinator for update submissions: photos, video and media_photos"""
    return MediaIngestionCoordinator(blob_store, settings.max_upload_bytes, EVENT_UPDATE_SLOTS)


def get_event_media_coordinator(
    blob_store=Depends(get_blob_store),
    settings: Settings = Depends(get_app_settings)
) -> MediaIngestionCoordinator:
    """Coordinator for admin event creation: photos and video"""
    return MediaIngestionCoordinator(blob_store, settings.max_upload_bytes, EVENT_CREATE_SLOTS)
