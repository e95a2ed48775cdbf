from fastapi import APIRouter, Depends
import logging

from app.api.deps import get_report_aggregator, get_view_tracker
from app.middleware.auth import require_api_key
from app.schemas.event_update import EventUpdateResponse
from app.schemas.report import EventReportResponse
from services.reporting import ReportAggregator
from services.view_tracking import ViewTracker

router = APIRouter(dependencies=[Depends(require_api_key)])
logger = logging.getLogger(__name__)


@router.get("/event_report/{event_id}", response_model=EventReportResponse)
async def get_event_report(
    event_id: int,
    aggregator: ReportAggregator = Depends(get_report_aggregator)
):
    """
    Participation report for an event (admin)

    Lists every entitled non-admin member with their view and update counts.
    Returns 404 if the event does not exist.
    """
    return aggregator.report(event_id)


@router.get("/event_user_details/{event_id}/{user_id}")
async def get_user_event_details(
    event_id: int,
    user_id: int,
    tracker: ViewTracker = Depends(get_view_tracker)
):
    """
    Latest update a member submitted for an event (admin)

    Returns an empty object when the member has not submitted one.
    """
    latest = tracker.latest_update(event_id, user_id)
    if latest is None:
        return {}
    return EventUpdateResponse.model_validate(latest).model_dump(mode="json")
