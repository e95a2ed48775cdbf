from fastapi import APIRouter
from app.api.v1.endpoints import auth, events, event_updates, reports

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(auth.router, tags=["auth"])
api_router.include_router(events.router, tags=["events"])
api_router.include_router(event_updates.router, tags=["event updates"])
api_router.include_router(reports.router, tags=["reports"])
