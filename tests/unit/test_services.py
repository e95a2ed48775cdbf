"""
Unit tests for the relational services against in-memory SQLite.

Tests cover:
- Event creation, broadcast entitlements and frozen status
- Event listing with the per-viewer update flag
- Idempotent view tracking and latest-update ordering
- Participation report counts
- PIN login and visit logging
"""

from datetime import date, datetime, timedelta
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from app.schemas.event import EventFields
from app.schemas.event_update import EventUpdateCreate
from app.utils.dates import utcnow
from core.exceptions import AuthError, NotFoundError, StorageError, ValidationError
from models.event import Event, EventEntitlement
from models.event_update import EventUpdate
from models.event_view import EventView
from models.user import UserVisit
from services.auth_service import AuthService
from services.event_catalog import EventCatalog, derive_status
from services.event_update_store import EventUpdateStore
from services.media_ingestion import MediaResult
from services.reporting import ReportAggregator
from services.view_tracking import ViewTracker

NOW = datetime(2024, 6, 1, 12, 0, 0)


def members(db, make_users, count=5):
    return make_users(db, [(f"10{i:02d}", f"member{i}", "Member") for i in range(count)])


def new_event(db, **overrides):
    values = {"name": "Rally", "start_date_time": NOW, "status": "ongoing", "photos": []}
    values.update(overrides)
    event = Event(**values)
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


class TestDeriveStatus:

    def test_future_start_is_ongoing(self):
        assert derive_status(NOW + timedelta(seconds=1), NOW) == "ongoing"

    def test_start_equal_to_now_is_previous(self):
        assert derive_status(NOW, NOW) == "previous"

    def test_missing_start_is_previous(self):
        assert derive_status(None, NOW) == "previous"


class TestEventCatalog:

    def test_broadcast_to_all_entitles_non_admins(self, session, make_users):
        make_users(session, [("9999", "admin", "Admin")])
        members(session, make_users, 5)
        catalog = EventCatalog(session, broadcast_all_targets=("all", "All Jila Addhyaksh"))

        event_id = catalog.create_event(
            EventFields(name="Rally", start_date_time="2030-01-01T10:00:00Z"),
            broadcast_target="all",
            now=NOW
        )

        entitled = session.query(EventEntitlement).filter(EventEntitlement.event_id == event_id).count()
        assert entitled == 5
        assert catalog.get_event(event_id).status == "ongoing"

    def test_legacy_broadcast_label(self, session, make_users):
        members(session, make_users, 2)
        catalog = EventCatalog(session, broadcast_all_targets=("all", "All Jila Addhyaksh"))

        event_id = catalog.create_event(
            EventFields(name="Rally", start_date_time="2020-01-01 10:00:00"),
            broadcast_target="all jila addhyaksh",
            now=NOW
        )

        assert session.query(EventEntitlement).filter(EventEntitlement.event_id == event_id).count() == 2
        assert catalog.get_event(event_id).status == "previous"

    def test_null_designation_counts_as_member(self, session, make_users):
        make_users(session, [("2001", "nobody", None)])
        catalog = EventCatalog(session)

        event_id = catalog.create_event(EventFields(name="Rally", start_date_time="2030-01-01"), "all", now=NOW)

        assert session.query(EventEntitlement).filter(EventEntitlement.event_id == event_id).count() == 1

    def test_other_target_creates_no_entitlements(self, session, make_users):
        members(session, make_users, 3)
        catalog = EventCatalog(session)

        event_id = catalog.create_event(EventFields(name="Rally", start_date_time="2030-01-01"), "district-7", now=NOW)

        assert session.query(EventEntitlement).filter(EventEntitlement.event_id == event_id).count() == 0

    def test_media_urls_stored(self, session):
        catalog = EventCatalog(session)

        event_id = catalog.create_event(
            EventFields(name="Rally", start_date_time="2030-01-01"),
            media=MediaResult(photos=["https://blobs.test/a.jpg"], video="https://blobs.test/v.mp4"),
            now=NOW
        )

        event = catalog.get_event(event_id)
        assert event.photos == ["https://blobs.test/a.jpg"]
        assert event.video == "https://blobs.test/v.mp4"

    def test_year_only_start_is_ongoing(self, session):
        catalog = EventCatalog(session)

        event_id = catalog.create_event(EventFields(name="Rally", start_date_time="2030"), now=NOW)

        event = catalog.get_event(event_id)
        assert event.start_date_time == datetime(2030, 1, 1, 0, 0, 0)
        assert event.status == "ongoing"

    def test_timestamp_start_rejected(self, session):
        with pytest.raises(ValidationError):
            EventCatalog(session).create_event(EventFields(name="Rally", start_date_time="1717236000"), now=NOW)

        assert session.query(Event).count() == 0

    def test_missing_name_rejected(self, session):
        with pytest.raises(ValidationError):
            EventCatalog(session).create_event(EventFields(start_date_time="2030-01-01"))

    def test_storage_failure_rolls_back(self, session, make_users):
        members(session, make_users, 2)
        catalog = EventCatalog(session)

        with patch.object(session, "commit", side_effect=OperationalError("COMMIT", {}, Exception("gone"))):
            with pytest.raises(StorageError):
                catalog.create_event(EventFields(name="Rally", start_date_time="2030-01-01"), "all", now=NOW)

        assert session.query(Event).count() == 0
        assert session.query(EventEntitlement).count() == 0

    def test_list_events_with_viewer_flag(self, session):
        first = new_event(session, name="First")
        second = new_event(session, name="Second")
        new_event(session, name="Old", status="previous")
        session.add(EventUpdate(event_id=first.id, user_id=42, update_date=date(2024, 6, 1), photos=[], media_photos=[]))
        session.commit()

        events = EventCatalog(session).list_events("ongoing", viewer_id=42)

        assert [e["name"] for e in events] == ["First", "Second"]
        assert events[0]["userHasUpdated"] is True
        assert events[1]["userHasUpdated"] is False
        assert events[0]["start_date_time"] == "2024-06-01 12:00:00"
        assert second.id == events[1]["id"]

    def test_list_events_without_viewer_has_no_flag(self, session):
        new_event(session)

        events = EventCatalog(session).list_events("ongoing")

        assert "userHasUpdated" not in events[0]


class TestEventUpdateStore:

    def test_submit_appends_rows(self, session):
        store = EventUpdateStore(session)
        record = EventUpdateCreate(event_id=1, user_id=2, attendees="40", issue_date="2024-06-01T10:00:00.500Z")

        first = store.submit(record, MediaResult(photos=["https://blobs.test/p.jpg"]))
        second = store.submit(record)

        rows = session.query(EventUpdate).order_by(EventUpdate.id).all()
        assert [row.id for row in rows] == [first, second]
        assert rows[0].photos == ["https://blobs.test/p.jpg"]
        assert rows[0].issue_date == datetime(2024, 6, 1, 10, 0, 0)
        assert rows[1].photos == []

    def test_missing_ids_rejected(self, session):
        with pytest.raises(ValidationError):
            EventUpdateStore(session).submit(EventUpdateCreate(event_id=1))

    def test_invalid_date_rejected(self, session):
        with pytest.raises(ValidationError):
            EventUpdateStore.prepare(EventUpdateCreate(event_id=1, user_id=2, start_date_time="yesterday"))


class TestViewTracker:

    def test_record_view_is_idempotent(self, session):
        tracker = ViewTracker(session)

        tracker.record_view(1, 2)
        tracker.record_view(1, 2)
        tracker.record_view(1, 3)

        assert session.query(EventView).filter(EventView.event_id == 1, EventView.user_id == 2).count() == 1
        assert session.query(EventView).count() == 2

    def test_record_view_without_insert_ignore(self, session):
        """Dialects lacking insert-ignore fall back to a plain insert; duplicates stay a no-op."""
        tracker = ViewTracker(session)
        dialect = session.get_bind().dialect

        with patch.object(dialect, "name", "mssql"):
            tracker.record_view(1, 2)
            tracker.record_view(1, 2)
            tracker.record_view(1, 3)

        assert session.query(EventView).filter(EventView.event_id == 1, EventView.user_id == 2).count() == 1
        assert session.query(EventView).count() == 2

    def test_latest_update_orders_by_date_then_id(self, session):
        session.add_all([
            EventUpdate(event_id=1, user_id=2, update_date=date(2024, 6, 3), name="later day", photos=[], media_photos=[]),
            EventUpdate(event_id=1, user_id=2, update_date=date(2024, 6, 5), name="same day 1", photos=[], media_photos=[]),
            EventUpdate(event_id=1, user_id=2, update_date=date(2024, 6, 5), name="same day 2", photos=[], media_photos=[]),
            EventUpdate(event_id=1, user_id=2, update_date=date(2024, 6, 4), name="inserted last", photos=[], media_photos=[]),
        ])
        session.commit()

        assert ViewTracker(session).latest_update(1, 2).name == "same day 2"

    def test_latest_update_none(self, session):
        assert ViewTracker(session).latest_update(1, 2) is None


class TestReportAggregator:

    def test_report_counts(self, session, make_users):
        admin, = make_users(session, [("9999", "admin", "Admin")])
        users = members(session, make_users, 3)
        event = new_event(session)
        session.add_all(EventEntitlement(event_id=event.id, user_id=u.id) for u in [admin, *users])
        session.add_all(EventView(event_id=event.id, user_id=u.id, view_date_time=NOW) for u in users)
        session.add_all(
            EventUpdate(event_id=event.id, user_id=u.id, update_date=date(2024, 6, 1), photos=[], media_photos=[])
            for u in users for _ in range(2)
        )
        # Activity on another event must not be counted
        session.add(EventView(event_id=event.id + 100, user_id=users[0].id, view_date_time=NOW))
        session.commit()

        report = ReportAggregator(session).report(event.id)

        assert [p.user_id for p in report.users] == [u.id for u in users]
        assert all(p.viewed_count == 1 and p.updated_count == 2 for p in report.users)
        assert report.event.id == event.id

    def test_report_includes_inactive_members(self, session, make_users):
        user, = members(session, make_users, 1)
        event = new_event(session)
        session.add(EventEntitlement(event_id=event.id, user_id=user.id))
        session.commit()

        participants = ReportAggregator(session).participants(event.id)

        assert participants == [{
            "user_id": user.id,
            "name": "member0",
            "designation": "Member",
            "viewed_count": 0,
            "updated_count": 0,
        }]

    def test_unknown_event(self, session):
        with pytest.raises(NotFoundError):
            ReportAggregator(session).report(12345)


class TestAuthService:

    def test_login_logs_visit(self, session, make_users):
        user, = make_users(session, [("1234", "Asha", "Member")])
        auth = AuthService(session)

        assert auth.login(1234).id == user.id

        visits = session.query(UserVisit).all()
        assert len(visits) == 1
        assert visits[0].month == utcnow().strftime("%Y-%m")

    @pytest.mark.parametrize("pin", [None, "", "   "])
    def test_missing_pin(self, session, pin):
        with pytest.raises(ValidationError):
            AuthService(session).login(pin)

    def test_unknown_pin(self, session, make_users):
        make_users(session, [("1234", "Asha", "Member")])

        with pytest.raises(AuthError):
            AuthService(session).login("4321")

        assert session.query(UserVisit).count() == 0

    def test_visit_log_failure_does_not_fail_login(self, session, make_users):
        user, = make_users(session, [("1234", "Asha", "Member")])
        auth = AuthService(session)

        with patch.object(session, "commit", side_effect=OperationalError("INSERT", {}, Exception("locked"))):
            assert auth.login("1234").id == user.id

        assert session.query(UserVisit).count() == 0

    def test_visit_summary(self, session, make_users):
        user, = make_users(session, [("1234", "Asha", "Member")])
        auth = AuthService(session)

        assert auth.visit_summary(user.id) == {"last_visit": None, "monthly_count": 0}

        auth.login("1234")
        auth.login("1234")
        summary = auth.visit_summary(user.id)

        assert summary["monthly_count"] == 2
        assert len(summary["last_visit"]) == len("YYYY-MM-DD HH:MM:SS")
