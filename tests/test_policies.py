"""
Unit tests for the pure decision code: authorization, validation,
transitions, errors, paging and notification rendering.
"""

import json
import logging
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import (
    AuthenticationError,
    HasDependentsError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
    Violation,
)
from app.core.logging_config import JSONFormatter
from app.core.pagination import Page, clamp_per_page
from app.core.security import create_access_token, decode_token, get_password_hash, verify_password
from app.models.destination import format_location
from app.services.authorization import (
    Actor,
    authorize,
    can_change_status,
    can_edit_trip_request,
    can_manage_destination,
    can_manage_traveler,
    can_view_trip_request,
)
from app.services.integrity import is_email_conflict
from app.services.notifications import NotificationDispatcher, TripRequestStatusChanged, render_message
from app.services.trip_requests import can_transition
from app.services.validators import (
    destination_violations,
    trip_schedule_violations,
    trip_schedule_update_violations,
)

NOW = datetime(2030, 1, 1, 12, 0, 0)

ADMIN = Actor(id=1, is_admin=True)
OWNER = Actor(id=2)
STRANGER = Actor(id=3)


def trip(status="requested", owner_id=2):
    return SimpleNamespace(owning_user_id=owner_id, status=status)


class TestAuthorization:
    def test_view(self):
        assert can_view_trip_request(ADMIN, trip())
        assert can_view_trip_request(OWNER, trip())
        assert not can_view_trip_request(STRANGER, trip())

    def test_owner_edits_only_while_requested(self):
        assert can_edit_trip_request(OWNER, trip("requested"))
        assert not can_edit_trip_request(OWNER, trip("approved"))
        assert not can_edit_trip_request(OWNER, trip("cancelled"))

    def test_admin_is_not_owner(self):
        assert not can_edit_trip_request(ADMIN, trip())

    def test_admin_only_capabilities(self):
        for predicate in (can_change_status, can_manage_traveler, can_manage_destination):
            assert predicate(ADMIN)
            assert not predicate(OWNER)

    def test_authorize_raises(self):
        authorize(True)
        with pytest.raises(UnauthorizedError):
            authorize(False)


class TestTransitions:
    @pytest.mark.parametrize("current,target", [
        ("requested", "approved"),
        ("requested", "cancelled"),
        ("approved", "cancelled"),
    ])
    def test_allowed(self, current, target):
        assert can_transition(current, target)

    @pytest.mark.parametrize("current,target", [
        ("cancelled", "approved"),
        ("cancelled", "requested"),
        ("approved", "requested"),
        ("requested", "requested"),
    ])
    def test_refused(self, current, target):
        assert not can_transition(current, target)


class TestScheduleValidation:
    def test_valid_schedule(self):
        assert trip_schedule_violations(NOW + timedelta(days=1), NOW + timedelta(days=2), True, now=NOW) == []

    def test_departure_must_be_future(self):
        violations = trip_schedule_violations(NOW, NOW + timedelta(days=2), True, now=NOW)
        assert violations == [Violation("departure_at", "after_now", "")]

    def test_return_must_follow_departure(self):
        departure = NOW + timedelta(days=1)
        violations = trip_schedule_violations(departure, departure, True, now=NOW)
        assert violations == [Violation("return_at", "after_departure", "")]

    def test_missing_dates(self):
        violations = trip_schedule_violations(None, None, True, now=NOW)
        assert [v.field for v in violations] == ["departure_at", "return_at"]

    def test_aware_datetimes_compared_in_utc(self):
        from datetime import timezone
        departure = (NOW + timedelta(hours=1)).replace(tzinfo=timezone(timedelta(hours=3)))
        # 13:00+03:00 is 10:00 UTC, before NOW
        violations = trip_schedule_violations(departure, NOW + timedelta(days=1), True, now=NOW)
        assert [v.rule for v in violations] == ["after_now"]

    def test_update_merges_with_stored_values(self):
        current = {"departure_at": NOW + timedelta(days=5), "return_at": NOW + timedelta(days=7)}

        assert trip_schedule_update_violations(current, {"return_at": NOW + timedelta(days=9)}, now=NOW) == []

        violations = trip_schedule_update_violations(current, {"return_at": NOW + timedelta(days=4)}, now=NOW)
        assert [v.field for v in violations] == ["return_at"]

    def test_untouched_past_departure_does_not_block_update(self):
        current = {"departure_at": NOW - timedelta(days=1), "return_at": NOW + timedelta(days=1)}

        assert trip_schedule_update_violations(current, {"return_at": NOW + timedelta(days=2)}, now=NOW) == []

        violations = trip_schedule_update_violations(current, {"departure_at": NOW - timedelta(hours=1)}, now=NOW)
        assert [v.rule for v in violations] == ["after_now"]


class TestDestinationValidation:
    def test_blank_fields(self):
        violations = destination_violations({"city": " ", "state": None, "country": ""})
        assert [v.field for v in violations] == ["city", "country"]

    def test_state_optional(self):
        assert destination_violations({"city": "Paris", "state": None, "country": "França"}) == []

    def test_full_location(self):
        assert format_location("Curitiba", "PR", "Brasil") == "Curitiba, PR, Brasil"
        assert format_location("Paris", None, "França") == "Paris, França"
        assert format_location("Paris", "", "França") == "Paris, França"


class TestErrors:
    def test_validation_error_payload(self):
        error = ValidationError([Violation("city", "required", "The city field is required.")])
        assert error.status_code == 422
        assert error.to_dict() == {
            "code": "VALIDATION_ERROR",
            "message": "The given data was invalid.",
            "details": {"errors": [{"field": "city", "rule": "required", "message": "The city field is required."}]},
        }

    def test_status_codes(self):
        assert AuthenticationError().status_code == 401
        assert UnauthorizedError().status_code == 403
        assert NotFoundError("Traveler", 5).status_code == 404
        assert HasDependentsError("Destination", 3).details == {"count": 3}

    def test_email_conflict_detection(self):
        duplicate = IntegrityError("INSERT INTO users", {}, Exception("UNIQUE constraint failed: users.email"))
        orphan = IntegrityError("INSERT INTO travelers", {}, Exception("FOREIGN KEY constraint failed"))

        assert is_email_conflict(duplicate)
        assert not is_email_conflict(orphan)


class TestPaging:
    def test_last_page(self):
        assert Page(items=[], total=31, page=1, per_page=15).last_page == 3
        assert Page(items=[], total=30, page=1, per_page=15).last_page == 2
        assert Page(items=[], total=0, page=1, per_page=15).last_page == 1

    def test_clamp(self):
        assert clamp_per_page(None) == 15
        assert clamp_per_page(1000) == 100
        assert clamp_per_page(0) == 1


class TestSecurity:
    def test_password_hash_roundtrip(self):
        hashed = get_password_hash("supersecret1")
        assert verify_password("supersecret1", hashed)
        assert not verify_password("supersecret2", hashed)

    def test_token_claims(self):
        payload = decode_token(create_access_token(42, True))
        assert payload["sub"] == "42"
        assert payload["is_admin"] is True

    def test_tampered_token(self):
        token = create_access_token(42, False)
        with pytest.raises(AuthenticationError):
            decode_token(token[:-4] + "abcd")


class TestNotifications:
    def event(self, new_status="approved"):
        return TripRequestStatusChanged(
            trip_request_id=7,
            user_id=2,
            destination="Lisboa, Portugal",
            old_status="requested",
            new_status=new_status,
        )

    def test_render_message(self):
        assert render_message(self.event("approved")) == "Your trip request to Lisboa, Portugal has been approved."
        assert render_message(self.event("cancelled")) == "Your trip request to Lisboa, Portugal has been cancelled."
        assert render_message(self.event("requested")) is None

    async def test_dispatch_swallows_and_logs_failures(self, caplog):
        class Broken(NotificationDispatcher):
            async def deliver(self, event):
                raise ConnectionError("smtp unreachable")

        with caplog.at_level(logging.ERROR, logger="app.services.notifications"):
            await Broken().dispatch(self.event())

        record = caplog.records[-1]
        assert record.getMessage() == "Notification delivery failed"
        assert record.trip_request_id == 7
        assert record.exc_info is not None


def test_json_formatter_includes_extra_fields():
    record = logging.LogRecord("app.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    record.trip_request_id = 3

    data = json.loads(JSONFormatter().format(record))

    assert data["message"] == "hello world"
    assert data["level"] == "INFO"
    assert data["trip_request_id"] == 3
