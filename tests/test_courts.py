"""
Tests for owner court management, weekly availability and the player
court listing with hourly slots.
"""
from datetime import time

import pytest

from models import db
from models.court_booking import CourtBooking
from services.scheduling import day_of_week as weekday


class TestOwnerCourts:
    """GET/POST /courts, PATCH /courts/<id>"""

    def test_owner_creates_court(self, client, owner, auth_headers):
        resp = client.post("/courts", headers=auth_headers(owner), json={
            "name": "Center Court", "hourly_rate": 250, "reservation_fee_percentage": 10,
        })
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["name"] == "Center Court"
        assert body["owner_id"] == owner.id
        assert body["is_active"] is True
        assert body["hourly_rate"] == 250

    def test_player_cannot_create_court(self, client, player, auth_headers):
        resp = client.post("/courts", headers=auth_headers(player), json={"name": "Nope"})
        assert resp.status_code == 403
        assert resp.get_json()["error"] == "forbidden"

    def test_court_validation(self, client, owner, auth_headers):
        resp = client.post("/courts", headers=auth_headers(owner), json={
            "name": "x" * 51, "hourly_rate": -1, "reservation_fee_percentage": 150,
        })
        assert resp.status_code == 422
        errors = resp.get_json()["errors"]
        assert set(errors) == {"name", "hourly_rate", "reservation_fee_percentage"}

    @pytest.mark.parametrize("value", ["nan", "inf", "-inf", "1e400"])
    def test_non_finite_numbers_rejected(self, client, owner, auth_headers, value):
        resp = client.post("/courts", headers=auth_headers(owner), json={
            "name": "Court", "hourly_rate": value, "reservation_fee_percentage": value,
        })
        assert resp.status_code == 422
        assert set(resp.get_json()["errors"]) == {"hourly_rate", "reservation_fee_percentage"}

    def test_array_body_is_validation_error(self, client, owner, auth_headers):
        resp = client.post("/courts", headers=auth_headers(owner), json=[1])
        assert resp.status_code == 422
        assert "name" in resp.get_json()["errors"]

    def test_owner_lists_only_own_courts(self, client, owner, make_user, make_court, auth_headers):
        other = make_user("owner")
        make_court(owner, name="Mine")
        make_court(other, name="Theirs")

        resp = client.get("/courts", headers=auth_headers(owner))
        assert [c["name"] for c in resp.get_json()] == ["Mine"]

    def test_superadmin_lists_all_courts_with_owner(self, client, owner, superadmin, make_court, auth_headers):
        make_court(owner, name="Mine")
        resp = client.get("/courts", headers=auth_headers(superadmin))
        body = resp.get_json()
        assert len(body) == 1
        assert body[0]["owner"]["id"] == owner.id

    def test_superadmin_creates_court_for_owner(self, client, owner, superadmin, auth_headers):
        resp = client.post("/courts", headers=auth_headers(superadmin), json={"name": "Given", "owner_id": owner.id})
        assert resp.status_code == 201
        assert resp.get_json()["owner_id"] == owner.id

    def test_update_court(self, client, owner, make_court, auth_headers):
        court = make_court(owner)
        resp = client.patch(f"/courts/{court.id}", headers=auth_headers(owner), json={
            "name": "Renamed", "is_active": False,
        })
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["name"] == "Renamed"
        assert body["is_active"] is False

    def test_update_other_owners_court_forbidden(self, client, owner, make_user, make_court, auth_headers):
        court = make_court(make_user("owner"))
        resp = client.patch(f"/courts/{court.id}", headers=auth_headers(owner), json={"name": "Mine now"})
        assert resp.status_code == 403

    def test_update_missing_court(self, client, owner, auth_headers):
        resp = client.patch("/courts/999", headers=auth_headers(owner), json={"name": "Ghost"})
        assert resp.status_code == 404
        assert resp.get_json()["error"] == "not_found"


class TestAvailability:
    """/owner/courts/<court>/availability"""

    def test_create_and_list(self, client, owner, make_court, auth_headers):
        court = make_court(owner)
        headers = auth_headers(owner)

        resp = client.post(f"/owner/courts/{court.id}/availability", headers=headers, json={
            "day_of_week": 1, "open_time": "08:00", "close_time": "22:00",
        })
        assert resp.status_code == 201
        assert resp.get_json()["open_time"] == "08:00"

        listed = client.get(f"/owner/courts/{court.id}/availability", headers=headers).get_json()
        assert [a["day_of_week"] for a in listed] == [1]

    def test_close_must_follow_open(self, client, owner, make_court, auth_headers):
        court = make_court(owner)
        resp = client.post(f"/owner/courts/{court.id}/availability", headers=auth_headers(owner), json={
            "day_of_week": 2, "open_time": "18:00", "close_time": "09:00",
        })
        assert resp.status_code == 422
        assert "close_time" in resp.get_json()["errors"]

    def test_day_of_week_range(self, client, owner, make_court, auth_headers):
        court = make_court(owner)
        resp = client.post(f"/owner/courts/{court.id}/availability", headers=auth_headers(owner), json={
            "day_of_week": 7, "open_time": "08:00", "close_time": "09:00",
        })
        assert resp.status_code == 422
        assert "day_of_week" in resp.get_json()["errors"]

    @pytest.mark.parametrize("day", ["--5", "²", "١", "Monday"])
    def test_malformed_day_of_week(self, client, owner, make_court, auth_headers, day):
        court = make_court(owner)
        resp = client.post(f"/owner/courts/{court.id}/availability", headers=auth_headers(owner), json={
            "day_of_week": day, "open_time": "08:00", "close_time": "09:00",
        })
        assert resp.status_code == 422
        assert "day_of_week" in resp.get_json()["errors"]

    def test_bad_time_format(self, client, owner, make_court, auth_headers):
        court = make_court(owner)
        resp = client.post(f"/owner/courts/{court.id}/availability", headers=auth_headers(owner), json={
            "day_of_week": 1, "open_time": "8am", "close_time": "09:00",
        })
        assert resp.status_code == 422
        assert "open_time" in resp.get_json()["errors"]

    def test_one_window_per_weekday(self, client, owner, make_court, auth_headers):
        court = make_court(owner, hours={3: ("08:00", "12:00")})
        resp = client.post(f"/owner/courts/{court.id}/availability", headers=auth_headers(owner), json={
            "day_of_week": 3, "open_time": "13:00", "close_time": "20:00",
        })
        assert resp.status_code == 422
        assert "day_of_week" in resp.get_json()["errors"]

    def test_update_and_delete(self, client, owner, make_court, auth_headers):
        court = make_court(owner, hours={4: ("08:00", "12:00")})
        availability = court.availabilities[0]
        headers = auth_headers(owner)

        resp = client.put(
            f"/owner/courts/{court.id}/availability/{availability.id}",
            headers=headers,
            json={"close_time": "16:30"},
        )
        assert resp.status_code == 200
        assert resp.get_json()["close_time"] == "16:30"

        resp = client.delete(f"/owner/courts/{court.id}/availability/{availability.id}", headers=headers)
        assert resp.status_code == 204
        assert client.get(f"/owner/courts/{court.id}/availability", headers=headers).get_json() == []

    def test_availability_of_other_court_forbidden(self, client, owner, make_court, auth_headers):
        court_a = make_court(owner, name="A")
        court_b = make_court(owner, name="B", hours={1: ("08:00", "12:00")})
        availability = court_b.availabilities[0]

        resp = client.put(
            f"/owner/courts/{court_a.id}/availability/{availability.id}",
            headers=auth_headers(owner),
            json={"close_time": "16:00"},
        )
        assert resp.status_code == 403

    def test_non_owner_forbidden(self, client, owner, player, make_court, auth_headers):
        court = make_court(owner)
        resp = client.get(f"/owner/courts/{court.id}/availability", headers=auth_headers(player))
        assert resp.status_code == 403

    def test_superadmin_manages_any_court(self, client, owner, superadmin, make_court, auth_headers):
        court = make_court(owner)
        resp = client.post(f"/owner/courts/{court.id}/availability", headers=auth_headers(superadmin), json={
            "day_of_week": 0, "open_time": "06:00", "close_time": "10:00",
        })
        assert resp.status_code == 201


class TestPlayerCourts:
    """GET /player/courts?date="""

    def test_requires_date(self, client, player, auth_headers):
        resp = client.get("/player/courts", headers=auth_headers(player))
        assert resp.status_code == 422
        assert "date" in resp.get_json()["errors"]

    def test_lists_hourly_slots(self, client, owner, player, make_court, auth_headers, tomorrow):
        court = make_court(owner, hours={weekday(tomorrow): ("08:00", "11:00")})
        db.session.add(CourtBooking(
            court_id=court.id, user_id=player.id, date=tomorrow,
            start_time=time(9, 0), end_time=time(10, 0), status="confirmed",
        ))
        db.session.commit()

        resp = client.get(f"/player/courts?date={tomorrow.isoformat()}", headers=auth_headers(player))
        assert resp.status_code == 200
        body = resp.get_json()
        assert len(body) == 1
        assert body[0]["slots"] == [
            {"start": "08:00", "end": "09:00", "available": True},
            {"start": "09:00", "end": "10:00", "available": False},
            {"start": "10:00", "end": "11:00", "available": True},
        ]

    def test_cancelled_booking_frees_slot(self, client, owner, player, make_court, auth_headers, tomorrow):
        court = make_court(owner, hours={weekday(tomorrow): ("08:00", "09:00")})
        db.session.add(CourtBooking(
            court_id=court.id, user_id=player.id, date=tomorrow,
            start_time=time(8, 0), end_time=time(9, 0), status="cancelled",
        ))
        db.session.commit()

        body = client.get(f"/player/courts?date={tomorrow.isoformat()}", headers=auth_headers(player)).get_json()
        assert body[0]["slots"][0]["available"] is True

    def test_last_slot_may_run_past_closing(self, client, owner, player, make_court, auth_headers, tomorrow):
        make_court(owner, hours={weekday(tomorrow): ("08:00", "09:30")})
        body = client.get(f"/player/courts?date={tomorrow.isoformat()}", headers=auth_headers(player)).get_json()
        assert [s["start"] for s in body[0]["slots"]] == ["08:00", "09:00"]
        assert body[0]["slots"][-1]["end"] == "10:00"

    def test_skips_inactive_and_closed_courts(self, client, owner, player, make_court, auth_headers, tomorrow):
        make_court(owner, name="Open", hours={weekday(tomorrow): ("08:00", "10:00")})
        make_court(owner, name="Inactive", is_active=False, hours={weekday(tomorrow): ("08:00", "10:00")})
        make_court(owner, name="Closed that day", hours={(weekday(tomorrow) + 1) % 7: ("08:00", "10:00")})

        body = client.get(f"/player/courts?date={tomorrow.isoformat()}", headers=auth_headers(player)).get_json()
        assert [c["name"] for c in body] == ["Open"]
