"""
Tests for player bookings, conflict rules, cancellation and the owner
booking dashboard (updates, stats, analytics, CSV export).
"""
from datetime import date, time, timedelta

import pytest

from models import db
from models.court_booking import CourtBooking
from models.queue_match import QueueMatch
from models.queue_session import QueueSession
from services.analytics import utc_day_start
from services.scheduling import day_of_week


@pytest.fixture
def court(owner, make_court, tomorrow):
    return make_court(owner, hourly_rate=200, hours={day_of_week(tomorrow): ("08:00", "20:00")})


def _book(client, headers, court_id, day, start, end, **extra):
    payload = {"date": day.isoformat(), "start_time": start, "end_time": end}
    payload.update(extra)
    return client.post(f"/courts/{court_id}/bookings", headers=headers, json=payload)


class TestCreateBooking:
    """POST /courts/<court>/bookings"""

    def test_book_open_slot(self, client, court, player, auth_headers, tomorrow):
        resp = _book(client, auth_headers(player), court.id, tomorrow, "09:00", "10:00")
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["status"] == "confirmed"
        assert body["payment_status"] == "reserved"
        assert body["court"]["id"] == court.id
        assert body["user"]["id"] == player.id

    def test_paid_booking(self, client, court, player, auth_headers, tomorrow):
        resp = _book(client, auth_headers(player), court.id, tomorrow, "09:00", "10:00", payment_status="paid")
        assert resp.get_json()["payment_status"] == "paid"

    def test_unknown_payment_status(self, client, court, player, auth_headers, tomorrow):
        resp = _book(client, auth_headers(player), court.id, tomorrow, "09:00", "10:00", payment_status="free")
        assert resp.status_code == 422
        assert "payment_status" in resp.get_json()["errors"]

    def test_outside_opening_hours(self, client, court, player, auth_headers, tomorrow):
        resp = _book(client, auth_headers(player), court.id, tomorrow, "19:00", "21:00")
        assert resp.status_code == 422
        assert resp.get_json()["error"] == "court_closed"

    def test_closed_weekday(self, client, owner, make_court, player, auth_headers, tomorrow):
        court = make_court(owner, hours={(day_of_week(tomorrow) + 1) % 7: ("08:00", "20:00")})
        resp = _book(client, auth_headers(player), court.id, tomorrow, "09:00", "10:00")
        assert resp.get_json()["error"] == "court_closed"

    def test_booking_may_end_at_closing_time(self, client, court, player, auth_headers, tomorrow):
        resp = _book(client, auth_headers(player), court.id, tomorrow, "19:00", "20:00")
        assert resp.status_code == 201

    def test_overlap_rejected(self, client, court, player, make_user, auth_headers, tomorrow):
        assert _book(client, auth_headers(player), court.id, tomorrow, "09:00", "11:00").status_code == 201

        other = auth_headers(make_user())
        for start, end in (("10:00", "12:00"), ("08:00", "09:30"), ("09:30", "10:30"), ("08:00", "12:00")):
            resp = _book(client, other, court.id, tomorrow, start, end)
            assert resp.status_code == 422
            assert resp.get_json()["error"] == "time_slot_unavailable"

    def test_back_to_back_allowed(self, client, court, player, auth_headers, tomorrow):
        headers = auth_headers(player)
        assert _book(client, headers, court.id, tomorrow, "09:00", "10:00").status_code == 201
        assert _book(client, headers, court.id, tomorrow, "10:00", "11:00").status_code == 201
        assert _book(client, headers, court.id, tomorrow, "08:00", "09:00").status_code == 201

    def test_inactive_court(self, client, owner, make_court, player, auth_headers, tomorrow):
        court = make_court(owner, is_active=False, hours={day_of_week(tomorrow): ("08:00", "20:00")})
        resp = _book(client, auth_headers(player), court.id, tomorrow, "09:00", "10:00")
        assert resp.status_code == 422
        assert resp.get_json()["error"] == "court_not_available"

    def test_end_before_start(self, client, court, player, auth_headers, tomorrow):
        resp = _book(client, auth_headers(player), court.id, tomorrow, "11:00", "10:00")
        assert resp.status_code == 422
        assert "end_time" in resp.get_json()["errors"]

    def test_past_date_rejected(self, client, owner, make_court, player, auth_headers):
        yesterday = date.today() - timedelta(days=1)
        court = make_court(owner, hours={day_of_week(yesterday): ("08:00", "20:00")})
        resp = _book(client, auth_headers(player), court.id, yesterday, "09:00", "10:00")
        assert resp.status_code == 422
        assert "date" in resp.get_json()["errors"]

    def test_beyond_advance_window_rejected(self, client, app, owner, make_court, player, auth_headers):
        far = date.today() + timedelta(days=app.config["ADVANCE_BOOKING_DAYS"] + 1)
        court = make_court(owner, hours={day_of_week(far): ("08:00", "20:00")})
        resp = _book(client, auth_headers(player), court.id, far, "09:00", "10:00")
        assert resp.status_code == 422
        assert "date" in resp.get_json()["errors"]

    def test_missing_court(self, client, player, auth_headers, tomorrow):
        resp = _book(client, auth_headers(player), 999, tomorrow, "09:00", "10:00")
        assert resp.status_code == 404

    def test_requires_login(self, client, court, tomorrow):
        resp = client.post(f"/courts/{court.id}/bookings", json={})
        assert resp.status_code == 401


class TestListAndCancel:
    """GET /courts/<court>/bookings, GET /player/bookings, DELETE /bookings/<id>"""

    def test_court_bookings_only_confirmed(self, client, court, player, auth_headers, tomorrow):
        headers = auth_headers(player)
        first = _book(client, headers, court.id, tomorrow, "09:00", "10:00").get_json()
        _book(client, headers, court.id, tomorrow, "11:00", "12:00")
        client.delete(f"/bookings/{first['id']}", headers=headers)

        listed = client.get(f"/courts/{court.id}/bookings?date={tomorrow.isoformat()}", headers=headers).get_json()
        assert [b["start_time"] for b in listed] == ["11:00"]

    def test_cancel_frees_slot(self, client, court, player, make_user, auth_headers, tomorrow):
        booking = _book(client, auth_headers(player), court.id, tomorrow, "09:00", "10:00").get_json()

        resp = client.delete(f"/bookings/{booking['id']}", headers=auth_headers(player))
        assert resp.status_code == 200
        assert resp.get_json()["message"] == "Booking cancelled successfully"
        assert CourtBooking.query.get(booking["id"]).status == "cancelled"

        again = _book(client, auth_headers(make_user()), court.id, tomorrow, "09:00", "10:00")
        assert again.status_code == 201

    def test_court_owner_can_cancel(self, client, court, owner, player, auth_headers, tomorrow):
        booking = _book(client, auth_headers(player), court.id, tomorrow, "09:00", "10:00").get_json()
        assert client.delete(f"/bookings/{booking['id']}", headers=auth_headers(owner)).status_code == 200

    def test_stranger_cannot_cancel(self, client, court, player, make_user, auth_headers, tomorrow):
        booking = _book(client, auth_headers(player), court.id, tomorrow, "09:00", "10:00").get_json()
        resp = client.delete(f"/bookings/{booking['id']}", headers=auth_headers(make_user()))
        assert resp.status_code == 403

    def test_player_bookings_filters(self, client, court, player, auth_headers, tomorrow):
        headers = auth_headers(player)
        kept = _book(client, headers, court.id, tomorrow, "09:00", "10:00").get_json()
        dropped = _book(client, headers, court.id, tomorrow, "12:00", "13:00").get_json()
        client.delete(f"/bookings/{dropped['id']}", headers=headers)

        everything = client.get("/player/bookings", headers=headers).get_json()
        # newest first
        assert [b["id"] for b in everything] == [dropped["id"], kept["id"]]

        upcoming = client.get("/player/bookings?upcoming=true", headers=headers).get_json()
        assert [b["id"] for b in upcoming] == [kept["id"]]

        cancelled = client.get("/player/bookings?status=cancelled", headers=headers).get_json()
        assert [b["id"] for b in cancelled] == [dropped["id"]]


class TestOwnerBookings:
    """/owner/bookings, /owner/stats, /owner/analytics, /owner/reports/export"""

    def test_owner_sees_bookings_on_own_courts(self, client, court, owner, make_user, make_court, player,
                                               auth_headers, tomorrow):
        _book(client, auth_headers(player), court.id, tomorrow, "09:00", "10:00")
        other_court = make_court(make_user("owner"), hours={day_of_week(tomorrow): ("08:00", "20:00")})
        _book(client, auth_headers(player), other_court.id, tomorrow, "09:00", "10:00")

        resp = client.get("/owner/bookings", headers=auth_headers(owner))
        assert resp.status_code == 200
        body = resp.get_json()
        assert len(body) == 1
        assert body[0]["user"]["email"] == player.email

    def test_player_cannot_see_owner_bookings(self, client, player, auth_headers):
        assert client.get("/owner/bookings", headers=auth_headers(player)).status_code == 403

    def test_owner_updates_booking(self, client, court, owner, player, auth_headers, tomorrow):
        booking = _book(client, auth_headers(player), court.id, tomorrow, "09:00", "10:00").get_json()

        resp = client.patch(f"/owner/bookings/{booking['id']}", headers=auth_headers(owner), json={
            "shuttlecock_count": 3, "start_session": True, "payment_status": "paid",
        })
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["shuttlecock_count"] == 3
        assert body["payment_status"] == "paid"
        assert body["started_at"] is not None

    def test_start_session_keeps_first_start(self, client, court, owner, player, auth_headers, tomorrow):
        booking = _book(client, auth_headers(player), court.id, tomorrow, "09:00", "10:00").get_json()
        headers = auth_headers(owner)
        first = client.patch(f"/owner/bookings/{booking['id']}", headers=headers, json={"start_session": True})
        second = client.patch(f"/owner/bookings/{booking['id']}", headers=headers, json={"start_session": True})
        assert first.get_json()["started_at"] == second.get_json()["started_at"]

    def test_negative_shuttlecock_count(self, client, court, owner, player, auth_headers, tomorrow):
        booking = _book(client, auth_headers(player), court.id, tomorrow, "09:00", "10:00").get_json()
        resp = client.patch(f"/owner/bookings/{booking['id']}", headers=auth_headers(owner),
                            json={"shuttlecock_count": -1})
        assert resp.status_code == 422

    def test_other_owner_cannot_update(self, client, court, player, make_user, auth_headers, tomorrow):
        booking = _book(client, auth_headers(player), court.id, tomorrow, "09:00", "10:00").get_json()
        resp = client.patch(f"/owner/bookings/{booking['id']}", headers=auth_headers(make_user("owner")),
                            json={"payment_status": "paid"})
        assert resp.status_code == 403

    def test_stats(self, client, owner, player, make_court, auth_headers):
        today = date.today()
        court = make_court(owner, hourly_rate=200)
        make_court(owner, name="Spare", is_active=False)
        db.session.add_all([
            CourtBooking(court_id=court.id, user_id=player.id, date=today,
                         start_time=time(9, 0), end_time=time(10, 30), status="confirmed"),
            CourtBooking(court_id=court.id, user_id=player.id, date=today,
                         start_time=time(11, 0), end_time=time(12, 0), status="cancelled"),
            CourtBooking(court_id=court.id, user_id=player.id, date=today + timedelta(days=2),
                         start_time=time(9, 0), end_time=time(10, 0), status="confirmed"),
        ])
        session = QueueSession(owner_id=owner.id, date=today, start_time=time(18, 0))
        db.session.add(session)
        db.session.flush()
        db.session.add(QueueMatch(queue_session_id=session.id, court_id=court.id, status="completed",
                                  start_time=utc_day_start(today) + timedelta(hours=12)))
        db.session.commit()

        stats = client.get("/owner/stats", headers=auth_headers(owner)).get_json()
        assert stats["total_courts"] == 2
        assert stats["active_courts"] == 1
        assert stats["total_bookings"] == 2
        assert stats["today_bookings"] == 1
        assert stats["today_revenue"] == 300.0
        assert stats["today_games_played"] == 2
        assert stats["today_cancelled"] == 1
        assert stats["upcoming_bookings"] == 2

    def test_daily_analytics(self, client, owner, player, make_court, auth_headers):
        today = date.today()
        yesterday = today - timedelta(days=1)
        court = make_court(owner, hourly_rate=100)
        db.session.add_all([
            CourtBooking(court_id=court.id, user_id=player.id, date=yesterday,
                         start_time=time(9, 0), end_time=time(11, 0), status="confirmed"),
            CourtBooking(court_id=court.id, user_id=player.id, date=today,
                         start_time=time(9, 0), end_time=time(10, 0), status="cancelled"),
        ])
        db.session.commit()

        resp = client.get("/owner/analytics", headers=auth_headers(owner))
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data == [
            {"date": today.isoformat(), "revenue": 0, "games_played": 0, "cancelled": 1},
            {"date": yesterday.isoformat(), "revenue": 200.0, "games_played": 1, "cancelled": 0},
        ]

    def test_analytics_without_courts(self, client, owner, auth_headers):
        assert client.get("/owner/analytics", headers=auth_headers(owner)).get_json() == {"data": []}

    def test_analytics_bad_date(self, client, owner, auth_headers):
        resp = client.get("/owner/analytics?start_date=yesterday", headers=auth_headers(owner))
        assert resp.status_code == 422

    def test_export_csv(self, client, owner, make_user, make_court, auth_headers):
        customer = make_user(name="Jo, Jr.", email="jo@example.com")
        today = date.today()
        court = make_court(owner, name="Court A", hourly_rate=150)
        db.session.add_all([
            CourtBooking(court_id=court.id, user_id=customer.id, date=today,
                         start_time=time(9, 0), end_time=time(11, 0), status="confirmed"),
            CourtBooking(court_id=court.id, user_id=customer.id, date=today,
                         start_time=time(12, 0), end_time=time(13, 0), status="cancelled"),
        ])
        db.session.commit()

        start = (today - timedelta(days=1)).isoformat()
        end = today.isoformat()
        resp = client.get(f"/owner/reports/export?start_date={start}&end_date={end}", headers=auth_headers(owner))
        assert resp.status_code == 200
        assert resp.mimetype == "text/csv"
        assert f'filename="report_{start}_{end}.csv"' in resp.headers["Content-Disposition"]

        lines = resp.get_data(as_text=True).split("\n")
        assert lines[0] == '"Date","Court","Customer","Email","Start","End","Status","Revenue (PHP)"'
        assert lines[1] == f'"{end}","Court A","Jo, Jr.","jo@example.com","09:00","11:00","confirmed","300.0"'
        assert lines[2] == f'"{end}","Court A","Jo, Jr.","jo@example.com","12:00","13:00","cancelled","0"'
        assert len(lines) == 3
