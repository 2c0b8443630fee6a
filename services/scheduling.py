"""
Court availability and booking conflict rules.

Weekdays follow the 0=Sunday .. 6=Saturday convention used by the
availability table. Overlap is half-open: a booking ending at 10:00 does
not clash with one starting at 10:00.
"""
from datetime import date, datetime, time, timedelta

from flask import current_app

from models import db
from models.court import Court
from models.court_availability import CourtAvailability
from models.court_booking import CourtBooking
from utils.errors import CourtClosedError, CourtNotAvailableError, TimeSlotUnavailableError

SLOT_LENGTH = timedelta(hours=1)


def day_of_week(day: date) -> int:
    return day.isoweekday() % 7


def overlaps(start_a: time, end_a: time, start_b: time, end_b: time) -> bool:
    return start_a < end_b and end_a > start_b


def availability_for(court: Court, day: date):
    return CourtAvailability.query.filter_by(court_id=court.id, day_of_week=day_of_week(day)).first()


def confirmed_bookings(court: Court, day: date):
    return (
        CourtBooking.query
        .filter_by(court_id=court.id, date=day, status="confirmed")
        .order_by(CourtBooking.start_time.asc())
        .all()
    )


def available_time_slots(court: Court, day: date) -> list:
    """
    Hourly slots from opening time for the given date, each flagged
    available unless it overlaps a confirmed booking. A slot may start
    less than an hour before closing time.
    """
    availability = availability_for(court, day)
    if availability is None:
        return []

    bookings = confirmed_bookings(court, day)

    slots = []
    current = datetime.combine(day, availability.open_time)
    close = datetime.combine(day, availability.close_time)
    while current < close:
        slot_end = current + SLOT_LENGTH
        start_t = current.time()
        # a slot running past midnight ends at 23:59:59 for comparison purposes
        end_t = slot_end.time() if slot_end.date() == day else time.max

        is_available = not any(
            overlaps(start_t, end_t, b.start_time, b.end_time) for b in bookings
        )
        slots.append({
            "start": current.strftime("%H:%M"),
            "end": slot_end.strftime("%H:%M"),
            "available": is_available,
        })
        current = slot_end

    return slots


def has_overlap(court: Court, day: date, start: time, end: time) -> bool:
    return db.session.query(
        CourtBooking.query
        .filter(
            CourtBooking.court_id == court.id,
            CourtBooking.date == day,
            CourtBooking.status == "confirmed",
            CourtBooking.start_time < end,
            CourtBooking.end_time > start,
        )
        .exists()
    ).scalar()


def ensure_bookable(court: Court, day: date, start: time, end: time):
    """Raise the first rule a new booking would break."""
    if not court.is_open_for_play:
        raise CourtNotAvailableError("Court is not available for booking.")

    availability = availability_for(court, day)
    if (
        availability is None
        or availability.open_time > start
        or availability.close_time < end
    ):
        raise CourtClosedError("Court is closed during this time.")

    if has_overlap(court, day, start, end):
        raise TimeSlotUnavailableError("Time slot is already booked.")


def create_booking(court: Court, user, day: date, start: time, end: time, payment_status=None) -> CourtBooking:
    ensure_bookable(court, day, start, end)

    booking = CourtBooking(
        court_id=court.id,
        user_id=user.id,
        date=day,
        start_time=start,
        end_time=end,
        status="confirmed",
        payment_status=payment_status or "reserved",
    )
    db.session.add(booking)
    db.session.commit()

    current_app.logger.info(
        "Booking %s created: court=%s date=%s %s-%s",
        booking.id, court.id, day.isoformat(), start.strftime("%H:%M"), end.strftime("%H:%M"),
    )
    return booking


def booking_window(today: date = None) -> tuple[date, date]:
    """First and last date a player may book, inclusive."""
    today = today or date.today()
    days = current_app.config.get("ADVANCE_BOOKING_DAYS", 7)
    return today, today + timedelta(days=days)
