"""
Owner-facing booking statistics, daily analytics and CSV export.

Revenue is booked hours multiplied by the court's hourly rate; queue
matches count as games played but earn no revenue here.
"""
import csv
import io
from datetime import date, datetime, time, timedelta, timezone

from models.court import Court
from models.court_booking import CourtBooking
from models.queue_match import QueueMatch

REPORT_HEADER = ["Date", "Court", "Customer", "Email", "Start", "End", "Status", "Revenue (PHP)"]


def owner_court_ids(owner) -> list:
    return [row.id for row in Court.query.filter_by(owner_id=owner.id).with_entities(Court.id).all()]


def booking_hours(booking: CourtBooking) -> float:
    start = datetime.combine(booking.date, booking.start_time)
    end = datetime.combine(booking.date, booking.end_time)
    return (end - start).total_seconds() / 3600


def booking_revenue(booking: CourtBooking) -> float:
    rate = booking.court.hourly_rate if booking.court else None
    return booking_hours(booking) * (rate or 0)


def _confirmed(court_ids):
    return CourtBooking.query.filter(
        CourtBooking.court_id.in_(court_ids),
        CourtBooking.status == "confirmed",
    )


def utc_day_start(day: date) -> datetime:
    """Local midnight of ``day`` as the naive UTC value match times are stored in."""
    return datetime.combine(day, time.min).astimezone(timezone.utc).replace(tzinfo=None)


def local_day(moment: datetime) -> date:
    """Local calendar date of a naive UTC timestamp."""
    return moment.replace(tzinfo=timezone.utc).astimezone().date()


def _matches_between(court_ids, start: date, end: date):
    return QueueMatch.query.filter(
        QueueMatch.court_id.in_(court_ids),
        QueueMatch.start_time >= utc_day_start(start),
        QueueMatch.start_time < utc_day_start(end + timedelta(days=1)),
    )


def _completed_matches_on(court_ids, day: date) -> int:
    return _matches_between(court_ids, day, day).filter(QueueMatch.status == "completed").count()


def owner_stats(owner, today: date = None) -> dict:
    today = today or date.today()
    week_start = today - timedelta(days=today.weekday())
    month_start = today.replace(day=1)

    court_ids = owner_court_ids(owner)
    active_courts = Court.query.filter(Court.owner_id == owner.id, Court.is_active.is_(True)).count()

    today_bookings = _confirmed(court_ids).filter(CourtBooking.date == today).all()
    today_cancelled = CourtBooking.query.filter(
        CourtBooking.court_id.in_(court_ids),
        CourtBooking.date == today,
        CourtBooking.status == "cancelled",
    ).count()

    return {
        "total_courts": len(court_ids),
        "active_courts": active_courts,
        "total_bookings": _confirmed(court_ids).count(),
        "today_bookings": len(today_bookings),
        "today_revenue": round(sum(booking_revenue(b) for b in today_bookings), 2),
        "today_games_played": len(today_bookings) + _completed_matches_on(court_ids, today),
        "today_cancelled": today_cancelled,
        "this_week_bookings": _confirmed(court_ids).filter(CourtBooking.date >= week_start).count(),
        "this_month_bookings": _confirmed(court_ids).filter(CourtBooking.date >= month_start).count(),
        "upcoming_bookings": _confirmed(court_ids).filter(CourtBooking.date >= today).count(),
    }


def default_range(start: date = None, end: date = None) -> tuple[date, date]:
    today = date.today()
    return start or (today - timedelta(days=30)), end or today


def _bookings_between(court_ids, start: date, end: date):
    return (
        CourtBooking.query
        .filter(
            CourtBooking.court_id.in_(court_ids),
            CourtBooking.date >= start,
            CourtBooking.date <= end,
        )
        .order_by(CourtBooking.date.asc(), CourtBooking.start_time.asc())
        .all()
    )


def daily_analytics(owner, start: date, end: date) -> list:
    court_ids = owner_court_ids(owner)
    if not court_ids:
        return []

    days = {}

    def bucket(day: date) -> dict:
        key = day.isoformat()
        if key not in days:
            days[key] = {"date": key, "revenue": 0, "games_played": 0, "cancelled": 0}
        return days[key]

    for booking in _bookings_between(court_ids, start, end):
        row = bucket(booking.date)
        if booking.status == "confirmed":
            row["revenue"] += booking_revenue(booking)
            row["games_played"] += 1
        elif booking.status == "cancelled":
            row["cancelled"] += 1

    for match in _matches_between(court_ids, start, end).all():
        row = bucket(local_day(match.start_time))
        if match.status == "completed":
            row["games_played"] += 1

    for row in days.values():
        row["revenue"] = round(row["revenue"], 2)

    return sorted(days.values(), key=lambda r: r["date"], reverse=True)


def export_report_csv(owner, start: date, end: date) -> str:
    """Every cell is quoted; rows are separated by a bare newline."""
    court_ids = owner_court_ids(owner)
    bookings = _bookings_between(court_ids, start, end) if court_ids else []

    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(REPORT_HEADER)
    for b in bookings:
        revenue = round(booking_revenue(b), 2) if b.status == "confirmed" else 0
        writer.writerow([
            b.date.isoformat(),
            b.court.name if b.court else "",
            b.user.name if b.user else "",
            b.user.email if b.user else "",
            b.start_time.strftime("%H:%M"),
            b.end_time.strftime("%H:%M"),
            b.status,
            str(revenue),
        ])
    return buf.getvalue().rstrip("\n")
