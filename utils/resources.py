"""
JSON shapes returned by the API, one function per model.
"""
from utils.validation import format_dt, format_time


def user_json(u, with_email=True):
    out = {"id": u.id, "name": u.name}
    if with_email:
        out.update({
            "email": u.email,
            "role": u.role,
            "level": round(u.level, 1) if u.level is not None else None,
            "created_at": format_dt(u.created_at),
            "updated_at": format_dt(u.updated_at),
        })
    return out


def court_json(c, with_owner=False):
    out = {
        "id": c.id,
        "owner_id": c.owner_id,
        "name": c.name,
        "is_active": c.is_active,
        "hourly_rate": c.hourly_rate,
        "reservation_fee_percentage": c.reservation_fee_percentage or 0,
        "created_at": format_dt(c.created_at),
        "updated_at": format_dt(c.updated_at),
    }
    if with_owner and c.owner is not None:
        out["owner"] = {"id": c.owner.id, "name": c.owner.name, "email": c.owner.email}
    return out


def availability_json(a):
    return {
        "id": a.id,
        "court_id": a.court_id,
        "day_of_week": a.day_of_week,
        "open_time": format_time(a.open_time),
        "close_time": format_time(a.close_time),
        "created_at": format_dt(a.created_at),
        "updated_at": format_dt(a.updated_at),
    }


def booking_json(b, with_court=True, with_user=False):
    out = {
        "id": b.id,
        "court_id": b.court_id,
        "user_id": b.user_id,
        "date": b.date.isoformat(),
        "start_time": format_time(b.start_time),
        "end_time": format_time(b.end_time),
        "status": b.status,
        "shuttlecock_count": b.shuttlecock_count,
        "started_at": format_dt(b.started_at),
        "payment_status": b.payment_status or "reserved",
        "created_at": format_dt(b.created_at),
        "updated_at": format_dt(b.updated_at),
    }
    if with_court and b.court is not None:
        out["court"] = {"id": b.court.id, "name": b.court.name}
    if with_user and b.user is not None:
        out["user"] = {"id": b.user.id, "name": b.user.name, "email": b.user.email}
    return out


def queue_session_json(s):
    return {
        "id": s.id,
        "owner_id": s.owner_id,
        "owner": {"id": s.owner.id, "name": s.owner.name} if s.owner else None,
        "date": s.date.isoformat(),
        "start_time": format_time(s.start_time),
        "end_time": format_time(s.end_time),
        "status": s.status,
        "created_at": format_dt(s.created_at),
        "updated_at": format_dt(s.updated_at),
    }


def queue_entry_json(e):
    return {
        "id": e.id,
        "queue_session_id": e.queue_session_id,
        "user_id": e.user_id,
        "user": {"id": e.user.id, "name": e.user.name} if e.user else None,
        "guest_name": e.guest_name,
        "display_name": e.display_name,
        "level": round(e.level, 1),
        "phone": e.phone,
        "notes": e.notes,
        "status": e.status,
        "games_played": e.games_played,
        "joined_at": format_dt(e.joined_at),
    }


def queue_match_json(m, with_players=True):
    out = {
        "id": m.id,
        "queue_session_id": m.queue_session_id,
        "court_id": m.court_id,
        "court": {"id": m.court.id, "name": m.court.name} if m.court else None,
        "status": m.status,
        "start_time": format_dt(m.start_time),
        "end_time": format_dt(m.end_time),
        "shuttlecocks_used": m.shuttlecocks_used,
    }
    if with_players:
        players = sorted(m.players, key=lambda p: (p.team or "A", p.id))
        out["players"] = [
            {
                "id": p.id,
                "queue_entry_id": p.queue_entry_id,
                "team": p.team,
                "queue_entry": queue_entry_json(p.queue_entry) if p.queue_entry else None,
            }
            for p in players
        ]
    return out
