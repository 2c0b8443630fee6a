"""
Walk-in queue: sessions, entries, court board and doubles matches.
"""
from datetime import datetime

from flask import current_app

from models import db
from models.court import Court
from models.queue_entry import QueueEntry
from models.queue_match import QueueMatch
from models.queue_match_player import QueueMatchPlayer
from models.queue_session import QueueSession
from models.user import User
from utils.errors import CourtNotAvailableError, InvalidTeamAssignmentError, MatchNotActiveError, ValidationError
from utils.resources import queue_entry_json, queue_match_json, queue_session_json

DEFAULT_LEVEL = 3.0


def create_session(data: dict, user: User) -> QueueSession:
    """
    Owners always own the sessions they open; everyone else must say
    which owner's courts the session runs on.
    """
    owner_id = user.id if user.role == "owner" else data.get("owner_id")
    if not owner_id:
        raise ValidationError(
            {"owner_id": ["owner_id is required for queue_master"]},
            message="owner_id is required for queue_master",
        )

    if user.role != "owner":
        owner = User.query.get(owner_id)
        if owner is None:
            raise ValidationError({"owner_id": ["The selected owner_id is invalid."]})

    session = QueueSession(
        owner_id=owner_id,
        date=data["date"],
        start_time=data["start_time"],
        end_time=data.get("end_time"),
        status="upcoming",
    )
    db.session.add(session)
    db.session.commit()
    return session


def _owner_courts_query(session: QueueSession):
    return Court.query.filter(Court.owner_id == session.owner_id, Court.active_filter())


def active_matches(session: QueueSession):
    return (
        QueueMatch.query
        .filter_by(queue_session_id=session.id, status="active")
        .order_by(QueueMatch.id.asc())
        .all()
    )


def available_courts(session: QueueSession) -> list:
    """Active courts of the session owner with no active match in this session."""
    busy = db.select(QueueMatch.court_id).where(
        QueueMatch.queue_session_id == session.id,
        QueueMatch.status == "active",
    )
    return (
        _owner_courts_query(session)
        .filter(Court.id.not_in(busy))
        .order_by(Court.id.asc())
        .all()
    )


def is_court_available(court_id: int, session: QueueSession) -> bool:
    return any(c.id == court_id for c in available_courts(session))


def split_teams(match: QueueMatch) -> tuple[list, list]:
    """Players of a match as (team A, team B), ordered by team then id."""
    players = sorted(match.players, key=lambda p: (p.team or "A", p.id))
    team_a, team_b = [], []
    for index, player in enumerate(players):
        team = (player.team or "").upper()
        if not team:
            # rows written before teams existed: first half is A
            team = "A" if index < len(players) / 2 else "B"
        (team_a if team == "A" else team_b).append(player)
    return team_a, team_b


def courts_with_status(session: QueueSession) -> list:
    courts = _owner_courts_query(session).order_by(Court.id.asc()).all()

    by_court = {}
    for match in active_matches(session):
        team_a, team_b = split_teams(match)
        names_a = [p.queue_entry.display_name for p in team_a if p.queue_entry and p.queue_entry.display_name]
        names_b = [p.queue_entry.display_name for p in team_b if p.queue_entry and p.queue_entry.display_name]
        by_court[match.court_id] = {
            "id": match.id,
            "players": names_a + names_b,
            "teamA": names_a,
            "teamB": names_b,
        }

    return [
        {
            "id": c.id,
            "name": c.name,
            "status": "in-use" if c.id in by_court else "available",
            "match": by_court.get(c.id),
        }
        for c in courts
    ]


def completed_matches_count(session: QueueSession) -> int:
    return QueueMatch.query.filter_by(queue_session_id=session.id, status="completed").count()


def session_entries(session: QueueSession) -> list:
    return (
        QueueEntry.query
        .filter_by(queue_session_id=session.id)
        .order_by(QueueEntry.joined_at.asc(), QueueEntry.id.asc())
        .all()
    )


def create_entry(session: QueueSession, data: dict) -> QueueEntry:
    has_user = data.get("user_id") is not None
    has_guest = data.get("guest_name") is not None and data.get("level") is not None
    if has_user == has_guest:
        raise ValidationError(
            {"user_id": ["Provide either user_id or both guest_name and level."]},
            message="Provide either user_id or both guest_name and level.",
        )

    if has_user:
        user = User.query.get(data["user_id"])
        if user is None:
            raise ValidationError({"user_id": ["The selected user_id is invalid."]})
        level = data.get("level")
        if level is None:
            level = user.level if user.level is not None else DEFAULT_LEVEL
    else:
        level = float(data["level"])

    entry = QueueEntry(
        queue_session_id=session.id,
        user_id=data["user_id"] if has_user else None,
        guest_name=None if has_user else data["guest_name"],
        level=float(level),
        status="waiting",
        games_played=0,
        phone=data.get("phone"),
        notes=data.get("notes"),
        joined_at=datetime.utcnow(),
    )
    db.session.add(entry)
    db.session.commit()
    return entry


def update_entry(entry: QueueEntry, data: dict) -> QueueEntry:
    for field in ("status", "level", "phone", "notes"):
        if field in data:
            setattr(entry, field, data[field])
    db.session.commit()
    return entry


def _waiting_entries(session: QueueSession, entry_ids: list) -> dict:
    rows = QueueEntry.query.filter(
        QueueEntry.id.in_(entry_ids),
        QueueEntry.queue_session_id == session.id,
        QueueEntry.status == "waiting",
    ).all()
    return {e.id: e for e in rows}


def _unique(ids) -> list:
    seen = []
    for i in ids or []:
        if i not in seen:
            seen.append(i)
    return seen


def _resolve_teams(data: dict) -> tuple[list, list]:
    if data.get("teamA") is not None and data.get("teamB") is not None:
        team_a = _unique(data["teamA"])
        team_b = _unique(data["teamB"])
        if len(team_a) != 2 or len(team_b) != 2:
            raise InvalidTeamAssignmentError("Both Team A and Team B must have exactly 2 players.")
        if len(set(team_a + team_b)) != 4:
            raise InvalidTeamAssignmentError("All 4 players must be unique.")
        return team_a, team_b

    if data.get("queue_entry_ids") is not None:
        entry_ids = _unique(data["queue_entry_ids"])
        if len(entry_ids) != 4:
            raise InvalidTeamAssignmentError("Exactly 4 unique queue_entry_ids are required.")
        # first two players form team A
        return entry_ids[:2], entry_ids[2:]

    raise InvalidTeamAssignmentError("Either teamA/teamB or queue_entry_ids must be provided.")


def create_match(session: QueueSession, data: dict) -> QueueMatch:
    court_id = int(data["court_id"])
    if not is_court_available(court_id, session):
        raise CourtNotAvailableError("Court is not available for this session.")

    team_a, team_b = _resolve_teams(data)

    entries = _waiting_entries(session, team_a + team_b)
    if len(entries) != 4:
        raise InvalidTeamAssignmentError("All 4 entries must be waiting and belong to this session.")

    match = QueueMatch(
        queue_session_id=session.id,
        court_id=court_id,
        status="active",
        start_time=datetime.utcnow(),
    )
    db.session.add(match)
    try:
        for team, ids in (("A", team_a), ("B", team_b)):
            for entry_id in ids:
                entry = entries[entry_id]
                match.players.append(QueueMatchPlayer(queue_entry=entry, team=team))
                entry.status = "playing"
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(
        "Queue match %s started on court %s (session %s): A=%s B=%s",
        match.id, court_id, session.id, team_a, team_b,
    )
    return match


def complete_match(match: QueueMatch, shuttlecocks_used=None) -> QueueMatch:
    if match.status != "active":
        raise MatchNotActiveError("Match is not active.")

    try:
        for player in match.players:
            entry = player.queue_entry
            if entry is None:
                continue
            entry.games_played = (entry.games_played or 0) + 1
            entry.status = "waiting"

        match.status = "completed"
        match.end_time = datetime.utcnow()
        match.shuttlecocks_used = shuttlecocks_used
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info("Queue match %s completed (shuttlecocks=%s)", match.id, shuttlecocks_used)
    return match


def session_detail(session: QueueSession) -> dict:
    out = queue_session_json(session)
    out["entries"] = [queue_entry_json(e) for e in session_entries(session)]
    out["active_matches"] = [queue_match_json(m) for m in active_matches(session)]
    out["completed_matches_count"] = completed_matches_count(session)
    return out
