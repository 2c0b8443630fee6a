"""
Doubles match suggestion for a queue session.

Waiting players are considered in queue order (fewest games played first,
then earliest arrival). Consecutive groups of four are tried first; only
if none of them can be balanced are all combinations of four examined.
"""
import random
from itertools import combinations

from models.queue_entry import QueueEntry
from models.queue_session import QueueSession
from services.queue import is_court_available
from utils.errors import CourtNotAvailableError

GROUP_SIZE = 4
# a group counts as "similar level" when its level spread is within this
SIMILAR_SPREAD = 1.5
# reject pairings whose team averages differ by more than this
MAX_TEAM_DIFF = 1.0


def _level(entry) -> float:
    return float(entry.level)


def are_similar_levels(players) -> bool:
    levels = [_level(p) for p in players]
    return (max(levels) - min(levels)) <= SIMILAR_SPREAD


def find_optimal_pairing(players) -> dict:
    """
    Split four players into two teams.

    Similar-level groups put the two strongest together against the two
    weakest. Mixed groups take whichever of the three possible pairings
    has the smallest difference in team average.
    """
    if are_similar_levels(players):
        ranked = sorted(players, key=_level)
        team_a = [ranked[2], ranked[3]]
        team_b = [ranked[0], ranked[1]]
    else:
        p = players
        candidates = [
            ([p[0], p[1]], [p[2], p[3]]),
            ([p[0], p[2]], [p[1], p[3]]),
            ([p[0], p[3]], [p[1], p[2]]),
        ]
        team_a, team_b = min(candidates, key=lambda c: _team_diff(*c))

    diff = _team_diff(team_a, team_b)
    return {
        "team_a": team_a,
        "team_b": team_b,
        "ordered": team_a + team_b,
        "diff": diff,
        "balanced": diff <= 0.5,
    }


def _team_diff(team_a, team_b) -> float:
    avg_a = sum(_level(p) for p in team_a) / 2
    avg_b = sum(_level(p) for p in team_b) / 2
    return abs(avg_a - avg_b)


def _classify(groups) -> dict:
    found = {"similar": [], "mixed": []}
    for group in groups:
        group = list(group)
        pairing = find_optimal_pairing(group)
        if pairing["diff"] > MAX_TEAM_DIFF:
            continue
        kind = "similar" if are_similar_levels(group) else "mixed"
        found[kind].append({"group": group, "pairing": pairing})
    return found


def _priority(candidate) -> tuple:
    games = [p.games_played or 0 for p in candidate["group"]]
    return min(games), sum(games) / len(games)


def pick_candidate(candidates: list, rng=random):
    """Random pick among candidates sharing the lowest minimum games played."""
    if not candidates:
        return None
    ranked = sorted(candidates, key=_priority)
    lowest = _priority(ranked[0])[0]
    top = [c for c in ranked if _priority(c)[0] == lowest]
    return rng.choice(top)


def suggest_players(waiting: list, rng=random) -> list:
    """Return the four suggested entries, team A first, or [] if none fit."""
    if len(waiting) < GROUP_SIZE:
        return []

    consecutive = (waiting[i:i + GROUP_SIZE] for i in range(len(waiting) - GROUP_SIZE + 1))
    found = _classify(consecutive)
    if not found["similar"] and not found["mixed"]:
        found = _classify(combinations(waiting, GROUP_SIZE))

    selected = pick_candidate(found["similar"] or found["mixed"], rng=rng)
    if selected is None:
        return []
    return selected["pairing"]["ordered"]


def waiting_queue(session: QueueSession) -> list:
    return (
        QueueEntry.query
        .filter_by(queue_session_id=session.id, status="waiting")
        .order_by(
            QueueEntry.games_played.asc(),
            QueueEntry.joined_at.asc(),
            QueueEntry.id.asc(),
        )
        .all()
    )


def suggest_match(session: QueueSession, court_id: int, rng=random) -> dict:
    if not is_court_available(court_id, session):
        raise CourtNotAvailableError("Court is not available for this session.")

    chosen = suggest_players(waiting_queue(session), rng=rng)
    return {
        "suggested": [
            {
                "queue_entry_id": e.id,
                "level": _level(e),
                "name": e.display_name,
            }
            for e in chosen
        ]
    }
