"""Normalize heterogeneous leaderboard stat payloads.

Stat keys vary across seasons and game modes, so every logical stat is read
through a short ordered list of candidate keys; the first key present wins and
a missing stat falls back to a default.
"""
from typing import Any, Dict, List, Mapping, Sequence

from .utils import to_number

# Point-breakdown keys counted as eliminations (substring match)
KILL_BREAKDOWN_KEYS = ('ELIMS', 'KILLS', 'TEAM_ELIMS')

# Per-session tracked stat keys
PLACEMENT_KEYS = ('PLACEMENT_STAT_INDEX',)
VICTORY_KEYS = ('VICTORY_ROYALE_STAT',)
SESSION_KILL_KEYS = ('TEAM_ELIMS_STAT_INDEX', 'ELIMS', 'KILLS')


def first_stat(stats: Any, keys: Sequence[str], default: float = 0) -> float:
    """Return the first finite numeric value among keys present in stats."""
    if not isinstance(stats, Mapping):
        return default
    for k in keys:
        if k in stats:
            v = to_number(stats[k], None)
            if v is not None:
                return v
    return default


def session_stats(session: Any) -> Mapping[str, Any]:
    if not isinstance(session, Mapping):
        return {}
    stats = session.get('trackedStats')
    return stats if isinstance(stats, Mapping) else {}


def session_history(entry: Mapping[str, Any]) -> List[Dict[str, Any]]:
    history = entry.get('sessionHistory')
    return list(history) if isinstance(history, list) else []


def count_kills(point_breakdown: Any) -> int:
    """Sum timesAchieved over breakdown keys naming an elimination category."""
    if not isinstance(point_breakdown, Mapping):
        return 0
    total = 0
    for key, item in point_breakdown.items():
        if not isinstance(key, str) or not any(k in key for k in KILL_BREAKDOWN_KEYS):
            continue
        if isinstance(item, Mapping):
            total += to_number(item.get('timesAchieved'))
    return int(total)


def is_win(session: Any) -> bool:
    stats = session_stats(session)
    return first_stat(stats, VICTORY_KEYS) > 0 or first_stat(stats, PLACEMENT_KEYS) == 1


def extract_stats(entry: Mapping[str, Any]) -> Dict[str, Any]:
    """Derive RankingRecord fields from one raw leaderboard entry."""
    history = session_history(entry)
    return {
        'rank': int(to_number(entry.get('rank'))),
        'points': to_number(entry.get('pointsEarned')),
        'kills': count_kills(entry.get('pointBreakdown')),
        'wins': sum(1 for s in history if is_win(s)),
        'matches': len(history),
        'kd': to_number(entry.get('kd')),
        'damage': to_number(entry.get('damageDealt')),
        'session_history': history,
    }
