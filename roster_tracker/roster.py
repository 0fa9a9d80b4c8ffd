import json
from typing import Any, Dict, Iterable, Optional, Sequence

from rapidfuzz import fuzz

from .models import TrackedPlayer

DEFAULT_ROSTER: tuple[TrackedPlayer, ...] = (
    TrackedPlayer(id='d706641c93524ceba9cd195b5e287d98', username='Akiira', name='Akiira'),
    TrackedPlayer(id='f0d8961f20d04631a6b2abda24a17070', username='MariusCOW', name='MariusCOW'),
    TrackedPlayer(id='5bec82879fbf436887597f49d9bcc7c3', username='Merstach', name='Merstach'),
    TrackedPlayer(id='79f1994f55eb4931a148935efa188b2f', username='Vanyak3k', name='Vanyak3k'),
)


class RosterError(Exception):
    pass


def load_roster(path: Optional[str] = None) -> tuple[TrackedPlayer, ...]:
    """Return the roster stored at path, or the built-in roster when path is None.

    The file is a JSON list of {"id", "username", "name"} objects; "name"
    defaults to "username" when missing.
    """
    if not path:
        return DEFAULT_ROSTER
    try:
        with open(path, 'r', encoding='utf-8') as fh:
            raw = json.load(fh)
    except (OSError, ValueError) as e:
        raise RosterError(f"Cannot read roster file {path}: {e}") from e
    if not isinstance(raw, list):
        raise RosterError(f"Roster file {path} must contain a JSON list")
    players = []
    for item in raw:
        if not isinstance(item, dict) or not item.get('id') or not item.get('username'):
            raise RosterError(f"Invalid roster entry in {path}: {item!r}")
        players.append(TrackedPlayer(
            id=str(item['id']),
            username=str(item['username']),
            name=str(item.get('name') or item['username']),
        ))
    return tuple(players)


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def match_roster_player(entry: Dict[str, Any], roster: Sequence[TrackedPlayer]) -> Optional[TrackedPlayer]:
    """Find the roster player a leaderboard entry belongs to.

    A roster player matches when their account id is one of the team's
    account ids, or when their username is contained (case-insensitively) in
    one of the team's display names. Roster order decides between several
    candidates.
    """
    if not isinstance(entry, dict):
        return None
    team_ids = _as_list(entry.get('teamAccountIds'))
    display_names = [dn.lower() for dn in _as_list(entry.get('teamAccountDisplayNames')) if isinstance(dn, str)]
    for player in roster:
        if player.id in team_ids:
            return player
        needle = player.username.lower()
        if needle and any(needle in dn for dn in display_names):
            return player
    return None


def normalize_name(name: str) -> str:
    if not name:
        return ''
    return ''.join(ch for ch in name.lower() if ch.isalnum() or ch.isspace()).strip()


def find_roster_player(query: str, roster: Iterable[TrackedPlayer], threshold: float = 0.8) -> Optional[TrackedPlayer]:
    """Resolve a typed player name (CLI / dashboard input) to a roster player.

    - Exact account id
    - Then exact normalized name or username
    - Then rapidfuzz ratio against names and usernames with cutoff=threshold
    Returns the roster player or None.
    """
    if not query:
        return None
    players = list(roster)
    for p in players:
        if p.id == query:
            return p
    norm = normalize_name(query)
    for p in players:
        if norm in (normalize_name(p.name), normalize_name(p.username)):
            return p

    best = None
    best_score = 0.0
    for p in players:
        score = max(fuzz.ratio(norm, normalize_name(p.name)), fuzz.ratio(norm, normalize_name(p.username))) / 100.0
        if score > best_score:
            best_score = score
            best = p
    if best_score >= threshold:
        return best
    return None
