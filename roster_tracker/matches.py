from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from . import config
from .models import MatchDetail, RankingRecord
from .stats import PLACEMENT_KEYS, SESSION_KILL_KEYS, first_stat, session_stats
from .utils import parse_timestamp

UNAVAILABLE_TIME = 'N/A'

# Shown in place of totals a spoiler delay is still holding back
SPOILER_MASK = '??'
SPOILER_FIELDS = ('rank', 'points', 'kills', 'wins')


def display_timezone(name: str = config.DISPLAY_TIMEZONE) -> tzinfo:
    if not name or name.upper() == 'UTC':
        return timezone.utc
    return ZoneInfo(name)


def format_match_time(end_time, tz: tzinfo) -> str:
    parsed = parse_timestamp(end_time)
    if parsed is None:
        return UNAVAILABLE_TIME
    return parsed.astimezone(tz).strftime('%H:%M:%S')


def _session_end(session: Any) -> Optional[datetime]:
    return parse_timestamp(session.get('endTime')) if isinstance(session, dict) else None


def _within_delay(end: Optional[datetime], delay_minutes: int, now: datetime) -> bool:
    if delay_minutes <= 0 or end is None:
        return False
    return now - end < timedelta(minutes=delay_minutes)


def latest_session_end(record: RankingRecord) -> Optional[datetime]:
    ends = [end for end in map(_session_end, record.session_history or []) if end is not None]
    return max(ends) if ends else None


def is_spoiler(record: RankingRecord, delay_minutes: int, now: Optional[datetime] = None) -> bool:
    """True while the player's latest session ended less than delay_minutes ago.

    A delay of 0 disables the check, and so does a history without a single
    readable end time. Exactly delay_minutes after the end it is no longer a
    spoiler.
    """
    now = now or datetime.now(timezone.utc)
    return _within_delay(latest_session_end(record), delay_minutes, now)


def spoiler_view(record: RankingRecord, delay_minutes: int, now: Optional[datetime] = None) -> Dict[str, Any]:
    """record.to_dict() with the totals masked while is_spoiler holds."""
    row = record.to_dict()
    if is_spoiler(record, delay_minutes, now):
        row.update(dict.fromkeys(SPOILER_FIELDS, SPOILER_MASK))
    return row


def project_matches(record: RankingRecord, tz: tzinfo | None = None, delay_minutes: int = 0,
                    now: Optional[datetime] = None) -> List[MatchDetail]:
    """Match-by-match view of a player's session history, most recent first.

    Per-match points are not part of the upstream session data and are
    always reported as 0. With a delay, sessions that ended less than
    delay_minutes before now are left out.
    """
    tz = tz or display_timezone()
    now = now or datetime.now(timezone.utc)
    details = []
    for i, session in enumerate(record.session_history or []):
        if _within_delay(_session_end(session), delay_minutes, now):
            continue
        stats = session_stats(session)
        session_id = session.get('sessionId') if isinstance(session, dict) else None
        details.append(MatchDetail(
            match_id=session_id if isinstance(session_id, str) and session_id else f'match-{i}',
            points=0,
            kills=int(first_stat(stats, SESSION_KILL_KEYS)),
            placement=int(first_stat(stats, PLACEMENT_KEYS)),
            time=format_match_time(session.get('endTime') if isinstance(session, dict) else None, tz),
        ))
    details.reverse()
    return details
