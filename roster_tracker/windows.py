"""Tournament window discovery and cumulative window resolution.

Upstream events expose real windows only (one per day or session). Some
tournaments are played over two sessions and scored together, so the tracker
offers synthetic "cumulative" windows named
``<eventId>_Week<N>_Cumulative``, ``<eventId>_PlayIn_Cumulative`` and
``<eventId>_Opens_Cumulative``. A synthetic id is classified once into a
WindowFamily variant, which knows which real windows it is built from.
"""
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Union

from . import config
from .fortnite_api import FortniteClient
from .models import EventWindow, TournamentInfo
from .naming import format_event_name
from .utils import parse_timestamp, setup_logging

logger = setup_logging(__name__)

_WEEK_RE = re.compile(r"Week(\d+)")


@dataclass(frozen=True)
class WeeklyCumulative:
    week: int

    @property
    def token(self) -> str:
        return f"Week{self.week}"

    @property
    def label(self) -> str:
        return f"FNCS Div 1 - Semaine {self.week} (Cumulé)"

    def constituent_patterns(self) -> tuple[str, ...]:
        return (f"Week{self.week}Day1", f"Week{self.week}Day2")


@dataclass(frozen=True)
class PlayInCumulative:
    token = "PlayIn"
    label = "Elite Series - Qualification Intermédiaire (Cumulé)"

    def constituent_patterns(self) -> tuple[str, ...]:
        return ("PlayInDay1", "PlayInDay2")


@dataclass(frozen=True)
class OpensCumulative:
    token = "Opens"
    label = "Elite Series - Tournoi Ouvert (Cumulé)"

    def constituent_patterns(self) -> tuple[str, ...]:
        return ("Open1", "Open2")


WindowFamily = Union[WeeklyCumulative, PlayInCumulative, OpensCumulative]


def synthetic_window_id(event_id: str, family: WindowFamily) -> str:
    return f"{event_id}_{family.token}{config.CUMULATIVE_SUFFIX}"


def is_cumulative(window_id: str) -> bool:
    return bool(window_id) and window_id.endswith(config.CUMULATIVE_SUFFIX)


def classify_window(event_id: str, window_id: str) -> Optional[WindowFamily]:
    """Return the cumulative family a window id denotes, or None for real windows."""
    if not is_cumulative(window_id):
        return None
    token = window_id[:-len(config.CUMULATIVE_SUFFIX)]
    if event_id and token.startswith(event_id):
        token = token[len(event_id):]
    m = _WEEK_RE.search(token)
    if m:
        return WeeklyCumulative(int(m.group(1)))
    if 'PlayIn' in token:
        return PlayInCumulative()
    if 'Opens' in token:
        return OpensCumulative()
    return None


def parse_windows(event: Dict[str, Any]) -> List[EventWindow]:
    raw = event.get('eventWindows')
    out = []
    for w in raw if isinstance(raw, list) else []:
        if not isinstance(w, dict) or not isinstance(w.get('eventWindowId'), str):
            continue
        rnd = w.get('round')
        out.append(EventWindow(
            event_window_id=w['eventWindowId'],
            begin_time=w.get('beginTime'),
            round=rnd if isinstance(rnd, int) and not isinstance(rnd, bool) else None,
        ))
    return out


def has_begun(window: EventWindow, now: datetime) -> bool:
    """True when the window's begin time is known and not after now."""
    begin = parse_timestamp(window.begin_time)
    return begin is not None and begin <= now


def find_constituents(windows: Sequence[EventWindow], family: WindowFamily) -> Optional[List[EventWindow]]:
    """First window matching each of the family's patterns, or None if one is missing."""
    found = []
    for pattern in family.constituent_patterns():
        match = next((w for w in windows if pattern in w.event_window_id), None)
        if match is None:
            return None
        found.append(match)
    return found


def load_events(client: FortniteClient) -> List[Dict[str, Any]]:
    """Past and current events, fetched concurrently; past events come first."""
    with ThreadPoolExecutor(max_workers=2) as pool:
        past = pool.submit(client.get_past_events)
        current = pool.submit(client.get_current_events)
        return past.result() + current.result()


def resolve_constituents(client: FortniteClient, event_id: str, synthetic_window_id: str,
                         now: Optional[datetime] = None) -> List[str]:
    """Real window ids a cumulative window is made of, in session order.

    Returns an empty list when the id is not a cumulative window, when the
    event or one of its sessions cannot be found, or when a session has not
    begun yet.
    """
    family = classify_window(event_id, synthetic_window_id)
    if family is None:
        return []
    now = now or datetime.now(timezone.utc)
    event = next((ev for ev in load_events(client) if ev.get('eventId') == event_id), None)
    if event is None:
        logger.info("Event %s not found for %s", event_id, synthetic_window_id)
        return []
    constituents = find_constituents(parse_windows(event), family)
    if constituents is None:
        logger.info("Sessions of %s not all published yet", synthetic_window_id)
        return []
    if not all(has_begun(w, now) for w in constituents):
        logger.info("Cumulative %s withheld until every session has begun", synthetic_window_id)
        return []
    return [w.event_window_id for w in constituents]


def is_relevant_tournament(event_id: str) -> bool:
    e = (event_id or '').lower()
    if config.REGION_TOKEN not in e:
        return False
    if not re.search(config.MAJOR_EVENT_PATTERN, e):
        return False
    return not re.search(config.EXCLUDED_EVENT_PATTERN, e)


def cumulative_families(event_id: str, windows: Sequence[EventWindow]) -> List[WindowFamily]:
    """Cumulative views offered for an event, according to its tournament format."""
    families: List[WindowFamily] = []
    if config.FNCS_CUMULATIVE_EVENT in event_id:
        weeks = []
        for w in windows:
            m = _WEEK_RE.search(w.event_window_id)
            if m and int(m.group(1)) not in weeks:
                weeks.append(int(m.group(1)))
        families.extend(WeeklyCumulative(week) for week in weeks)
    if config.ELITE_SERIES_TOKEN in event_id:
        if 'PlayIn' in event_id:
            families.append(PlayInCumulative())
        families.append(OpensCumulative())
    return families


def _display_date(begin_time: Optional[str]) -> Optional[str]:
    parsed = parse_timestamp(begin_time)
    return parsed.strftime('%d/%m/%Y') if parsed else None


def list_tournaments(client: Optional[FortniteClient] = None, now: Optional[datetime] = None,
                     limit: int = config.TOURNAMENT_LIMIT) -> List[TournamentInfo]:
    """Relevant windows that have already begun, newest first.

    Cumulative windows are listed once both of their sessions exist and the
    last one has begun.
    """
    client = client or FortniteClient.from_env()
    if client is None:
        logger.warning("%s is not set; no tournaments available", config.API_KEY_ENV)
        return []
    now = now or datetime.now(timezone.utc)
    found: Dict[tuple, TournamentInfo] = {}
    for event in load_events(client):
        event_id = event.get('eventId')
        if not isinstance(event_id, str) or not is_relevant_tournament(event_id):
            continue
        windows = parse_windows(event)
        for w in windows:
            if not has_begun(w, now):
                continue
            key = (event_id, w.event_window_id)
            if key not in found:
                found[key] = TournamentInfo(
                    event_id=event_id,
                    event_window_id=w.event_window_id,
                    event_name=format_event_name(event_id, w),
                    date=w.begin_time,
                    display_date=_display_date(w.begin_time),
                )
        for family in cumulative_families(event_id, windows):
            constituents = find_constituents(windows, family)
            if constituents is None or not has_begun(constituents[-1], now):
                continue
            window_id = synthetic_window_id(event_id, family)
            key = (event_id, window_id)
            if key not in found:
                last = constituents[-1]
                found[key] = TournamentInfo(
                    event_id=event_id,
                    event_window_id=window_id,
                    event_name=family.label,
                    date=last.begin_time,
                    display_date=_display_date(last.begin_time),
                )

    def sort_key(info: TournamentInfo) -> float:
        parsed = parse_timestamp(info.date)
        return parsed.timestamp() if parsed else 0.0

    return sorted(found.values(), key=sort_key, reverse=True)[:limit]
