"""Roster rankings for a tournament window, real or cumulative."""
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from . import config
from .fortnite_api import FortniteClient
from .models import RankingRecord, TrackedPlayer
from .roster import load_roster, match_roster_player
from .stats import extract_stats
from .utils import setup_logging
from .windows import is_cumulative, resolve_constituents

logger = setup_logging(__name__)

PageFetcher = Callable[[int], List[Dict[str, Any]]]


def _safe_page(fetch: PageFetcher, page: int) -> List[Dict[str, Any]]:
    try:
        entries = fetch(page)
    except Exception as e:
        logger.warning("Page %s failed, treating as empty: %s", page, e)
        return []
    if not isinstance(entries, list):
        logger.warning("Page %s malformed, treating as empty", page)
        return []
    return entries


def fetch_pages_in_batches(fetch: PageFetcher, total_pages: int, batch_size: int,
                           stop: Callable[[List[List[Dict[str, Any]]]], bool]) -> int:
    """Run fetch over pages 0..total_pages-1, batch_size pages at a time.

    Every batch is joined before the next one starts; its pages are handed to
    stop() in page order, and fetching ends early when stop() returns True.
    Returns the number of pages requested.
    """
    requested = 0
    with ThreadPoolExecutor(max_workers=batch_size) as pool:
        for start in range(0, total_pages, batch_size):
            batch = range(start, min(start + batch_size, total_pages))
            pages = list(pool.map(lambda p: _safe_page(fetch, p), batch))
            requested += len(batch)
            if stop(pages):
                break
    return requested


def fetch_window(client: FortniteClient, event_id: str, event_window_id: str,
                 roster: Sequence[TrackedPlayer], total_pages: int = config.TOTAL_PAGES,
                 batch_size: int = config.PAGE_BATCH_SIZE) -> List[RankingRecord]:
    """One RankingRecord per roster player found on a window's leaderboard, by rank.

    Pages are ordered by rank, so the first row seen for a player is their
    official one and later duplicates are dropped.
    """
    found: Dict[str, RankingRecord] = {}

    def collect(pages: List[List[Dict[str, Any]]]) -> bool:
        for entries in pages:
            for entry in entries:
                player = match_roster_player(entry, roster)
                if player is None or player.id in found:
                    continue
                found[player.id] = RankingRecord(player=player.name, account_id=player.id, **extract_stats(entry))
        return len(found) == len(roster)

    requested = fetch_pages_in_batches(
        lambda page: client.get_leaderboard_page(event_id, event_window_id, page),
        total_pages, batch_size, collect,
    )
    logger.debug("%s/%s: %d of %d roster players found in %d pages",
                 event_id, event_window_id, len(found), len(roster), requested)
    return sorted(found.values(), key=lambda r: r.rank)


def merge_rankings(result_sets: Iterable[Sequence[RankingRecord]]) -> List[RankingRecord]:
    """Sum per-window rankings into one record per player and re-rank by points.

    Players are keyed by account id. Session histories are concatenated in
    input order. Upstream ranks are replaced by the 1-based position in the
    merged points order. Input records are left untouched.
    """
    merged: Dict[str, RankingRecord] = {}
    for results in result_sets:
        for record in results:
            existing = merged.get(record.account_id)
            if existing is None:
                merged[record.account_id] = replace(record, session_history=list(record.session_history))
                continue
            existing.points += record.points
            existing.kills += record.kills
            existing.wins += record.wins
            existing.matches += record.matches
            existing.session_history.extend(record.session_history)

    ordered = sorted(merged.values(), key=lambda r: r.points, reverse=True)
    for position, record in enumerate(ordered, start=1):
        record.rank = position
    return ordered


def get_cumulative_rankings(client: FortniteClient, event_id: str, synthetic_window_id: str,
                            roster: Sequence[TrackedPlayer]) -> List[RankingRecord]:
    window_ids = resolve_constituents(client, event_id, synthetic_window_id)
    if not window_ids:
        return []
    with ThreadPoolExecutor(max_workers=len(window_ids)) as pool:
        result_sets = list(pool.map(lambda wid: fetch_window(client, event_id, wid, roster), window_ids))
    return merge_rankings(result_sets)


def get_tournament_rankings(event_id: str, event_window_id: str, client: Optional[FortniteClient] = None,
                            roster: Optional[Sequence[TrackedPlayer]] = None) -> List[RankingRecord]:
    """Rankings of the roster for a real or cumulative window.

    Without an API key there is no data: the result is an empty list.
    """
    client = client or FortniteClient.from_env()
    if client is None:
        logger.warning("%s is not set; no rankings available", config.API_KEY_ENV)
        return []
    roster = roster if roster is not None else load_roster(config.ROSTER_PATH)
    try:
        if is_cumulative(event_window_id):
            return get_cumulative_rankings(client, event_id, event_window_id, roster)
        return fetch_window(client, event_id, event_window_id, roster)
    except Exception:
        logger.exception("Rankings for %s/%s failed", event_id, event_window_id)
        return []
