from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class TrackedPlayer:
    id: str  # Epic account id
    username: str  # display name fragment used for lookup
    name: str


@dataclass
class RankingRecord:
    player: str
    account_id: str
    rank: int = 0  # 0 = unranked
    points: float = 0
    kills: int = 0
    wins: int = 0
    matches: int = 0
    kd: float = 0
    damage: float = 0
    is_live: bool = True
    session_history: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self, include_sessions: bool = False) -> Dict[str, Any]:
        out = asdict(self)
        if not include_sessions:
            out.pop('session_history')
        return out


@dataclass
class MatchDetail:
    match_id: str
    points: int  # per-match points are not reported upstream
    kills: int
    placement: int
    time: str


@dataclass
class EventWindow:
    event_window_id: str
    begin_time: Optional[str] = None
    round: Optional[int] = None


@dataclass
class TournamentInfo:
    event_id: str
    event_window_id: str
    event_name: str
    date: Optional[str] = None
    display_date: Optional[str] = None
