"""Human-readable tournament labels for the picker (French, as shown to fans)."""
import re
from typing import Optional

from .models import EventWindow

_SKIP_PARTS = {'EU', 'S39', 'S38', 'S37', 'Day1', 'Day2'}


def _number(pattern: str, text: str) -> Optional[str]:
    m = re.search(pattern, text)
    return m.group(1) if m else None


def _base_name(name: str) -> str:
    if 'FNCS' in name:
        div = _number(r"Division(\d+)", name)
        return f"FNCS Div {div}" if div else "FNCS"
    if 'SoloVictoryCup' in name or 'SoloSeries' in name:
        return "Solo Victory Cup"
    if 'DuosVictoryCup' in name:
        return "Duos Victory Cup"
    if 'CashCup' in name:
        return "Cash Cup"
    if 'EliteSeries' in name:
        return "Elite Series"
    return ' '.join(p for p in name.split('_') if p not in _SKIP_PARTS)


def _elite_series_label(window_id: str) -> Optional[str]:
    if 'Open' in window_id:
        if 'Open1' in window_id:
            return "Elite Series - Tournoi Ouvert (Session 1)"
        if 'Open2' in window_id:
            return "Elite Series - Tournoi Ouvert (Session 2)"
        return "Elite Series - Tournoi Ouvert"
    if 'PlayIn' in window_id:
        if 'Day1' in window_id:
            return "Elite Series - Qualification Intermédiaire (Session 1)"
        if 'Day2' in window_id:
            return "Elite Series - Qualification Intermédiaire (Session 2)"
        return "Elite Series - Qualification Intermédiaire"
    if 'Heat' in window_id:
        heat = _number(r"Heat(\d+)", window_id) or ''
        return f"Elite Series - Série {heat}".strip()
    if 'Final' in window_id:
        return "Elite Series - Finale"
    return None


def _fncs_label(window_id: str) -> Optional[str]:
    if 'Week' not in window_id:
        return None
    week = _number(r"Week(\d+)", window_id) or '?'
    if 'Day1' in window_id:
        return f"FNCS Div 1 - Semaine {week} (Session 1)"
    if 'Day2' in window_id:
        return f"FNCS Div 1 - Semaine {week} (Session 2)"
    if 'Final' in window_id:
        return f"FNCS Div 1 - Finale Hebdomadaire {week}"
    return None


def format_event_name(event_id: str, window: EventWindow) -> str:
    name = event_id.replace('epicgames_', '').replace('Fortnite:', '')
    window_id = window.event_window_id

    if 'EliteSeries' in name:
        label = _elite_series_label(window_id)
        if label:
            return label
    if 'FNCS' in name:
        label = _fncs_label(window_id)
        if label:
            return label

    base = _base_name(name)
    if 'Week' in window_id:
        week = _number(r"Week(\d+)", window_id)
        if week:
            base += f" W{week}"
    elif 'Qualifier' in window_id:
        qualifier = _number(r"Qualifier(\d+)", window_id)
        if qualifier:
            base += f" Q{qualifier}"

    if 'Final' in window_id:
        base += " Finals"
    elif 'Day1' in window_id:
        base += " Day 1"
    elif 'Day2' in window_id:
        base += " Day 2"
    elif window.round and window.round > 1:
        base += f" Round {window.round}"
    else:
        rnd = _number(r"Round(\d+)", window_id)
        if rnd:
            base += f" Rd {rnd}"
    return base.strip()

