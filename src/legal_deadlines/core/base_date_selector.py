"""
Base-Date Selector
Chooses the date that starts a deadline clock among all dates found in a document
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from .models import DateCandidate, DeadlineTemplate, ensure_utc

logger = logging.getLogger(__name__)

# Default picker window: recent documents about current events
DEFAULT_WINDOW_PAST = timedelta(days=180)
DEFAULT_WINDOW_FUTURE = timedelta(days=14)

# Anchor picker windows
ANCHOR_WINDOW_PAST = timedelta(days=3 * 365)
ANCHOR_WINDOW_FUTURE = timedelta(days=60)
ANCHOR_NEAR_FUTURE = timedelta(days=7)
ANCHOR_WINDOW_BONUS = 900
ANCHOR_NEAR_FUTURE_BONUS = 120


def pick_base_date(candidates: Sequence[datetime], now: Optional[datetime] = None) -> datetime:
    """
    Pick the most plausible recent date

    Prefers the latest date between 180 days ago and 14 days ahead, falls back
    to the latest date anywhere, and to now when the document has no dates.
    """

    now = ensure_utc(now)
    if not candidates:
        return now

    lower = now - DEFAULT_WINDOW_PAST
    upper = now + DEFAULT_WINDOW_FUTURE

    plausible = [date for date in candidates if lower <= date <= upper]
    if plausible:
        return max(plausible)

    return max(candidates)


def find_anchor_indexes(text: str, template: DeadlineTemplate) -> List[int]:
    """Offsets of every match of the template's event hints (or its trigger when it has none)"""

    patterns = template.base_event_hints if template.has_event_hints else (template.trigger,)
    indexes = []
    for pattern in patterns:
        indexes.extend(match.start() for match in pattern.finditer(text))
    return indexes


def score_candidate(candidate: DateCandidate, anchor_indexes: Sequence[int], now: datetime) -> float:
    distance = min(abs(candidate.index - anchor) for anchor in anchor_indexes)
    score = float(-distance)

    if now - ANCHOR_WINDOW_PAST <= candidate.date <= now + ANCHOR_WINDOW_FUTURE:
        score += ANCHOR_WINDOW_BONUS
    if candidate.date <= now + ANCHOR_NEAR_FUTURE:
        score += ANCHOR_NEAR_FUTURE_BONUS

    return score


def pick_event_anchored_base_date(text: str,
                                  template: DeadlineTemplate,
                                  candidates: Sequence[DateCandidate],
                                  now: Optional[datetime] = None) -> Optional[datetime]:
    """
    Pick the date written closest to the event that starts the deadline

    Every candidate is scored by its character distance to the nearest anchor
    match, with bonuses for dates inside the realistic legal window
    (3 years back to 60 days ahead) and for dates no more than 7 days ahead.

    Args:
        text: Document text the candidates were extracted from
        template: Template whose hints (or trigger) mark the event
        candidates: Date candidates with offsets
        now: Reference time, defaults to the current UTC time

    Returns:
        The best scoring date (most recent on ties), or None without
        candidates or anchors
    """

    if not candidates:
        return None

    anchor_indexes = find_anchor_indexes(text, template)
    if not anchor_indexes:
        return None

    now = ensure_utc(now)
    ranked = sorted(
        candidates,
        key=lambda candidate: (score_candidate(candidate, anchor_indexes, now), candidate.date),
        reverse=True
    )

    best = ranked[0]
    logger.debug(f"Anchored {template.id_suffix} on {best.date.date()} at offset {best.index}")
    return best.date
