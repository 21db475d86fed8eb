"""
Date Candidate Extractor
Finds calendar dates in document text together with their character offsets
"""

import logging
import re
from datetime import datetime, timezone
from typing import List, Optional

from .models import DateCandidate

logger = logging.getLogger(__name__)

# ASCII digits and word boundaries only
DOTTED_DATE = re.compile(r'\b(\d{1,2})\.(\d{1,2})\.(\d{2,4})\b', re.ASCII)
SLASH_DATE = re.compile(r'\b(\d{1,2})/(\d{1,2})/(\d{2,4})\b', re.ASCII)
ISO_DATE = re.compile(r'\b(\d{4})-(\d{2})-(\d{2})\b', re.ASCII)

# Candidates are pinned to this UTC hour so day arithmetic never crosses midnight
CANDIDATE_HOUR_UTC = 9


def build_candidate_date(year: str, month: str, day: str) -> Optional[datetime]:
    """
    Construct a candidate date from matched components

    Returns:
        Date at 09:00 UTC, or None when the components do not form a real date
    """

    if len(year) == 2:
        year = f"20{year}"
    elif len(year) != 4:
        return None

    try:
        return datetime(int(year), int(month), int(day), CANDIDATE_HOUR_UTC, tzinfo=timezone.utc)
    except ValueError:
        return None


def parse_date_candidates_with_index(text: str) -> List[DateCandidate]:
    """
    Extract every dotted, slashed and ISO date in the text

    Matches are grouped by shape (dotted, slashed, ISO) and keep their
    original offsets. A substring matched by more than one shape yields more
    than one candidate.

    Args:
        text: Document text, already truncated by the caller

    Returns:
        Unsorted date candidates
    """

    candidates = []

    for pattern in (DOTTED_DATE, SLASH_DATE):
        for match in pattern.finditer(text):
            day, month, year = match.groups()
            date = build_candidate_date(year, month, day)
            if date is not None:
                candidates.append(DateCandidate(date=date, index=match.start()))

    for match in ISO_DATE.finditer(text):
        year, month, day = match.groups()
        date = build_candidate_date(year, month, day)
        if date is not None:
            candidates.append(DateCandidate(date=date, index=match.start()))

    logger.debug(f"Extracted {len(candidates)} date candidates")
    return candidates


def parse_date_candidates(text: str) -> List[datetime]:
    return [candidate.date for candidate in parse_date_candidates_with_index(text)]
