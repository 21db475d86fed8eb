"""
Confidence Scorer
Calculates detection confidence for derived deadlines and decides review gating
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from .models import CaseDeadline, MAX_CONFIDENCE, MIN_CONFIDENCE, REVIEW_THRESHOLD

logger = logging.getLogger(__name__)


class ConfidenceScorer:
    """
    Converts base-date selection evidence into a bounded confidence score
    Anything below the review threshold is flagged for human verification
    """

    def __init__(self):
        """Initialize confidence scorer"""

        self.baseline = 0.56

        # Additive evidence factors
        self.weights = {
            "anchored_base_date": 0.25,
            "event_hints": 0.10,
            "any_date_candidate": 0.07,
            "multiple_date_candidates": 0.03
        }

        self.bounds = (MIN_CONFIDENCE, MAX_CONFIDENCE)
        self.review_threshold = REVIEW_THRESHOLD

    def calculate(self,
                  anchored_base_date: Optional[datetime],
                  date_candidate_count: int,
                  has_event_hints: bool) -> float:
        """
        Calculate detection confidence for one template match

        Args:
            anchored_base_date: Date found by the anchor picker, or None
            date_candidate_count: Number of dates extracted from the document
            has_event_hints: Whether the template declares event hints

        Returns:
            Confidence score clamped to [0.35, 0.97]
        """

        confidence = self.baseline

        if anchored_base_date is not None:
            confidence += self.weights["anchored_base_date"]
        if has_event_hints:
            confidence += self.weights["event_hints"]
        if date_candidate_count > 0:
            confidence += self.weights["any_date_candidate"]
        if date_candidate_count >= 2:
            confidence += self.weights["multiple_date_candidates"]

        lower, upper = self.bounds
        return max(lower, min(upper, confidence))

    def requires_review(self, confidence: float) -> bool:
        return confidence < self.review_threshold

    def get_confidence_statistics(self, deadlines: List[CaseDeadline]) -> Dict:
        """Get statistics about confidence scores"""

        scores = [d.detection_confidence for d in deadlines if d.detection_confidence is not None]

        if not scores:
            return {
                "count": 0,
                "average": 0.0,
                "min": 0.0,
                "max": 0.0,
                "requires_review": 0
            }

        return {
            "count": len(scores),
            "average": sum(scores) / len(scores),
            "min": min(scores),
            "max": max(scores),
            "requires_review": sum(1 for s in scores if self.requires_review(s))
        }


_default_scorer = ConfidenceScorer()


def compute_detection_confidence(anchored_base_date: Optional[datetime],
                                 date_candidate_count: int,
                                 has_event_hints: bool) -> float:
    return _default_scorer.calculate(anchored_base_date, date_candidate_count, has_event_hints)


def requires_review(confidence: float) -> bool:
    return _default_scorer.requires_review(confidence)
