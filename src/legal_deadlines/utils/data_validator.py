"""
Data Validator Utility
Validates input documents and derived deadline records
"""

import logging
from typing import List

from ..core.models import (
    CaseDeadline,
    JURISDICTIONS,
    MAX_CONFIDENCE,
    MIN_CONFIDENCE,
    REVIEW_THRESHOLD,
    parse_iso
)

logger = logging.getLogger(__name__)

DEADLINE_ID_PREFIX = 'deadline:auto:'


class DataValidator:
    """
    Validates documents and derived deadlines
    Ensures data quality throughout the pipeline
    """

    def __init__(self):
        """Initialize data validator"""
        logger.debug("Data validator initialized")

    def validate_document(self, document) -> bool:
        """
        Validate input document

        Args:
            document: LegalDocumentRecord from ingestion

        Returns:
            True if valid, False otherwise
        """

        if not getattr(document, 'id', None):
            logger.warning("Document without id")
            return False

        if not isinstance(document.text, str) or not document.text.strip():
            logger.warning(f"Document {document.id} has no text")
            return False

        # Unknown codes still match the EU and ECHR overlay templates
        jurisdiction = document.detected_jurisdiction
        if jurisdiction and jurisdiction not in JURISDICTIONS:
            logger.warning(f"Document {document.id} has unknown jurisdiction: {jurisdiction}")

        return True

    def validate_deadline(self, deadline: CaseDeadline) -> List[str]:
        """
        Check a derived deadline against the engine's invariants

        Args:
            deadline: Derived deadline

        Returns:
            List of violations, empty when the deadline is consistent
        """

        errors = []

        if not deadline.id.startswith(DEADLINE_ID_PREFIX):
            errors.append(f"Unexpected id format: {deadline.id}")

        confidence = deadline.detection_confidence
        if confidence is None:
            errors.append("Missing detection confidence")
        else:
            if not MIN_CONFIDENCE <= confidence <= MAX_CONFIDENCE:
                errors.append(f"Confidence out of bounds: {confidence}")
            if deadline.requires_review is not None and deadline.requires_review != (confidence < REVIEW_THRESHOLD):
                errors.append("requires_review does not match confidence")

        try:
            due = parse_iso(deadline.due_at)
            if due.weekday() >= 5:
                errors.append(f"Due date falls on a weekend: {deadline.due_at}")
        except ValueError:
            errors.append(f"Invalid due date: {deadline.due_at}")

        if len(deadline.evidence_snippets) > 3:
            errors.append("More than three evidence snippets")

        return errors
