"""
Shared fixtures for the deadline engine tests
"""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Allow running the suite from a source checkout without installing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from legal_deadlines.core.models import CaseDeadline, CaseFile, LegalDocumentRecord  # noqa: E402


@pytest.fixture
def now():
    return datetime(2026, 2, 20, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_document():
    def _make(text, doc_id="doc-1", title="Schriftsatz", jurisdiction=None):
        return LegalDocumentRecord(
            id=doc_id,
            title=title,
            raw_text=text,
            detected_jurisdiction=jurisdiction
        )
    return _make


@pytest.fixture
def make_deadline():
    def _make(deadline_id, confidence=0.9):
        return CaseDeadline(
            id=deadline_id,
            title="Frist",
            due_at="2026-03-02T09:00:00.000Z",
            source_doc_ids=["doc-1"],
            status="open",
            priority="critical",
            reminder_offsets_in_minutes=[4320, 1440],
            created_at="2026-02-20T12:00:00.000Z",
            updated_at="2026-02-20T12:00:00.000Z",
            derived_from="auto_template",
            detection_confidence=confidence,
            requires_review=confidence < 0.78
        )
    return _make


@pytest.fixture
def case_file():
    return CaseFile(
        id="case-1",
        workspace_id="ws-1",
        title="Müller ./. Schmidt",
        deadline_ids=["deadline:existing"]
    )
