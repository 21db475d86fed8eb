"""
Tests for document and deadline validation
"""

from dataclasses import replace

from legal_deadlines.core.models import LegalDocumentRecord
from legal_deadlines.utils.data_validator import DataValidator


def test_valid_document(make_document):
    assert DataValidator().validate_document(make_document("Berufung", jurisdiction="DE"))


def test_document_without_id():
    doc = LegalDocumentRecord(id="", title="Ohne Id", raw_text="Berufung")
    assert not DataValidator().validate_document(doc)


def test_blank_document(make_document):
    assert not DataValidator().validate_document(make_document(" \n\t "))


def test_unknown_jurisdiction_is_accepted(make_document):
    assert DataValidator().validate_document(make_document("EGMR", jurisdiction="US"))


def test_consistent_deadline(make_deadline):
    deadline = make_deadline("deadline:auto:case-1:doc-1:x:2026-03-02", confidence=0.81)
    assert DataValidator().validate_deadline(deadline) == []


def test_inconsistent_deadline(make_deadline):
    deadline = replace(
        make_deadline("manual-1", confidence=0.99),
        due_at="2026-02-28T09:00:00.000Z",
        evidence_snippets=["a", "b", "c", "d"]
    )

    errors = DataValidator().validate_deadline(deadline)

    assert len(errors) == 4
    assert any("weekend" in error for error in errors)


def test_review_flag_must_match_confidence(make_deadline):
    deadline = replace(make_deadline("deadline:auto:x", confidence=0.6), requires_review=False)
    assert DataValidator().validate_deadline(deadline) == ["requires_review does not match confidence"]


def test_unparseable_due_date(make_deadline):
    deadline = replace(make_deadline("deadline:auto:x"), due_at="bald")
    assert DataValidator().validate_deadline(deadline) == ["Invalid due date: bald"]
