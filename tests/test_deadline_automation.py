"""
Tests for deadline derivation from documents
"""

from datetime import datetime, timezone

import pytest

from legal_deadlines.core.models import DERIVED_FROM_LIMITATION, DERIVED_FROM_TEMPLATE
from legal_deadlines.pipeline.main_pipeline import DeadlineAutomationService
from legal_deadlines.utils.data_validator import DataValidator

FORTFUEHRUNG_TEXT = (
    "Einstellungsbescheid der Staatsanwaltschaft, zugestellt am 10.02.2026.\n"
    "Fortführungsantrag wird geprüft."
)

STRAFBEFEHL_TEXT = (
    "Vorgang vom 01.01.2024.\n"
    "Der Strafbefehl wurde am 14.02.2026 zugestellt. Einspruch ist möglich."
)

LIMITATION_TEXT = "Der Anspruch entstanden ist am 15.05.2025; Kenntnis bestand."


@pytest.fixture
def service():
    return DeadlineAutomationService()


def by_suffix(deadlines, suffix):
    matches = [d for d in deadlines if f":{suffix}:" in d.id]
    assert len(matches) == 1, [d.id for d in deadlines]
    return matches[0]


class TestTemplateDeadlines:

    def test_fortfuehrungsantrag(self, service, make_document, now):
        doc = make_document(FORTFUEHRUNG_TEXT, title="Einstellungsbescheid", jurisdiction="DE")

        (deadline,) = service.derive_deadlines_from_documents("case-1", [doc], now=now)

        assert "Fortführungsantrag" in deadline.title
        assert deadline.title == "Fortführungsantrag prüfen (§ 172 StPO) — Einstellungsbescheid"
        assert deadline.id == "deadline:auto:case-1:doc-1:fortfuehrungsantrag-stpo-172:2026-02-24"
        assert deadline.due_at.startswith("2026-02-24")
        assert deadline.base_event_at == "2026-02-10T09:00:00.000Z"
        assert deadline.derived_from == DERIVED_FROM_TEMPLATE
        assert deadline.detection_confidence == pytest.approx(0.97)
        assert deadline.requires_review is False
        assert deadline.evidence_snippets
        assert deadline.source_doc_ids == ["doc-1"]
        assert deadline.status == "open"
        assert deadline.priority == "critical"
        assert deadline.reminder_offsets_in_minutes == [4320, 1440, 180, 60]
        assert deadline.created_at == deadline.updated_at == "2026-02-20T12:00:00.000Z"

    def test_strafbefehl_anchors_on_service_date(self, service, make_document, now):
        doc = make_document(STRAFBEFEHL_TEXT, jurisdiction="DE")

        deadlines = service.derive_deadlines_from_documents("case-1", [doc], now=now)
        deadline = by_suffix(deadlines, "einspruch-strafbefehl-stpo-410")

        assert deadline.base_event_at.startswith("2026-02-14")
        # 28.02.2026 is a Saturday
        assert deadline.due_at.startswith("2026-03-02")
        assert deadline.id.endswith(":2026-03-02")

    def test_document_without_dates_uses_now(self, service, make_document, now):
        doc = make_document("Berufung eingelegt.", jurisdiction="DE")

        (deadline,) = service.derive_deadlines_from_documents("case-1", [doc], now=now)

        assert deadline.base_event_at == "2026-02-20T12:00:00.000Z"
        assert deadline.due_at == "2026-03-20T12:00:00.000Z"
        assert deadline.detection_confidence == pytest.approx(0.56)
        assert deadline.requires_review is True
        assert deadline.evidence_snippets == ["Berufung eingelegt."]

    def test_month_period_from_month_end_rolls_over(self, service, make_document):
        doc = make_document("Berufung eingelegt, Urteil vom 31.03.2026.", jurisdiction="DE")
        now = datetime(2026, 4, 10, 12, tzinfo=timezone.utc)

        (deadline,) = service.derive_deadlines_from_documents("c", [doc], now=now)

        # 31.04. does not exist and overflows to 01.05.2026, a Friday
        assert deadline.id == "deadline:auto:c:doc-1:berufung-zpo-517:2026-05-01"
        assert deadline.due_at == "2026-05-01T09:00:00.000Z"

    def test_unknown_jurisdiction_keeps_overlay_templates(self, service, make_document, now):
        doc = make_document("Individualbeschwerde zum EGMR am 05.02.2026.", jurisdiction="US")

        deadlines = service.derive_deadlines_from_documents("case-1", [doc], now=now)

        assert [d.id.split(":")[4] for d in deadlines] == ["egmr-beschwerde-art35"]
        assert deadlines[0].due_at.startswith("2026-06-05")


class TestLimitationRule:

    @pytest.fixture
    def limitation_now(self):
        return datetime(2025, 6, 1, 12, tzinfo=timezone.utc)

    def test_year_end_check_without_jurisdiction(self, service, make_document, limitation_now):
        doc = make_document(LIMITATION_TEXT, title="Forderungsschreiben")

        deadlines = service.derive_deadlines_from_documents("case-1", [doc], now=limitation_now)
        deadline = by_suffix(deadlines, "verjaehrung")

        # 31.12.2028 is a Sunday
        assert deadline.id == "deadline:auto:case-1:doc-1:verjaehrung:2029-01-01"
        assert deadline.due_at == "2029-01-01T09:00:00.000Z"
        assert deadline.base_event_at == "2025-05-15T09:00:00.000Z"
        assert deadline.title == "Regelverjährung prüfen (§§ 195, 199 BGB) — Forderungsschreiben"
        assert deadline.derived_from == DERIVED_FROM_LIMITATION
        assert deadline.detection_confidence == pytest.approx(0.74)
        assert deadline.requires_review is True
        assert deadline.priority == "high"
        assert deadline.reminder_offsets_in_minutes == [43200, 20160, 10080, 4320, 1440]
        assert len(deadline.evidence_snippets) == 1

    def test_applies_to_german_documents(self, service, make_document, limitation_now):
        doc = make_document(LIMITATION_TEXT, jurisdiction="DE")
        deadlines = service.derive_deadlines_from_documents("case-1", [doc], now=limitation_now)

        assert [d.derived_from for d in deadlines] == [DERIVED_FROM_LIMITATION]

    def test_not_applied_to_other_jurisdictions(self, service, make_document, limitation_now):
        doc = make_document(LIMITATION_TEXT, jurisdiction="FR")
        assert service.derive_deadlines_from_documents("case-1", [doc], now=limitation_now) == []


class TestBatchBehaviour:

    def test_blank_documents_are_skipped(self, service, make_document, now):
        blank = make_document("   \n ", doc_id="blank")
        emptied = make_document("Berufung", doc_id="emptied")
        emptied.normalized_text = ""
        valid = make_document("Berufung eingelegt.", doc_id="valid", jurisdiction="DE")

        deadlines = service.derive_deadlines_from_documents("case-1", [blank, emptied, valid], now=now)

        assert [d.source_doc_ids for d in deadlines] == [["valid"]]

    def test_text_beyond_limit_is_ignored(self, service, make_document, now):
        doc = make_document("x" * 30000 + " Berufung", jurisdiction="DE")
        assert service.derive_deadlines_from_documents("case-1", [doc], now=now) == []

    def test_same_document_twice_is_deduplicated(self, service, make_document, now):
        doc = make_document(STRAFBEFEHL_TEXT, jurisdiction="DE")

        once = service.derive_deadlines_from_documents("case-1", [doc], now=now)
        twice = service.derive_deadlines_from_documents("case-1", [doc, doc], now=now)

        assert twice == once

    def test_documents_get_distinct_ids(self, service, make_document, now):
        docs = [
            make_document(STRAFBEFEHL_TEXT, doc_id="doc-1", jurisdiction="DE"),
            make_document(STRAFBEFEHL_TEXT, doc_id="doc-2", jurisdiction="DE")
        ]

        deadlines = service.derive_deadlines_from_documents("case-1", docs, now=now)

        assert len(deadlines) == 4
        assert len({d.id for d in deadlines}) == 4

    def test_derivation_is_deterministic(self, service, make_document, now):
        docs = [
            make_document(FORTFUEHRUNG_TEXT, doc_id="doc-1", jurisdiction="DE"),
            make_document(STRAFBEFEHL_TEXT, doc_id="doc-2", jurisdiction="DE"),
            make_document(LIMITATION_TEXT, doc_id="doc-3")
        ]

        first = service.derive_deadlines_from_documents("case-1", docs, now=now)
        second = DeadlineAutomationService().derive_deadlines_from_documents("case-1", docs, now=now)

        assert first == second

    def test_derived_deadlines_are_consistent(self, service, make_document, now):
        docs = [
            make_document(FORTFUEHRUNG_TEXT, doc_id="doc-1", jurisdiction="DE"),
            make_document(STRAFBEFEHL_TEXT, doc_id="doc-2"),
            make_document(LIMITATION_TEXT, doc_id="doc-3"),
            make_document("Berufung und Kündigung am 07.02.2026", doc_id="doc-4", jurisdiction="DE"),
            make_document("Appel du jugement signifié le 02/02/2026", doc_id="doc-5", jurisdiction="FR")
        ]

        deadlines = service.derive_deadlines_from_documents("case-1", docs, now=now)
        validator = DataValidator()

        assert deadlines
        for deadline in deadlines:
            assert validator.validate_deadline(deadline) == []
        for doc in docs:
            assert sum(1 for d in deadlines if d.source_doc_ids == [doc.id]) <= 9

    def test_no_documents(self, service, now):
        assert service.derive_deadlines_from_documents("case-1", [], now=now) == []
