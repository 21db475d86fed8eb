"""
Main Pipeline Orchestrator
Derives legal deadlines from case documents and links them into the case record
"""

import argparse
import asyncio
import json
import logging
import os
import re
import sys
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from dotenv import load_dotenv

from ..core.base_date_selector import pick_base_date, pick_event_anchored_base_date
from ..core.case_store import CaseStore, DynamoDBCaseStore
from ..core.confidence_scorer import ConfidenceScorer
from ..core.date_extractor import parse_date_candidates_with_index
from ..core.deadline_calculator import LegalDeadlineCalculator, add_duration, normalize_to_business_day
from ..core.evidence_collector import collect_evidence_snippets
from ..core.models import (
    CaseDeadline,
    DERIVED_FROM_LIMITATION,
    DERIVED_FROM_TEMPLATE,
    LegalDocumentRecord,
    MAX_TEXT_CHARS,
    ensure_utc,
    parse_iso,
    to_iso
)
from ..core.templates import match_templates
from ..utils.data_validator import DataValidator
from ..utils.logger import AuditLogger, setup_logger

logger = logging.getLogger(__name__)

# Regular limitation period (§§ 195, 199 BGB): three years from the end of the year of knowledge
LIMITATION_TRIGGER = re.compile(r'\b(verjährung|kenntnis|anspruch\s+entstanden)\b', re.IGNORECASE)
LIMITATION_ID_SUFFIX = 'verjaehrung'
LIMITATION_YEARS = 3
LIMITATION_TITLE = 'Regelverjährung prüfen (§§ 195, 199 BGB)'
LIMITATION_CONFIDENCE = 0.74
LIMITATION_PRIORITY = 'high'
LIMITATION_REMINDERS = [43200, 20160, 10080, 4320, 1440]
LIMITATION_EVIDENCE = 'Verjährungshinweis im Dokument erkannt. Bitte Fristbeginn fachlich prüfen.'


@dataclass
class PipelineConfig:
    """Configuration for deadline derivation and persistence"""
    deadlines_table: str = "legal-deadlines"
    case_files_table: str = "case-files"
    aws_region: str = "us-east-1"
    audit_log_path: Optional[str] = None
    log_level: str = "INFO"
    log_dir: Optional[str] = None

    @classmethod
    def from_env(cls, env_file: str = ".env.local") -> "PipelineConfig":
        """Build configuration from environment variables (and .env.local when present)"""
        load_dotenv(env_file)
        defaults = cls()
        return cls(
            deadlines_table=os.getenv("DEADLINES_TABLE", defaults.deadlines_table),
            case_files_table=os.getenv("CASE_FILES_TABLE", defaults.case_files_table),
            aws_region=os.getenv("AWS_REGION", defaults.aws_region),
            audit_log_path=os.getenv("AUDIT_LOG_PATH") or None,
            log_level=os.getenv("LOG_LEVEL", defaults.log_level),
            log_dir=os.getenv("LOG_DIR") or None
        )


@dataclass
class DerivationResult:
    """Result of deriving and persisting deadlines for one case"""
    case_id: str
    deadlines: List[CaseDeadline] = field(default_factory=list)
    upserted_count: int = 0
    requires_review_count: int = 0
    skipped_document_ids: List[str] = field(default_factory=list)


def create_case_store(config: PipelineConfig) -> DynamoDBCaseStore:
    return DynamoDBCaseStore(
        deadlines_table=config.deadlines_table,
        case_files_table=config.case_files_table,
        region=config.aws_region
    )


class DeadlineAutomationService:
    """
    Derives deadlines from document text and links them to a case

    Derivation is pure and deterministic for a fixed reference time. Only
    upsert_auto_deadlines touches the case store.
    """

    def __init__(self,
                 case_store: Optional[CaseStore] = None,
                 config: Optional[PipelineConfig] = None,
                 audit_logger: Optional[AuditLogger] = None):
        """
        Initialize service

        Args:
            case_store: Persistence collaborator for deadlines and case files
            config: Pipeline configuration
            audit_logger: Audit trail writer (built from config when omitted)
        """

        self.config = config or PipelineConfig()
        self.case_store = case_store
        self.confidence_scorer = ConfidenceScorer()
        self.validator = DataValidator()

        if audit_logger is None and self.config.audit_log_path:
            audit_logger = AuditLogger(self.config.audit_log_path)
        self.audit_logger = audit_logger

    def derive_deadlines_from_documents(self,
                                        case_id: str,
                                        docs: Sequence[LegalDocumentRecord],
                                        workspace_id: Optional[str] = None,
                                        now: Optional[datetime] = None) -> List[CaseDeadline]:
        """
        Derive deadlines for every document of a case

        Args:
            case_id: Case the deadlines belong to
            docs: Documents to scan
            workspace_id: Workspace of the case (informational)
            now: Reference time, defaults to the current UTC time

        Returns:
            Deadlines unique by id
        """

        deadlines, _ = self._derive(case_id, docs, ensure_utc(now))
        return deadlines

    def _derive(self,
                case_id: str,
                docs: Sequence[LegalDocumentRecord],
                now: datetime) -> Tuple[List[CaseDeadline], List[str]]:
        timestamp = to_iso(now)
        output: List[CaseDeadline] = []
        skipped: List[str] = []

        for doc in docs:
            if not self.validator.validate_document(doc):
                skipped.append(getattr(doc, 'id', None) or '')
                continue

            text = doc.text[:MAX_TEXT_CHARS]
            if not text.strip():
                skipped.append(doc.id)
                continue

            output.extend(self._derive_for_document(case_id, doc, text, now, timestamp))

        # Last write wins per id
        dedup: Dict[str, CaseDeadline] = {}
        for deadline in output:
            dedup[deadline.id] = deadline

        logger.debug(f"Derived {len(dedup)} deadlines for case {case_id} from {len(docs)} documents")
        return list(dedup.values()), skipped

    def _derive_for_document(self,
                             case_id: str,
                             doc: LegalDocumentRecord,
                             text: str,
                             now: datetime,
                             timestamp: str) -> List[CaseDeadline]:
        candidates = parse_date_candidates_with_index(text)
        default_base_date = pick_base_date([candidate.date for candidate in candidates], now)
        jurisdiction = doc.detected_jurisdiction

        deadlines = []
        for template in match_templates(text, jurisdiction):
            anchored = pick_event_anchored_base_date(text, template, candidates, now)
            base_date = anchored or default_base_date

            confidence = self.confidence_scorer.calculate(
                anchored_base_date=anchored,
                date_candidate_count=len(candidates),
                has_event_hints=template.has_event_hints
            )

            due_at = normalize_to_business_day(
                add_duration(base_date, template.add_days, template.add_months)
            )

            deadlines.append(CaseDeadline(
                id=self._deadline_id(case_id, doc.id, template.id_suffix, due_at),
                title=f"{template.title} — {doc.title}",
                due_at=to_iso(due_at),
                derived_from=DERIVED_FROM_TEMPLATE,
                base_event_at=to_iso(base_date),
                detection_confidence=confidence,
                requires_review=self.confidence_scorer.requires_review(confidence),
                evidence_snippets=collect_evidence_snippets(text, template),
                source_doc_ids=[doc.id],
                status='open',
                priority=template.priority,
                reminder_offsets_in_minutes=list(template.reminder_offsets_in_minutes),
                created_at=timestamp,
                updated_at=timestamp
            ))

        if (not jurisdiction or jurisdiction == 'DE') and LIMITATION_TRIGGER.search(text):
            deadlines.append(self._limitation_deadline(case_id, doc, default_base_date, timestamp))

        return deadlines

    def _limitation_deadline(self,
                             case_id: str,
                             doc: LegalDocumentRecord,
                             knowledge_date: datetime,
                             timestamp: str) -> CaseDeadline:
        """
        Year-end limitation check; always routed to review

        The three years are added to 31.12. of the knowledge year before the
        business-day shift. Shifting the knowledge year's 31.12. first and
        adding three years afterwards could end on a weekend or on 02.01.
        """

        year_end = datetime(knowledge_date.year + LIMITATION_YEARS, 12, 31, 9, tzinfo=timezone.utc)
        due_at = normalize_to_business_day(year_end)

        return CaseDeadline(
            id=self._deadline_id(case_id, doc.id, LIMITATION_ID_SUFFIX, due_at),
            title=f"{LIMITATION_TITLE} — {doc.title}",
            due_at=to_iso(due_at),
            derived_from=DERIVED_FROM_LIMITATION,
            base_event_at=to_iso(knowledge_date),
            detection_confidence=LIMITATION_CONFIDENCE,
            requires_review=True,
            evidence_snippets=[LIMITATION_EVIDENCE],
            source_doc_ids=[doc.id],
            status='open',
            priority=LIMITATION_PRIORITY,
            reminder_offsets_in_minutes=list(LIMITATION_REMINDERS),
            created_at=timestamp,
            updated_at=timestamp
        )

    @staticmethod
    def _deadline_id(case_id: str, doc_id: str, suffix: str, due_at: datetime) -> str:
        return f"deadline:auto:{case_id}:{doc_id}:{suffix}:{due_at.date().isoformat()}"

    async def upsert_auto_deadlines(self,
                                    case_id: str,
                                    deadlines: Sequence[CaseDeadline],
                                    workspace_id: Optional[str] = None) -> int:
        """
        Persist derived deadlines and link them into the case file

        Deadlines are written one after another in the given order. The case
        file update is a plain read-modify-write without version check, so
        concurrent runs for the same case can overwrite each other's links.
        Store errors propagate to the caller.

        Args:
            case_id: Case to link the deadlines to
            deadlines: Deadlines to persist
            workspace_id: Workspace of the case (informational)

        Returns:
            Number of deadlines processed
        """

        if self.case_store is None:
            raise ValueError("No case store configured")

        for deadline in deadlines:
            await self.case_store.upsert_deadline(deadline)

        linked = False
        if deadlines:
            case_file = await self.case_store.get_case_file(case_id)
            if case_file is not None:
                # dict preserves insertion order: prior ids first, then new ones
                deadline_ids = list(dict.fromkeys(
                    list(case_file.deadline_ids) + [deadline.id for deadline in deadlines]
                ))
                await self.case_store.upsert_case_file(replace(case_file, deadline_ids=deadline_ids))
                linked = True
            else:
                logger.info(f"Case {case_id} not found, deadlines stored without case link")

        if self.audit_logger:
            self.audit_logger.log("deadline.auto_upserted", {
                "case_id": case_id,
                "workspace_id": workspace_id,
                "deadline_ids": [deadline.id for deadline in deadlines],
                "case_linked": linked
            })

        logger.info(f"Upserted {len(deadlines)} auto deadlines for case {case_id}")
        return len(deadlines)

    async def process_documents(self,
                                case_id: str,
                                docs: Sequence[LegalDocumentRecord],
                                workspace_id: Optional[str] = None,
                                now: Optional[datetime] = None) -> DerivationResult:
        """
        Derive deadlines and persist them in one step

        Args:
            case_id: Case the documents belong to
            docs: Documents to scan
            workspace_id: Workspace of the case
            now: Reference time, defaults to the current UTC time

        Returns:
            DerivationResult with the derived deadlines and counts
        """

        deadlines, skipped = self._derive(case_id, docs, ensure_utc(now))
        upserted = await self.upsert_auto_deadlines(case_id, deadlines, workspace_id)

        return DerivationResult(
            case_id=case_id,
            deadlines=deadlines,
            upserted_count=upserted,
            requires_review_count=sum(1 for d in deadlines if d.requires_review),
            skipped_document_ids=skipped
        )


def _read_documents(paths: Sequence[str], jurisdiction: Optional[str]) -> List[LegalDocumentRecord]:
    documents = []
    for path in paths:
        file_path = Path(path)
        documents.append(LegalDocumentRecord(
            id=file_path.stem,
            title=file_path.name,
            raw_text=file_path.read_text(encoding='utf-8'),
            detected_jurisdiction=jurisdiction
        ))
    return documents


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="legal-deadlines",
        description="Derive legal deadlines from case documents"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    derive = subparsers.add_parser("derive", help="Derive deadlines from text files")
    derive.add_argument("files", nargs="+", help="Normalized document text files")
    derive.add_argument("--case-id", required=True)
    derive.add_argument("--workspace-id")
    derive.add_argument("--jurisdiction", help="Detected jurisdiction code, e.g. DE")
    derive.add_argument("--now", help="Reference time as ISO date or instant")
    derive.add_argument("--persist", action="store_true", help="Upsert into DynamoDB and link the case")

    calculate = subparsers.add_parser("calculate", help="Calculate deadlines for a deadline type")
    calculate.add_argument("--type", dest="deadline_type", required=True)
    calculate.add_argument("--trigger-date", required=True)
    calculate.add_argument("--jurisdiction", default="DE")

    subparsers.add_parser("types", help="List deadline types for calculate")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command line entry point"""

    args = build_parser().parse_args(argv)
    config = PipelineConfig.from_env()
    setup_logger("legal_deadlines", config.log_level, config.log_dir)

    if args.command == "calculate":
        result = LegalDeadlineCalculator().calculate(args.jurisdiction, args.trigger_date, args.deadline_type)
        print(json.dumps(result, indent=2, ensure_ascii=False))
        return 0 if result['ok'] else 1

    if args.command == "types":
        print(json.dumps(LegalDeadlineCalculator().get_available_types(), indent=2, ensure_ascii=False))
        return 0

    now = parse_iso(args.now) if args.now else None
    documents = _read_documents(args.files, args.jurisdiction)

    if args.persist:
        service = DeadlineAutomationService(case_store=create_case_store(config), config=config)
        result = asyncio.run(service.process_documents(args.case_id, documents, args.workspace_id, now))
        deadlines = result.deadlines
    else:
        service = DeadlineAutomationService(config=config)
        deadlines = service.derive_deadlines_from_documents(args.case_id, documents, args.workspace_id, now)

    print(json.dumps([deadline.to_dict() for deadline in deadlines], indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
