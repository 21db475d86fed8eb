"""
Domain Models
Records exchanged between document ingestion, deadline derivation and case persistence
"""

import re
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

# Closed jurisdiction code set; EU and ECHR are supranational overlays
JURISDICTIONS = ('AT', 'DE', 'CH', 'FR', 'IT', 'PT', 'PL', 'EU', 'ECHR')
OVERLAY_JURISDICTIONS = ('EU', 'ECHR')

PRIORITIES = ('critical', 'high', 'medium', 'low')
PRIORITY_SCORES = {
    'critical': 4,
    'high': 3,
    'medium': 2,
    'low': 1
}

DEADLINE_STATUSES = ('open', 'alerted', 'acknowledged', 'completed', 'expired')

DERIVED_FROM_TEMPLATE = 'auto_template'
DERIVED_FROM_LIMITATION = 'limitation_rule'

MAX_TEXT_CHARS = 30_000
MAX_AUTO_DEADLINES_PER_DOC = 8

# Single boundary between auto-trusted and human-reviewed deadlines
REVIEW_THRESHOLD = 0.78
MIN_CONFIDENCE = 0.35
MAX_CONFIDENCE = 0.97


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> datetime:
    """Current UTC time for None; naive datetimes are taken as UTC"""
    if value is None:
        return utc_now()
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_iso(value: datetime) -> str:
    """Render a datetime as a UTC instant with millisecond precision, e.g. 2026-02-24T09:00:00.000Z"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime('%Y-%m-%dT%H:%M:%S.') + f"{value.microsecond // 1000:03d}Z"


def parse_iso(value: str) -> datetime:
    """Parse an ISO instant (trailing Z allowed) into an aware UTC datetime"""
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _camel_to_snake(name: str) -> str:
    return re.sub(r'(?<!^)(?=[A-Z])', '_', name).lower()


def _normalize_keys(data: Dict) -> Dict:
    return {_camel_to_snake(key): value for key, value in data.items()}


@dataclass
class LegalDocumentRecord:
    """Normalized document as delivered by the ingestion pipeline"""
    id: str
    title: str
    raw_text: str = ""
    normalized_text: Optional[str] = None
    detected_jurisdiction: Optional[str] = None
    case_id: Optional[str] = None
    workspace_id: Optional[str] = None

    @property
    def text(self) -> str:
        # normalized text wins even when empty
        if self.normalized_text is not None:
            return self.normalized_text
        return self.raw_text or ""

    @classmethod
    def from_dict(cls, data: Dict) -> "LegalDocumentRecord":
        values = _normalize_keys(data)
        return cls(
            id=values['id'],
            title=values.get('title', values['id']),
            raw_text=values.get('raw_text') or "",
            normalized_text=values.get('normalized_text'),
            detected_jurisdiction=values.get('detected_jurisdiction'),
            case_id=values.get('case_id'),
            workspace_id=values.get('workspace_id')
        )


@dataclass(frozen=True)
class DeadlineTemplate:
    """Static rule describing when and how a statutory deadline is derived"""
    id_suffix: str
    title: str
    trigger: re.Pattern
    jurisdictions: Tuple[str, ...]
    priority: str
    reminder_offsets_in_minutes: Tuple[int, ...]
    base_event_hints: Tuple[re.Pattern, ...] = ()
    add_days: int = 0
    add_months: int = 0

    @property
    def has_event_hints(self) -> bool:
        return len(self.base_event_hints) > 0


@dataclass(frozen=True)
class DateCandidate:
    date: datetime
    index: int


@dataclass
class CaseDeadline:
    """Deadline record linked to a case"""
    id: str
    title: str
    due_at: str
    source_doc_ids: List[str]
    status: str
    priority: str
    reminder_offsets_in_minutes: List[int]
    created_at: str
    updated_at: str
    derived_from: Optional[str] = None
    base_event_at: Optional[str] = None
    detection_confidence: Optional[float] = None
    requires_review: Optional[bool] = None
    evidence_snippets: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> "CaseDeadline":
        values = _normalize_keys(data)
        confidence = values.get('detection_confidence')
        return cls(
            id=values['id'],
            title=values['title'],
            due_at=values['due_at'],
            source_doc_ids=list(values.get('source_doc_ids') or []),
            status=values.get('status', 'open'),
            priority=values.get('priority', 'medium'),
            reminder_offsets_in_minutes=[int(v) for v in values.get('reminder_offsets_in_minutes') or []],
            created_at=values['created_at'],
            updated_at=values.get('updated_at', values['created_at']),
            derived_from=values.get('derived_from'),
            base_event_at=values.get('base_event_at'),
            detection_confidence=float(confidence) if confidence is not None else None,
            requires_review=values.get('requires_review'),
            evidence_snippets=list(values.get('evidence_snippets') or [])
        )


@dataclass
class CaseFile:
    """Case record; only deadline_ids is touched by deadline linking"""
    id: str
    workspace_id: str
    title: str
    deadline_ids: List[str] = field(default_factory=list)
    actor_ids: List[str] = field(default_factory=list)
    issue_ids: List[str] = field(default_factory=list)
    memory_event_ids: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    matter_id: Optional[str] = None
    summary: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> "CaseFile":
        values = _normalize_keys(data)
        return cls(
            id=values['id'],
            workspace_id=values.get('workspace_id', ''),
            title=values.get('title', ''),
            deadline_ids=list(values.get('deadline_ids') or []),
            actor_ids=list(values.get('actor_ids') or []),
            issue_ids=list(values.get('issue_ids') or []),
            memory_event_ids=list(values.get('memory_event_ids') or []),
            tags=list(values.get('tags') or []),
            matter_id=values.get('matter_id'),
            summary=values.get('summary'),
            created_at=values.get('created_at'),
            updated_at=values.get('updated_at')
        )
