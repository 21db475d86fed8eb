"""
Core derivation modules for the legal deadline engine
"""

from .models import CaseDeadline, CaseFile, DateCandidate, DeadlineTemplate, LegalDocumentRecord
from .templates import DEADLINE_TEMPLATES, match_templates, template_matches_jurisdiction
from .date_extractor import parse_date_candidates_with_index
from .base_date_selector import pick_base_date, pick_event_anchored_base_date
from .confidence_scorer import ConfidenceScorer, compute_detection_confidence
from .evidence_collector import collect_evidence_snippets
from .deadline_calculator import LegalDeadlineCalculator, add_duration, normalize_to_business_day
from .case_store import CaseStore, DynamoDBCaseStore
from .mock_case_store import MockCaseStore

__all__ = [
    'CaseDeadline',
    'CaseFile',
    'DateCandidate',
    'DeadlineTemplate',
    'LegalDocumentRecord',
    'DEADLINE_TEMPLATES',
    'match_templates',
    'template_matches_jurisdiction',
    'parse_date_candidates_with_index',
    'pick_base_date',
    'pick_event_anchored_base_date',
    'ConfidenceScorer',
    'compute_detection_confidence',
    'collect_evidence_snippets',
    'LegalDeadlineCalculator',
    'add_duration',
    'normalize_to_business_day',
    'CaseStore',
    'DynamoDBCaseStore',
    'MockCaseStore'
]
