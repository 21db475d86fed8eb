"""
Mock Case Store for Testing
Keeps deadlines and case files in memory without requiring DynamoDB
"""

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Tuple

from .case_store import CaseStore
from .models import CaseDeadline, CaseFile, to_iso, utc_now

logger = logging.getLogger(__name__)


class MockCaseStore(CaseStore):
    """
    In-memory case store for tests and local runs
    Records every write in call order
    """

    def __init__(self, case_files: Optional[Iterable[CaseFile]] = None):
        """Initialize mock case store"""

        self.deadlines: Dict[str, CaseDeadline] = {}
        self.case_files: Dict[str, CaseFile] = {
            case_file.id: case_file for case_file in (case_files or [])
        }
        self.calls: List[Tuple[str, str]] = []

        logger.info("Mock case store initialized for testing")

    async def upsert_deadline(self, deadline: CaseDeadline) -> CaseDeadline:
        self.calls.append(("upsert_deadline", deadline.id))
        self.deadlines[deadline.id] = deadline
        return deadline

    async def upsert_case_file(self, case_file: CaseFile) -> CaseFile:
        self.calls.append(("upsert_case_file", case_file.id))
        now = to_iso(utc_now())
        stored = replace(case_file, created_at=case_file.created_at or now, updated_at=now)
        self.case_files[stored.id] = stored
        return stored

    async def get_case_file(self, case_id: str) -> Optional[CaseFile]:
        self.calls.append(("get_case_file", case_id))
        return self.case_files.get(case_id)
