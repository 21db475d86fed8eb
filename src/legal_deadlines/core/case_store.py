"""
Case Store
Persistence contract for derived deadlines and case files, with a DynamoDB implementation
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from decimal import Decimal
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import ClientError

from .models import CaseDeadline, CaseFile, to_iso, utc_now

logger = logging.getLogger(__name__)


class CaseStore(ABC):
    """
    Persistence collaborator used by deadline linking
    Implementations own retries; callers treat every call as fallible
    """

    @abstractmethod
    async def upsert_deadline(self, deadline: CaseDeadline) -> CaseDeadline:
        """Create or overwrite a deadline by id"""

    @abstractmethod
    async def upsert_case_file(self, case_file: CaseFile) -> CaseFile:
        """Create or overwrite a case file by id"""

    @abstractmethod
    async def get_case_file(self, case_id: str) -> Optional[CaseFile]:
        """Return the case file, or None when it does not exist"""


def _to_dynamo(value: Any) -> Any:
    """DynamoDB rejects floats; store them as Decimal"""
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {key: _to_dynamo(item) for key, item in value.items() if item is not None}
    if isinstance(value, (list, tuple)):
        return [_to_dynamo(item) for item in value]
    return value


def _from_dynamo(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {key: _from_dynamo(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_from_dynamo(item) for item in value]
    return value


class DynamoDBCaseStore(CaseStore):
    """
    Case store backed by two DynamoDB tables
    Deadlines are keyed by deadline_id, case files by case_id
    """

    def __init__(self,
                 deadlines_table: str = 'legal-deadlines',
                 case_files_table: str = 'case-files',
                 region: str = 'us-east-1',
                 dynamodb_resource=None):
        """
        Initialize DynamoDB tables

        Args:
            deadlines_table: Table holding deadline items
            case_files_table: Table holding case file items
            region: AWS region used when no resource is given
            dynamodb_resource: Existing boto3 DynamoDB resource (will create if not provided)
        """

        dynamodb = dynamodb_resource or boto3.resource('dynamodb', region_name=region)
        self.deadlines_table = dynamodb.Table(deadlines_table)
        self.case_files_table = dynamodb.Table(case_files_table)

        logger.info(f"DynamoDB case store initialized with tables: {deadlines_table}, {case_files_table}")

    async def upsert_deadline(self, deadline: CaseDeadline) -> CaseDeadline:
        item = _to_dynamo(deadline.to_dict())
        item['deadline_id'] = deadline.id

        try:
            self.deadlines_table.put_item(Item=item)
        except ClientError as e:
            logger.error(f"Failed to store deadline {deadline.id}: {e}")
            raise

        return deadline

    async def upsert_case_file(self, case_file: CaseFile) -> CaseFile:
        now = to_iso(utc_now())
        stored = replace(case_file, created_at=case_file.created_at or now, updated_at=now)

        item = _to_dynamo(stored.to_dict())
        item['case_id'] = stored.id

        try:
            self.case_files_table.put_item(Item=item)
        except ClientError as e:
            logger.error(f"Failed to store case file {case_file.id}: {e}")
            raise

        return stored

    async def get_case_file(self, case_id: str) -> Optional[CaseFile]:
        try:
            response = self.case_files_table.get_item(Key={'case_id': case_id})
        except ClientError as e:
            logger.error(f"Failed to load case file {case_id}: {e}")
            raise

        if 'Item' not in response:
            return None

        item: Dict = _from_dynamo(response['Item'])
        item.pop('case_id', None)
        item.setdefault('id', case_id)
        return CaseFile.from_dict(item)
