"""
Utility modules for the legal deadline engine
"""

from .data_validator import DataValidator
from .logger import setup_logger, AuditLogger

__all__ = [
    'DataValidator',
    'setup_logger',
    'AuditLogger'
]
