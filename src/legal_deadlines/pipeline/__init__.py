"""
Pipeline orchestration for legal deadline derivation
"""

from .main_pipeline import DeadlineAutomationService, DerivationResult, PipelineConfig

__all__ = [
    'DeadlineAutomationService',
    'DerivationResult',
    'PipelineConfig'
]
