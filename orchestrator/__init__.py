"""
Orchestration package for running conversion jobs.

This package sequences the stages of a conversion (Resolve → Retrieve →
Query → Convert) and reports on the outcome.
"""

from .conversion_orchestrator import ConversionFailed, ConversionOrchestrator
from .conversion_report import ConversionReport

__all__ = [
    'ConversionFailed',
    'ConversionOrchestrator',
    'ConversionReport'
]
