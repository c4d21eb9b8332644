"""
Service layer for coordinating business logic.

This package contains high-level services that coordinate the analytics to
produce complete reports.
"""

from .analysis_service import AnalysisService, AnalysisServiceProtocol

__all__ = [
    "AnalysisService",
    "AnalysisServiceProtocol",
]
