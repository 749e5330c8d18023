"""
Reporting modules for the Flight Claims engine.
"""

from .pipeline import (
    PipelineReport,
    PipelineReportBuilder,
    PipelineReportFormatter,
    claims_frame,
)

__all__ = [
    "PipelineReport",
    "PipelineReportBuilder",
    "PipelineReportFormatter",
    "claims_frame",
]
