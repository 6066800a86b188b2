"""
app/domain package marker.
"""

from app.domain.application import Application, FileUpload
from app.domain.organization import Organization, WorkflowConfig, WorkflowType
from app.domain.submission import SubmissionOutcomeSet, SubmissionResult

__all__ = [
    "Application",
    "FileUpload",
    "Organization",
    "SubmissionOutcomeSet",
    "SubmissionResult",
    "WorkflowConfig",
    "WorkflowType",
]
