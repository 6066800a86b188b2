"""
app/schemas package marker.
"""

from app.schemas.submission import (
    OrganizationResponse,
    SubmissionBatchResponse,
    SubmissionResultResponse,
)

__all__ = [
    "OrganizationResponse",
    "SubmissionBatchResponse",
    "SubmissionResultResponse",
]
