"""
app/schemas/submission.py

Response schemas for the intake endpoints.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class SubmissionResultResponse(BaseModel):
    """
    API response model for one organization's submission outcome.
    """

    success: bool
    message: str
    data: Any = None
    error: Any = None


class SubmissionBatchResponse(BaseModel):
    """
    API response model for a dispatched application.
    """

    success: bool
    message: str
    partial: bool = False
    data: dict[str, SubmissionResultResponse] = Field(default_factory=dict)


class OrganizationResponse(BaseModel):
    """
    API response model for an organization offered to applicants.
    """

    id: str
    name: str
    description: str = ""
    website: str = ""
    workflow_type: str
    workflow_implemented: bool
