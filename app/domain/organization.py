"""
app/domain/organization.py

Static funding organization descriptors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class WorkflowType(str, Enum):
    """
    Transport category used to reach an organization.
    """

    API = "api"
    GOOGLE_FORM = "googleForm"
    EMAIL = "email"


@dataclass(frozen=True)
class WorkflowConfig:
    """
    Transport-specific settings for one organization.
    """

    api_headers: dict[str, str] = field(default_factory=dict)
    api_method: str = "POST"
    form_url: str | None = None
    form_fields: dict[str, str] = field(default_factory=dict)
    email_recipients: list[str] = field(default_factory=list)
    email_subject: str | None = None


@dataclass(frozen=True)
class Organization:
    """
    One funding organization an application can be dispatched to.
    """

    id: str
    name: str
    description: str = ""
    website: str = ""
    active: bool = False
    workflow_implemented: bool = False
    workflow_type: str = WorkflowType.API.value
    api_url: str | None = None
    field_mapping: dict[str, str] = field(default_factory=dict)
    workflow_config: WorkflowConfig = field(default_factory=WorkflowConfig)

    @property
    def is_dispatchable(self) -> bool:
        return self.active and self.workflow_implemented
