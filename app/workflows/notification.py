"""
app/workflows/notification.py

Structured payload for the email relay notification that accompanies an
API submission.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from app.domain.application import (
    COMMON_FIELDS,
    CONFIRMATION_FLAG,
    INTERNAL_FLAGS,
    ORGANIZATIONS_FIELD,
    as_list,
    is_file,
)
from app.domain.organization import Organization

PROJECT_DETAILS = "project_details"
APPLICANT_INFO = "applicant_info"
ADDITIONAL_INFO = "additional_info"

NOTIFICATION_TEMPLATE = "grant_application"

FIELD_BUCKETS: dict[str, str] = {
    "project_name": PROJECT_DETAILS,
    "project_description": PROJECT_DETAILS,
    "short_description": PROJECT_DETAILS,
    "main_focus": PROJECT_DETAILS,
    "potential_impact": PROJECT_DETAILS,
    "focus_area_description": PROJECT_DETAILS,
    "grant_purpose": PROJECT_DETAILS,
    "github": PROJECT_DETAILS,
    "license": PROJECT_DETAILS,
    "free_open_source": PROJECT_DETAILS,
    "duration": PROJECT_DETAILS,
    "timelines": PROJECT_DETAILS,
    "commitment": PROJECT_DETAILS,
    "proposed_budget": PROJECT_DETAILS,
    "has_received_funding": PROJECT_DETAILS,
    "what_funding": PROJECT_DETAILS,
    "your_name": APPLICANT_INFO,
    "name": APPLICANT_INFO,
    "email": APPLICANT_INFO,
    "personal_github": APPLICANT_INFO,
    "twitter": APPLICANT_INFO,
    "linkedin": APPLICANT_INFO,
    "website": APPLICANT_INFO,
    "city": APPLICANT_INFO,
    "country": APPLICANT_INFO,
    "are_you_lead": APPLICANT_INFO,
    "other_lead": APPLICANT_INFO,
    "other_contact": APPLICANT_INFO,
    "bios": APPLICANT_INFO,
    "years_experience": APPLICANT_INFO,
    "technical_background": APPLICANT_INFO,
    "bitcoin_contributions": APPLICANT_INFO,
    "why_considered": APPLICANT_INFO,
}


def partition_fields(
    application: Mapping[str, Any],
    organization: Organization,
) -> dict[str, dict[str, Any]]:
    """
    Split relevant application fields into the three notification buckets.

    A field is relevant when it has a bucket, takes part in the organization's
    field mapping, or is a common field. Relevant fields without a bucket land
    in additional info.
    """

    mapped_fields = set(organization.field_mapping) | set(organization.field_mapping.values())
    buckets: dict[str, dict[str, Any]] = {
        PROJECT_DETAILS: {},
        APPLICANT_INFO: {},
        ADDITIONAL_INFO: {},
    }

    for key, value in application.items():
        if key in INTERNAL_FLAGS or key == ORGANIZATIONS_FIELD or is_file(value):
            continue
        if key not in FIELD_BUCKETS and key not in mapped_fields and key not in COMMON_FIELDS:
            continue
        buckets[FIELD_BUCKETS.get(key, ADDITIONAL_INFO)][key] = value

    return buckets


def build_notification_payload(
    application: Mapping[str, Any],
    organization: Organization,
) -> dict[str, Any]:
    buckets = partition_fields(application, organization)
    config = organization.workflow_config
    return {
        "applicant_name": application.get("your_name") or application.get("name"),
        "applicant_email": application.get("email"),
        "project_name": application.get("project_name"),
        PROJECT_DETAILS: buckets[PROJECT_DETAILS],
        APPLICANT_INFO: buckets[APPLICANT_INFO],
        ADDITIONAL_INFO: buckets[ADDITIONAL_INFO],
        "recipients": list(config.email_recipients),
        "subject": config.email_subject or f"New Grant Application for {organization.name}",
        "template": NOTIFICATION_TEMPLATE,
        CONFIRMATION_FLAG: bool(application.get(CONFIRMATION_FLAG, False)),
        ORGANIZATIONS_FIELD: [str(item) for item in as_list(application.get(ORGANIZATIONS_FIELD))],
    }
