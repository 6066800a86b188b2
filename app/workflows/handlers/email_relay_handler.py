"""
app/workflows/handlers/email_relay_handler.py

Submission handler for organizations that receive applications by email.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import requests

from app.config import EmailRelaySettings, HTTPSettings
from app.domain.application import file_parts, is_file, to_json_safe
from app.domain.organization import Organization, WorkflowType
from app.domain.submission import SubmissionResult
from app.workflows.base import SubmissionError, WorkflowHandler
from app.workflows.field_mapper import map_fields

logger = logging.getLogger(__name__)

LARGE_FIELD_BYTES = 50 * 1024
VERY_LARGE_FIELD_BYTES = 500 * 1024
LARGE_APPLICATION_BYTES = 20 * 1024 * 1024


@dataclass(frozen=True)
class FieldSize:
    field: str
    size: int
    kind: str


@dataclass(frozen=True)
class ApplicationSizeReport:
    total_size: int
    field_sizes: list[FieldSize] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)


def analyze_application_size(application: Mapping[str, Any]) -> ApplicationSizeReport:
    """
    Measure each field and suggest reductions for oversized content.
    """

    sizes: list[FieldSize] = []
    for key, value in application.items():
        if value is None:
            sizes.append(FieldSize(field=key, size=0, kind="text"))
        elif is_file(value):
            size = sum(len(part.buffer) for part in file_parts(value))
            sizes.append(FieldSize(field=key, size=size, kind="file"))
        else:
            sizes.append(FieldSize(field=key, size=len(str(value).encode("utf-8")), kind="text"))
    sizes.sort(key=lambda item: item.size, reverse=True)
    total = sum(item.size for item in sizes)

    suggestions: list[str] = []
    for item in sizes:
        if item.size > VERY_LARGE_FIELD_BYTES:
            if item.kind == "file":
                suggestions.append(
                    f"Consider compressing or reducing the size of file: {item.field} "
                    f"({item.size / 1024 / 1024:.2f}MB)"
                )
            else:
                suggestions.append(
                    f"Consider shortening the text in: {item.field} ({item.size / 1024:.1f}KB)"
                )
        elif item.size > LARGE_FIELD_BYTES and item.kind == "text":
            suggestions.append(
                f"Field '{item.field}' is quite large ({item.size / 1024:.1f}KB). "
                "Consider summarizing if possible."
            )

    if not suggestions and total > LARGE_APPLICATION_BYTES:
        suggestions.append(
            "Overall application size is large. Consider removing unnecessary files or reducing text length."
        )

    return ApplicationSizeReport(total_size=total, field_sizes=sizes, suggestions=suggestions)


class EmailRelayWorkflowHandler(WorkflowHandler):
    """
    Forwards the mapped application to the email-dispatch relay.
    """

    workflow_type = WorkflowType.EMAIL.value

    def __init__(
        self,
        *,
        http_settings: HTTPSettings,
        email_relay: EmailRelaySettings,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(http_settings=http_settings, session=session)
        self._email_relay = email_relay

    def submit(self, application: Mapping[str, Any], organization: Organization) -> SubmissionResult:
        config = organization.workflow_config
        try:
            if not config.email_recipients:
                raise SubmissionError("Email recipients are not configured for this organization")
            if not self._email_relay.url:
                raise SubmissionError("Email relay URL is not configured (EMAIL_RELAY_URL)")

            mapped = map_fields(application, organization.field_mapping)
            payload = {
                "application": to_json_safe(mapped),
                "recipients": list(config.email_recipients),
                "subject": config.email_subject or f"New Grant Application for {organization.name}",
                "organization": organization.name,
            }
            self._check_payload_size(payload, mapped, organization)

            response = self._request(
                method="POST",
                url=self._email_relay.url,
                json_body=payload,
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
            body = self.response_body(response)
            if not isinstance(body, dict) or body.get("message") != "success":
                raise SubmissionError("Email relay did not confirm delivery", detail=body)
        except (SubmissionError, requests.RequestException) as exc:
            logger.error(
                "Email submission failed organization=%s error=%s",
                organization.id,
                exc,
            )
            return SubmissionResult.failure(
                f"Failed to submit application to {organization.name} (Email)",
                self.error_detail(exc),
            )
        except Exception as exc:
            logger.exception("Unexpected email submission failure organization=%s", organization.id)
            return SubmissionResult.failure(
                f"Failed to submit application to {organization.name} (Email)",
                str(exc),
            )

        return SubmissionResult(
            success=True,
            message=f"Application submitted successfully to {organization.name} (Email)",
            data=body,
        )

    def _check_payload_size(
        self,
        payload: Mapping[str, Any],
        mapped: Mapping[str, Any],
        organization: Organization,
    ) -> None:
        """
        Reject payloads the relay cannot deliver, naming the largest fields.
        """

        payload_bytes = len(json.dumps(payload, default=str).encode("utf-8"))
        report = analyze_application_size(mapped)
        logger.info(
            "Email submission organization=%s fields=%d payload_bytes=%d largest=%s",
            organization.id,
            len(report.field_sizes),
            payload_bytes,
            json.dumps([(item.field, item.size) for item in report.field_sizes[:5]]),
        )

        if payload_bytes > self._email_relay.max_payload_bytes:
            largest = ", ".join(
                f"{item.field} ({item.size / 1024:.1f}KB)" for item in report.field_sizes[:3]
            )
            raise SubmissionError(
                f"Email size too large for {organization.name}. Largest fields: {largest}"
            )

        if payload_bytes > self._email_relay.warn_payload_bytes:
            logger.warning(
                "Email payload is close to the relay limit organization=%s payload_bytes=%d",
                organization.id,
                payload_bytes,
            )
        for suggestion in report.suggestions:
            logger.warning("Size suggestion organization=%s: %s", organization.id, suggestion)
