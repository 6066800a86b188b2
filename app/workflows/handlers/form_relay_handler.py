"""
app/workflows/handlers/form_relay_handler.py

Submission handler for hosted form endpoints (Google Forms style relays).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

import requests

from app.domain.application import is_defined
from app.domain.organization import Organization, WorkflowType
from app.domain.submission import SubmissionResult
from app.workflows.base import SubmissionError, WorkflowHandler, select_fields
from app.workflows.field_mapper import map_fields

logger = logging.getLogger(__name__)

FORM_SUCCESS_STATUS_CODES = {200, 302}
DATE_OF_BIRTH_FIELD = "date_of_birth"

_FALLBACK_DATE_FORMATS = ("%m/%d/%Y", "%B %d, %Y", "%b %d, %Y", "%d %B %Y")


def parse_date(value: str) -> date | None:
    """
    Parse an ISO date or datetime, or a few common written formats.
    """

    raw = value.strip()
    if not raw:
        return None

    normalized = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
    try:
        return datetime.fromisoformat(normalized).date()
    except ValueError:
        pass

    for date_format in _FALLBACK_DATE_FORMATS:
        try:
            return datetime.strptime(raw, date_format).date()
        except ValueError:
            continue
    return None


def derive_date_parts(fields: Mapping[str, Any], field_name: str = DATE_OF_BIRTH_FIELD) -> dict[str, str]:
    """
    Year, month and day components of a date field as un-padded strings.
    """

    value = fields.get(field_name)
    if not isinstance(value, str):
        return {}
    parsed = parse_date(value)
    if parsed is None:
        logger.debug("Skipping unparseable %s value=%r", field_name, value)
        return {}
    return {
        f"{field_name}_year": str(parsed.year),
        f"{field_name}_month": str(parsed.month),
        f"{field_name}_day": str(parsed.day),
    }


def form_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(str(item) for item in value)
    return str(value)


class FormRelayWorkflowHandler(WorkflowHandler):
    """
    Posts a URL-encoded form body built from the organization's form field table.
    """

    workflow_type = WorkflowType.GOOGLE_FORM.value

    def submit(self, application: Mapping[str, Any], organization: Organization) -> SubmissionResult:
        config = organization.workflow_config
        try:
            if not config.form_url:
                raise SubmissionError("Form URL is not configured for this organization")
            if not config.form_fields:
                raise SubmissionError("Form fields are not configured for this organization")

            mapped = map_fields(application, organization.field_mapping)
            relevant = select_fields(mapped, config.form_fields.keys())
            for key, value in derive_date_parts(relevant).items():
                if not is_defined(relevant.get(key)):
                    relevant[key] = value
            form_data = self.build_form_data(relevant, config.form_fields)

            logger.info(
                "Submitting form organization=%s url=%s fields=%d",
                organization.id,
                config.form_url,
                len(form_data),
            )
            response = self._request(
                method="POST",
                url=config.form_url,
                data=form_data,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                allow_redirects=False,
            )
            logger.info(
                "Form response organization=%s status=%s",
                organization.id,
                response.status_code,
            )
            if response.status_code not in FORM_SUCCESS_STATUS_CODES:
                raise SubmissionError(
                    f"Form endpoint returned status {response.status_code}",
                    detail=self.response_body(response) or f"HTTP {response.status_code}",
                )
        except (SubmissionError, requests.RequestException) as exc:
            logger.error(
                "Form submission failed organization=%s error=%s",
                organization.id,
                exc,
            )
            return SubmissionResult.failure(
                f"Failed to submit application to {organization.name} (Google Form)",
                self.error_detail(exc),
            )
        except Exception as exc:
            logger.exception("Unexpected form submission failure organization=%s", organization.id)
            return SubmissionResult.failure(
                f"Failed to submit application to {organization.name} (Google Form)",
                str(exc),
            )

        return SubmissionResult(
            success=True,
            message=f"Application submitted successfully to {organization.name} (Google Form)",
            data={},
        )

    @staticmethod
    def build_form_data(fields: Mapping[str, Any], form_fields: Mapping[str, str]) -> dict[str, str]:
        form_data: dict[str, str] = {}
        for application_field, form_field in form_fields.items():
            value = form_value(fields.get(application_field))
            if value:
                form_data[form_field] = value
        return form_data
