"""
app/workflows/handlers/api_handler.py

Submission handler for organizations that accept JSON over a REST API.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import requests

from app.config import ApiCredentialSettings, EmailRelaySettings, HTTPSettings
from app.domain.application import ORGANIZATIONS_FIELD, as_list
from app.domain.organization import Organization, WorkflowType
from app.domain.submission import SubmissionResult
from app.workflows.base import SubmissionError, WorkflowHandler, select_fields
from app.workflows.field_mapper import map_fields
from app.workflows.notification import build_notification_payload
from app.workflows.transforms import apply_transforms, transforms_for

logger = logging.getLogger(__name__)

DEFAULT_API_HEADERS = {"Content-Type": "application/json"}

# Organizations that receive a relay notification alongside the API call.
NOTIFIED_ORGANIZATIONS = frozenset({"opensats"})


class ApiWorkflowHandler(WorkflowHandler):
    """
    Posts a filtered, organization-shaped JSON payload to the organization API.
    """

    workflow_type = WorkflowType.API.value

    def __init__(
        self,
        *,
        http_settings: HTTPSettings,
        credentials: ApiCredentialSettings,
        email_relay: EmailRelaySettings,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(http_settings=http_settings, session=session)
        self._credentials = credentials
        self._email_relay = email_relay

    def submit(self, application: Mapping[str, Any], organization: Organization) -> SubmissionResult:
        try:
            if not organization.api_url:
                raise SubmissionError("API URL is not configured for this organization")

            mapped = map_fields(application, organization.field_mapping)
            payload = self.build_payload(mapped, organization)
            headers = self.resolve_headers(organization)
            method = organization.workflow_config.api_method or "POST"

            logger.info(
                "Submitting application organization=%s method=%s url=%s fields=%d",
                organization.id,
                method,
                organization.api_url,
                len(payload),
            )
            response = self._request(
                method=method,
                url=organization.api_url,
                json_body=payload,
                headers=headers,
            )
            response.raise_for_status()
        except (SubmissionError, requests.RequestException) as exc:
            logger.error(
                "API submission failed organization=%s error=%s",
                organization.id,
                exc,
            )
            return SubmissionResult.failure(
                f"Failed to submit application to {organization.name}",
                self.error_detail(exc),
            )
        except Exception as exc:
            logger.exception("Unexpected API submission failure organization=%s", organization.id)
            return SubmissionResult.failure(
                f"Failed to submit application to {organization.name}",
                str(exc),
            )

        if organization.id in NOTIFIED_ORGANIZATIONS:
            self._send_notification(mapped, organization)

        return SubmissionResult(
            success=True,
            message=f"Application submitted successfully to {organization.name}",
            data=self.response_body(response),
        )

    def build_payload(self, mapped: Mapping[str, Any], organization: Organization) -> dict[str, Any]:
        """
        Filter the mapped application to the organization's fields and normalize it.
        """

        mapping = organization.field_mapping
        payload = select_fields(mapped, [*mapping.keys(), *mapping.values()])
        payload = apply_transforms(payload, mapped, transforms_for(organization.id))
        if ORGANIZATIONS_FIELD in payload:
            payload[ORGANIZATIONS_FIELD] = as_list(payload[ORGANIZATIONS_FIELD])
        return payload

    def resolve_headers(self, organization: Organization) -> dict[str, str]:
        headers = dict(organization.workflow_config.api_headers or DEFAULT_API_HEADERS)
        if organization.id == "opensats" and "Authorization" not in headers:
            api_key = self._credentials.opensats_api_key
            if api_key:
                headers["Authorization"] = f"Bearer {api_key}"
            else:
                logger.warning("OPENSATS_API_KEY is not set; submitting without authorization.")
        return headers

    def _send_notification(self, mapped: Mapping[str, Any], organization: Organization) -> None:
        """
        Best-effort relay notification. Failures are logged and never surfaced.
        """

        relay_url = self._email_relay.url
        if not relay_url:
            logger.warning(
                "EMAIL_RELAY_URL is not configured; skipping notification organization=%s",
                organization.id,
            )
            return

        try:
            response = self._request(
                method="POST",
                url=relay_url,
                json_body=build_notification_payload(mapped, organization),
                headers=DEFAULT_API_HEADERS,
            )
            response.raise_for_status()
            body = self.response_body(response)
            if not isinstance(body, dict) or body.get("message") != "success":
                logger.warning(
                    "Notification relay returned non-success organization=%s body=%s",
                    organization.id,
                    body,
                )
        except Exception as exc:
            logger.error(
                "Notification relay failed organization=%s error=%s",
                organization.id,
                exc,
            )
