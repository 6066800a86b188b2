"""
app/services/submission_service.py

Dispatch of one application to the organizations an applicant selected.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from functools import lru_cache
from typing import Any

from app.domain.application import CONFIRMATION_FLAG, ORGANIZATIONS_FIELD
from app.domain.organization import Organization, WorkflowConfig, WorkflowType
from app.domain.submission import SubmissionOutcomeSet, SubmissionResult
from app.logging_utils import log_dispatch_summary, log_submission_outcome
from app.registry.loader import OrganizationRegistry, get_organization_registry
from app.workflows.factory import HandlerRegistry, get_handler_registry

logger = logging.getLogger(__name__)

CONFIRMATION_SUBJECT = "Your Grant Application Has Been Submitted"


class ConfirmationEmailError(RuntimeError):
    """
    Raised when the applicant confirmation email cannot be sent.
    """


class SubmissionService:
    """
    Routes an application to each organization's workflow handler in turn.
    """

    def __init__(
        self,
        *,
        organizations: OrganizationRegistry,
        handlers: HandlerRegistry,
    ) -> None:
        self._organizations = organizations
        self._handlers = handlers

    def select_organizations(self, organization_ids: Sequence[str]) -> list[Organization]:
        """
        Resolve selected ids in order, keeping active organizations with a
        wired-up workflow. Unknown and duplicate ids are dropped.
        """

        selected: list[Organization] = []
        seen: set[str] = set()
        for organization_id in organization_ids:
            if organization_id in seen:
                continue
            seen.add(organization_id)

            organization = self._organizations.get(organization_id)
            if organization is None:
                logger.warning("Ignoring unknown organization id=%s", organization_id)
                continue
            if not organization.is_dispatchable:
                logger.info(
                    "Ignoring organization id=%s active=%s workflow_implemented=%s",
                    organization.id,
                    organization.active,
                    organization.workflow_implemented,
                )
                continue
            selected.append(organization)
        return selected

    def submit_to_organization(
        self,
        application: Mapping[str, Any],
        organization: Organization,
    ) -> SubmissionResult:
        workflow_type = organization.workflow_type or WorkflowType.API.value
        handler = self._handlers.get_handler(workflow_type)
        if handler is None:
            return SubmissionResult.failure(
                f"No handler available for {organization.name} (workflow type: {workflow_type})",
                "Workflow handler not implemented",
            )

        try:
            return handler.submit(application, organization)
        except Exception as exc:
            logger.exception("Error in submission service organization=%s", organization.id)
            return SubmissionResult.failure(
                f"Failed to process submission for {organization.name}",
                str(exc) or "Unknown error",
            )

    def submit_batch(
        self,
        application: Mapping[str, Any],
        organizations: Sequence[Organization],
    ) -> SubmissionOutcomeSet:
        """
        Submit to each organization sequentially, in selection order.

        Every call sees the full selected id list; only the first organization
        is asked to send the applicant confirmation.
        """

        selected_ids = [organization.id for organization in organizations]
        outcomes = SubmissionOutcomeSet()

        for index, organization in enumerate(organizations):
            per_org_application = {
                **application,
                CONFIRMATION_FLAG: index == 0,
                ORGANIZATIONS_FIELD: list(selected_ids),
            }
            result = self.submit_to_organization(per_org_application, organization)
            outcomes.record(organization.id, result)
            log_submission_outcome(
                logger,
                organization,
                result,
                position=index + 1,
                total=len(organizations),
            )

        log_dispatch_summary(logger, outcomes)
        return outcomes

    def send_confirmation_email(
        self,
        application: Mapping[str, Any],
        summary: Mapping[str, int] | None = None,
    ) -> SubmissionResult:
        """
        Send the applicant a confirmation through the email relay handler.
        """

        applicant_email = application.get("email")
        if not isinstance(applicant_email, str) or not applicant_email.strip():
            raise ConfirmationEmailError("Applicant email is required")

        handler = self._handlers.get_handler(WorkflowType.EMAIL.value)
        if handler is None:
            raise ConfirmationEmailError("Email workflow handler not available")

        confirmation = Organization(
            id="confirmation",
            name="Confirmation Email",
            active=True,
            workflow_implemented=True,
            workflow_type=WorkflowType.EMAIL.value,
            workflow_config=WorkflowConfig(
                email_recipients=[applicant_email.strip()],
                email_subject=CONFIRMATION_SUBJECT,
            ),
        )
        payload = {**application, CONFIRMATION_FLAG: True}
        if summary is not None:
            payload["submissionSummary"] = dict(summary)

        result = handler.submit(payload, confirmation)
        if not result.success:
            raise ConfirmationEmailError(result.message)
        return result


@lru_cache(maxsize=1)
def get_submission_service() -> SubmissionService:
    """
    Return the process-wide submission service.
    """

    return SubmissionService(
        organizations=get_organization_registry(),
        handlers=get_handler_registry(),
    )
