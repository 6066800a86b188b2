"""
app/api/routers/submission.py

Grant application intake HTTP endpoints.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from app.api.dependencies import IntakeForm, IntakeRequestError, get_intake_form
from app.domain.submission import SubmissionOutcomeSet
from app.registry.loader import OrganizationRegistry, get_organization_registry
from app.schemas.submission import (
    OrganizationResponse,
    SubmissionBatchResponse,
    SubmissionResultResponse,
)
from app.services.recaptcha_service import RecaptchaVerifier, get_recaptcha_verifier
from app.services.submission_service import SubmissionService, get_submission_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["submissions"])


@router.post(
    "/submit",
    response_model=SubmissionBatchResponse,
    response_model_exclude_none=True,
)
def submit_application(
    intake: IntakeForm = Depends(get_intake_form),
    verifier: RecaptchaVerifier = Depends(get_recaptcha_verifier),
    submission_service: SubmissionService = Depends(get_submission_service),
) -> SubmissionBatchResponse:
    """
    Verify the applicant and dispatch the application to every valid selected organization.
    """

    try:
        return _dispatch_application(intake, verifier, submission_service)
    except IntakeRequestError:
        raise
    except Exception as exc:
        logger.exception("Unexpected failure while handling application submission")
        raise IntakeRequestError(
            "Internal server error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=str(exc),
        ) from exc


def _dispatch_application(
    intake: IntakeForm,
    verifier: RecaptchaVerifier,
    submission_service: SubmissionService,
) -> SubmissionBatchResponse:
    if not intake.recaptcha_token:
        raise IntakeRequestError("reCAPTCHA token is required")

    verification = verifier.verify(intake.recaptcha_token, remote_ip=intake.remote_ip)
    if not verification.success:
        raise IntakeRequestError(
            "reCAPTCHA verification failed",
            details=", ".join(verification.error_codes) or None,
        )

    if not intake.organization_ids:
        raise IntakeRequestError("No organizations selected")

    organizations = submission_service.select_organizations(intake.organization_ids)
    if not organizations:
        raise IntakeRequestError("No valid organizations selected")

    outcomes = submission_service.submit_batch(intake.application, organizations)
    if outcomes.is_empty:
        raise IntakeRequestError(
            "No organizations processed",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details="Valid organizations were selected but none were processed.",
        )

    return SubmissionBatchResponse(
        success=outcomes.success,
        message=_batch_message(outcomes),
        partial=outcomes.partial,
        data={
            organization_id: SubmissionResultResponse(**result.to_dict())
            for organization_id, result in outcomes.results.items()
        },
    )


@router.get("/organizations", response_model=list[OrganizationResponse])
def list_organizations(
    registry: OrganizationRegistry = Depends(get_organization_registry),
) -> list[OrganizationResponse]:
    """
    List the organizations applicants may select.
    """

    return [
        OrganizationResponse(
            id=organization.id,
            name=organization.name,
            description=organization.description,
            website=organization.website,
            workflow_type=organization.workflow_type,
            workflow_implemented=organization.workflow_implemented,
        )
        for organization in registry.offered()
    ]


def _batch_message(outcomes: SubmissionOutcomeSet) -> str:
    summary = outcomes.summary()
    if outcomes.success:
        return f"Application submitted successfully to {summary['total']} organization(s)"
    if outcomes.partial:
        return (
            f"Application partially submitted: {summary['successful']} of {summary['total']} "
            f"organizations succeeded (failed: {', '.join(outcomes.failed_ids)})"
        )
    return "Application submission failed for all selected organizations"
