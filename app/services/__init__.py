"""
app/services package marker.
"""

from app.services.recaptcha_service import RecaptchaVerifier, VerificationResult, get_recaptcha_verifier
from app.services.submission_service import (
    ConfirmationEmailError,
    SubmissionService,
    get_submission_service,
)

__all__ = [
    "ConfirmationEmailError",
    "RecaptchaVerifier",
    "SubmissionService",
    "VerificationResult",
    "get_recaptcha_verifier",
    "get_submission_service",
]
