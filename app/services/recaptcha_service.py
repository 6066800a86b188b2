"""
app/services/recaptcha_service.py

Bot verification against the reCAPTCHA siteverify endpoint.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache

import requests

from app.config import HTTPSettings, RecaptchaSettings, get_http_settings, get_recaptcha_settings

logger = logging.getLogger(__name__)

MISSING_SECRET_KEY = "missing-secret-key"
MISSING_INPUT_RESPONSE = "missing-input-response"
REQUEST_FAILED = "verification-request-failed"


@dataclass(frozen=True)
class VerificationResult:
    success: bool
    error_codes: list[str] = field(default_factory=list)


class RecaptchaVerifier:
    """
    Verifies client tokens. Every failure mode is reported, never raised.
    """

    def __init__(
        self,
        *,
        settings: RecaptchaSettings,
        http_settings: HTTPSettings,
        session: requests.Session | None = None,
    ) -> None:
        self._settings = settings
        self._timeout_seconds = http_settings.timeout_seconds
        self._session = session or requests.Session()

    def verify(self, token: str | None, remote_ip: str | None = None) -> VerificationResult:
        if not self._settings.secret_key:
            logger.error("RECAPTCHA_SECRET_KEY is missing; rejecting verification.")
            return VerificationResult(success=False, error_codes=[MISSING_SECRET_KEY])
        if not token:
            return VerificationResult(success=False, error_codes=[MISSING_INPUT_RESPONSE])

        form = {"secret": self._settings.secret_key, "response": token}
        if remote_ip:
            form["remoteip"] = remote_ip

        try:
            response = self._session.post(
                self._settings.verify_url,
                data=form,
                timeout=self._timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error("reCAPTCHA verification request failed error=%s", exc)
            return VerificationResult(success=False, error_codes=[REQUEST_FAILED])

        if not isinstance(payload, dict):
            return VerificationResult(success=False, error_codes=[REQUEST_FAILED])

        error_codes = [str(code) for code in payload.get("error-codes", []) or []]
        success = payload.get("success") is True
        if not success:
            logger.warning("reCAPTCHA verification rejected error_codes=%s", error_codes)
        return VerificationResult(success=success, error_codes=error_codes)


@lru_cache(maxsize=1)
def get_recaptcha_verifier() -> RecaptchaVerifier:
    """
    Return the process-wide verifier.
    """

    return RecaptchaVerifier(
        settings=get_recaptcha_settings(),
        http_settings=get_http_settings(),
    )
