"""
app/workflows/base.py

Workflow handler abstraction and shared HTTP mechanics.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Any

import requests

from app.config import HTTPSettings
from app.domain.application import COMMON_FIELDS, INTERNAL_FLAGS, is_file
from app.domain.organization import Organization
from app.domain.submission import SubmissionResult

logger = logging.getLogger(__name__)


class SubmissionError(RuntimeError):
    """
    Raised inside a handler when a submission cannot be completed.

    Handlers convert it into a failed SubmissionResult before returning.
    """

    def __init__(self, message: str, *, detail: Any = None) -> None:
        super().__init__(message)
        self.detail = detail if detail is not None else message


class WorkflowHandler(ABC):
    """
    Handler interface for delivering an application to one kind of endpoint.
    """

    workflow_type: str

    def __init__(
        self,
        *,
        http_settings: HTTPSettings,
        session: requests.Session | None = None,
    ) -> None:
        self._session = session or requests.Session()
        self._timeout_seconds = http_settings.timeout_seconds

    @abstractmethod
    def submit(self, application: Mapping[str, Any], organization: Organization) -> SubmissionResult:
        """
        Deliver the application and return a normalized result. Never raises.
        """

    def _request(
        self,
        *,
        method: str,
        url: str,
        json_body: Any = None,
        data: Any = None,
        headers: Mapping[str, str] | None = None,
        allow_redirects: bool = True,
    ) -> requests.Response:
        """
        Execute one outbound HTTP request. No retries are attempted.
        """

        return self._session.request(
            method=method,
            url=url,
            json=json_body,
            data=data,
            headers=dict(headers or {}),
            timeout=self._timeout_seconds,
            allow_redirects=allow_redirects,
        )

    @staticmethod
    def response_body(response: requests.Response | None) -> Any:
        """
        Return the parsed JSON body of a response, falling back to its text.
        """

        if response is None:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text or None

    @classmethod
    def error_detail(cls, exc: Exception) -> Any:
        """
        Prefer the remote error body when the exception carries a response.
        """

        if isinstance(exc, SubmissionError):
            return exc.detail
        response = getattr(exc, "response", None)
        body = cls.response_body(response) if isinstance(response, requests.Response) else None
        return body if body else str(exc)


def select_fields(
    application: Mapping[str, Any],
    allowed_fields: Iterable[str],
) -> dict[str, Any]:
    """
    Keep allowed and common fields, dropping internal flags and file uploads.
    """

    allowed = set(allowed_fields) | set(COMMON_FIELDS)
    return {
        key: value
        for key, value in application.items()
        if key in allowed and key not in INTERNAL_FLAGS and not is_file(value)
    }
