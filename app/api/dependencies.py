"""
app/api/dependencies.py

Shared FastAPI dependencies for request parsing and validation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from fastapi import Request, status
from starlette.datastructures import UploadFile

from app.domain.application import ORGANIZATIONS_FIELD, Application, FileUpload

RECAPTCHA_FIELD = "recaptchaToken"

_BOOLEAN_VALUES = {"true": True, "false": False}


class IntakeRequestError(Exception):
    """
    Request-level failure rendered as `{"error": ...}` with a status code.
    """

    def __init__(
        self,
        error: str,
        *,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: str | None = None,
    ) -> None:
        super().__init__(error)
        self.error = error
        self.status_code = status_code
        self.details = details

    def to_dict(self) -> dict[str, str]:
        payload = {"error": self.error}
        if self.details is not None:
            payload["details"] = self.details
        return payload


@dataclass
class IntakeForm:
    """
    Parsed multipart intake request.
    """

    application: Application = field(default_factory=dict)
    organization_ids: list[str] = field(default_factory=list)
    recaptcha_token: str | None = None
    remote_ip: str | None = None


async def _to_file_upload(upload: UploadFile) -> FileUpload:
    buffer = await upload.read()
    await upload.close()
    return FileUpload(
        buffer=buffer,
        filename=upload.filename or "",
        mimetype=upload.content_type or "application/octet-stream",
        size=len(buffer),
    )


def _coerce_text(value: str) -> str | bool:
    return _BOOLEAN_VALUES.get(value, value)


async def get_intake_form(request: Request) -> IntakeForm:
    """
    Parse the multipart body into an application and the selected organizations.

    `organizations` always yields a list. Other repeated keys become lists and
    file parts become FileUpload descriptors.
    """

    form = await request.form()
    collected: dict[str, list[Any]] = {}
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            if not value.filename:
                continue
            parsed: Any = await _to_file_upload(value)
        else:
            parsed = _coerce_text(value) if key != ORGANIZATIONS_FIELD else value
        collected.setdefault(key, []).append(parsed)

    token_values = collected.pop(RECAPTCHA_FIELD, [])
    token = token_values[0] if token_values and isinstance(token_values[0], str) else None

    organization_ids = [
        str(item).strip()
        for item in collected.pop(ORGANIZATIONS_FIELD, [])
        if isinstance(item, str) and item.strip()
    ]

    application: Application = {
        key: values[0] if len(values) == 1 else values
        for key, values in collected.items()
    }
    application[ORGANIZATIONS_FIELD] = list(organization_ids)

    return IntakeForm(
        application=application,
        organization_ids=organization_ids,
        recaptcha_token=token.strip() if token else None,
        remote_ip=request.client.host if request.client else None,
    )
