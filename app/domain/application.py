"""
app/domain/application.py

Canonical application record shared by every submission workflow.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any

CONFIRMATION_FLAG = "isSendingConfirmation"
ORGANIZATIONS_FIELD = "organizations"

INTERNAL_FLAGS = frozenset({CONFIRMATION_FLAG})

COMMON_FIELDS = (
    "name",
    "email",
    "project_name",
    "project_description",
    ORGANIZATIONS_FIELD,
)

Application = dict[str, Any]


@dataclass(frozen=True)
class FileUpload:
    """
    Binary file part received with an application.
    """

    buffer: bytes
    filename: str
    mimetype: str
    size: int

    def to_attachment(self) -> dict[str, Any]:
        """
        Render the file as a JSON-safe attachment descriptor.
        """

        return {
            "filename": self.filename,
            "mimetype": self.mimetype,
            "size": self.size,
            "content": base64.b64encode(self.buffer).decode("ascii"),
        }


def is_file(value: Any) -> bool:
    """
    Whether a field holds an uploaded file, or several under one field name.
    """

    if isinstance(value, FileUpload):
        return True
    if isinstance(value, (list, tuple)) and value:
        return any(isinstance(item, FileUpload) for item in value)
    return False


def file_parts(value: Any) -> list[FileUpload]:
    if isinstance(value, FileUpload):
        return [value]
    if isinstance(value, (list, tuple)):
        return [item for item in value if isinstance(item, FileUpload)]
    return []


def is_defined(value: Any) -> bool:
    """
    Whether a field value counts as present on an application.
    """

    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def as_list(value: Any) -> list[Any]:
    """
    Coerce a scalar or sequence field into a list.
    """

    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def to_json_safe(application: Application) -> dict[str, Any]:
    """
    Copy an application replacing file uploads with attachment descriptors.
    """

    safe: dict[str, Any] = {}
    for key, value in application.items():
        if isinstance(value, FileUpload):
            safe[key] = value.to_attachment()
        elif isinstance(value, (list, tuple)):
            safe[key] = [
                item.to_attachment() if isinstance(item, FileUpload) else item
                for item in value
            ]
        else:
            safe[key] = value
    return safe
