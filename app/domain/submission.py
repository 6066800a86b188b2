"""
app/domain/submission.py

Per-organization submission outcomes and their per-request aggregate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class SubmissionResult:
    """
    Normalized outcome of one organization submission.
    """

    success: bool
    message: str
    data: Any = None
    error: Any = None

    @classmethod
    def failure(cls, message: str, error: Any = None) -> SubmissionResult:
        return cls(success=False, message=message, error=error)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": self.success, "message": self.message}
        if self.data is not None:
            payload["data"] = self.data
        if self.error is not None:
            payload["error"] = self.error
        return payload


@dataclass
class SubmissionOutcomeSet:
    """
    Results keyed by organization id, in dispatch order.
    """

    results: dict[str, SubmissionResult] = field(default_factory=dict)

    def record(self, organization_id: str, result: SubmissionResult) -> None:
        self.results[organization_id] = result

    def __len__(self) -> int:
        return len(self.results)

    @property
    def is_empty(self) -> bool:
        return not self.results

    @property
    def succeeded_ids(self) -> list[str]:
        return [org_id for org_id, result in self.results.items() if result.success]

    @property
    def failed_ids(self) -> list[str]:
        return [org_id for org_id, result in self.results.items() if not result.success]

    @property
    def success(self) -> bool:
        """
        True only when at least one organization ran and every one succeeded.
        """

        return bool(self.results) and not self.failed_ids

    @property
    def partial(self) -> bool:
        """
        True when at least one, but not all, organizations succeeded.
        """

        return bool(self.succeeded_ids) and bool(self.failed_ids)

    def summary(self) -> dict[str, int]:
        return {
            "total": len(self.results),
            "successful": len(self.succeeded_ids),
            "failed": len(self.failed_ids),
        }

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {org_id: result.to_dict() for org_id, result in self.results.items()}
