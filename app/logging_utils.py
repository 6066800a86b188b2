"""
app/logging_utils.py

Dispatch audit log lines. Each line is a compact JSON object so per-organization
outcomes can be grepped and parsed from the application log.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from app.domain.organization import Organization
from app.domain.submission import SubmissionOutcomeSet, SubmissionResult

_MAX_ERROR_CHARS = 300


def _summarize_error(error: Any) -> str | None:
    if error is None:
        return None
    text = error if isinstance(error, str) else json.dumps(error, default=str)
    if len(text) > _MAX_ERROR_CHARS:
        return text[:_MAX_ERROR_CHARS] + "..."
    return text


def _emit(logger: logging.Logger, level: int, event: str, fields: dict[str, Any]) -> None:
    logger.log(level, json.dumps({"event": event, **fields}, default=str, sort_keys=True))


def log_submission_outcome(
    logger: logging.Logger,
    organization: Organization,
    result: SubmissionResult,
    *,
    position: int,
    total: int,
) -> None:
    """
    One line per organization, at WARNING when the submission failed.
    """

    fields: dict[str, Any] = {
        "organization": organization.id,
        "workflow_type": organization.workflow_type,
        "success": result.success,
        "position": position,
        "total": total,
    }
    if not result.success:
        fields["message"] = result.message
        fields["error"] = _summarize_error(result.error)
    _emit(
        logger,
        logging.INFO if result.success else logging.WARNING,
        "organization_submission_finished",
        fields,
    )


def log_dispatch_summary(logger: logging.Logger, outcomes: SubmissionOutcomeSet) -> None:
    fields: dict[str, Any] = dict(outcomes.summary())
    if outcomes.failed_ids:
        fields["failed_organizations"] = outcomes.failed_ids
    _emit(logger, logging.INFO, "application_dispatch_finished", fields)
