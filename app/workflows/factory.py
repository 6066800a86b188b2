"""
Workflow handler registry and factory.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from functools import lru_cache

import requests

from app.config import (
    ApiCredentialSettings,
    EmailRelaySettings,
    HTTPSettings,
    get_api_credential_settings,
    get_email_relay_settings,
    get_http_settings,
)
from app.domain.organization import WorkflowType
from app.workflows.base import WorkflowHandler
from app.workflows.handlers import (
    ApiWorkflowHandler,
    EmailRelayWorkflowHandler,
    FormRelayWorkflowHandler,
)

logger = logging.getLogger(__name__)

HandlerBuilder = Callable[[], WorkflowHandler]


class HandlerRegistry:
    """
    One lazily built, cached handler instance per workflow type.
    """

    def __init__(
        self,
        *,
        http_settings: HTTPSettings,
        credentials: ApiCredentialSettings,
        email_relay: EmailRelaySettings,
        session: requests.Session | None = None,
        builders: Mapping[str, HandlerBuilder] | None = None,
    ) -> None:
        shared_session = session or requests.Session()
        builtins: dict[str, HandlerBuilder] = {
            WorkflowType.API.value: lambda: ApiWorkflowHandler(
                http_settings=http_settings,
                credentials=credentials,
                email_relay=email_relay,
                session=shared_session,
            ),
            WorkflowType.GOOGLE_FORM.value: lambda: FormRelayWorkflowHandler(
                http_settings=http_settings,
                session=shared_session,
            ),
            WorkflowType.EMAIL.value: lambda: EmailRelayWorkflowHandler(
                http_settings=http_settings,
                email_relay=email_relay,
                session=shared_session,
            ),
        }
        if builders:
            builtins.update(builders)
        self._builders = builtins
        self._handlers: dict[str, WorkflowHandler] = {}

    def get_handler(self, workflow_type: str) -> WorkflowHandler | None:
        """
        Return the cached handler for a workflow type, or None when unknown.
        """

        cached = self._handlers.get(workflow_type)
        if cached is not None:
            return cached

        builder = self._builders.get(workflow_type)
        if builder is None:
            logger.warning("No handler available for workflow type: %s", workflow_type)
            return None

        handler = builder()
        self._handlers[workflow_type] = handler
        return handler

    def register(self, workflow_type: str, handler: WorkflowHandler) -> None:
        """
        Register a custom handler, replacing any cached instance for the type.
        """

        self._handlers[workflow_type] = handler

    def registered_types(self) -> list[str]:
        return sorted(set(self._builders) | set(self._handlers))


@lru_cache(maxsize=1)
def get_handler_registry() -> HandlerRegistry:
    """
    Return the process-wide handler registry.
    """

    return HandlerRegistry(
        http_settings=get_http_settings(),
        credentials=get_api_credential_settings(),
        email_relay=get_email_relay_settings(),
    )
