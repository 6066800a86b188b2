from __future__ import annotations

import unittest

from app.config import ApiCredentialSettings, EmailRelaySettings, HTTPSettings
from app.domain.submission import SubmissionResult
from app.workflows.base import WorkflowHandler
from app.workflows.factory import HandlerRegistry
from app.workflows.handlers import (
    ApiWorkflowHandler,
    EmailRelayWorkflowHandler,
    FormRelayWorkflowHandler,
)
from tests.conftest import FakeSession


class _StaticHandler(WorkflowHandler):
    workflow_type = "webhook"

    def submit(self, application, organization):
        return SubmissionResult(success=True, message="static")


def _registry(**kwargs) -> HandlerRegistry:
    return HandlerRegistry(
        http_settings=HTTPSettings(timeout_seconds=5.0),
        credentials=ApiCredentialSettings(),
        email_relay=EmailRelaySettings(url=None),
        session=FakeSession(),
        **kwargs,
    )


class TestHandlerRegistry(unittest.TestCase):
    def test_builtin_types_resolve_to_handlers(self) -> None:
        registry = _registry()

        self.assertIsInstance(registry.get_handler("api"), ApiWorkflowHandler)
        self.assertIsInstance(registry.get_handler("googleForm"), FormRelayWorkflowHandler)
        self.assertIsInstance(registry.get_handler("email"), EmailRelayWorkflowHandler)

    def test_handler_instances_are_cached(self) -> None:
        registry = _registry()

        self.assertIs(registry.get_handler("api"), registry.get_handler("api"))

    def test_unknown_type_returns_none(self) -> None:
        registry = _registry()

        with self.assertLogs("app.workflows.factory", level="WARNING"):
            self.assertIsNone(registry.get_handler("carrier-pigeon"))

    def test_register_replaces_builtin(self) -> None:
        registry = _registry()
        custom = _StaticHandler(http_settings=HTTPSettings())

        registry.get_handler("api")
        registry.register("api", custom)

        self.assertIs(registry.get_handler("api"), custom)

    def test_custom_builders_extend_types(self) -> None:
        registry = _registry(builders={"webhook": lambda: _StaticHandler(http_settings=HTTPSettings())})

        self.assertIsInstance(registry.get_handler("webhook"), _StaticHandler)
        self.assertEqual(registry.registered_types(), ["api", "email", "googleForm", "webhook"])


if __name__ == "__main__":
    unittest.main()
