"""
tests/test_api_handler.py

ApiWorkflowHandler: payload shaping, headers, primary call outcome and the
best-effort relay notification.
"""

from __future__ import annotations

import json

import pytest
import requests

from app.config import ApiCredentialSettings, EmailRelaySettings
from app.domain.application import FileUpload
from app.domain.organization import Organization, WorkflowConfig
from app.workflows.handlers.api_handler import ApiWorkflowHandler
from app.workflows.transforms import OPENSATS_REQUIRED_FIELDS
from tests.conftest import RELAY_URL, FakeSession, make_response

API_URL = "https://opensats.example.test/api/github"


def _opensats(**overrides) -> Organization:
    values = dict(
        id="opensats",
        name="OpenSats",
        active=True,
        workflow_implemented=True,
        workflow_type="api",
        api_url=API_URL,
        field_mapping={"name": "your_name", "main_focus": "main_focus"},
        workflow_config=WorkflowConfig(
            email_recipients=["grants@opensats.example"],
            email_subject="New OpenSats Application",
        ),
    )
    values.update(overrides)
    return Organization(**values)


def _application() -> dict:
    return {
        "name": "Satoshi",
        "email": "satoshi@example.org",
        "project_name": "Timechain",
        "project_description": "Peer-to-peer electronic cash.",
        "main_focus": "layer1",
        "internal_note": "do not send",
        "isSendingConfirmation": True,
        "organizations": "opensats",
        "budget_sheet": FileUpload(buffer=b"data", filename="b.pdf", mimetype="application/pdf", size=4),
    }


@pytest.fixture()
def session() -> FakeSession:
    return FakeSession(
        {
            API_URL: make_response(200, {"id": 42}),
            RELAY_URL: make_response(200, {"message": "success"}),
        }
    )


@pytest.fixture()
def handler(session, http_settings, credentials, relay_settings) -> ApiWorkflowHandler:
    return ApiWorkflowHandler(
        http_settings=http_settings,
        credentials=credentials,
        email_relay=relay_settings,
        session=session,
    )


def test_successful_submission_returns_remote_body(handler, session) -> None:
    result = handler.submit(_application(), _opensats())

    assert result.success is True
    assert result.data == {"id": 42}
    assert session.calls[0].method == "POST"
    assert session.calls[0].url == API_URL


def test_payload_contains_only_mapped_and_common_fields(handler, session) -> None:
    handler.submit(_application(), _opensats())

    payload = session.calls_to(API_URL)[0].json
    assert payload["your_name"] == "Satoshi"
    assert payload["main_focus"] == "layer1"
    assert payload["project_name"] == "Timechain"
    assert "internal_note" not in payload
    assert "isSendingConfirmation" not in payload
    assert "budget_sheet" not in payload


def test_scalar_organizations_are_coerced_to_list(handler, session) -> None:
    handler.submit(_application(), _opensats())

    assert session.calls_to(API_URL)[0].json["organizations"] == ["opensats"]


def test_opensats_transforms_are_applied(handler, session) -> None:
    handler.submit(_application(), _opensats())

    payload = session.calls_to(API_URL)[0].json
    assert payload["short_description"] == "Peer-to-peer electronic cash."
    assert payload["general_fund"] is True
    assert payload["source"] == "common-grant-app"


def test_default_headers_include_bearer_token(handler, session) -> None:
    handler.submit(_application(), _opensats())

    headers = session.calls_to(API_URL)[0].headers
    assert headers["Content-Type"] == "application/json"
    assert headers["Authorization"] == "Bearer test-key"


def test_configured_authorization_is_not_replaced(handler, session) -> None:
    organization = _opensats(
        workflow_config=WorkflowConfig(api_headers={"Authorization": "Token abc"}),
    )

    handler.submit(_application(), organization)

    assert session.calls_to(API_URL)[0].headers == {"Authorization": "Token abc"}


def test_configured_method_is_used(handler, session) -> None:
    handler.submit(_application(), _opensats(workflow_config=WorkflowConfig(api_method="PUT")))

    assert session.calls_to(API_URL)[0].method == "PUT"


def test_missing_api_url_fails_without_calls(handler, session) -> None:
    result = handler.submit(_application(), _opensats(api_url=None))

    assert result.success is False
    assert result.error == "API URL is not configured for this organization"
    assert session.calls == []


def test_remote_rejection_carries_error_body(handler, session) -> None:
    session.routes[API_URL] = make_response(422, {"detail": "license is required"})

    result = handler.submit(_application(), _opensats())

    assert result.success is False
    assert result.error == {"detail": "license is required"}
    assert session.calls_to(RELAY_URL) == []


def test_network_failure_carries_exception_message(handler, session) -> None:
    session.routes[API_URL] = requests.ConnectionError("connection refused")

    result = handler.submit(_application(), _opensats())

    assert result.success is False
    assert result.error == "connection refused"


def test_notification_is_sent_with_buckets(handler, session) -> None:
    application = {**_application(), "organizations": ["opensats", "hrf"], "anything_else": "hi"}
    organization = _opensats(field_mapping={"name": "your_name", "anything_else": "anything_else"})

    handler.submit(application, organization)

    payload = session.calls_to(RELAY_URL)[0].json
    assert payload["applicant_email"] == "satoshi@example.org"
    assert payload["project_name"] == "Timechain"
    assert payload["project_details"]["project_description"] == "Peer-to-peer electronic cash."
    assert payload["applicant_info"]["your_name"] == "Satoshi"
    assert payload["additional_info"] == {"anything_else": "hi"}
    assert payload["recipients"] == ["grants@opensats.example"]
    assert payload["subject"] == "New OpenSats Application"
    assert payload["isSendingConfirmation"] is True
    assert payload["organizations"] == ["opensats", "hrf"]
    assert "budget_sheet" not in payload["additional_info"]
    assert "internal_note" not in payload["additional_info"]


def test_notification_failure_does_not_change_result(handler, session) -> None:
    session.routes[RELAY_URL] = requests.Timeout("relay timed out")

    result = handler.submit(_application(), _opensats())

    assert result.success is True
    assert len(session.calls_to(RELAY_URL)) == 1


def test_notification_non_success_marker_is_ignored(handler, session) -> None:
    session.routes[RELAY_URL] = make_response(200, {"message": "queued"})

    assert handler.submit(_application(), _opensats()).success is True


def test_notification_skipped_without_relay_url(session, http_settings) -> None:
    handler = ApiWorkflowHandler(
        http_settings=http_settings,
        credentials=ApiCredentialSettings(),
        email_relay=EmailRelaySettings(url=None),
        session=session,
    )

    result = handler.submit(_application(), _opensats())

    assert result.success is True
    assert [call.url for call in session.calls] == [API_URL]
    assert "Authorization" not in session.calls[0].headers


def test_other_organizations_get_no_notification(handler, session) -> None:
    organization = _opensats(id="maelstrom", name="Maelstrom")

    handler.submit(_application(), organization)

    assert session.calls_to(RELAY_URL) == []


def test_repeated_file_field_is_left_out_of_payload(handler, session) -> None:
    application = {
        **_application(),
        "attachments": [
            FileUpload(buffer=b"a", filename="a.pdf", mimetype="application/pdf", size=1),
            FileUpload(buffer=b"b", filename="b.pdf", mimetype="application/pdf", size=1),
        ],
    }
    organization = _opensats(field_mapping={"name": "your_name", "attachments": "attachments"})

    result = handler.submit(application, organization)

    assert result.success is True
    payload = session.calls_to(API_URL)[0].json
    assert "attachments" not in payload
    json.dumps(payload)
    assert "attachments" not in session.calls_to(RELAY_URL)[0].json["additional_info"]


def test_sparse_application_still_sends_required_opensats_fields(handler, session) -> None:
    handler.submit({"name": "Satoshi", "project_description": "Cash"}, _opensats())

    payload = session.calls_to(API_URL)[0].json
    for field_name in OPENSATS_REQUIRED_FIELDS:
        assert field_name in payload
    assert payload["license"] == ""
    assert payload["your_name"] == "Satoshi"
    assert payload["short_description"] == "Cash"
    assert payload["general_fund"] is True
