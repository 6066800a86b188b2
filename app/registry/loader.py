"""
JSON loader for the static organization registry.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterator, Sequence
from functools import lru_cache

from app.config import get_registry_settings, resolve_project_path
from app.domain.organization import Organization, WorkflowConfig, WorkflowType

logger = logging.getLogger(__name__)

_ALLOWED_METHODS = {"POST", "PUT", "PATCH"}


class OrganizationRegistry:
    """
    Read-only lookup of organizations by id, preserving configuration order.
    """

    def __init__(self, organizations: Sequence[Organization]) -> None:
        self._organizations: dict[str, Organization] = {}
        for organization in organizations:
            if organization.id in self._organizations:
                raise ValueError(f"Duplicate organization id '{organization.id}' in registry.")
            self._organizations[organization.id] = organization

    def get(self, organization_id: str) -> Organization | None:
        return self._organizations.get(organization_id)

    def __contains__(self, organization_id: object) -> bool:
        return organization_id in self._organizations

    def __iter__(self) -> Iterator[Organization]:
        return iter(self._organizations.values())

    def __len__(self) -> int:
        return len(self._organizations)

    def offered(self) -> list[Organization]:
        """
        Organizations that may be shown to applicants.
        """

        return [organization for organization in self if organization.active]


def load_organizations(*, config_path: str) -> OrganizationRegistry:
    """
    Load organization descriptors from a JSON file.
    """

    path = resolve_project_path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Organization registry file not found: {path}")

    raw_data = json.loads(path.read_text(encoding="utf-8"))
    entries = raw_data.get("organizations", [])
    if not isinstance(entries, list):
        raise ValueError("Invalid organization registry: 'organizations' must be a list.")

    parsed: list[Organization] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue

        organization_id = str(entry.get("id", "")).strip()
        name = str(entry.get("name", "")).strip()
        if not organization_id or not name:
            logger.warning("Skipping registry entry without id or name entry=%s", entry)
            continue

        parsed.append(
            Organization(
                id=organization_id,
                name=name,
                description=str(entry.get("description", "")).strip(),
                website=str(entry.get("website", "")).strip(),
                active=_optional_bool(entry.get("active"), False),
                workflow_implemented=_optional_bool(entry.get("workflow_implemented"), False),
                workflow_type=_workflow_type(entry.get("workflow_type")),
                api_url=_env_override(entry.get("api_url_env"), entry.get("api_url")),
                field_mapping=_normalize_str_mapping(entry.get("field_mapping", {})),
                workflow_config=_parse_workflow_config(entry.get("workflow_config", {})),
            )
        )

    return OrganizationRegistry(parsed)


@lru_cache(maxsize=1)
def get_organization_registry() -> OrganizationRegistry:
    """
    Return the process-wide organization registry.
    """

    settings = get_registry_settings()
    registry = load_organizations(config_path=settings.config_path)
    logger.info("Loaded %d organizations from %s", len(registry), settings.config_path)
    return registry


def _parse_workflow_config(raw: object) -> WorkflowConfig:
    if not isinstance(raw, dict):
        return WorkflowConfig()

    method = str(raw.get("api_method", "POST")).strip().upper() or "POST"
    if method not in _ALLOWED_METHODS:
        raise ValueError(f"Unsupported api_method '{method}'. Allowed: {sorted(_ALLOWED_METHODS)}.")

    return WorkflowConfig(
        api_headers=_normalize_str_mapping(raw.get("api_headers", {})),
        api_method=method,
        form_url=_env_override(raw.get("form_url_env"), raw.get("form_url")),
        form_fields=_normalize_str_mapping(raw.get("form_fields", {})),
        email_recipients=_normalize_str_list(raw.get("email_recipients", [])),
        email_subject=_optional_str(raw.get("email_subject")),
    )


def _workflow_type(value: object) -> str:
    raw = _optional_str(value)
    if raw is None:
        return WorkflowType.API.value
    # Unknown types are kept so dispatch can report them per organization.
    return raw


def _env_override(env_name: object, value: object) -> str | None:
    name = _optional_str(env_name)
    if name:
        override = os.getenv(name, "").strip()
        if override:
            return override
    return _optional_str(value)


def _normalize_str_list(raw: object) -> list[str]:
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list):
        return []
    return [item.strip() for item in raw if isinstance(item, str) and item.strip()]


def _normalize_str_mapping(raw: object) -> dict[str, str]:
    if not isinstance(raw, dict):
        return {}

    normalized: dict[str, str] = {}
    for key, value in raw.items():
        if not isinstance(key, str) or not isinstance(value, str):
            continue
        if key.strip() and value.strip():
            normalized[key.strip()] = value.strip()
    return normalized


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def _optional_bool(value: object, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
    return default
