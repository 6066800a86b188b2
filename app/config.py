"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
_DEFAULT_ORGANIZATIONS_CONFIG = "app/registry/organizations.json"
_DEFAULT_RECAPTCHA_VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    for filename in (".env", ".env.local"):
        env_path = _PROJECT_ROOT / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def resolve_project_path(raw_path: str) -> Path:
    """
    Resolve a relative path against the project root.
    """

    candidate = Path(raw_path)
    if candidate.is_absolute():
        return candidate
    return (_PROJECT_ROOT / candidate).resolve()


@dataclass(frozen=True)
class HTTPSettings:
    """
    Shared HTTP behavior settings for outbound submissions.
    """

    timeout_seconds: float = 30.0


@dataclass(frozen=True)
class RecaptchaSettings:
    """
    Bot-verification settings.
    """

    secret_key: str | None = None
    verify_url: str = _DEFAULT_RECAPTCHA_VERIFY_URL


@dataclass(frozen=True)
class EmailRelaySettings:
    """
    Email-dispatch relay endpoint settings.

    Payloads above `max_payload_bytes` are rejected before sending; payloads
    above `warn_payload_bytes` are sent with a warning.
    """

    url: str | None = None
    max_payload_bytes: int = 25 * 1024 * 1024
    warn_payload_bytes: int = 20 * 1024 * 1024


@dataclass(frozen=True)
class ApiCredentialSettings:
    """
    Credentials injected into organization API calls.
    """

    opensats_api_key: str | None = None


@dataclass(frozen=True)
class RegistrySettings:
    """
    Location of the static organization registry.
    """

    config_path: str


@lru_cache(maxsize=1)
def get_http_settings() -> HTTPSettings:
    """
    Return shared submission HTTP settings from environment variables.
    """

    return HTTPSettings(
        timeout_seconds=max(1.0, _get_float_env("SUBMISSION_HTTP_TIMEOUT_SECONDS", 30.0)),
    )


@lru_cache(maxsize=1)
def get_recaptcha_settings() -> RecaptchaSettings:
    """
    Return bot-verification settings from environment variables.
    """

    return RecaptchaSettings(
        secret_key=get_optional_str_env("RECAPTCHA_SECRET_KEY"),
        verify_url=_get_str_env("RECAPTCHA_VERIFY_URL", _DEFAULT_RECAPTCHA_VERIFY_URL),
    )


@lru_cache(maxsize=1)
def get_email_relay_settings() -> EmailRelaySettings:
    """
    Return email relay settings from environment variables.
    """

    return EmailRelaySettings(
        url=get_optional_str_env("EMAIL_RELAY_URL"),
        max_payload_bytes=max(1, _get_int_env("EMAIL_MAX_PAYLOAD_BYTES", 25 * 1024 * 1024)),
        warn_payload_bytes=max(1, _get_int_env("EMAIL_WARN_PAYLOAD_BYTES", 20 * 1024 * 1024)),
    )


@lru_cache(maxsize=1)
def get_api_credential_settings() -> ApiCredentialSettings:
    """
    Return organization API credentials from environment variables.
    """

    return ApiCredentialSettings(opensats_api_key=get_optional_str_env("OPENSATS_API_KEY"))


@lru_cache(maxsize=1)
def get_registry_settings() -> RegistrySettings:
    """
    Return cached registry settings from environment variables.
    """

    raw_path = _get_str_env("ORGANIZATIONS_CONFIG_PATH", _DEFAULT_ORGANIZATIONS_CONFIG)
    return RegistrySettings(config_path=str(resolve_project_path(raw_path)))
