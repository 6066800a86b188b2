from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api.dependencies import IntakeRequestError


def _validate_env() -> None:
    """
    Validate environment variables at startup.

    Raises RuntimeError listing every invalid variable so the operator can fix
    all problems in one restart cycle. A missing RECAPTCHA_SECRET_KEY is only
    logged: verification then fails per request instead of at boot.
    """

    from app.config import get_optional_str_env, get_registry_settings

    errors: list[str] = []

    # --- Organization registry ------------------------------------------
    registry_path = get_registry_settings().config_path
    if not os.path.exists(registry_path):
        errors.append(
            f"Organization registry not found at '{registry_path}'. "
            "Set ORGANIZATIONS_CONFIG_PATH to a valid JSON file."
        )

    # --- Timeout --------------------------------------------------------
    raw_timeout = get_optional_str_env("SUBMISSION_HTTP_TIMEOUT_SECONDS")
    if raw_timeout is not None:
        try:
            float(raw_timeout)
        except ValueError:
            errors.append(
                f"SUBMISSION_HTTP_TIMEOUT_SECONDS='{raw_timeout}' is not a number."
            )

    if errors:
        raise RuntimeError(
            "Startup validation failed, invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _warn_missing_optional_settings() -> None:
    from app.config import get_email_relay_settings, get_recaptcha_settings

    log = logging.getLogger(__name__)
    if not get_recaptcha_settings().secret_key:
        log.warning("RECAPTCHA_SECRET_KEY is not set; every submission will fail verification.")
    if not get_email_relay_settings().url:
        log.warning("EMAIL_RELAY_URL is not set; email workflows and notifications are disabled.")


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Load the organization registry before serving traffic."""
    from app.registry.loader import get_organization_registry

    registry = get_organization_registry()
    dispatchable = sum(1 for organization in registry if organization.is_dispatchable)
    logging.getLogger(__name__).info(
        "Organization registry ready organizations=%d dispatchable=%d",
        len(registry),
        dispatchable,
    )
    _warn_missing_optional_settings()
    yield


async def _intake_error_handler(request: Request, exc: IntakeRequestError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logging.getLogger(__name__).exception("Unhandled error path=%s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "details": str(exc)},
    )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Grant Intake API",
        version="1.0.0",
        lifespan=_lifespan,
    )
    application.add_exception_handler(IntakeRequestError, _intake_error_handler)
    application.add_exception_handler(Exception, _unhandled_error_handler)

    from app.api.routers import submission_router

    application.include_router(submission_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
