from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from credential_registry.api.dependencies import registry
from credential_registry.api.errors import install_error_handlers
from credential_registry.api.health import router as health_router
from credential_registry.api.issuers import router as issuers_router
from credential_registry.api.metrics_endpoint import router as metrics_router
from credential_registry.api.records import router as records_router
from credential_registry.api.subjects import router as subjects_router
from credential_registry.api.users import router as users_router
from credential_registry.api.verification import router as verification_router
from credential_registry.core.config import SETTINGS
from credential_registry.core.errors import AlreadyRegisteredError
from credential_registry.core.logging import setup_logging
from credential_registry.middleware.metrics import MetricsMiddleware
from credential_registry.middleware.request_context import (
    RequestContextMiddleware,
    install_log_filter,
)

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
install_log_filter()

logger = logging.getLogger(__name__)


def bootstrap() -> None:
    """Prepare the store, seed the pending gauges and the first Admin."""
    create_schema = getattr(registry.store, "create_schema", None)
    if create_schema is not None:
        create_schema()
    for workflow in registry.workflows.values():
        workflow.sync_pending_gauge()

    if SETTINGS.bootstrap_admin is None:
        return
    try:
        registry.identity.bootstrap_admin(
            SETTINGS.bootstrap_admin, SETTINGS.bootstrap_admin_name
        )
    except AlreadyRegisteredError:
        logger.info("Admin already present, bootstrap skipped")


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    bootstrap()
    yield
    dispose = getattr(registry.store, "dispose", None)
    if dispose is not None:
        dispose()


app = FastAPI(
    title="credential-registry",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Last-added runs first: RequestContext (outermost) -> Metrics -> CORS -> route
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

install_error_handlers(app)

# users before the /v1/{domain}/... routers so /v1/users/* never resolves
# as a domain path
app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(users_router)
app.include_router(subjects_router)
app.include_router(issuers_router)
app.include_router(records_router)
app.include_router(verification_router)

logger.info(
    "credential-registry started  env=%s store=%s log_level=%s port=%d docs=%s",
    SETTINGS.app_env,
    registry.store.kind,
    SETTINGS.log_level,
    SETTINGS.port,
    "on" if SETTINGS.is_dev else "off",
)
