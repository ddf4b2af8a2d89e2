"""FastAPI app factory.

Every `WorkflowConsoleError` is turned into a single dismissible notification:

    {"error": {"code": ..., "message": ..., "dismissible": true, "details": {...}}}
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from workflow_console import __version__
from workflow_console.analytics import InstanceTrendSource
from workflow_console.errors import (
    DefinitionNotActive,
    IllegalTransitionError,
    InvalidReference,
    MalformedPayload,
    RemoteOperationFailed,
    WorkflowConsoleError,
)
from workflow_console.server.config import ServerSettings
from workflow_console.server.router import router
from workflow_console.services import DashboardService, DefinitionService, InstanceService
from workflow_console.store.client import WorkflowStoreClient
from workflow_console.store.protocol import WorkflowStore

logger = logging.getLogger(__name__)

_HTTP_STATUS: dict[type[WorkflowConsoleError], int] = {
    InvalidReference: 422,
    MalformedPayload: 422,
    IllegalTransitionError: 409,
    DefinitionNotActive: 409,
    RemoteOperationFailed: 502,
}


def _http_status(exc: WorkflowConsoleError) -> int:
    for error_type, status in _HTTP_STATUS.items():
        if isinstance(exc, error_type):
            return status
    return 500


def _details(exc: WorkflowConsoleError) -> dict[str, Any]:
    if isinstance(exc, InvalidReference):
        return {
            "nodeIds": exc.node_ids,
            "violations": [v.to_json() for v in exc.violations],
        }
    if isinstance(exc, IllegalTransitionError):
        return {"status": exc.status, "action": exc.action}
    if isinstance(exc, DefinitionNotActive):
        return {"definitionId": exc.definition_id, "status": exc.status}
    if isinstance(exc, RemoteOperationFailed):
        return {"operation": exc.operation, "upstreamStatus": exc.status_code}
    return {}


def error_notification(exc: WorkflowConsoleError) -> dict[str, Any]:
    return {
        "error": {
            "code": exc.code,
            "message": exc.message,
            "dismissible": True,
            "details": _details(exc),
        }
    }


async def _handle_console_error(request: Request, exc: WorkflowConsoleError) -> JSONResponse:
    status = _http_status(exc)
    logger.warning(
        "Request rejected",
        extra={"path": request.url.path, "code": exc.code, "http_status": status},
    )
    return JSONResponse(status_code=status, content=error_notification(exc))


def create_app(
    *,
    store: WorkflowStore | None = None,
    settings: ServerSettings | None = None,
    trend_source: InstanceTrendSource | None = None,
) -> FastAPI:
    """Build the console API.

    Without an explicit `store`, a `WorkflowStoreClient` is created from
    `settings` (itself loaded from the environment when omitted).
    """

    settings = settings or ServerSettings()

    owned_client: WorkflowStoreClient | None = None
    if store is None:
        owned_client = WorkflowStoreClient(
            base_url=settings.store_base_url, timeout_seconds=settings.store_timeout_seconds
        )
        store = owned_client

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        if owned_client is not None:
            owned_client.close()

    app = FastAPI(
        title="Workflow Console",
        version=__version__,
        description="REST API for authoring, publishing and monitoring workflows.",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    paging = {"page_size": settings.page_size, "max_pages": settings.max_reload_pages}
    definitions = DefinitionService(store, **paging)
    instances = InstanceService(store, **paging)

    # Expose settings and services for request handlers.
    app.state.settings = settings
    app.state.definitions = definitions
    app.state.instances = instances
    app.state.dashboard = DashboardService(definitions, instances, trend_source)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.parsed_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(WorkflowConsoleError, _handle_console_error)  # type: ignore[arg-type]
    app.include_router(router, prefix="/api")
    return app
