"""FastAPI app factory.

Endpoints are intentionally thin wrappers over :class:`WorkflowService`.
Failures are raised by the service/core and turned into the shared response
envelope by the exception handlers registered here.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from fastapi import FastAPI, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from workflow_engine import __version__
from workflow_engine.config import EngineSettings
from workflow_engine.core import (
    TransitionError,
    ValidationResult,
    WorkflowDefinition,
    WorkflowInstance,
)
from workflow_engine.server.models import (
    ApiResponse,
    CheckActionRequest,
    CreateDefinitionRequest,
    ExecuteActionRequest,
)
from workflow_engine.service import (
    DefinitionNotFound,
    DefinitionRejected,
    InstanceNotFound,
    WorkflowService,
    WorkflowServiceError,
)
from workflow_engine.storage import DefinitionStore, InstanceStore

logger = logging.getLogger(__name__)


def _envelope(
    status_code: int, error: str, errors: list[str] | None = None
) -> JSONResponse:
    body = ApiResponse[None](success=False, error=error, errors=errors)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(TransitionError)
    async def transition_error_handler(_request: Request, exc: TransitionError) -> JSONResponse:
        return _envelope(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(WorkflowServiceError)
    async def service_error_handler(_request: Request, exc: WorkflowServiceError) -> JSONResponse:
        if isinstance(exc, DefinitionNotFound | InstanceNotFound):
            return _envelope(status.HTTP_404_NOT_FOUND, str(exc))
        if isinstance(exc, DefinitionRejected):
            return _envelope(status.HTTP_400_BAD_REQUEST, str(exc), list(exc.errors))
        return _envelope(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.warning(
            "Request validation failed",
            extra={"path": request.url.path, "method": request.method},
        )
        messages = [
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
            for err in exc.errors()
        ]
        return _envelope(status.HTTP_400_BAD_REQUEST, "Request validation failed", messages)


def create_app(settings: EngineSettings | None = None) -> FastAPI:
    settings = settings or EngineSettings()

    app = FastAPI(
        title="Configurable Workflow Engine",
        version=__version__,
        description="REST API for defining workflows and driving their instances.",
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.parsed_cors_origins(),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    service = WorkflowService(
        definitions=DefinitionStore(settings.definitions_file),
        instances=InstanceStore(settings.instances_file),
    )
    app.state.service = service
    _register_error_handlers(app)

    # Workflow definitions

    @app.post(
        "/api/definitions",
        status_code=status.HTTP_201_CREATED,
        response_model=ApiResponse[WorkflowDefinition],
    )
    def create_definition(
        req: CreateDefinitionRequest, response: Response
    ) -> ApiResponse[WorkflowDefinition]:
        definition = service.create_definition(
            name=req.name,
            states=req.states,
            actions=req.actions,
            description=req.description,
        )
        response.headers["Location"] = f"/api/definitions/{definition.id}"
        return ApiResponse[WorkflowDefinition](success=True, data=definition)

    @app.get("/api/definitions/{definition_id}", response_model=ApiResponse[WorkflowDefinition])
    def get_definition(definition_id: str) -> ApiResponse[WorkflowDefinition]:
        return ApiResponse[WorkflowDefinition](
            success=True, data=service.get_definition(definition_id)
        )

    @app.get("/api/definitions", response_model=ApiResponse[list[WorkflowDefinition]])
    def list_definitions() -> ApiResponse[list[WorkflowDefinition]]:
        return ApiResponse[list[WorkflowDefinition]](
            success=True, data=service.list_definitions()
        )

    @app.get(
        "/api/definitions/{definition_id}/instances",
        response_model=ApiResponse[list[WorkflowInstance]],
    )
    def list_definition_instances(definition_id: str) -> ApiResponse[list[WorkflowInstance]]:
        return ApiResponse[list[WorkflowInstance]](
            success=True, data=service.list_instances_by_definition(definition_id)
        )

    # Workflow instances

    @app.post(
        "/api/instances",
        status_code=status.HTTP_201_CREATED,
        response_model=ApiResponse[WorkflowInstance],
    )
    def start_instance(
        response: Response,
        definition_id: str = Query(alias="definitionId"),
    ) -> ApiResponse[WorkflowInstance] | JSONResponse:
        try:
            instance = service.start_instance(definition_id)
        except DefinitionNotFound as e:
            # The definition is a request argument here, not the addressed resource.
            return _envelope(status.HTTP_400_BAD_REQUEST, str(e))
        response.headers["Location"] = f"/api/instances/{instance.id}"
        return ApiResponse[WorkflowInstance](success=True, data=instance)

    @app.get("/api/instances/{instance_id}", response_model=ApiResponse[WorkflowInstance])
    def get_instance(instance_id: str) -> ApiResponse[WorkflowInstance]:
        return ApiResponse[WorkflowInstance](success=True, data=service.get_instance(instance_id))

    @app.get("/api/instances", response_model=ApiResponse[list[WorkflowInstance]])
    def list_instances() -> ApiResponse[list[WorkflowInstance]]:
        return ApiResponse[list[WorkflowInstance]](success=True, data=service.list_instances())

    @app.post("/api/instances/{instance_id}/execute", response_model=ApiResponse[WorkflowInstance])
    def execute_action(
        instance_id: str, req: ExecuteActionRequest
    ) -> ApiResponse[WorkflowInstance]:
        updated = service.execute_action(instance_id, req.action_name)
        return ApiResponse[WorkflowInstance](success=True, data=updated)

    @app.post("/api/instances/{instance_id}/check", response_model=ApiResponse[ValidationResult])
    def check_action(instance_id: str, req: CheckActionRequest) -> ApiResponse[ValidationResult]:
        result = service.check_action(instance_id, req.action_id)
        return ApiResponse[ValidationResult](success=True, data=result)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "healthy", "timestamp": datetime.now(tz=UTC).isoformat()}

    @app.get("/")
    def index() -> dict[str, object]:
        return {
            "message": "Configurable Workflow Engine API",
            "version": __version__,
            "endpoints": {
                "definitions": {
                    "create": "POST /api/definitions",
                    "get": "GET /api/definitions/{id}",
                    "list": "GET /api/definitions",
                },
                "instances": {
                    "create": "POST /api/instances?definitionId={definitionId}",
                    "get": "GET /api/instances/{id}",
                    "list": "GET /api/instances",
                    "listByDefinition": "GET /api/definitions/{definitionId}/instances",
                    "execute": "POST /api/instances/{id}/execute",
                    "check": "POST /api/instances/{id}/check",
                },
            },
        }

    return app
