from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import TodoServiceSettings, get_settings
from .dependencies import build_todos_repository, get_app_settings
from .elasticsearch_client import close_elasticsearch_client, get_elasticsearch_client
from .errors import AppError
from .routes import todos as todos_routes

logger = logging.getLogger(__name__)


def _validation_payload(exc: RequestValidationError) -> dict:
    errors = [
        {"field": ".".join(str(part) for part in error.get("loc", ())), "message": error.get("msg", "")}
        for error in exc.errors()
    ]
    return {
        "statusCode": 400,
        "error": "VALIDATION_ERROR",
        "message": "Request validation failed",
        "details": {"errors": errors},
    }


def create_app(settings: Optional[TodoServiceSettings] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(title="Todo Index Service", version="1.0.0")
    app.dependency_overrides[get_app_settings] = lambda: settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AppError)
    async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content=_validation_payload(exc))

    app.include_router(todos_routes.router, prefix=settings.api_prefix)

    @app.get("/health", tags=["health"])
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @app.on_event("startup")
    async def _startup() -> None:
        # Warm up the Elasticsearch client so failures surface early
        get_elasticsearch_client(settings)
        if settings.elasticsearch and settings.elasticsearch.backfill_on_startup:
            try:
                await build_todos_repository(settings).backfill_missing_fields()
            except AppError as exc:
                logger.warning("Backfill of legacy todo documents skipped: %s", exc.message)

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        await close_elasticsearch_client(settings)

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create_app(), host="0.0.0.0", port=8001)
