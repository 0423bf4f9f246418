"""FastAPI Application Entry Point."""

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from finopsguard.api.v1 import api_router
from finopsguard.core.config import Settings
from finopsguard.core.config import settings as default_settings
from finopsguard.core.exceptions import FinOpsGuardError
from finopsguard.core.logging import configure_logging
from finopsguard.providers.base import ProviderSet
from finopsguard.providers.factory import build_provider_set
from finopsguard.services.scan_service import ScanService
from finopsguard.services.scan_storage import InMemoryScanStorage, ScanStorage

logger = structlog.get_logger()


async def finopsguard_error_handler(request: Request, exc: FinOpsGuardError) -> JSONResponse:
    """Render a typed pipeline error with its mapped status code."""
    logger.warning(
        "api.request_failed",
        path=request.url.path,
        code=exc.code,
        status_code=exc.status_code,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request body validation failures as 400 input errors."""
    details = [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
    role_arn_invalid = any("roleArn" in d["loc"] or "role_arn" in d["loc"] for d in details)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "InvalidRoleArn" if role_arn_invalid else "InvalidRequest",
            "message": details[0]["msg"] if details else "Invalid request",
            "details": details,
        },
    )


def create_app(
    settings: Settings | None = None,
    provider_set: ProviderSet | None = None,
    storage: ScanStorage | None = None,
) -> FastAPI:
    """
    Build the application with its providers and storage wired in.

    Args:
        settings: Application settings (defaults to the environment)
        provider_set: Provider implementations (defaults to ``build_provider_set``)
        storage: Scan storage (defaults to in-memory storage)
    """
    settings = settings or default_settings
    configure_logging(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        description="FinOpsGuard - AWS cost scan and savings estimation",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    providers = provider_set or build_provider_set(settings)
    app.state.settings = settings
    app.state.scan_service = ScanService(settings, providers)
    app.state.scan_storage = storage or InMemoryScanStorage()

    app.add_exception_handler(FinOpsGuardError, finopsguard_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)

    @app.get(f"{settings.API_V1_PREFIX}/health", tags=["health"])
    async def health_check() -> JSONResponse:
        """Health check endpoint."""
        return JSONResponse(
            status_code=200,
            content={
                "status": "healthy",
                "service": settings.APP_NAME,
                "environment": settings.APP_ENV,
                "mockAws": settings.MOCK_AWS,
            },
        )

    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    logger.info("app.created", environment=settings.APP_ENV, mock_aws=settings.MOCK_AWS)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
