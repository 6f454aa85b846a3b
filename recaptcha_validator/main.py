"""reCAPTCHA Validation Service.

Forwards client-supplied reCAPTCHA tokens to Google's siteverify endpoint
and answers with a uniform JSON envelope.
"""

import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from recaptcha_validator.api.routes.health import router as health_router
from recaptcha_validator.api.routes.monitoring import router as monitoring_router
from recaptcha_validator.api.routes.recaptcha import router as recaptcha_router
from recaptcha_validator.clients.recaptcha_client import RecaptchaClient
from recaptcha_validator.core.config import (
    AppEnvironment,
    Settings,
    ensure_required_settings,
    get_settings,
)
from recaptcha_validator.core.errors import (
    ConfigurationError,
    RecaptchaServiceError,
    VerificationRejectedError,
    get_status_code,
)
from recaptcha_validator.core.logging import setup_logging
from recaptcha_validator.core.metrics import recaptcha_validations_total
from recaptcha_validator.core.tracing import (
    REQUEST_ID_HEADER,
    clear_tracing_context,
    set_request_id,
)
from recaptcha_validator.schemas.v1.common import ApiEnvelope
from recaptcha_validator.utils.redaction import redact_body

logger = structlog.get_logger(__name__)

API_CSP_POLICY = (
    "default-src 'none'; frame-ancestors 'none'; base-uri 'none'; "
    "form-action 'none'; object-src 'none'"
)
DOCS_CSP_POLICY = (
    "default-src 'self'; img-src 'self' data:; style-src 'self' 'unsafe-inline'; "
    "script-src 'self' 'unsafe-inline'; frame-ancestors 'none'; object-src 'none'; "
    "base-uri 'self'"
)
ENDPOINTS = (
    "GET  /health - service status",
    "POST /validate-recaptcha - validate a reCAPTCHA token",
)


def _request_log_context(request: Request) -> dict[str, str]:
    return {
        "path": request.url.path,
        "method": request.method,
        "client_host": request.client.host if request.client else "",
    }


def _is_docs_path(path: str) -> bool:
    return path.startswith("/docs") or path.startswith("/redoc") or path.startswith("/openapi.json")


def _cors_headers(request: Request, settings: Settings) -> dict[str, str]:
    """CORS headers for any response, preflight or not."""
    security = settings.security
    headers = {
        "Access-Control-Allow-Methods": ", ".join(security.cors_allow_methods),
        "Access-Control-Allow-Headers": ", ".join(security.cors_allow_headers),
    }
    if "*" in security.cors_allowed_origins:
        headers["Access-Control-Allow-Origin"] = "*"
    else:
        origin = request.headers.get("origin")
        if origin and origin in security.cors_allowed_origins:
            headers["Access-Control-Allow-Origin"] = origin
            headers["Vary"] = "Origin"
    return headers


def _envelope_response(status_code: int, message: str, data=None, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ApiEnvelope.error(message, data=data).to_content(),
        headers=headers,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan context manager."""
    settings = get_settings()
    setup_logging()

    # Refuse to serve traffic without a secret, whichever server hosts the app.
    ensure_required_settings(settings)
    logger.info("RECAPTCHA_SECRET_KEY loaded")

    logger.info(
        "Starting reCAPTCHA validation service",
        app=settings.app.name,
        env=settings.app.env.value,
        version=settings.app.version,
        port=settings.server.port,
        endpoints=list(ENDPOINTS),
    )

    recaptcha_client = RecaptchaClient(settings=settings)
    app.state.settings = settings
    app.state.recaptcha_client = recaptcha_client

    yield

    await recaptcha_client.close()

    logger.info("reCAPTCHA validation service stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="reCAPTCHA Validation Service",
        description="Validates reCAPTCHA tokens against Google's siteverify API.",
        version=settings.app.version,
        lifespan=lifespan,
        docs_url="/docs" if settings.app.env != AppEnvironment.PROD else None,
        redoc_url="/redoc" if settings.app.env != AppEnvironment.PROD else None,
        openapi_url="/openapi.json" if settings.app.env != AppEnvironment.PROD else None,
    )

    app.include_router(health_router)
    app.include_router(recaptcha_router)
    app.include_router(monitoring_router)

    setup_telemetry(app, settings)

    @app.middleware("http")
    async def cors_middleware(request: Request, call_next):
        """Attach CORS headers to every response and answer OPTIONS directly."""
        cors_headers = _cors_headers(request, settings)
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=cors_headers)

        response = await call_next(request)
        response.headers.update(cors_headers)
        return response

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        """Log every request; POST/PUT bodies are logged with secrets masked."""
        log_context = _request_log_context(request)
        if request.method in {"POST", "PUT"}:
            body = await request.body()
            logger.info("Request received", **log_context, body=redact_body(body))
        else:
            logger.info("Request received", **log_context)

        response = await call_next(request)

        logger.info("Request completed", **log_context, status_code=response.status_code)
        return response

    @app.middleware("http")
    async def payload_size_guard(request: Request, call_next):
        max_request = settings.security.max_request_size_bytes

        content_length = request.headers.get("content-length")
        if content_length:
            try:
                if int(content_length) > max_request:
                    logger.warning(
                        "Request payload exceeds configured size limit",
                        **_request_log_context(request),
                        content_length=content_length,
                        max_request_size_bytes=max_request,
                    )
                    return _envelope_response(413, "Request payload too large")
            except ValueError:
                logger.warning(
                    "Invalid Content-Length header",
                    **_request_log_context(request),
                    content_length=content_length,
                )
        elif request.method in {"POST", "PUT", "PATCH"}:
            # Chunked uploads carry no Content-Length; measure what actually arrived.
            body = await request.body()
            if len(body) > max_request:
                logger.warning(
                    "Request payload exceeds configured size limit",
                    **_request_log_context(request),
                    content_length=len(body),
                    max_request_size_bytes=max_request,
                )
                return _envelope_response(413, "Request payload too large")

        return await call_next(request)

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        """Bind the caller's X-Request-ID (or a fresh one) to this request."""
        request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id

        try:
            response = await call_next(request)
        finally:
            # Prevent context leakage across requests in long-lived workers.
            clear_tracing_context()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    @app.middleware("http")
    async def security_headers_middleware(request: Request, call_next):
        """Set baseline security headers for all responses."""
        response = await call_next(request)

        csp_policy = DOCS_CSP_POLICY if _is_docs_path(request.url.path) else API_CSP_POLICY
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Content-Security-Policy", csp_policy)
        return response

    @app.exception_handler(RecaptchaServiceError)
    async def domain_error_handler(request: Request, exc: RecaptchaServiceError) -> JSONResponse:
        """Render domain errors as the standard envelope."""
        status_code = get_status_code(exc)
        logger.warning(
            "Domain exception",
            **_request_log_context(request),
            status_code=status_code,
            error_code=exc.code,
            error=exc.message,
            error_details=exc.details or {},
        )
        data = None
        if isinstance(exc, VerificationRejectedError) and exc.result is not None:
            data = exc.result.to_payload()
        return _envelope_response(status_code, exc.message, data=data)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Wrap routing errors (404, 405, ...) in the standard envelope."""
        headers = getattr(exc, "headers", None)
        if exc.status_code == 405:
            allowed = (headers or {}).get("Allow", "POST")
            message = f"Method not allowed. Use {allowed}"
        else:
            message = str(exc.detail)
        return _envelope_response(exc.status_code, message, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Malformed JSON or a body that is not a token object."""
        recaptcha_validations_total.labels(outcome="invalid_request").inc()
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg', '')}"
            for error in exc.errors()
        )
        logger.warning(
            "Request body rejected",
            **_request_log_context(request),
            error=problems,
        )
        return _envelope_response(400, f"Invalid request body: {problems}")

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(
            "Unhandled exception",
            **_request_log_context(request),
            error=str(exc),
        )
        return _envelope_response(500, "Internal server error")

    return app


def setup_telemetry(app: FastAPI, settings: Settings) -> None:
    """Setup OpenTelemetry instrumentation."""
    if not settings.observability.otlp_endpoint:
        return

    resource = Resource(
        attributes={
            SERVICE_NAME: settings.observability.service_name,
        }
    )

    provider = TracerProvider(resource=resource)
    exporter = OTLPSpanExporter(
        endpoint=settings.observability.otlp_endpoint,
        insecure=settings.observability.otlp_insecure,
    )
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    FastAPIInstrumentor.instrument_app(app)


def run() -> None:
    """Run the application using uvicorn.

    Exits with status 1 before binding the port when required
    configuration is missing.
    """
    import uvicorn

    try:
        settings = get_settings()
        setup_logging()
        ensure_required_settings(settings)
    except ConfigurationError as exc:
        logger.error("Configuration error, refusing to start", error=exc.message)
        sys.exit(1)
    except PydanticValidationError as exc:
        logger.error("Invalid configuration, refusing to start", error=str(exc))
        sys.exit(1)

    uvicorn.run(
        "recaptcha_validator.main:create_app",
        factory=True,
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.app.env == AppEnvironment.LOCAL,
        workers=1 if settings.app.env == AppEnvironment.LOCAL else settings.server.workers,
        log_level=settings.app.log_level.lower(),
    )


if __name__ == "__main__":
    run()
