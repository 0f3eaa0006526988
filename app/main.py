from __future__ import annotations

import os
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import PlainTextResponse, RedirectResponse

from core.logging_utils import maybe_enable_json_logging, set_request_id
from core.metrics import export_prometheus, observe_request
from core.observability import init_sentry
from paystub_api.main import lifespan as api_lifespan, router as api_router
from paystub_api.main import register_exception_handlers as register_api_exception_handlers


def _resolve_cors_origins() -> list[str]:
    origins_env = (os.environ.get("API_CORS_ORIGINS") or "").strip()
    if origins_env:
        return [o.strip() for o in origins_env.split(",") if o.strip()]
    return [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:8000",
        "http://127.0.0.1:8000",
    ]


def create_app() -> FastAPI:
    maybe_enable_json_logging()
    init_sentry()
    application = FastAPI(title="Paystub Portal", lifespan=api_lifespan)

    application.add_middleware(
        CORSMiddleware,
        allow_origins=_resolve_cors_origins(),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(api_router, prefix="/api")
    register_api_exception_handlers(application)
    # Versioned namespace alongside the unversioned /api paths
    application.include_router(api_router, prefix="/api/v1")

    @application.get("/", include_in_schema=False)
    def root_redirect():
        return RedirectResponse(url="/api/meta", status_code=307)

    @application.middleware("http")
    async def request_id_middleware(request, call_next):
        rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        set_request_id(rid)
        resp = await call_next(request)
        resp.headers["X-Request-ID"] = rid
        return resp

    @application.middleware("http")
    async def security_headers(request, call_next):
        resp = await call_next(request)
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if "Content-Security-Policy" not in resp.headers:
            resp.headers["Content-Security-Policy"] = "default-src 'self'; frame-ancestors 'none'"
        # HSTS only when the request is over HTTPS (direct or via proxy header)
        xf_proto = request.headers.get("x-forwarded-proto", "").split(",")[0].strip().lower()
        scheme = (request.url.scheme or "").lower()
        if (scheme == "https" or xf_proto == "https") and "strict-transport-security" not in resp.headers:
            resp.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return resp

    @application.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        t0 = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = getattr(response, "status_code", 200) or 200
        finally:
            dur = max(0.0, time.perf_counter() - t0)
            route = request.scope.get("route")
            handler = getattr(route, "name", None) or request.url.path
            observe_request(str(handler), str(request.method), int(status), float(dur))
        return response

    @application.get("/metrics", include_in_schema=False)
    async def metrics():
        return PlainTextResponse(export_prometheus(), media_type="text/plain; version=0.0.4; charset=utf-8")

    def custom_openapi():
        if application.openapi_schema:
            return application.openapi_schema
        openapi_schema = get_openapi(
            title=application.title,
            version="1.0.0",
            description="HR pay-status overview and employee paystub self-service",
            routes=application.routes,
        )
        comps = openapi_schema.setdefault("components", {})
        security = comps.setdefault("securitySchemes", {})
        security.setdefault(
            "AdminToken",
            {"type": "apiKey", "in": "header", "name": "X-Admin-Token", "description": "HR admin token or Authorization Bearer"},
        )
        security.setdefault(
            "EmployeeToken",
            {"type": "apiKey", "in": "header", "name": "X-Employee-Token", "description": "Employee token or Authorization Bearer"},
        )
        schemas = comps.setdefault("schemas", {})
        schemas.setdefault(
            "ProblemDetails",
            {
                "type": "object",
                "properties": {
                    "type": {"type": "string"},
                    "title": {"type": "string"},
                    "status": {"type": "integer"},
                    "detail": {"type": "string"},
                    "instance": {"type": "string"},
                    "code": {"type": "string"},
                    "request_id": {"type": "string"},
                },
            },
        )
        application.openapi_schema = openapi_schema
        return application.openapi_schema

    application.openapi = custom_openapi

    return application


app = create_app()
