"""
Main FastAPI application for the WiFi dashboard API.
Serves health, auth, payments, notifications, admin, support CRUD and metrics.
"""
import logging
import time
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from wifidash.api.routes import (
    admin,
    auth,
    contact_queries,
    health,
    notifications,
    payment_plans,
    payments,
    tickets,
)
from wifidash.core.config import settings
from wifidash.core.errors import DomainError, ValidationError
from wifidash.core.logging import configure_logging
from wifidash.utils.metrics import router as metrics_router

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="WiFi Dashboard API",
    description="Subscription payments, notifications and support for the WiFi dashboard",
    version="1.0.0",
)

# CORS
origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
if not origins:
    origins = [settings.frontend_url, "http://localhost:3000", "http://127.0.0.1:3000"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def access_log(request: Request, call_next):
    request_id = request.headers.get(settings.request_id_header) or uuid4().hex
    start = time.time()
    response = await call_next(request)
    response.headers[settings.request_id_header] = request_id
    logger.info(
        "http_request",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "status_code": response.status_code,
            "latency_ms": round((time.time() - start) * 1000, 1),
        },
    )
    return response


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    body: dict = {"detail": exc.message}
    if isinstance(exc, ValidationError) and exc.field:
        body["field"] = exc.field
    if exc.status_code >= 500:
        logger.error("domain_error", extra={"path": request.url.path, "error": exc.message})
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "unhandled_error",
        extra={"path": request.url.path, "method": request.method, "error": str(exc)},
    )
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Routers
app.include_router(health.router, tags=["health"])
app.include_router(auth.router)
app.include_router(payments.router)
app.include_router(notifications.router)
app.include_router(admin.router)
app.include_router(admin.public_router)
app.include_router(tickets.router)
app.include_router(contact_queries.router)
app.include_router(payment_plans.router)
app.include_router(metrics_router)
