import logging
import os
import sys
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from jose import ExpiredSignatureError, JWTError
from sqlalchemy.exc import IntegrityError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from lexdesk.config import CORS_ORIGINS, DEBUG, LOG_LEVEL, PORT, UPLOAD_DIR
from lexdesk.database import connect_with_retry
from lexdesk.responses import error_body
from lexdesk import models  # noqa: F401  registers tables before create_all
from lexdesk.auth.routes import router as auth_router
from lexdesk.clients.routes import router as clients_router
from lexdesk.cases.routes import router as cases_router
from lexdesk.invoices.routes import router as invoices_router
from lexdesk.service_catalog.routes import router as services_router
from lexdesk.appointments.routes import router as appointments_router
from lexdesk.tasks.routes import router as tasks_router
from lexdesk.team_members.routes import router as team_members_router
from lexdesk.notifications.routes import router as notifications_router

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        connect_with_retry()
    except OperationalError:
        logger.critical("Could not connect to the database, exiting")
        sys.exit(1)
    yield


app = FastAPI(
    title="LexDesk API",
    description="Legal practice management: clients, cases, billing and scheduling",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["Cross-Origin-Opener-Policy"] = "same-origin-allow-popups"
        response.headers["Cross-Origin-Resource-Policy"] = "cross-origin"
        return response

app.add_middleware(SecurityHeadersMiddleware)

# =====================================================
# ERROR HANDLERS
# =====================================================

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = f"Route not found: {request.url.path}"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message, getattr(exc, "errors", None)),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = {}
    for error in exc.errors():
        location = [str(part) for part in error["loc"] if part != "body"]
        errors[".".join(location) or "body"] = error["msg"]
    return JSONResponse(status_code=422, content=error_body("Validation Error", errors))


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(status_code=409, content=error_body("Duplicate Entry"))


@app.exception_handler(ExpiredSignatureError)
async def expired_token_handler(request: Request, exc: ExpiredSignatureError):
    return JSONResponse(status_code=401, content=error_body("Token expired"))


@app.exception_handler(JWTError)
async def jwt_error_handler(request: Request, exc: JWTError):
    return JSONResponse(status_code=401, content=error_body("Invalid token"))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    extra = {"stack": traceback.format_exc()} if DEBUG else {}
    return JSONResponse(status_code=500, content=error_body("Internal Server Error", **extra))

# =====================================================
# ROUTES
# =====================================================

for router in (
    auth_router,
    clients_router,
    cases_router,
    invoices_router,
    services_router,
    appointments_router,
    tasks_router,
    team_members_router,
    notifications_router,
):
    app.include_router(router, prefix="/api")

# Uploaded files, e.g. /uploads/profile-images/<name>
os.makedirs(UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=UPLOAD_DIR), name="uploads")


@app.get("/")
def root():
    return {
        "message": "LexDesk API",
        "version": "1.0.0",
        "status": "running"
    }

@app.get("/health")
def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=PORT, reload=DEBUG)
