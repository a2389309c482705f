"""Portfolio API - FastAPI server for the portfolio site and its admin console."""

import logging
import os

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from portfolio_api.auth.database import init_db
from portfolio_api.auth.routes import router as auth_router
from portfolio_api.admin.routes import router as admin_router
from portfolio_api.contact.routes import CONTACT_CORS_HEADERS, router as contact_router
from portfolio_api.content.routes import router as content_router
from portfolio_api.storage.uploads import get_uploads_dir

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Comma-separated list of allowed origins, "*" for any
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]


class SiteCORSMiddleware(CORSMiddleware):
    """CORSMiddleware that leaves paths under `exempt_prefixes` to their own routes."""

    def __init__(self, app, exempt_prefixes=(), **kwargs):
        super().__init__(app, **kwargs)
        self.exempt_prefixes = tuple(exempt_prefixes)

    async def __call__(self, scope, receive, send):
        if scope["type"] == "http" and scope["path"].startswith(self.exempt_prefixes):
            await self.app(scope, receive, send)
            return
        await super().__call__(scope, receive, send)


app = FastAPI(
    title="Portfolio API",
    description="Portfolio content, admin console and contact form backend",
    version="0.1.0"
)


# Initialize database on startup
@app.on_event("startup")
async def startup_event():
    try:
        init_db()
        logging.info("Database initialization completed on startup")
    except Exception as e:
        # Log error but don't crash the app; requests will surface database errors
        logging.error(f"Database initialization error on startup: {str(e)}", exc_info=True)


app.include_router(auth_router)
app.include_router(content_router)
app.include_router(admin_router)
app.include_router(contact_router)

# Uploaded images and resumes
UPLOADS_DIR = get_uploads_dir()
UPLOADS_DIR.mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=str(UPLOADS_DIR)), name="uploads")

# CORS configuration - must be added before exception handlers.
# The contact form answers its own preflights with permissive headers for any origin.
app.add_middleware(
    SiteCORSMiddleware,
    exempt_prefixes=(contact_router.prefix,),
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Retry-After"],
)


def _cors_headers(request: Request) -> dict:
    """CORS headers for error responses produced outside the CORS middleware."""
    if request.url.path.startswith(contact_router.prefix):
        return dict(CONTACT_CORS_HEADERS)
    origin = request.headers.get("origin")
    if not origin:
        return {}
    if "*" in ALLOWED_ORIGINS or origin in ALLOWED_ORIGINS:
        return {
            "Access-Control-Allow-Origin": origin,
            "Access-Control-Allow-Credentials": "true",
            "Access-Control-Allow-Methods": "*",
            "Access-Control-Allow-Headers": "*",
        }
    return {}


def _http_error_response(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Dict details are sent as the body (e.g. {"error": ...}); strings are wrapped in {"detail": ...}
    if isinstance(exc.detail, dict):
        content = exc.detail
    elif isinstance(exc.detail, str):
        content = {"detail": exc.detail}
    else:
        content = {"detail": str(exc.detail)}

    headers = {**_cors_headers(request), **(exc.headers or {})}
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


# Global exception handlers to ensure CORS headers are always added
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Ensure CORS headers are added to FastAPI HTTP exceptions."""
    return _http_error_response(request, exc)


@app.exception_handler(StarletteHTTPException)
async def starlette_http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Ensure CORS headers are added to Starlette HTTP exceptions."""
    return _http_error_response(request, exc)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Ensure CORS headers are added to validation errors."""
    # ctx may hold the raw ValueError, which is not JSON serializable
    errors = [
        {key: value for key, value in error.items() if key != "ctx"}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={"detail": errors},
        headers=_cors_headers(request)
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Ensure CORS headers are added to all exceptions."""
    logging.error(f"Unhandled exception: {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
        headers=_cors_headers(request)
    )


@app.get("/")
async def root():
    return {"message": "Portfolio API is running", "status": "ok"}


@app.get("/health")
async def health():
    return {"status": "healthy"}
