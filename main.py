import os

from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

import logging
import time
from contextlib import asynccontextmanager
from http import HTTPStatus

from fastapi import APIRouter, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core import exceptions
from core.logging_config import setup_logging
from routers import auth, health, sharing, task_lists, tasks

# uvicorn main:app --reload
# Open:  http://localhost:8000/docs

# Initialize logging FIRST
setup_logging()

logger = logging.getLogger(__name__)

# Check if testing before importing rate limiter
TESTING = os.getenv("TESTING", "false").lower() == "true"

if not TESTING:
    from slowapi import _rate_limit_exceeded_handler
    from slowapi.errors import RateLimitExceeded

    from core.rate_limit_config import limiter

API_PREFIX = "/api"

# --- Application Setup ---


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Shared Task Lists API starting up")
    yield
    # Shutdown
    logger.info("Shared Task Lists API shutting down")


app = FastAPI(
    title="Shared Task Lists API",
    description="Task lists with owner/edit/view sharing between users",
    version=health.APP_VERSION,
    lifespan=lifespan,
)

# Only add rate limiter if not testing
if not TESTING:
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore
    logger.info("Rate limiting enabled")
else:
    logger.info("Rate limiting disabled (testing mode)")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    elapsed_time = (time.time() - start_time) * 1000
    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_time:.2f}ms)"
    )
    return response


@app.get("/")
def root():
    """Welcome endpoint listing the API sections"""
    return {
        "message": "Shared Task Lists API",
        "version": health.APP_VERSION,
        "status": "running",
        "endpoints": {
            "auth": f"{API_PREFIX}/auth",
            "task_lists": f"{API_PREFIX}/tasklists",
            "tasks": f"{API_PREFIX}/tasks",
            "shares": f"{API_PREFIX}/shares",
        },
    }


api_router = APIRouter(prefix=API_PREFIX)
api_router.include_router(auth.router)
api_router.include_router(task_lists.router)
api_router.include_router(tasks.router)
api_router.include_router(sharing.sharing_router)

app.include_router(api_router)
app.include_router(health.router)


# --- Exception Handlers ---


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Handle schema validation failures by returning 400 with field messages"""
    errors = [
        {
            "field": ".".join(str(part) for part in error["loc"] if part != "body"),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    logger.warning(f"Validation failed: {errors} (path: {request.url.path})")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Validation Error",
            "message": errors[0]["message"] if errors else "Invalid request",
            "errors": errors,
        },
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Bearer/JWT failures, unknown routes and wrong methods share the
    {"error", "message"} body of the domain errors.
    """
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        error = "Authentication Failed"
    else:
        error = HTTPStatus(exc.status_code).phrase
    logger.warning(f"HTTP {exc.status_code}: {exc.detail} (path: {request.url.path})")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": error, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(exceptions.FieldValidationError)
async def field_validation_handler(
    request: Request, exc: exceptions.FieldValidationError
):
    """Handle FieldValidationError (and DuplicateUserError) by returning 400"""
    logger.warning(f"{type(exc).__name__}: {exc.message} (path: {request.url.path})")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Validation Error",
            "message": exc.message,
            "errors": [{"field": exc.field, "message": exc.message}],
        },
    )


@app.exception_handler(exceptions.InvalidCredentialsError)
async def invalid_credentials_handler(
    request: Request, exc: exceptions.InvalidCredentialsError
):
    """Handle InvalidCredentialsError by returning 401"""
    logger.warning(f"InvalidCredentialsError: {exc.message} (path: {request.url.path})")
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"error": "Authentication Failed", "message": exc.message},
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.exception_handler(exceptions.ForbiddenError)
async def forbidden_handler(request: Request, exc: exceptions.ForbiddenError):
    """Handle access denials by returning 403"""
    logger.warning(f"{type(exc).__name__}: {exc!r} (path: {request.url.path})")
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={
            "error": "Forbidden",
            "message": str(exc),
            # Don't expose task_list_id or user_id in response for security
        },
    )


@app.exception_handler(exceptions.NotFoundError)
async def not_found_handler(request: Request, exc: exceptions.NotFoundError):
    """Handle missing lists, tasks, shares and share targets by returning 404"""
    logger.error(f"{type(exc).__name__}: {exc} (path: {request.url.path})")
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": "Not Found", "message": str(exc)},
    )


@app.exception_handler(exceptions.ConflictError)
async def conflict_handler(request: Request, exc: exceptions.ConflictError):
    """Handle ConflictError by returning 409"""
    logger.warning(f"{type(exc).__name__}: {exc} (path: {request.url.path})")
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"error": "Conflict", "message": str(exc)},
    )


@app.exception_handler(exceptions.InvalidOperationError)
async def invalid_operation_handler(
    request: Request, exc: exceptions.InvalidOperationError
):
    """Handle InvalidOperationError by returning 400"""
    logger.warning(f"{type(exc).__name__}: {exc} (path: {request.url.path})")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid Operation", "message": str(exc)},
    )


@app.exception_handler(exceptions.InvalidReferenceError)
async def invalid_reference_handler(
    request: Request, exc: exceptions.InvalidReferenceError
):
    """Handle InvalidReferenceError by returning 400"""
    logger.warning(f"{type(exc).__name__}: {exc} (path: {request.url.path})")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid Reference", "message": str(exc)},
    )


@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception):
    """Log unexpected failures with detail, answer with a generic 500"""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal Server Error", "message": "Something went wrong"},
    )
