import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .settings import get_settings
from .routers import tasks as tasks_router

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "tasks",
        "description": "Task list commands: add, toggle, delete, clear completed, complete all, and filtered views.",
    },
]

_settings = get_settings()

logging.basicConfig(level=_settings.log_level)

app = FastAPI(
    title="TaskFlow",
    description="Local task list with progress tracking, persisted to a key-value snapshot.",
    version="0.1.0",
    openapi_tags=openapi_tags,
)

# An empty CORS_ALLOW_ORIGINS list allows every origin.
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_allow_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Report bad task commands (unknown filter, missing text) as a 422 envelope:
    ``{"error": "ValidationError", "message": ..., "detail": [...]}``.
    """
    return JSONResponse(
        status_code=422,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            "detail": exc.errors(),
        },
    )


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check():
    """
    Report which snapshot storage the task list is using.

    Returns:
        ``{"message": "Healthy", "backend": "memory"|"sqlite", "storage_key": <key>}``
    """
    return {
        "message": "Healthy",
        "backend": _settings.storage_backend,
        "storage_key": _settings.storage_key,
    }


app.include_router(tasks_router.router)
