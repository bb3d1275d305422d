from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import (
    CorruptStateError,
    InvalidCriterionError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from .logging_setup import setup_logging
from .routers import tasks as tasks_router
from .settings import get_settings
from .store import TaskStore, get_task_store

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "tasks",
        "description": "Create, update, toggle and delete tasks; filtered views and statistics.",
    },
]

app = FastAPI(
    title="Task Tracker",
    description="Local API over a single-user task store with persistent storage.",
    version="0.1.0",
    openapi_tags=openapi_tags,
)

_settings = get_settings()

# No cookies or auth headers are involved, so credentials stay disabled.
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_allow_origins or ["*"],
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type"],
)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Malformed request body (unknown key, wrong JSON type). Uses the draft
    error envelope; "field" is the first offending body key, if any.
    """
    # Offending input values are not echoed back; they may not be encodable.
    errors = [{"loc": e["loc"], "msg": e["msg"], "type": e["type"]} for e in exc.errors()]
    loc = [str(part) for part in errors[0]["loc"] if part != "body"] if errors else []
    return JSONResponse(
        status_code=422,
        content=jsonable_encoder(
            {
                "error": "ValidationError",
                "message": "Request validation failed",
                "field": loc[0] if loc else None,
                "detail": errors,
            }
        ),
    )


@app.exception_handler(ValidationError)
async def draft_validation_exception_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """
    Draft rejected by the store. Same envelope as request validation, plus the field name.
    """
    return JSONResponse(
        status_code=422,
        content={
            "error": "ValidationError",
            "message": exc.message,
            "field": exc.field,
        },
    )


@app.exception_handler(NotFoundError)
async def not_found_exception_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": "Task not found"})


@app.exception_handler(InvalidCriterionError)
async def invalid_criterion_exception_handler(request: Request, exc: InvalidCriterionError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"detail": "filter must be one of: all, pending, completed, highPriority"},
    )


@app.exception_handler(StorageError)
@app.exception_handler(CorruptStateError)
async def storage_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"error": type(exc).__name__, "message": str(exc)},
    )


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check(store: TaskStore = Depends(get_task_store)):
    """
    Report the storage backend in use and how many tasks it currently holds.

    Loading the store here means a corrupt or unreadable store shows up as a
    500 from the health check rather than on the first task request.
    """
    return {"message": "Healthy", "backend": store.storage.name, "tasks": len(store.list())}


app.include_router(tasks_router.router)


# PUBLIC_INTERFACE
def run() -> None:
    """
    Serve the API with uvicorn on the configured host/port.

    Usage:
        task-tracker
    """
    import uvicorn

    setup_logging(console_level=_settings.log_level, log_file=_settings.log_file)
    uvicorn.run(app, host=_settings.host, port=_settings.port, log_config=None)


if __name__ == "__main__":
    run()
