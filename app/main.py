import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.auth.router import router as auth_router
from app.config import settings
from app.core.exceptions import AppError, ErrorKind, InternalError
from app.db.session import engine
from app.todos.router import router as todos_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    await engine.dispose()


app = FastAPI(
    title="Todo API",
    version="1.0.0",
    description="Multi-user todo lists with bearer-token authentication.",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def guard_requests(request: Request, call_next):
    """Log every request and turn escaped exceptions into a 500 body."""
    start = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        logger.exception("Unhandled error during %s %s", request.method, request.url.path)
        error = InternalError()
        response = JSONResponse(status_code=error.status_code, content=error.to_dict())
    logger.info(
        "Request - Method: %s | Status: %d | Path: %s | Duration: %.1fms",
        request.method,
        response.status_code,
        request.url.path,
        (time.perf_counter() - start) * 1000,
    )
    return response


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.kind is ErrorKind.INTERNAL:
        logger.error(
            "Internal error during %s %s: %s",
            request.method,
            request.url.path,
            getattr(exc, "detail", None) or exc.message,
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def _describe(error: dict[str, Any]) -> str:
    loc = [str(part) for part in error.get("loc", ()) if part != "body"]
    field = ".".join(loc) or "body"
    ctx = error.get("ctx") or {}
    kind = error.get("type")
    if kind == "missing":
        return f"{field} is required"
    if kind == "json_invalid":
        return "Invalid request body"
    if kind == "string_too_short":
        return f"{field} must be at least {ctx.get('min_length')} characters"
    if kind == "string_too_long":
        return f"{field} must be at most {ctx.get('max_length')} characters"
    if kind == "value_error" and field == "email":
        return f"{field} must be a valid email"
    return f"{field} is invalid"


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = ", ".join(dict.fromkeys(_describe(error) for error in exc.errors()))
    status = ErrorKind.VALIDATION.status_code
    return JSONResponse(
        status_code=status,
        content={"status": status, "code": ErrorKind.VALIDATION.value, "message": message},
    )


app.include_router(auth_router)
app.include_router(todos_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


def run() -> None:
    import uvicorn

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
