import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from releasecheck.api.health import router as health_router
from releasecheck.api.releases import router as releases_router
from releasecheck.core.config import get_settings
from releasecheck.services.observability import TRACE_HEADER, accept_trace_id, emit_structured_log, trace_scope

settings = get_settings()
if not logging.getLogger().handlers:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")


app = FastAPI(title=settings.app_name)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def trace_and_request_log_middleware(request: Request, call_next):
    with trace_scope(accept_trace_id(request.headers.get(TRACE_HEADER))) as trace_id:
        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[TRACE_HEADER] = trace_id
            return response
        finally:
            path_params = request.scope.get("path_params") or {}
            emit_structured_log(
                component="api",
                event="http_request",
                release_id=path_params.get("release_id"),
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    emit_structured_log(
        component="api",
        event="unhandled_exception",
        level=logging.ERROR,
        method=request.method,
        path=request.url.path,
        error_type=type(exc).__name__,
        error=str(exc),
    )
    return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


app.include_router(health_router)
app.include_router(releases_router)


def run() -> None:
    logging.getLogger("releasecheck.main").info(
        "server_starting host=%s port=%s health=http://%s:%s/health",
        settings.host,
        settings.port,
        settings.host,
        settings.port,
    )
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
