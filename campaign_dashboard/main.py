from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .error_logging import error_logger
from .routers import benchmark, creatives, engagement

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

app.include_router(creatives.router)
app.include_router(engagement.router)
app.include_router(benchmark.router)


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    error_logger.log(
        {
            "tool": "dashboard",
            "severity": "error",
            "message": str(exc),
            "route": request.url.path,
            "method": request.method,
            "status_code": 500,
            "meta": {"exception": type(exc).__name__},
        }
    )
    return JSONResponse(status_code=500, content={"detail": "Internal error while building dashboard"})


@app.get("/healthz")
def healthz():
    return {"ok": True, "version": settings.app_version}
