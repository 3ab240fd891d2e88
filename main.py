# type: ignore
# pyright: reportGeneralTypeIssues=false
"""
Member Service
==============
Maintains a referral hierarchy of members. Every member has at most one
upline and, through automatic breadth-first placement, at most two downlines.

Exposes member CRUD, the full hierarchy as a nested display tree,
relation-aware search and cascading subtree removal.

Port: 8005
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from member_service.controllers import member_controller, system_controller
from member_service.core.config import settings
from member_service.core.dependencies import get_member_repo, get_member_service
from member_service.core.logging import get_logger
from member_service.middleware import MetricsMiddleware, RequestIDMiddleware

logger = get_logger(__name__)


# ── Lifespan ──────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    repo = get_member_repo()
    await repo.create_schema()
    try:
        await get_member_service().seed_gauges()
    except Exception:
        logger.warning("Could not seed gauges: store may not be ready yet")
    logger.info("Member service started backend=%s", settings.STORE_BACKEND)
    yield
    await repo.dispose()
    logger.info("Shutting down: store disposed")


# ── FastAPI App ───────────────────────────────────────────────────────────
app = FastAPI(
    title="Member Service",
    description="Referral hierarchy with automatic upline placement.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestIDMiddleware)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception")
    return JSONResponse(status_code=500, content={"error": "internal_server_error", "detail": str(exc)})


app.include_router(system_controller.router)
app.include_router(member_controller.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.SERVICE_PORT, log_level="info")
