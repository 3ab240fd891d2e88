# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""System endpoints: health, readiness, metrics."""
from fastapi import APIRouter, Depends, HTTPException
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from member_service.core.config import settings
from member_service.core.dependencies import get_member_repo

router = APIRouter(tags=["System"])


@router.get("/health")
def health_check():
    return {"status": "ok", "service": settings.SERVICE_NAME, "version": settings.SERVICE_VERSION}


@router.get("/health/ready")
async def readiness_check(repo=Depends(get_member_repo)):
    try:
        await repo.verify_connection()
        return {"status": "ok", "store": settings.STORE_BACKEND, "members": await repo.count()}
    except Exception as exc:
        raise HTTPException(status_code=503, detail=f"Store unavailable: {exc}")


@router.get("/metrics")
def prometheus_metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
