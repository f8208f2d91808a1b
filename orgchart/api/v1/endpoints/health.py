from __future__ import annotations

import logging

from fastapi import APIRouter

from orgchart.core.config import settings
from orgchart.services.employee_service import employee_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check():
    services: dict[str, str] = {}

    try:
        if not employee_service.initialized:
            services["employee_store"] = "not_configured"
        else:
            ok = await employee_service.check_connection()
            services["employee_store"] = "ok" if ok else "error"
    except Exception:
        logger.exception("Employee store health check failed")
        services["employee_store"] = "error"

    services["cosmos_db"] = services["employee_store"] if employee_service.backend == "cosmos" else "not_configured"

    all_ok = all(v in ("ok", "not_configured") for v in services.values())

    return {
        "status": "healthy" if all_ok else "degraded",
        "version": settings.APP_VERSION,
        "storage_backend": employee_service.backend or None,
        "services": services,
    }


@router.get("/ready")
async def readiness_probe():
    return {"ready": employee_service.initialized}
