import logging

from fastapi import APIRouter

from app.modules.grocery.router import router as grocery_router
from app.modules.grocery.schemas import HealthResponse
from app.services.schedules import NowUtc

router = APIRouter()
logger = logging.getLogger("app.health")


@router.get("/api/health", response_model=HealthResponse, tags=["health"])
def Health() -> HealthResponse:
    logger.debug("health ok")
    return HealthResponse(Status="ok", Timestamp=NowUtc())


router.include_router(grocery_router)
