"""Health (sin auth), salidas tipadas y estables."""
from fastapi import APIRouter, status

from devconnector.api.schemas.health import HealthOut, PingOut
from devconnector.infrastructure.db.mongo_async import db_ready

router = APIRouter(tags=["Health"])  # no prefix to keep paths stable


@router.get("/ping", response_model=PingOut, summary="Ping básico")
def ping() -> PingOut:
    return PingOut(message="pong")


@router.get("/health", status_code=status.HTTP_200_OK, response_model=HealthOut, summary="Salud básica + Mongo")
async def health() -> HealthOut:
    mongo = await db_ready()
    return HealthOut(ok=True, mongo=mongo)
