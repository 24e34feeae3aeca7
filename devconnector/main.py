"""Entrada principal de la app FastAPI (configura middlewares, excepciones y routers)."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from devconnector.api.router import api_router
from devconnector.core.config import settings
from devconnector.core.exceptions import register_exception_handlers
from devconnector.core.logging import setup_logging
from devconnector.core.middleware import add_middlewares
from devconnector.infrastructure.db.bootstrap import ensure_collections
from devconnector.infrastructure.db.mongo_async import close_mongo, db_ready

_log = logging.getLogger("devconnector.startup")

setup_logging(settings.log_level)


async def _on_startup() -> None:
    if not settings.jwt_configured:
        _log.warning("JWT_SECRET no configurado; las rutas privadas responderán 401")
    if not settings.mongo_bootstrap:
        return
    # Garantiza colecciones/índices/validadores mínimos si hay conexión
    if await db_ready():
        await ensure_collections()
    else:
        _log.warning("Mongo no listo; omitiendo ensure_collections()")


@asynccontextmanager
async def lifespan(_app: FastAPI):
    await _on_startup()
    try:
        yield
    finally:
        close_mongo()


app = FastAPI(title=settings.app_name, lifespan=lifespan)

add_middlewares(app)
register_exception_handlers(app)


# Monta routers bajo el prefijo configurado
app.include_router(api_router, prefix=settings.api_prefix_normalized)
