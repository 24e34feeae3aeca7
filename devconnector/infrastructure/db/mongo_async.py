"""Cliente MongoDB asíncrono (Motor).

Un único cliente por proceso, inicializado lazy. Repositorios y bootstrap
obtienen la base con `get_async_db()`; los routers nunca la tocan directamente.
"""
from __future__ import annotations

import logging
from typing import Optional

import certifi
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from devconnector.core.config import settings

_log = logging.getLogger("devconnector.mongo.async")

_aclient: Optional[AsyncIOMotorClient] = None
_adb: Optional[AsyncIOMotorDatabase] = None


def _build_async_client() -> AsyncIOMotorClient:
    uri = settings.mongo_uri
    kwargs = dict(serverSelectionTimeoutMS=settings.mongo_server_selection_timeout_ms)
    if uri.startswith("mongodb+srv://"):
        # SRV ya implica TLS; proveemos CA bundle para robustez
        kwargs["tlsCAFile"] = certifi.where()
    elif settings.mongo_tls:
        kwargs["tls"] = True
        kwargs["tlsCAFile"] = certifi.where()
        if settings.mongo_tls_insecure:
            kwargs["tlsAllowInvalidCertificates"] = True
        if settings.mongo_tls_allow_invalid_hostnames:
            kwargs["tlsAllowInvalidHostnames"] = True
    return AsyncIOMotorClient(uri, **kwargs)


def get_async_db() -> AsyncIOMotorDatabase:
    """Devuelve la DB asíncrona; inicializa lazy un único cliente/bd."""
    global _aclient, _adb
    if _adb is None:
        _aclient = _aclient or _build_async_client()
        _adb = _aclient[settings.mongo_db]
        _log.info("Motor listo (db=%s)", settings.mongo_db)
    return _adb


async def db_ready() -> bool:
    """Ping al servidor; False si no responde dentro del timeout de selección."""
    try:
        await get_async_db().command("ping")
        return True
    except PyMongoError as e:
        _log.warning("Mongo no accesible: %s", e)
        return False


def close_mongo() -> None:
    global _aclient, _adb
    if _aclient is not None:
        _aclient.close()
        _log.info("Motor cerrado")
    _aclient = None
    _adb = None
