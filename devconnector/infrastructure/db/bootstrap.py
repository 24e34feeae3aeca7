"""
Bootstrap de la base Mongo: define y aplica validadores (JSON Schema) e índices.
Se ejecuta al inicio de la app para asegurar colecciones mínimas y consistencia.

El índice único `profiles.user` es el respaldo ante upserts concurrentes del
mismo dueño: el segundo insert falla con DuplicateKeyError en lugar de crear
un segundo perfil.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List

from pymongo.errors import PyMongoError

from devconnector.infrastructure.db.mongo_async import get_async_db
from devconnector.repositories.account_repo import COLLECTION as ACCOUNTS
from devconnector.repositories.profile_repo import COLLECTION as PROFILES

_log = logging.getLogger("devconnector.mongo.bootstrap")

_SOCIAL_KEYS = ("youtube", "facebook", "twitter", "instagram", "linkedin")

ACCOUNT_VALIDATOR: Dict[str, Any] = {
    "bsonType": "object",
    "required": ["name", "email"],
    "properties": {
        "name": {"bsonType": "string"},
        "email": {"bsonType": "string", "minLength": 3},
        "avatar": {"bsonType": ["string", "null"]},
    },
    "additionalProperties": True,
}

PROFILE_VALIDATOR: Dict[str, Any] = {
    "bsonType": "object",
    "required": ["user", "social"],
    "properties": {
        "user": {"bsonType": "objectId"},
        "skills": {"bsonType": "array", "items": {"bsonType": "string"}},
        "social": {
            "bsonType": "object",
            "properties": {k: {"bsonType": "string"} for k in _SOCIAL_KEYS},
            "additionalProperties": False,
        },
    },
    "additionalProperties": True,
}


async def _collmod_or_create(name: str, validator: Dict[str, Any] | None) -> None:
    db = get_async_db()
    try:
        if validator:
            await db.command({
                "collMod": name,
                "validator": {"$jsonSchema": validator},
                "validationLevel": "moderate",
            })
            return
    except PyMongoError:
        # collMod falla si la colección no existe; se intenta crear abajo
        pass
    try:
        if name not in await db.list_collection_names():
            if validator:
                await db.create_collection(name, validator={"$jsonSchema": validator})
            else:
                await db.create_collection(name)
    except PyMongoError as e:
        # No aborta el arranque; solo deja sin validator estricto.
        _log.warning("No se pudo aplicar validator en '%s': %s", name, e)


async def _ensure_indexes(name: str, indexes: List[Dict[str, Any]]) -> None:
    coll = get_async_db()[name]
    for ix in indexes:
        ix = dict(ix)
        keys = ix.pop("keys")
        try:
            await coll.create_index(keys, **ix)
        except PyMongoError as e:
            # Datos previos duplicados impiden el índice único; se avisa y se sigue
            _log.warning("No se pudo crear índice en '%s' (%s): %s", name, keys, e)


async def ensure_collections() -> None:
    """Garantiza colecciones, validadores e índices mínimos."""
    await _collmod_or_create(ACCOUNTS, ACCOUNT_VALIDATOR)
    await _ensure_indexes(ACCOUNTS, [{"keys": [("email", 1)], "unique": True, "name": "uniq_email"}])

    await _collmod_or_create(PROFILES, PROFILE_VALIDATOR)
    await _ensure_indexes(PROFILES, [{"keys": [("user", 1)], "unique": True, "name": "uniq_profile_user"}])
    _log.info("Colecciones e índices verificados (%s, %s)", ACCOUNTS, PROFILES)
