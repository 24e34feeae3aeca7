"""Repo de la colección `accounts`.

Este servicio solo lee la proyección pública (`name`, `avatar`) y elimina cuentas.
"""
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId

from devconnector.infrastructure.db import mongo_async

COLLECTION = "accounts"

PUBLIC_PROJECTION = {"name": 1, "avatar": 1}


async def find_public_by_ids(ids: Iterable[ObjectId]) -> List[Dict[str, Any]]:
    """Proyección `{_id, name, avatar}` de las cuentas indicadas."""
    ids = list(ids)
    if not ids:
        return []
    cursor = mongo_async.get_async_db()[COLLECTION].find({"_id": {"$in": ids}}, PUBLIC_PROJECTION)
    return await cursor.to_list(length=None)


async def delete_account(account_id: ObjectId) -> Optional[Dict[str, Any]]:
    """Elimina la cuenta; devuelve el doc eliminado o None si no existía."""
    return await mongo_async.get_async_db()[COLLECTION].find_one_and_delete({"_id": account_id})


async def exists(account_id: ObjectId) -> bool:
    doc = await mongo_async.get_async_db()[COLLECTION].find_one({"_id": account_id}, {"_id": 1})
    return doc is not None
