"""Repo de la colección `profiles`.

- `user` se guarda como ObjectId (referencia a `accounts._id`).
- `populate_user` sustituye esa referencia por `{_id, name, avatar}` al leer;
  no se persiste ninguna duplicación.
"""
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo import ReturnDocument

from devconnector.infrastructure.db import mongo_async
from devconnector.repositories import account_repo

COLLECTION = "profiles"


def _coll():
    return mongo_async.get_async_db()[COLLECTION]


async def find_by_user(user_id: ObjectId) -> Optional[Dict[str, Any]]:
    return await _coll().find_one({"user": user_id})


async def list_all() -> List[Dict[str, Any]]:
    return await _coll().find({}).to_list(length=None)


async def replace_by_user(user_id: ObjectId, doc: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Reemplaza el conjunto completo de campos; devuelve el doc ya reemplazado."""
    return await _coll().find_one_and_replace(
        {"user": user_id},
        doc,
        return_document=ReturnDocument.AFTER,
    )


async def insert(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Inserta y devuelve el documento con su `_id`."""
    data = dict(doc)
    res = await _coll().insert_one(data)
    data["_id"] = res.inserted_id
    return data


async def delete_by_user(user_id: ObjectId) -> Optional[Dict[str, Any]]:
    return await _coll().find_one_and_delete({"user": user_id})


async def populate_user(profiles: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Join de lectura: `user` (ObjectId) -> `{_id, name, avatar}` o None si la cuenta no existe."""
    ids = {p["user"] for p in profiles if p.get("user") is not None}
    accounts = await account_repo.find_public_by_ids(ids)
    by_id = {a["_id"]: a for a in accounts}
    out = []
    for p in profiles:
        p = dict(p)
        p["user"] = by_id.get(p.get("user"))
        out.append(p)
    return out
