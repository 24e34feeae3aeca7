"""Servicios de perfil: upsert y consultas.

Reglas del upsert:
- Filtrado por presencia: un campo solo se copia si su valor es "truthy"
  (None, "", 0, False, NaN y contenedores vacíos cuentan como ausentes).
  Es el comportamiento histórico del cliente y se conserva tal cual.
- `skills` llega como texto separado por comas; se parte y se recorta cada
  segmento sin filtrar los vacíos ("js,,react" -> ["js", "", "react"]).
- `social` siempre se adjunta, aunque quede vacío.
- Reemplazo, no merge: cada upsert sustituye el conjunto completo de campos,
  así que un campo omitido en una actualización queda eliminado.
"""
import logging
import math
from typing import Any, Dict, List, Mapping, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.errors import PyMongoError

from devconnector.core.exceptions import InvalidIdentifier, ProfileNotFound, StoreFailure
from devconnector.repositories import profile_repo

_log = logging.getLogger("devconnector.profile")

SCALAR_FIELDS = ("company", "website", "location", "bio", "status", "githubusername")
SOCIAL_FIELDS = ("youtube", "facebook", "twitter", "instagram", "linkedin")


def to_object_id(value: Any) -> ObjectId:
    """Convierte a ObjectId o lanza InvalidIdentifier (nunca un fallo de servidor)."""
    if isinstance(value, ObjectId):
        return value
    if value is None:
        # ObjectId(None) generaría un id nuevo
        raise InvalidIdentifier(value)
    try:
        return ObjectId(value)
    except (InvalidId, TypeError) as e:
        raise InvalidIdentifier(value) from e


def is_present(value: Any) -> bool:
    if isinstance(value, float) and math.isnan(value):
        return False
    return bool(value)


def parse_skills(raw: Any) -> List[str]:
    """"js, node , react" -> ["js", "node", "react"]; los segmentos vacíos se conservan."""
    if isinstance(raw, (list, tuple)):
        return [str(s).strip() for s in raw]
    return [s.strip() for s in str(raw).split(",")]


def build_profile_fields(owner_id: ObjectId, raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Construye en memoria el documento candidato a partir del payload crudo."""
    raw = raw or {}
    fields: Dict[str, Any] = {"user": owner_id}

    for key in SCALAR_FIELDS:
        if is_present(raw.get(key)):
            fields[key] = raw[key]

    if is_present(raw.get("skills")):
        fields["skills"] = parse_skills(raw["skills"])

    social: Dict[str, Any] = {}
    for key in SOCIAL_FIELDS:
        if is_present(raw.get(key)):
            social[key] = raw[key]
    fields["social"] = social
    return fields


async def upsert_profile(owner_id: Any, raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Crea o reemplaza el perfil del dueño. Una lectura y una escritura, sin reintentos."""
    oid = to_object_id(owner_id)
    fields = build_profile_fields(oid, raw)

    try:
        existing = await profile_repo.find_by_user(oid)
        if existing:
            profile = await profile_repo.replace_by_user(oid, fields)
            if profile is None:
                # Eliminado entre la lectura y el reemplazo
                raise StoreFailure("profile.replace", f"perfil de {oid} desapareció antes del reemplazo")
            _log.info("Perfil actualizado user=%s", oid)
            return profile
        profile = await profile_repo.insert(fields)
        _log.info("Perfil creado user=%s id=%s", oid, profile["_id"])
        return profile
    except PyMongoError as e:
        # Incluye DuplicateKeyError cuando otro upsert concurrente insertó primero
        raise StoreFailure("profile.upsert", str(e)) from e


async def _one_populated(oid: ObjectId, not_found_message: str) -> Dict[str, Any]:
    try:
        profile = await profile_repo.find_by_user(oid)
        if not profile:
            raise ProfileNotFound(not_found_message)
        return (await profile_repo.populate_user([profile]))[0]
    except PyMongoError as e:
        raise StoreFailure("profile.find", str(e)) from e


async def get_my_profile(owner_id: Any) -> Dict[str, Any]:
    """Perfil del usuario autenticado con `user` poblado (name, avatar)."""
    return await _one_populated(to_object_id(owner_id), "No hay perfil para este usuario")


async def get_profile_by_user_id(user_id: Any) -> Dict[str, Any]:
    """Perfil público por id de cuenta. Un id mal formado responde como no encontrado."""
    return await _one_populated(to_object_id(user_id), "Perfil no encontrado")


async def list_profiles() -> List[Dict[str, Any]]:
    try:
        profiles = await profile_repo.list_all()
        return await profile_repo.populate_user(profiles)
    except PyMongoError as e:
        raise StoreFailure("profile.list", str(e)) from e


def serialize_profile(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """ObjectId -> str para la respuesta JSON (`_id` se expone como `id`)."""
    if doc is None:
        return None
    out = dict(doc)
    out["id"] = str(out.pop("_id", "")) or None
    user = out.get("user")
    if isinstance(user, ObjectId):
        out["user"] = str(user)
    elif isinstance(user, dict):
        u = dict(user)
        u["id"] = str(u.pop("_id", "")) or None
        out["user"] = u
    return out
