"""
Endpoints de perfiles.

- Privados (token): `/profile/me`, `POST /profile`, `DELETE /profile`.
- Públicos: `GET /profile`, `/profile/user/{user_id}`.
- La API delega en `services/profile_service.py` y `services/account_service.py`;
  los errores de dominio los traduce `core/exceptions.py`.
"""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends
from pydantic import ValidationError

from devconnector.api.deps import get_current_account_id, get_current_user_id
from devconnector.api.schemas.profile import MessageOut, ProfileIn, ProfileOut, profile_violations
from devconnector.core.exceptions import PayloadValidationError
from devconnector.services import account_service, profile_service

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get(
    "/me",
    response_model=ProfileOut,
    response_model_exclude_none=True,
    summary="Perfil propio",
    description="Devuelve el perfil del usuario autenticado con nombre y avatar de la cuenta.",
)
async def get_my_profile(owner_id: str = Depends(get_current_account_id)):
    profile = await profile_service.get_my_profile(owner_id)
    return profile_service.serialize_profile(profile)


@router.post(
    "",
    response_model=ProfileOut,
    response_model_exclude_none=True,
    summary="Crear o actualizar perfil",
    description="Reemplaza el perfil completo con los campos presentes en el payload (status y skills obligatorios).",
    # El body se valida a mano para responder 400 con la lista de violaciones
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": ProfileIn.model_json_schema()}},
        }
    },
)
async def upsert_my_profile(
    payload: Optional[Dict[str, Any]] = Body(default=None),
    owner_id: str = Depends(get_current_account_id),
):
    try:
        data = ProfileIn.model_validate(payload or {})
    except ValidationError as e:
        raise PayloadValidationError(profile_violations(e))
    profile = await profile_service.upsert_profile(owner_id, data.model_dump(exclude_none=True))
    return profile_service.serialize_profile(profile)


@router.get(
    "",
    response_model=List[ProfileOut],
    response_model_exclude_none=True,
    summary="Listar perfiles",
)
async def list_profiles():
    profiles = await profile_service.list_profiles()
    return [profile_service.serialize_profile(p) for p in profiles]


@router.get(
    "/user/{user_id}",
    response_model=ProfileOut,
    response_model_exclude_none=True,
    summary="Perfil por id de cuenta",
)
async def get_profile_by_user_id(user_id: str):
    profile = await profile_service.get_profile_by_user_id(user_id)
    return profile_service.serialize_profile(profile)


@router.delete(
    "",
    response_model=MessageOut,
    summary="Eliminar perfil y cuenta",
    description="Elimina perfil y cuenta del usuario autenticado (no transaccional).",
)
async def delete_my_account(owner_id: str = Depends(get_current_user_id)):
    await account_service.delete_account_cascade(owner_id)
    return MessageOut(message="Usuario eliminado")
