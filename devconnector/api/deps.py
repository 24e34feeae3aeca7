"""
Dependencias reutilizables para routers (FastAPI Depends).

- Autenticación: extrae y valida el Access Token y devuelve el id del dueño.
- `get_current_account_id` además exige que la cuenta siga existiendo, para que
  un token emitido antes de eliminar la cuenta no pueda recrear un perfil huérfano.
- Mantener esta capa delgada: sin lógica de negocio.
"""
from typing import Optional

from fastapi import Depends, Header, HTTPException
from pymongo.errors import PyMongoError
from starlette.status import HTTP_401_UNAUTHORIZED

from devconnector.core.exceptions import InvalidIdentifier, StoreFailure
from devconnector.infrastructure.security.token_service import (
    TokenError,
    owner_id_from_payload,
    verify_access_token,
)
from devconnector.repositories import account_repo
from devconnector.services.profile_service import to_object_id


def _extract_token(authorization: Optional[str], x_auth_token: Optional[str]) -> Optional[str]:
    if authorization and authorization.startswith("Bearer "):
        return authorization.split(" ", 1)[1].strip() or None
    # Header legacy del cliente React
    return (x_auth_token or "").strip() or None


def get_current_user_id(
    authorization: Optional[str] = Header(default=None),
    x_auth_token: Optional[str] = Header(default=None),
) -> str:
    token = _extract_token(authorization, x_auth_token)
    if not token:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Falta token")
    try:
        payload = verify_access_token(token)
    except TokenError:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Token inválido")

    owner_id = owner_id_from_payload(payload)
    if not owner_id:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Token inválido")
    return owner_id


async def get_current_account_id(owner_id: str = Depends(get_current_user_id)) -> str:
    try:
        oid = to_object_id(owner_id)
    except InvalidIdentifier:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Token inválido")
    try:
        found = await account_repo.exists(oid)
    except PyMongoError as e:
        raise StoreFailure("account.exists", str(e)) from e
    if not found:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Usuario no encontrado")
    return owner_id
