"""
Verificación de JWTs de acceso emitidos por el servicio de cuentas.

Aquí solo se decodifica y se extrae el id del dueño; la emisión no vive en este servicio.
"""
from typing import Any, Dict, Optional

import jwt as pyjwt

from devconnector.core.config import settings


class TokenError(Exception):
    pass


def verify_access_token(token: str) -> Dict[str, Any]:
    """Decodifica y valida firma/expiración. Devuelve payload."""
    if not settings.jwt_secret:
        raise TokenError("JWT_SECRET no configurado")
    try:
        return pyjwt.decode(token, key=settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except pyjwt.PyJWTError as e:
        raise TokenError(str(e)) from e


def owner_id_from_payload(payload: Dict[str, Any]) -> Optional[str]:
    """Id del dueño: claim `sub` o, en tokens legacy, `user.id`."""
    sub = payload.get("sub")
    if sub:
        return str(sub)
    user = payload.get("user")
    if isinstance(user, dict) and user.get("id"):
        return str(user["id"])
    return None
