"""
Esquemas Pydantic para `profiles` (entrada de upsert y salidas).

Los campos ausentes se omiten en la respuesta (los routers usan
`response_model_exclude_none=True`): ausencia y cadena vacía no son lo mismo.
"""
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator


class SocialOut(BaseModel):
    youtube: Optional[Any] = None
    facebook: Optional[Any] = None
    twitter: Optional[Any] = None
    instagram: Optional[Any] = None
    linkedin: Optional[Any] = None


class ProfileOwnerOut(BaseModel):
    """Proyección pública de la cuenta dueña."""
    id: str
    name: Optional[str] = None
    avatar: Optional[str] = None


class ProfileOut(BaseModel):
    # Los escalares se guardan tal como llegaron (sin coerción de tipo)
    model_config = ConfigDict(extra="ignore")

    id: str
    user: Union[ProfileOwnerOut, str, None] = None
    company: Optional[Any] = None
    website: Optional[Any] = None
    location: Optional[Any] = None
    bio: Optional[Any] = None
    status: Optional[Any] = None
    githubusername: Optional[Any] = None
    skills: Optional[List[str]] = None
    social: SocialOut = SocialOut()


class MessageOut(BaseModel):
    message: str


class ProfileIn(BaseModel):
    """
    Payload de `POST /profile`.

    `status` y `skills` son obligatorios y no pueden venir vacíos; el resto es
    opcional. Los valores se aceptan como texto: una cadena vacía pasa el esquema
    y el servicio la descarta por el filtrado por presencia.
    """
    model_config = ConfigDict(extra="ignore")

    status: str
    skills: Union[str, List[str]]

    company: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    githubusername: Optional[str] = None

    youtube: Optional[str] = None
    facebook: Optional[str] = None
    twitter: Optional[str] = None
    instagram: Optional[str] = None
    linkedin: Optional[str] = None

    @field_validator("status", "skills")
    @classmethod
    def _not_empty(cls, v: Union[str, List[str]]) -> Union[str, List[str]]:
        # Lista vacía y cadena vacía cuentan igual: el perfil quedaría sin el campo
        if not v:
            raise ValueError("vacío")
        return v


REQUIRED_MESSAGES: Dict[str, str] = {
    "status": "El estado es obligatorio",
    "skills": "Las habilidades son obligatorias",
}


def profile_violations(exc: ValidationError) -> List[Dict[str, Any]]:
    """Traduce los errores de pydantic a `{param, msg, location, value}` (uno por campo)."""
    violations: List[Dict[str, Any]] = []
    seen = set()
    for e in exc.errors():
        loc = e.get("loc") or ()
        param = str(loc[0]) if loc else "body"
        if param in seen:
            # Un Union reporta un error por rama; basta con el primero
            continue
        seen.add(param)
        missing = e.get("type") == "missing"
        value = None if missing else e.get("input")
        if param in REQUIRED_MESSAGES and (missing or value is None or e.get("type") == "value_error"):
            msg = REQUIRED_MESSAGES[param]
        else:
            msg = e.get("msg")
        violations.append({"param": param, "msg": msg, "location": "body", "value": value})
    return violations
