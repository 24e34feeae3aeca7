"""
Errores de dominio y handlers globales para respuestas de error consistentes.

Taxonomía:
- PayloadValidationError: el payload no cumple reglas de campos requeridos (400).
- ProfileNotFound: no hay perfil/cuenta que coincida (404, no es un fallo del servidor).
- InvalidIdentifier: id mal formado; se responde igual que ProfileNotFound
  pero se distingue internamente para diagnóstico.
- StoreFailure: fallo de I/O o de restricción en Mongo (500 opaco, se loggea).
"""
import logging
from typing import Any, Dict, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


class PayloadValidationError(Exception):
    def __init__(self, violations: List[Dict[str, Any]]):
        super().__init__("Validation error")
        self.violations = violations


class ProfileNotFound(Exception):
    def __init__(self, message: str = "Perfil no encontrado"):
        super().__init__(message)
        self.message = message


class InvalidIdentifier(ProfileNotFound):
    def __init__(self, value: Any, message: str = "Perfil no encontrado"):
        super().__init__(message)
        self.value = value


class StoreFailure(Exception):
    """Fallo de persistencia. `details` queda solo para logs, nunca para el cliente."""

    def __init__(self, operation: str, details: Any = None):
        super().__init__(f"Store failure during {operation}")
        self.operation = operation
        self.details = details


def _req_id(request: Request) -> str | None:
    return getattr(getattr(request, "state", object()), "request_id", None)


def _body(request: Request, **fields: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = dict(fields)
    rid = _req_id(request)
    if rid:
        body["request_id"] = rid
    return body


def register_exception_handlers(app: FastAPI) -> None:
    log = logging.getLogger("devconnector.errors")

    @app.exception_handler(StarletteHTTPException)
    async def _http_exc_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content=_body(request, message=exc.detail or "HTTP error"))

    @app.exception_handler(RequestValidationError)
    async def _validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content=_body(request, message="Validation error", errors=jsonable_errors(exc.errors())),
        )

    @app.exception_handler(PayloadValidationError)
    async def _payload_validation_handler(request: Request, exc: PayloadValidationError):
        return JSONResponse(status_code=400, content=_body(request, message="Validation error", errors=exc.violations))

    @app.exception_handler(ProfileNotFound)
    async def _not_found_handler(request: Request, exc: ProfileNotFound):
        if isinstance(exc, InvalidIdentifier):
            log.info("Identificador mal formado value=%r request_id=%s", exc.value, _req_id(request))
        else:
            log.debug("Perfil no encontrado path=%s", request.url.path)
        return JSONResponse(status_code=404, content=_body(request, message=exc.message))

    @app.exception_handler(StoreFailure)
    async def _store_failure_handler(request: Request, exc: StoreFailure):
        log.error(
            "Store failure operation=%s details=%s request_id=%s",
            exc.operation,
            exc.details,
            _req_id(request),
            exc_info=exc.__cause__ or exc,
        )
        return JSONResponse(status_code=500, content=_body(request, message="Internal server error"))

    @app.exception_handler(Exception)
    async def _generic_handler(request: Request, exc: Exception):
        rid = _req_id(request)
        log.exception("Unhandled error request_id=%s", rid)
        return JSONResponse(status_code=500, content=_body(request, message="Internal server error"))


def jsonable_errors(errors: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    # `ctx` de pydantic puede traer excepciones no serializables
    out = []
    for e in errors:
        e = dict(e)
        if "ctx" in e:
            e["ctx"] = {k: str(v) for k, v in (e["ctx"] or {}).items()}
        out.append(e)
    return out
