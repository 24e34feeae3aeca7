"""
Eliminación en cascada de perfil + cuenta.

Las dos eliminaciones se lanzan en paralelo y sin transacción: cada una tiene su
propio resultado. Si alguna falla se reporta StoreFailure aunque la otra haya
tenido éxito, sin compensación; quien llama debe asumir que el estado puede
quedar a medias (perfil borrado y cuenta viva, o al revés).

Que el perfil ya no exista no es error: la cuenta se elimina igual, así que
repetir la operación es seguro.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from devconnector.core.exceptions import StoreFailure
from devconnector.repositories import account_repo, profile_repo
from devconnector.services.profile_service import to_object_id

_log = logging.getLogger("devconnector.account")


@dataclass
class RemovalOutcome:
    collection: str
    removed: bool = False
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class DeletionReport:
    owner_id: str
    outcomes: List[RemovalOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(o.ok for o in self.outcomes)

    @property
    def failed(self) -> List[RemovalOutcome]:
        return [o for o in self.outcomes if not o.ok]


def _outcome(collection: str, result: Any) -> RemovalOutcome:
    if isinstance(result, Exception):
        return RemovalOutcome(collection=collection, error=result)
    if isinstance(result, BaseException):
        # CancelledError y similares no se convierten en resultado
        raise result
    return RemovalOutcome(collection=collection, removed=result is not None)


async def delete_account_cascade(owner_id: Any) -> DeletionReport:
    """Elimina perfil y cuenta del dueño como una unidad lógica (no atómica)."""
    oid = to_object_id(owner_id)

    # TODO: eliminar también los posts del usuario cuando este servicio tenga acceso a la colección `posts`.
    results = await asyncio.gather(
        profile_repo.delete_by_user(oid),
        account_repo.delete_account(oid),
        return_exceptions=True,
    )
    report = DeletionReport(
        owner_id=str(oid),
        outcomes=[
            _outcome(profile_repo.COLLECTION, results[0]),
            _outcome(account_repo.COLLECTION, results[1]),
        ],
    )

    if not report.ok:
        for o in report.failed:
            _log.error("Eliminación fallida collection=%s user=%s: %s", o.collection, oid, o.error)
        raise StoreFailure("account.delete", report)

    _log.info(
        "Cuenta eliminada user=%s profile_removed=%s account_removed=%s",
        oid,
        report.outcomes[0].removed,
        report.outcomes[1].removed,
    )
    return report
