"""Audit-trail helpers shared by every write service."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from painel_emendas.models.historico_emenda import HistoricoEmenda

logger = logging.getLogger(__name__)


def registrar_historico(
    db: Session,
    emenda_id: int,
    evento: str,
    detalhe: str | None,
    feito_por: str | None,
) -> HistoricoEmenda:
    """Add a history entry to the session without committing.

    The caller commits together with the change being audited so that the
    entry and the change land in the same transaction.
    """
    entrada = HistoricoEmenda(
        emenda_id=emenda_id,
        evento=evento,
        detalhe=detalhe,
        feito_por=feito_por,
    )
    db.add(entrada)
    logger.debug("historico: emenda=%s evento=%s por=%s", emenda_id, evento, feito_por)
    return entrada
