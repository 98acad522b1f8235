"""
Financial execution service layer: fund transfers (Repasse) and expenses
(Despesa) of an amendment.

Transfers and expenses do not take part in the allocation invariant; an
expense may optionally point at a destination, which must belong to the
same amendment.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from painel_emendas.models.acao_emenda import AcaoEmenda
from painel_emendas.models.despesa import Despesa
from painel_emendas.models.destinacao_recurso import DestinacaoRecurso
from painel_emendas.models.repasse import Repasse
from painel_emendas.models.usuario import Usuario
from painel_emendas.schemas.financeiro import (
    DespesaCreate,
    DespesaStatusUpdate,
    DespesaUpdate,
    RepasseCreate,
    RepasseUpdate,
)
from painel_emendas.services.emenda_service import get_emenda_or_404
from painel_emendas.services.historico_service import registrar_historico
from painel_emendas.services.transacao import transacao
from painel_emendas.utils.constants import EVENTO_DESPESA, EVENTO_REPASSE
from painel_emendas.utils.money import format_brl, to_decimal

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _get_repasse_or_404(db: Session, emenda_id: int, repasse_id: int) -> Repasse:
    repasse: Repasse | None = (
        db.query(Repasse)
        .filter(Repasse.id == repasse_id, Repasse.emenda_id == emenda_id)
        .first()
    )
    if repasse is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Repasse com id={repasse_id} não encontrado na emenda {emenda_id}.",
        )
    return repasse


def _get_despesa_or_404(db: Session, emenda_id: int, despesa_id: int) -> Despesa:
    despesa: Despesa | None = (
        db.query(Despesa)
        .filter(Despesa.id == despesa_id, Despesa.emenda_id == emenda_id)
        .first()
    )
    if despesa is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Despesa com id={despesa_id} não encontrada na emenda {emenda_id}.",
        )
    return despesa


def _validar_destinacao(db: Session, emenda_id: int, destinacao_id: int | None) -> None:
    """Raise 422 unless *destinacao_id* is ``None`` or belongs to the amendment."""
    if destinacao_id is None:
        return
    encontrada = (
        db.query(DestinacaoRecurso.id)
        .join(AcaoEmenda, DestinacaoRecurso.acao_id == AcaoEmenda.id)
        .filter(DestinacaoRecurso.id == destinacao_id, AcaoEmenda.emenda_id == emenda_id)
        .first()
    )
    if encontrada is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Destinação id={destinacao_id} não pertence à emenda {emenda_id}.",
        )


# ---------------------------------------------------------------------------
# Repasses
# ---------------------------------------------------------------------------


def listar_repasses(db: Session, emenda_id: int) -> list[Repasse]:
    get_emenda_or_404(db, emenda_id)
    return (
        db.query(Repasse)
        .filter(Repasse.emenda_id == emenda_id)
        .order_by(Repasse.data.desc(), Repasse.id.desc())
        .all()
    )


def criar_repasse(
    db: Session, emenda_id: int, data: RepasseCreate, usuario: Usuario
) -> Repasse:
    """Register a transfer and record it in the amendment history."""
    with transacao(db, "criar_repasse"):
        get_emenda_or_404(db, emenda_id)
        campos = data.model_dump()
        campos["valor"] = to_decimal(campos["valor"])
        repasse = Repasse(emenda_id=emenda_id, **campos)
        db.add(repasse)
        registrar_historico(
            db,
            emenda_id,
            EVENTO_REPASSE,
            f"Repasse de {format_brl(repasse.valor)} registrado ({repasse.status}).",
            usuario.username,
        )
    db.refresh(repasse)

    logger.info(
        "criar_repasse: emenda=%d repasse=%d valor=%s status=%s por=%s",
        emenda_id, repasse.id, repasse.valor, repasse.status, usuario.username,
    )
    return repasse


def atualizar_repasse(
    db: Session, emenda_id: int, repasse_id: int, data: RepasseUpdate, usuario: Usuario
) -> Repasse:
    dados = data.model_dump(exclude_unset=True)
    if "valor" in dados:
        if dados["valor"] is None:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="O valor do repasse não pode ser nulo.",
            )
        dados["valor"] = to_decimal(dados["valor"])
    if "status" in dados and dados["status"] is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="O status do repasse não pode ser nulo.",
        )

    with transacao(db, "atualizar_repasse"):
        repasse = _get_repasse_or_404(db, emenda_id, repasse_id)
        for campo, valor in dados.items():
            setattr(repasse, campo, valor)
        registrar_historico(
            db,
            emenda_id,
            EVENTO_REPASSE,
            f"Repasse id={repasse_id} atualizado: {', '.join(sorted(dados)) or 'sem alterações'}.",
            usuario.username,
        )
    db.refresh(repasse)

    logger.info(
        "atualizar_repasse: emenda=%d repasse=%d campos=%s por=%s",
        emenda_id, repasse_id, list(dados), usuario.username,
    )
    return repasse


def excluir_repasse(db: Session, emenda_id: int, repasse_id: int, usuario: Usuario) -> None:
    with transacao(db, "excluir_repasse"):
        repasse = _get_repasse_or_404(db, emenda_id, repasse_id)
        valor = repasse.valor
        db.delete(repasse)
        registrar_historico(
            db,
            emenda_id,
            EVENTO_REPASSE,
            f"Repasse de {format_brl(valor)} excluído.",
            usuario.username,
        )

    logger.info(
        "excluir_repasse: emenda=%d repasse=%d por=%s", emenda_id, repasse_id, usuario.username
    )


# ---------------------------------------------------------------------------
# Despesas
# ---------------------------------------------------------------------------


def listar_despesas(db: Session, emenda_id: int) -> list[Despesa]:
    get_emenda_or_404(db, emenda_id)
    return (
        db.query(Despesa)
        .filter(Despesa.emenda_id == emenda_id)
        .order_by(Despesa.data.desc(), Despesa.id.desc())
        .all()
    )


def criar_despesa(
    db: Session, emenda_id: int, data: DespesaCreate, usuario: Usuario
) -> Despesa:
    """Register an expense.

    ``registrada_por`` is always the acting user.

    Raises:
        HTTPException 404: If the amendment does not exist.
        HTTPException 422: If ``destinacao_id`` belongs to another amendment.
    """
    with transacao(db, "criar_despesa"):
        get_emenda_or_404(db, emenda_id)
        _validar_destinacao(db, emenda_id, data.destinacao_id)
        campos = data.model_dump()
        campos["valor"] = to_decimal(campos["valor"])
        despesa = Despesa(emenda_id=emenda_id, registrada_por=usuario.username, **campos)
        db.add(despesa)
        registrar_historico(
            db,
            emenda_id,
            EVENTO_DESPESA,
            f"Despesa de {format_brl(despesa.valor)} registrada ({despesa.status_execucao}).",
            usuario.username,
        )
    db.refresh(despesa)

    logger.info(
        "criar_despesa: emenda=%d despesa=%d valor=%s por=%s",
        emenda_id, despesa.id, despesa.valor, usuario.username,
    )
    return despesa


def atualizar_despesa(
    db: Session, emenda_id: int, despesa_id: int, data: DespesaUpdate, usuario: Usuario
) -> Despesa:
    dados = data.model_dump(exclude_unset=True)
    for obrigatorio in ("valor", "status_execucao"):
        if obrigatorio in dados and dados[obrigatorio] is None:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"O campo {obrigatorio} não pode ser nulo.",
            )
    if "valor" in dados:
        dados["valor"] = to_decimal(dados["valor"])

    with transacao(db, "atualizar_despesa"):
        despesa = _get_despesa_or_404(db, emenda_id, despesa_id)
        if "destinacao_id" in dados:
            _validar_destinacao(db, emenda_id, dados["destinacao_id"])
        for campo, valor in dados.items():
            setattr(despesa, campo, valor)
        registrar_historico(
            db,
            emenda_id,
            EVENTO_DESPESA,
            f"Despesa id={despesa_id} atualizada: {', '.join(sorted(dados)) or 'sem alterações'}.",
            usuario.username,
        )
    db.refresh(despesa)

    logger.info(
        "atualizar_despesa: emenda=%d despesa=%d campos=%s por=%s",
        emenda_id, despesa_id, list(dados), usuario.username,
    )
    return despesa


def alterar_status_despesa(
    db: Session,
    emenda_id: int,
    despesa_id: int,
    data: DespesaStatusUpdate,
    usuario: Usuario,
) -> Despesa:
    """Move an expense to another execution status."""
    with transacao(db, "alterar_status_despesa"):
        despesa = _get_despesa_or_404(db, emenda_id, despesa_id)
        anterior = despesa.status_execucao
        despesa.status_execucao = data.status_execucao
        registrar_historico(
            db,
            emenda_id,
            EVENTO_DESPESA,
            f"Despesa id={despesa_id}: status {anterior} → {data.status_execucao}.",
            usuario.username,
        )
    db.refresh(despesa)

    logger.info(
        "alterar_status_despesa: despesa=%d %s→%s por=%s",
        despesa_id, anterior, data.status_execucao, usuario.username,
    )
    return despesa


def excluir_despesa(db: Session, emenda_id: int, despesa_id: int, usuario: Usuario) -> None:
    with transacao(db, "excluir_despesa"):
        despesa = _get_despesa_or_404(db, emenda_id, despesa_id)
        valor = despesa.valor
        db.delete(despesa)
        registrar_historico(
            db,
            emenda_id,
            EVENTO_DESPESA,
            f"Despesa de {format_brl(valor)} excluída.",
            usuario.username,
        )

    logger.info(
        "excluir_despesa: emenda=%d despesa=%d por=%s", emenda_id, despesa_id, usuario.username
    )
