"""
Amendment (Emenda) service layer.

All database access for the ``/api/emendas`` endpoints that are not about
planning or finances lives here: list, detail, create, update, pending-item
dismissal and history.

Design notes
------------
- The list is filtered, sorted and paginated in Python by
  ``filtro_service`` over amendments loaded with their transfers, expenses
  and dismissals (``selectinload``).  Derived totals and pending items are
  therefore always computed from the current rows.
- Amendments are never deleted through the API.
- Updates are last-write-wins, except that ``valor_total`` can never drop
  below what is already allocated to destinations; that check runs with the
  amendment row locked (``with_for_update``) like every planning write.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, status
from sqlalchemy.orm import Session, selectinload

from painel_emendas.config import get_settings
from painel_emendas.models.acao_emenda import AcaoEmenda
from painel_emendas.models.emenda import Emenda
from painel_emendas.models.historico_emenda import HistoricoEmenda
from painel_emendas.models.pendencia_emenda import PendenciaEmenda
from painel_emendas.models.usuario import Usuario
from painel_emendas.schemas.common import OrdenacaoParams, PaginationParams
from painel_emendas.schemas.emenda import (
    EmendaCreate,
    EmendaDetalheResponse,
    EmendaFiltros,
    EmendaListItem,
    EmendaTabelaResponse,
    EmendaUpdate,
    PendenciaDispensadaResponse,
    PendenciaDispensaRequest,
    QuadroDemonstrativo,
)
from painel_emendas.services import filtro_service
from painel_emendas.services.historico_service import registrar_historico
from painel_emendas.services.saldo_service import (
    parcela_primeiro_parlamentar,
    total_destinado,
)
from painel_emendas.services.transacao import transacao
from painel_emendas.utils.constants import (
    ALVOS_PENDENCIA,
    EVENTO_ATUALIZACAO,
    EVENTO_CRIACAO,
    EVENTO_PENDENCIA,
    EVENTO_STATUS_INTERNO,
)
from painel_emendas.utils.money import format_brl, safe_pct, to_decimal

logger = logging.getLogger(__name__)

_CAMPOS_MONETARIOS = ("valor_total", "valor_segundo_responsavel")
_CAMPOS_OBRIGATORIOS = frozenset({
    "tipo", "tipo_recurso", "autor", "parlamentar", "valor_total",
    "situacao", "status_interno", "anexos_essenciais",
})


# ---------------------------------------------------------------------------
# Loading helpers
# ---------------------------------------------------------------------------


def carregar_emendas(db: Session) -> list[Emenda]:
    """Load every amendment with the collections the pure services read.

    Newest first; this is the input order the list keeps when no sort key
    is given.
    """
    return (
        db.query(Emenda)
        .options(
            selectinload(Emenda.repasses),
            selectinload(Emenda.despesas),
            selectinload(Emenda.pendencias),
            selectinload(Emenda.acoes).selectinload(AcaoEmenda.destinacoes),
        )
        .order_by(Emenda.created_at.desc(), Emenda.id.desc())
        .all()
    )


def get_emenda_or_404(db: Session, emenda_id: int, for_update: bool = False) -> Emenda:
    """Fetch one amendment or raise 404.

    Args:
        db: Active SQLAlchemy session.
        emenda_id: Primary key.
        for_update: Lock the row until the end of the transaction
            (``SELECT … FOR UPDATE``; ignored by SQLite).

    Raises:
        HTTPException 404: If the amendment does not exist.
    """
    query = db.query(Emenda).filter(Emenda.id == emenda_id)
    if for_update:
        query = query.with_for_update()
    emenda: Emenda | None = query.first()
    if emenda is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Emenda com id={emenda_id} não encontrada.",
        )
    return emenda


def _list_item(emenda: Emenda, limite_alto_valor: float) -> EmendaListItem:
    return EmendaListItem(
        id=emenda.id,
        numero_emenda=emenda.numero_emenda,
        tipo=emenda.tipo,
        tipo_recurso=emenda.tipo_recurso,
        autor=emenda.autor,
        parlamentar=emenda.parlamentar,
        valor_total=float(to_decimal(emenda.valor_total)),
        situacao=emenda.situacao,
        status_interno=emenda.status_interno,
        ano_exercicio=emenda.ano_exercicio,
        portaria=emenda.portaria,
        deliberacao_cie=emenda.deliberacao_cie,
        anexos_essenciais=bool(emenda.anexos_essenciais),
        total_repassado=float(filtro_service.total_repassado(emenda)),
        total_gasto=float(filtro_service.total_gasto(emenda)),
        pendencias=filtro_service.pendencias_da_emenda(emenda, limite_alto_valor),
        created_at=emenda.created_at,
    )


# ---------------------------------------------------------------------------
# Read operations
# ---------------------------------------------------------------------------


def listar_emendas(
    db: Session,
    filtros: EmendaFiltros,
    ordenacao: OrdenacaoParams,
    pagination: PaginationParams,
) -> EmendaTabelaResponse:
    """Return one page of the filtered and sorted amendment list.

    Raises:
        HTTPException 422: If the sort field is not sortable.
    """
    settings = get_settings()
    emendas = filtro_service.filtrar_emendas(carregar_emendas(db), filtros)
    try:
        emendas = filtro_service.ordenar_emendas(emendas, ordenacao.campo, ordenacao.direcao)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc
    pagina, total = filtro_service.paginar(emendas, pagination.page, pagination.page_size)

    logger.debug(
        "listar_emendas: total=%d page=%d page_size=%d",
        total, pagination.page, pagination.page_size,
    )
    return EmendaTabelaResponse(
        rows=[_list_item(e, settings.LIMITE_ALTO_VALOR) for e in pagina],
        total=total,
        page=pagination.page,
        page_size=pagination.page_size,
    )


def get_detalhe(db: Session, emenda_id: int) -> EmendaDetalheResponse:
    """Return the full amendment with its financial statement and checklist."""
    settings = get_settings()
    emenda = get_emenda_or_404(db, emenda_id)

    repassado = filtro_service.total_repassado(emenda)
    gasto = filtro_service.total_gasto(emenda)
    quadro = QuadroDemonstrativo(
        valor_total=float(to_decimal(emenda.valor_total)),
        total_repassado=float(repassado),
        total_gasto=float(gasto),
        saldo_atual=float(repassado - gasto),
        percentual_execucao=safe_pct(gasto, emenda.valor_total),
    )

    return EmendaDetalheResponse(
        id=emenda.id,
        numero_emenda=emenda.numero_emenda,
        numero_proposta=emenda.numero_proposta,
        tipo=emenda.tipo,
        tipo_recurso=emenda.tipo_recurso,
        origem=emenda.origem,
        autor=emenda.autor,
        parlamentar=emenda.parlamentar,
        segundo_autor=emenda.segundo_autor,
        segundo_parlamentar=emenda.segundo_parlamentar,
        valor_total=float(to_decimal(emenda.valor_total)),
        valor_segundo_responsavel=(
            None
            if emenda.valor_segundo_responsavel is None
            else float(to_decimal(emenda.valor_segundo_responsavel))
        ),
        parcela_primeiro_parlamentar=float(
            parcela_primeiro_parlamentar(emenda.valor_total, emenda.valor_segundo_responsavel)
        ),
        situacao=emenda.situacao,
        status_interno=emenda.status_interno,
        portaria=emenda.portaria,
        deliberacao_cie=emenda.deliberacao_cie,
        anexos_essenciais=bool(emenda.anexos_essenciais),
        ano_exercicio=emenda.ano_exercicio,
        descricao_completa=emenda.descricao_completa,
        objeto_emenda=emenda.objeto_emenda,
        meta_operacional=emenda.meta_operacional,
        observacoes=emenda.observacoes,
        created_at=emenda.created_at,
        updated_at=emenda.updated_at,
        quadro=quadro,
        pendencias=filtro_service.pendencias_da_emenda(emenda, settings.LIMITE_ALTO_VALOR),
        pendencias_dispensadas=[
            PendenciaDispensadaResponse.model_validate(p) for p in emenda.pendencias
        ],
    )


def listar_historico(db: Session, emenda_id: int) -> list[HistoricoEmenda]:
    """Return the audit trail of one amendment, newest first."""
    get_emenda_or_404(db, emenda_id)
    return (
        db.query(HistoricoEmenda)
        .filter(HistoricoEmenda.emenda_id == emenda_id)
        .order_by(HistoricoEmenda.criado_em.desc(), HistoricoEmenda.id.desc())
        .all()
    )


# ---------------------------------------------------------------------------
# Write operations
# ---------------------------------------------------------------------------


def _valores_para_orm(dados: dict[str, Any]) -> dict[str, Any]:
    for campo in _CAMPOS_MONETARIOS:
        if dados.get(campo) is not None:
            dados[campo] = to_decimal(dados[campo])
    return dados


def criar_emenda(db: Session, data: EmendaCreate, usuario: Usuario) -> Emenda:
    """Create an amendment and record the creation in its history."""
    emenda = Emenda(**_valores_para_orm(data.model_dump()))
    with transacao(db, "criar_emenda"):
        db.add(emenda)
        db.flush()
        registrar_historico(
            db,
            emenda.id,
            EVENTO_CRIACAO,
            f"Emenda criada com valor total {format_brl(emenda.valor_total)}.",
            usuario.username,
        )
    db.refresh(emenda)

    logger.info(
        "criar_emenda: id=%d tipo_recurso=%s valor=%s por=%s",
        emenda.id, emenda.tipo_recurso, emenda.valor_total, usuario.username,
    )
    return emenda


def atualizar_emenda(
    db: Session, emenda_id: int, data: EmendaUpdate, usuario: Usuario
) -> Emenda:
    """Apply a partial update.

    Raises:
        HTTPException 404: If the amendment does not exist.
        HTTPException 422: If the co-author value would exceed the total, or
                           the new total is below the allocated amount.
    """
    dados = _valores_para_orm(data.model_dump(exclude_unset=True))
    nulos = sorted(c for c in _CAMPOS_OBRIGATORIOS if c in dados and dados[c] is None)
    if nulos:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Campos obrigatórios não podem ser nulos: {nulos}.",
        )

    with transacao(db, "atualizar_emenda"):
        emenda = get_emenda_or_404(db, emenda_id, for_update=True)

        novo_total = dados.get("valor_total", to_decimal(emenda.valor_total))
        novo_segundo = dados.get("valor_segundo_responsavel", emenda.valor_segundo_responsavel)
        try:
            parcela_primeiro_parlamentar(novo_total, novo_segundo)
        except ValueError as exc:
            logger.warning("atualizar_emenda: id=%d rejeitada: %s", emenda_id, exc)
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=str(exc),
            ) from exc

        if "valor_total" in dados:
            alocado = total_destinado(emenda.acoes)
            if novo_total < alocado:
                logger.warning(
                    "atualizar_emenda: id=%d valor_total %s abaixo do alocado %s",
                    emenda_id, novo_total, alocado,
                )
                raise HTTPException(
                    status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                    detail=(
                        f"O valor total ({format_brl(novo_total)}) não pode ser menor que o "
                        f"valor já destinado às ações ({format_brl(alocado)})."
                    ),
                )

        status_anterior = emenda.status_interno
        for campo, valor in dados.items():
            setattr(emenda, campo, valor)

        if "status_interno" in dados and dados["status_interno"] != status_anterior:
            registrar_historico(
                db,
                emenda.id,
                EVENTO_STATUS_INTERNO,
                f"Status interno alterado de {status_anterior} para {dados['status_interno']}.",
                usuario.username,
            )
        outros = sorted(set(dados) - {"status_interno"})
        if outros:
            registrar_historico(
                db,
                emenda.id,
                EVENTO_ATUALIZACAO,
                f"Campos alterados: {', '.join(outros)}.",
                usuario.username,
            )
    db.refresh(emenda)

    logger.info(
        "atualizar_emenda: id=%d campos=%s por=%s",
        emenda_id, list(dados.keys()), usuario.username,
    )
    return emenda


def dispensar_pendencia(
    db: Session, emenda_id: int, data: PendenciaDispensaRequest, usuario: Usuario
) -> PendenciaEmenda:
    """Mark a document-type pending item as dismissed.

    Dismissing the same target twice updates the existing record.
    """
    with transacao(db, "dispensar_pendencia"):
        emenda = get_emenda_or_404(db, emenda_id)
        pendencia: PendenciaEmenda | None = (
            db.query(PendenciaEmenda)
            .filter(
                PendenciaEmenda.emenda_id == emenda.id,
                PendenciaEmenda.target_id == data.target_id,
            )
            .first()
        )
        if pendencia is None:
            pendencia = PendenciaEmenda(
                emenda_id=emenda.id,
                target_id=data.target_id,
                descricao=f"{ALVOS_PENDENCIA[data.target_id]} dispensada",
            )
            db.add(pendencia)
        pendencia.dispensada = True
        pendencia.justificativa = data.justificativa
        registrar_historico(
            db,
            emenda.id,
            EVENTO_PENDENCIA,
            f"Pendência '{ALVOS_PENDENCIA[data.target_id]}' dispensada.",
            usuario.username,
        )
    db.refresh(pendencia)

    logger.info(
        "dispensar_pendencia: emenda=%d alvo=%s por=%s",
        emenda_id, data.target_id, usuario.username,
    )
    return pendencia
