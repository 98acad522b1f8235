"""
Reports router: financial summary, pending items, overview and audit.

Mounts under ``/api/relatorios`` (prefix set in ``main.py``).

All endpoints require a valid JWT token and accept the same amendment
filters as ``GET /api/emendas``, so every report reflects the list the
user is currently looking at.

Endpoints
---------
GET /resumo-financeiro — Total / pago / pendente per consolidated group.
GET /pendencias        — Amendments bucketed by pending-item type.
GET /visao-geral       — Consolidated totals and breakdowns.
GET /auditoria         — Latest history events and top-10 planned actions.
GET /despesas          — Flattened expense report.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from painel_emendas.database import get_db
from painel_emendas.models.usuario import Usuario
from painel_emendas.routers.parametros import filtros_despesa, filtros_emenda
from painel_emendas.schemas.emenda import EmendaFiltros
from painel_emendas.schemas.relatorio import (
    AuditoriaResponse,
    DespesaFiltros,
    DespesaRelatorioResponse,
    PendenciasResponse,
    ResumoFinanceiroItem,
    VisaoGeralResponse,
)
from painel_emendas.services import resumo_service
from painel_emendas.services.auth_service import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Relatórios"])

Filtros = Annotated[EmendaFiltros, Depends(filtros_emenda)]
Db = Annotated[Session, Depends(get_db)]
Leitor = Annotated[Usuario, Depends(get_current_user)]


# ---------------------------------------------------------------------------
# GET /resumo-financeiro
# ---------------------------------------------------------------------------


@router.get(
    "/resumo-financeiro",
    response_model=list[ResumoFinanceiroItem],
    summary="Resumo financeiro por grupo",
    description=(
        "Um card por grupo (Incremento MAC, Incremento PAP, Equipamento). Pago soma "
        "repasses REPASSADO; para Equipamento soma também as despesas liquidadas ou pagas."
    ),
    responses={401: {"description": "Token JWT ausente ou inválido."}},
)
def get_resumo_financeiro(
    filtros: Filtros, db: Db, _current_user: Leitor
) -> list[ResumoFinanceiroItem]:
    logger.info("GET /relatorios/resumo-financeiro")
    return resumo_service.get_resumo_financeiro(db, filtros)


# ---------------------------------------------------------------------------
# GET /pendencias
# ---------------------------------------------------------------------------


@router.get(
    "/pendencias",
    response_model=PendenciasResponse,
    summary="Emendas agrupadas por pendência",
    description=(
        "Uma emenda aparece em todos os grupos cujas condições atende. Pendências "
        "documentais dispensadas não contam."
    ),
)
def get_pendencias(filtros: Filtros, db: Db, _current_user: Leitor) -> PendenciasResponse:
    return resumo_service.get_pendencias(db, filtros)


# ---------------------------------------------------------------------------
# GET /visao-geral
# ---------------------------------------------------------------------------


@router.get(
    "/visao-geral",
    response_model=VisaoGeralResponse,
    summary="Visão geral consolidada",
)
def get_visao_geral(filtros: Filtros, db: Db, _current_user: Leitor) -> VisaoGeralResponse:
    return resumo_service.get_visao_geral(db, filtros)


# ---------------------------------------------------------------------------
# GET /auditoria
# ---------------------------------------------------------------------------


@router.get(
    "/auditoria",
    response_model=AuditoriaResponse,
    summary="Auditoria e comparativo planejado x executado",
)
def get_auditoria(
    filtros: Filtros,
    db: Db,
    _current_user: Leitor,
    limite: Annotated[
        int, Query(description="Máximo de eventos de histórico.", ge=1, le=1000)
    ] = 100,
) -> AuditoriaResponse:
    return resumo_service.get_auditoria(db, filtros, limite=limite)


# ---------------------------------------------------------------------------
# GET /despesas
# ---------------------------------------------------------------------------


@router.get(
    "/despesas",
    response_model=DespesaRelatorioResponse,
    summary="Relatório de despesas",
    description=(
        "Despesas das emendas filtradas, com filtros adicionais por responsável, "
        "unidade, demanda, fornecedor e status de execução."
    ),
)
def get_relatorio_despesas(
    filtros: Filtros,
    filtros_desp: Annotated[DespesaFiltros, Depends(filtros_despesa)],
    db: Db,
    _current_user: Leitor,
) -> DespesaRelatorioResponse:
    return resumo_service.get_relatorio_despesas(db, filtros, filtros_desp)
