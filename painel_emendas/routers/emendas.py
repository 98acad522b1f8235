"""
Amendments router.

Mounts under ``/api/emendas`` (prefix set in ``main.py``).

Reads require any authenticated user; writes require one of
``PERFIS_EDICAO`` (ADMIN, GESTOR, ANALISTA).  Amendments are never deleted.

Endpoints
---------
GET  /                              — Filtered, sorted, paginated list.
GET  /{emenda_id}                   — Detail with financial statement.
POST /                              — Create an amendment.
PUT  /{emenda_id}                   — Partial update.
GET  /{emenda_id}/historico         — Audit trail.
POST /{emenda_id}/pendencias/dispensar — Dismiss a document pending item.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from painel_emendas.database import get_db
from painel_emendas.models.usuario import Usuario
from painel_emendas.routers.parametros import filtros_emenda, ordenacao, paginacao
from painel_emendas.schemas.common import OrdenacaoParams, PaginationParams
from painel_emendas.schemas.emenda import (
    EmendaCreate,
    EmendaDetalheResponse,
    EmendaFiltros,
    EmendaTabelaResponse,
    EmendaUpdate,
    HistoricoResponse,
    PendenciaDispensadaResponse,
    PendenciaDispensaRequest,
)
from painel_emendas.services import emenda_service
from painel_emendas.services.auth_service import get_current_user, require_role
from painel_emendas.utils.constants import PERFIS_EDICAO

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Emendas"])

EmendaId = Annotated[int, Path(description="ID da emenda.", ge=1)]


@router.get(
    "",
    response_model=EmendaTabelaResponse,
    summary="Listar emendas",
    description=(
        "Lista paginada de emendas com totais repassado/gasto e pendências calculados. "
        "Aceita filtros por autor, tipo, situação, faixa de valor, período de criação, "
        "presença/ausência de documentos e repasses, e ordenação por um campo."
    ),
    responses={
        200: {"description": "Página de emendas."},
        401: {"description": "Token JWT ausente ou inválido."},
        422: {"description": "Parâmetro de filtro ou ordenação inválido."},
    },
)
def get_emendas(
    filtros: Annotated[EmendaFiltros, Depends(filtros_emenda)],
    ordem: Annotated[OrdenacaoParams, Depends(ordenacao)],
    pagination: Annotated[PaginationParams, Depends(paginacao)],
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[Usuario, Depends(get_current_user)],
) -> EmendaTabelaResponse:
    """Return one page of the amendment list.

    Args:
        filtros: Multi-field filter state.
        ordem: Optional single sort key and direction.
        pagination: Page number and size.
        db: Database session injected by ``get_db``.
        _current_user: Authenticated user (validates JWT; not used directly).

    Returns:
        An ``EmendaTabelaResponse`` with the rows and the filtered total.
    """
    return emenda_service.listar_emendas(db, filtros, ordem, pagination)


@router.get(
    "/{emenda_id}",
    response_model=EmendaDetalheResponse,
    summary="Detalhe da emenda",
    responses={404: {"description": "Emenda não encontrada."}},
)
def get_emenda(
    emenda_id: EmendaId,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[Usuario, Depends(get_current_user)],
) -> EmendaDetalheResponse:
    return emenda_service.get_detalhe(db, emenda_id)


@router.post(
    "",
    response_model=EmendaDetalheResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Cadastrar emenda",
    responses={
        201: {"description": "Emenda criada."},
        403: {"description": "Perfil sem permissão de edição."},
        422: {"description": "Dados inválidos (ex. valor do segundo responsável acima do total)."},
    },
)
def post_emenda(
    data: EmendaCreate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(require_role(*PERFIS_EDICAO))],
) -> EmendaDetalheResponse:
    emenda = emenda_service.criar_emenda(db, data, current_user)
    return emenda_service.get_detalhe(db, emenda.id)


@router.put(
    "/{emenda_id}",
    response_model=EmendaDetalheResponse,
    summary="Atualizar emenda",
    description=(
        "Atualização parcial: apenas os campos enviados são gravados. O valor total não "
        "pode ficar abaixo do valor já destinado às ações."
    ),
    responses={
        404: {"description": "Emenda não encontrada."},
        422: {"description": "Valor total abaixo do destinado ou coautoria inválida."},
    },
)
def put_emenda(
    emenda_id: EmendaId,
    data: EmendaUpdate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(require_role(*PERFIS_EDICAO))],
) -> EmendaDetalheResponse:
    emenda_service.atualizar_emenda(db, emenda_id, data, current_user)
    return emenda_service.get_detalhe(db, emenda_id)


@router.get(
    "/{emenda_id}/historico",
    response_model=list[HistoricoResponse],
    summary="Histórico da emenda",
    responses={404: {"description": "Emenda não encontrada."}},
)
def get_historico(
    emenda_id: EmendaId,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[Usuario, Depends(get_current_user)],
) -> list[HistoricoResponse]:
    return [
        HistoricoResponse.model_validate(h)
        for h in emenda_service.listar_historico(db, emenda_id)
    ]


@router.post(
    "/{emenda_id}/pendencias/dispensar",
    response_model=PendenciaDispensadaResponse,
    summary="Dispensar pendência documental",
    description="Dispensa a pendência de portaria, deliberação CIE, proposta ou ofício.",
    responses={404: {"description": "Emenda não encontrada."}},
)
def post_dispensar_pendencia(
    emenda_id: EmendaId,
    data: PendenciaDispensaRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(require_role(*PERFIS_EDICAO))],
) -> PendenciaDispensadaResponse:
    pendencia = emenda_service.dispensar_pendencia(db, emenda_id, data, current_user)
    return PendenciaDispensadaResponse.model_validate(pendencia)
