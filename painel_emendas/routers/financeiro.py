"""
Financial execution router: transfers (repasses) and expenses (despesas).

Mounts under ``/api/emendas`` (prefix set in ``main.py``).

Endpoints
---------
GET    /{emenda_id}/repasses
POST   /{emenda_id}/repasses
PUT    /{emenda_id}/repasses/{repasse_id}
DELETE /{emenda_id}/repasses/{repasse_id}
GET    /{emenda_id}/despesas
POST   /{emenda_id}/despesas
PUT    /{emenda_id}/despesas/{despesa_id}
PATCH  /{emenda_id}/despesas/{despesa_id}/status
DELETE /{emenda_id}/despesas/{despesa_id}
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from painel_emendas.database import get_db
from painel_emendas.models.usuario import Usuario
from painel_emendas.schemas.common import MessageResponse
from painel_emendas.schemas.financeiro import (
    DespesaCreate,
    DespesaResponse,
    DespesaStatusUpdate,
    DespesaUpdate,
    RepasseCreate,
    RepasseResponse,
    RepasseUpdate,
)
from painel_emendas.services import financeiro_service
from painel_emendas.services.auth_service import get_current_user, require_role
from painel_emendas.utils.constants import PERFIS_EDICAO

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Financeiro"])

EmendaId = Annotated[int, Path(description="ID da emenda.", ge=1)]
RepasseId = Annotated[int, Path(description="ID do repasse.", ge=1)]
DespesaId = Annotated[int, Path(description="ID da despesa.", ge=1)]
Leitor = Annotated[Usuario, Depends(get_current_user)]
Editor = Annotated[Usuario, Depends(require_role(*PERFIS_EDICAO))]
Db = Annotated[Session, Depends(get_db)]


# ---------------------------------------------------------------------------
# Repasses
# ---------------------------------------------------------------------------


@router.get(
    "/{emenda_id}/repasses",
    response_model=list[RepasseResponse],
    summary="Listar repasses",
)
def get_repasses(emenda_id: EmendaId, db: Db, _current_user: Leitor) -> list[RepasseResponse]:
    return [
        RepasseResponse.model_validate(r)
        for r in financeiro_service.listar_repasses(db, emenda_id)
    ]


@router.post(
    "/{emenda_id}/repasses",
    response_model=RepasseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Registrar repasse",
    description="Somente repasses com status REPASSADO contam como valor recebido.",
)
def post_repasse(
    emenda_id: EmendaId, data: RepasseCreate, db: Db, current_user: Editor
) -> RepasseResponse:
    repasse = financeiro_service.criar_repasse(db, emenda_id, data, current_user)
    return RepasseResponse.model_validate(repasse)


@router.put(
    "/{emenda_id}/repasses/{repasse_id}",
    response_model=RepasseResponse,
    summary="Atualizar repasse",
)
def put_repasse(
    emenda_id: EmendaId,
    repasse_id: RepasseId,
    data: RepasseUpdate,
    db: Db,
    current_user: Editor,
) -> RepasseResponse:
    repasse = financeiro_service.atualizar_repasse(db, emenda_id, repasse_id, data, current_user)
    return RepasseResponse.model_validate(repasse)


@router.delete(
    "/{emenda_id}/repasses/{repasse_id}",
    response_model=MessageResponse,
    summary="Excluir repasse",
)
def delete_repasse(
    emenda_id: EmendaId, repasse_id: RepasseId, db: Db, current_user: Editor
) -> MessageResponse:
    financeiro_service.excluir_repasse(db, emenda_id, repasse_id, current_user)
    return MessageResponse(message="Repasse excluído.")


# ---------------------------------------------------------------------------
# Despesas
# ---------------------------------------------------------------------------


@router.get(
    "/{emenda_id}/despesas",
    response_model=list[DespesaResponse],
    summary="Listar despesas",
)
def get_despesas(emenda_id: EmendaId, db: Db, _current_user: Leitor) -> list[DespesaResponse]:
    return [
        DespesaResponse.model_validate(d)
        for d in financeiro_service.listar_despesas(db, emenda_id)
    ]


@router.post(
    "/{emenda_id}/despesas",
    response_model=DespesaResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Registrar despesa",
    responses={422: {"description": "Destinação informada não pertence à emenda."}},
)
def post_despesa(
    emenda_id: EmendaId, data: DespesaCreate, db: Db, current_user: Editor
) -> DespesaResponse:
    despesa = financeiro_service.criar_despesa(db, emenda_id, data, current_user)
    return DespesaResponse.model_validate(despesa)


@router.put(
    "/{emenda_id}/despesas/{despesa_id}",
    response_model=DespesaResponse,
    summary="Atualizar despesa",
)
def put_despesa(
    emenda_id: EmendaId,
    despesa_id: DespesaId,
    data: DespesaUpdate,
    db: Db,
    current_user: Editor,
) -> DespesaResponse:
    despesa = financeiro_service.atualizar_despesa(db, emenda_id, despesa_id, data, current_user)
    return DespesaResponse.model_validate(despesa)


@router.patch(
    "/{emenda_id}/despesas/{despesa_id}/status",
    response_model=DespesaResponse,
    summary="Alterar status de execução da despesa",
)
def patch_status_despesa(
    emenda_id: EmendaId,
    despesa_id: DespesaId,
    data: DespesaStatusUpdate,
    db: Db,
    current_user: Editor,
) -> DespesaResponse:
    despesa = financeiro_service.alterar_status_despesa(
        db, emenda_id, despesa_id, data, current_user
    )
    return DespesaResponse.model_validate(despesa)


@router.delete(
    "/{emenda_id}/despesas/{despesa_id}",
    response_model=MessageResponse,
    summary="Excluir despesa",
)
def delete_despesa(
    emenda_id: EmendaId, despesa_id: DespesaId, db: Db, current_user: Editor
) -> MessageResponse:
    financeiro_service.excluir_despesa(db, emenda_id, despesa_id, current_user)
    return MessageResponse(message="Despesa excluída.")
