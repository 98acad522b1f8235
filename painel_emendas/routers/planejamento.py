"""
Planning router: actions and resource destinations of an amendment.

Mounts under ``/api/emendas`` (prefix set in ``main.py``).

Every write is validated against the amendment balance on the server and
written in a single transaction; ``POST /{emenda_id}/planejamento/saldo``
is the read-only preview the form calls while the user types.

Endpoints
---------
GET    /{emenda_id}/planejamento
POST   /{emenda_id}/planejamento/saldo
POST   /{emenda_id}/acoes
PUT    /{emenda_id}/acoes/{acao_id}
DELETE /{emenda_id}/acoes/{acao_id}
POST   /{emenda_id}/acoes/{acao_id}/destinacoes
PUT    /{emenda_id}/acoes/{acao_id}/destinacoes/{destinacao_id}
DELETE /{emenda_id}/acoes/{acao_id}/destinacoes/{destinacao_id}
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from painel_emendas.database import get_db
from painel_emendas.models.destinacao_recurso import DestinacaoRecurso
from painel_emendas.models.usuario import Usuario
from painel_emendas.schemas.common import MessageResponse
from painel_emendas.schemas.planejamento import (
    AcaoResponse,
    AcaoSave,
    DestinacaoResponse,
    DestinacaoSave,
    PlanejamentoResponse,
    SaldoPreviewRequest,
    SaldoResponse,
)
from painel_emendas.services import planejamento_service
from painel_emendas.services.auth_service import get_current_user, require_role
from painel_emendas.utils.constants import PERFIS_EDICAO
from painel_emendas.utils.money import to_decimal

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Planejamento"])

EmendaId = Annotated[int, Path(description="ID da emenda.", ge=1)]
AcaoId = Annotated[int, Path(description="ID da ação.", ge=1)]
DestinacaoId = Annotated[int, Path(description="ID da destinação.", ge=1)]
Editor = Annotated[Usuario, Depends(require_role(*PERFIS_EDICAO))]

_RESPOSTAS_ESCRITA = {
    403: {"description": "Perfil sem permissão de edição."},
    404: {"description": "Emenda, ação ou destinação não encontrada."},
    422: {"description": "Valor planejado excede o saldo disponível da emenda."},
}


def _destinacao_response(destinacao: DestinacaoRecurso) -> DestinacaoResponse:
    return DestinacaoResponse(
        id=destinacao.id,
        acao_id=destinacao.acao_id,
        tipo_destinacao=destinacao.tipo_destinacao,
        valor_destinado=float(to_decimal(destinacao.valor_destinado)),
        grupo_despesa=destinacao.grupo_despesa,
        subtipo=destinacao.subtipo,
        portaria_vinculada=destinacao.portaria_vinculada,
        observacao_tecnica=destinacao.observacao_tecnica,
        valor_executado=float(sum(to_decimal(d.valor) for d in destinacao.despesas)),
    )


# ---------------------------------------------------------------------------
# Planning tree and balance preview
# ---------------------------------------------------------------------------


@router.get(
    "/{emenda_id}/planejamento",
    response_model=PlanejamentoResponse,
    summary="Planejamento da emenda",
    description="Ações, destinações, total destinado, saldo livre e valores executados.",
    responses={404: {"description": "Emenda não encontrada."}},
)
def get_planejamento(
    emenda_id: EmendaId,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[Usuario, Depends(get_current_user)],
) -> PlanejamentoResponse:
    return planejamento_service.get_planejamento(db, emenda_id)


@router.post(
    "/{emenda_id}/planejamento/saldo",
    response_model=SaldoResponse,
    summary="Pré-visualizar saldo da ação",
    description=(
        "Calcula disponível, total planejado e restante para o formulário de ação sem "
        "gravar nada. Informe ``acao_id`` ao editar uma ação existente."
    ),
    responses={404: {"description": "Emenda ou ação não encontrada."}},
)
def post_saldo(
    emenda_id: EmendaId,
    data: SaldoPreviewRequest,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[Usuario, Depends(get_current_user)],
) -> SaldoResponse:
    return planejamento_service.previsualizar_saldo(db, emenda_id, data)


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


@router.post(
    "/{emenda_id}/acoes",
    response_model=AcaoResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Criar ação com destinações",
    responses=_RESPOSTAS_ESCRITA,
)
def post_acao(
    emenda_id: EmendaId,
    data: AcaoSave,
    db: Annotated[Session, Depends(get_db)],
    current_user: Editor,
) -> AcaoResponse:
    """Create an action and its destinations atomically.

    Args:
        emenda_id: Parent amendment.
        data: Action fields plus ``{categoria: valor}`` for the editable categories.
        db: Database session injected by ``get_db``.
        current_user: Editor performing the change.

    Returns:
        The created action with its destinations.
    """
    acao = planejamento_service.salvar_acao(db, emenda_id, data, current_user)
    return planejamento_service.build_acao_response(db, acao)


@router.put(
    "/{emenda_id}/acoes/{acao_id}",
    response_model=AcaoResponse,
    summary="Editar ação com destinações",
    description=(
        "Categorias em ``valores`` são criadas ou atualizadas (0 mantém uma destinação "
        "de valor zero); categorias em ``remover_categorias`` são excluídas; as demais "
        "destinações da ação permanecem inalteradas."
    ),
    responses=_RESPOSTAS_ESCRITA,
)
def put_acao(
    emenda_id: EmendaId,
    acao_id: AcaoId,
    data: AcaoSave,
    db: Annotated[Session, Depends(get_db)],
    current_user: Editor,
) -> AcaoResponse:
    acao = planejamento_service.salvar_acao(db, emenda_id, data, current_user, acao_id=acao_id)
    return planejamento_service.build_acao_response(db, acao)


@router.delete(
    "/{emenda_id}/acoes/{acao_id}",
    response_model=MessageResponse,
    summary="Excluir ação",
    description="Exclui a ação e todas as suas destinações.",
    responses=_RESPOSTAS_ESCRITA,
)
def delete_acao(
    emenda_id: EmendaId,
    acao_id: AcaoId,
    db: Annotated[Session, Depends(get_db)],
    current_user: Editor,
) -> MessageResponse:
    planejamento_service.excluir_acao(db, emenda_id, acao_id, current_user)
    return MessageResponse(message="Ação excluída.")


# ---------------------------------------------------------------------------
# Single destinations
# ---------------------------------------------------------------------------


@router.post(
    "/{emenda_id}/acoes/{acao_id}/destinacoes",
    response_model=DestinacaoResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Adicionar destinação",
    responses={**_RESPOSTAS_ESCRITA, 409: {"description": "Categoria já existe na ação."}},
)
def post_destinacao(
    emenda_id: EmendaId,
    acao_id: AcaoId,
    data: DestinacaoSave,
    db: Annotated[Session, Depends(get_db)],
    current_user: Editor,
) -> DestinacaoResponse:
    destinacao = planejamento_service.salvar_destinacao(db, emenda_id, acao_id, data, current_user)
    return _destinacao_response(destinacao)


@router.put(
    "/{emenda_id}/acoes/{acao_id}/destinacoes/{destinacao_id}",
    response_model=DestinacaoResponse,
    summary="Editar destinação",
    responses={**_RESPOSTAS_ESCRITA, 409: {"description": "Categoria já existe na ação."}},
)
def put_destinacao(
    emenda_id: EmendaId,
    acao_id: AcaoId,
    destinacao_id: DestinacaoId,
    data: DestinacaoSave,
    db: Annotated[Session, Depends(get_db)],
    current_user: Editor,
) -> DestinacaoResponse:
    destinacao = planejamento_service.salvar_destinacao(
        db, emenda_id, acao_id, data, current_user, destinacao_id=destinacao_id
    )
    return _destinacao_response(destinacao)


@router.delete(
    "/{emenda_id}/acoes/{acao_id}/destinacoes/{destinacao_id}",
    response_model=MessageResponse,
    summary="Excluir destinação",
    responses=_RESPOSTAS_ESCRITA,
)
def delete_destinacao(
    emenda_id: EmendaId,
    acao_id: AcaoId,
    destinacao_id: DestinacaoId,
    db: Annotated[Session, Depends(get_db)],
    current_user: Editor,
) -> MessageResponse:
    planejamento_service.excluir_destinacao(db, emenda_id, acao_id, destinacao_id, current_user)
    return MessageResponse(message="Destinação excluída.")
