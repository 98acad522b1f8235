"""
Planning service layer: actions (AcaoEmenda) and resource destinations
(DestinacaoRecurso) under an amendment.

Every write follows the same path:

1. load the amendment with ``SELECT … FOR UPDATE`` (ignored by SQLite),
2. compute the balance with ``saldo_service`` over the current rows,
3. reject with HTTP 422 when the proposal exceeds the amendment total,
4. write the action and all of its destinations in one transaction.

Nothing is written when validation fails, and a persistence failure rolls
back the whole write (see ``transacao``).  Afterwards
``Σ valor_destinado ≤ valor_total`` holds for the amendment.

Design notes
------------
- Destinations are removed only on explicit request (``remover_categorias``
  in the action payload or ``DELETE …/destinacoes/{id}``).  A value of ``0``
  keeps a zero-budget destination.
- Categories the action form does not expose, and editable categories the
  payload leaves out, stay untouched and keep consuming budget.
- An action holds at most one destination per category.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from painel_emendas.models.acao_emenda import AcaoEmenda
from painel_emendas.models.despesa import Despesa
from painel_emendas.models.destinacao_recurso import DestinacaoRecurso
from painel_emendas.models.emenda import Emenda
from painel_emendas.models.usuario import Usuario
from painel_emendas.schemas.planejamento import (
    AcaoResponse,
    AcaoSave,
    DestinacaoResponse,
    DestinacaoSave,
    PlanejamentoResponse,
    SaldoPreviewRequest,
    SaldoResponse,
)
from painel_emendas.services.emenda_service import get_emenda_or_404
from painel_emendas.services.historico_service import registrar_historico
from painel_emendas.services.saldo_service import (
    Saldo,
    calcular_saldo_acao,
    executado_por_destinacao,
    total_destinado,
    validar_destinacao,
)
from painel_emendas.services.transacao import transacao
from painel_emendas.utils.constants import CATEGORIAS_DESTINACAO, EVENTO_PLANEJAMENTO
from painel_emendas.utils.money import ZERO, format_brl, safe_pct, somar, to_decimal

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _get_acao_or_404(emenda: Emenda, acao_id: int) -> AcaoEmenda:
    for acao in emenda.acoes:
        if acao.id == acao_id:
            return acao
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Ação com id={acao_id} não encontrada na emenda {emenda.id}.",
    )


def _get_destinacao_or_404(acao: AcaoEmenda, destinacao_id: int) -> DestinacaoRecurso:
    for destinacao in acao.destinacoes:
        if destinacao.id == destinacao_id:
            return destinacao
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Destinação com id={destinacao_id} não encontrada na ação {acao.id}.",
    )


def _saldo_response(saldo: Saldo) -> SaldoResponse:
    return SaldoResponse(
        disponivel=float(saldo.disponivel),
        total_planejado=float(saldo.total_planejado),
        restante=float(saldo.restante),
        excede_orcamento=saldo.excede_orcamento,
    )


def _rejeitar_excesso(saldo: Saldo, operacao: str, emenda_id: int) -> None:
    logger.warning(
        "%s: emenda=%d excede orçamento (disponível=%s planejado=%s)",
        operacao, emenda_id, saldo.disponivel, saldo.total_planejado,
    )
    raise HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=(
            f"O valor planejado ({format_brl(saldo.total_planejado)}) excede o saldo "
            f"disponível da emenda ({format_brl(saldo.disponivel)})."
        ),
    )


def _despesas_da_emenda(db: Session, emenda_id: int) -> list[Despesa]:
    return db.query(Despesa).filter(Despesa.emenda_id == emenda_id).all()


def _acao_response(acao: AcaoEmenda, executado: dict[int, object]) -> AcaoResponse:
    destinacoes = [
        DestinacaoResponse(
            id=d.id,
            acao_id=d.acao_id,
            tipo_destinacao=d.tipo_destinacao,
            valor_destinado=float(to_decimal(d.valor_destinado)),
            grupo_despesa=d.grupo_despesa,
            subtipo=d.subtipo,
            portaria_vinculada=d.portaria_vinculada,
            observacao_tecnica=d.observacao_tecnica,
            valor_executado=float(to_decimal(executado.get(d.id, ZERO))),
        )
        for d in acao.destinacoes
    ]
    return AcaoResponse(
        id=acao.id,
        emenda_id=acao.emenda_id,
        nome_acao=acao.nome_acao,
        area=acao.area,
        descricao_oficial=acao.descricao_oficial,
        complexidade=acao.complexidade,
        publico_alvo=acao.publico_alvo,
        destinacoes=destinacoes,
        total_planejado=float(somar(d.valor_destinado for d in acao.destinacoes)),
        total_executado=float(somar(executado.get(d.id, ZERO) for d in acao.destinacoes)),
    )


def build_acao_response(db: Session, acao: AcaoEmenda) -> AcaoResponse:
    executado = executado_por_destinacao(_despesas_da_emenda(db, acao.emenda_id))
    return _acao_response(acao, executado)


def _nova_destinacao(categoria: str, valor: object) -> DestinacaoRecurso:
    return DestinacaoRecurso(
        tipo_destinacao=categoria,
        valor_destinado=to_decimal(valor),
        grupo_despesa=CATEGORIAS_DESTINACAO[categoria],
    )


# ---------------------------------------------------------------------------
# Read operations
# ---------------------------------------------------------------------------


def get_planejamento(db: Session, emenda_id: int) -> PlanejamentoResponse:
    """Return the planning tree of an amendment with planned/executed totals."""
    emenda = get_emenda_or_404(db, emenda_id)
    executado = executado_por_destinacao(_despesas_da_emenda(db, emenda_id))
    destinado = total_destinado(emenda.acoes)
    valor_total = to_decimal(emenda.valor_total)

    return PlanejamentoResponse(
        emenda_id=emenda.id,
        valor_total=float(valor_total),
        total_destinado=float(destinado),
        saldo_livre=float(valor_total - destinado),
        percentual_alocado=safe_pct(destinado, valor_total),
        acoes=[_acao_response(acao, executado) for acao in emenda.acoes],
    )


def previsualizar_saldo(
    db: Session, emenda_id: int, data: SaldoPreviewRequest
) -> SaldoResponse:
    """Compute the action-form balance without writing anything."""
    emenda = get_emenda_or_404(db, emenda_id)
    acao = None if data.acao_id is None else _get_acao_or_404(emenda, data.acao_id)
    try:
        saldo = calcular_saldo_acao(emenda, data.valores, acao, data.remover_categorias)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
    return _saldo_response(saldo)


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


def salvar_acao(
    db: Session,
    emenda_id: int,
    data: AcaoSave,
    usuario: Usuario,
    acao_id: int | None = None,
) -> AcaoEmenda:
    """Create (``acao_id is None``) or edit an action with its editable destinations.

    For every category in ``data.valores`` the action's destination is
    created or updated; every category in ``data.remover_categorias`` is
    deleted.  The action row and its destinations are written atomically.

    Args:
        db: Active SQLAlchemy session.
        emenda_id: Parent amendment.
        data: Action fields plus category values.
        usuario: Acting user (recorded in the history).
        acao_id: Action to edit, ``None`` to create.

    Returns:
        The saved ``AcaoEmenda``.

    Raises:
        HTTPException 404: If the amendment or action does not exist.
        HTTPException 422: If the planned values exceed the available balance.
    """
    with transacao(db, "salvar_acao"):
        emenda = get_emenda_or_404(db, emenda_id, for_update=True)
        acao = None if acao_id is None else _get_acao_or_404(emenda, acao_id)

        try:
            saldo = calcular_saldo_acao(emenda, data.valores, acao, data.remover_categorias)
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
            ) from exc
        if saldo.excede_orcamento:
            _rejeitar_excesso(saldo, "salvar_acao", emenda_id)

        campos = data.model_dump(exclude={"valores", "remover_categorias"})
        if acao is None:
            acao = AcaoEmenda(**campos)
            emenda.acoes.append(acao)
        else:
            for campo, valor in campos.items():
                setattr(acao, campo, valor)

        for categoria, valor in data.valores.items():
            existentes = [d for d in acao.destinacoes if d.tipo_destinacao == categoria]
            if existentes:
                existentes[0].valor_destinado = to_decimal(valor)
                # collapse legacy duplicates into the first row
                for duplicada in existentes[1:]:
                    acao.destinacoes.remove(duplicada)
            else:
                acao.destinacoes.append(_nova_destinacao(categoria, valor))

        for categoria in data.remover_categorias:
            for destinacao in [d for d in acao.destinacoes if d.tipo_destinacao == categoria]:
                acao.destinacoes.remove(destinacao)

        db.flush()
        registrar_historico(
            db,
            emenda.id,
            EVENTO_PLANEJAMENTO,
            (
                f"Ação '{acao.nome_acao}' {'criada' if acao_id is None else 'atualizada'}; "
                f"planejado {format_brl(saldo.total_planejado)}, "
                f"saldo restante {format_brl(saldo.restante)}."
            ),
            usuario.username,
        )
    db.refresh(acao)

    logger.info(
        "salvar_acao: emenda=%d acao=%d planejado=%s restante=%s por=%s",
        emenda_id, acao.id, saldo.total_planejado, saldo.restante, usuario.username,
    )
    return acao


def excluir_acao(db: Session, emenda_id: int, acao_id: int, usuario: Usuario) -> None:
    """Delete an action together with all of its destinations."""
    with transacao(db, "excluir_acao"):
        emenda = get_emenda_or_404(db, emenda_id, for_update=True)
        acao = _get_acao_or_404(emenda, acao_id)
        nome = acao.nome_acao
        emenda.acoes.remove(acao)
        registrar_historico(
            db, emenda.id, EVENTO_PLANEJAMENTO, f"Ação '{nome}' excluída.", usuario.username
        )

    logger.info("excluir_acao: emenda=%d acao=%d por=%s", emenda_id, acao_id, usuario.username)


# ---------------------------------------------------------------------------
# Single destinations
# ---------------------------------------------------------------------------


def salvar_destinacao(
    db: Session,
    emenda_id: int,
    acao_id: int,
    data: DestinacaoSave,
    usuario: Usuario,
    destinacao_id: int | None = None,
) -> DestinacaoRecurso:
    """Create or edit one destination (single-destination dialog).

    The new total is every other destination of the amendment plus
    ``data.valor_destinado``; it may not exceed ``valor_total``.

    Raises:
        HTTPException 404: If the amendment, action or destination does not exist.
        HTTPException 409: If the action already has a destination of that category.
        HTTPException 422: If the new total exceeds the amendment total.
    """
    with transacao(db, "salvar_destinacao"):
        emenda = get_emenda_or_404(db, emenda_id, for_update=True)
        acao = _get_acao_or_404(emenda, acao_id)
        destinacao = (
            None if destinacao_id is None else _get_destinacao_or_404(acao, destinacao_id)
        )

        duplicada = any(
            d.tipo_destinacao == data.tipo_destinacao and d is not destinacao
            for d in acao.destinacoes
        )
        if duplicada:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=(
                    f"A ação já possui uma destinação da categoria "
                    f"{CATEGORIAS_DESTINACAO[data.tipo_destinacao]}."
                ),
            )

        saldo = validar_destinacao(emenda, data.valor_destinado, destinacao_id)
        if saldo.excede_orcamento:
            _rejeitar_excesso(saldo, "salvar_destinacao", emenda_id)

        campos = data.model_dump()
        campos["valor_destinado"] = to_decimal(campos["valor_destinado"])
        if destinacao is None:
            destinacao = DestinacaoRecurso(**campos)
            acao.destinacoes.append(destinacao)
        else:
            for campo, valor in campos.items():
                setattr(destinacao, campo, valor)

        db.flush()
        registrar_historico(
            db,
            emenda.id,
            EVENTO_PLANEJAMENTO,
            (
                f"Destinação {CATEGORIAS_DESTINACAO[destinacao.tipo_destinacao]} da ação "
                f"'{acao.nome_acao}' definida em {format_brl(destinacao.valor_destinado)}."
            ),
            usuario.username,
        )
    db.refresh(destinacao)

    logger.info(
        "salvar_destinacao: emenda=%d acao=%d destinacao=%d valor=%s por=%s",
        emenda_id, acao_id, destinacao.id, destinacao.valor_destinado, usuario.username,
    )
    return destinacao


def excluir_destinacao(
    db: Session, emenda_id: int, acao_id: int, destinacao_id: int, usuario: Usuario
) -> None:
    """Delete one destination; linked expenses keep existing, unlinked."""
    with transacao(db, "excluir_destinacao"):
        emenda = get_emenda_or_404(db, emenda_id, for_update=True)
        acao = _get_acao_or_404(emenda, acao_id)
        destinacao = _get_destinacao_or_404(acao, destinacao_id)
        rotulo = CATEGORIAS_DESTINACAO.get(destinacao.tipo_destinacao, destinacao.tipo_destinacao)
        acao.destinacoes.remove(destinacao)
        registrar_historico(
            db,
            emenda.id,
            EVENTO_PLANEJAMENTO,
            f"Destinação {rotulo} removida da ação '{acao.nome_acao}'.",
            usuario.username,
        )

    logger.info(
        "excluir_destinacao: emenda=%d acao=%d destinacao=%d por=%s",
        emenda_id, acao_id, destinacao_id, usuario.username,
    )
