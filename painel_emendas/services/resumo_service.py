"""
Financial summary and report service layer (``/api/relatorios``).

The aggregations are pure functions over collections of amendments,
transfers, expenses and actions; the ``get_*`` functions at the bottom load
the rows from the session and hand them over.

Design notes
------------
- "Paid" for a resource group is the sum of its REPASSADO transfers.  Groups
  listed in ``GRUPOS_PAGAMENTO_POR_DESPESA`` (Equipamento) also add their
  settled expenses (LIQUIDADA or PAGA), since equipment is frequently bought
  directly.  Nothing prevents a transfer and an expense from describing the
  same money; ``pendente`` may then go negative and is reported as is.
- Percentages go through ``safe_pct`` and are not capped at 100.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from decimal import Decimal
from typing import Any

from sqlalchemy.orm import Session

from painel_emendas.config import get_settings
from painel_emendas.models.historico_emenda import HistoricoEmenda
from painel_emendas.schemas.emenda import EmendaFiltros
from painel_emendas.schemas.relatorio import (
    AcaoComparativo,
    AuditoriaItem,
    AuditoriaResponse,
    DespesaFiltros,
    DespesaRelatorioResponse,
    DespesaRelatorioRow,
    EmendaPendenteItem,
    PendenciaBucket,
    PendenciasResponse,
    ResumoFinanceiroItem,
    ValorAgrupado,
    VisaoGeralResponse,
)
from painel_emendas.services import filtro_service
from painel_emendas.services.emenda_service import carregar_emendas
from painel_emendas.services.saldo_service import executado_por_destinacao
from painel_emendas.utils.constants import (
    ALTO_VALOR,
    CATEGORIAS_DESTINACAO,
    GRUPOS_PAGAMENTO_POR_DESPESA,
    GRUPOS_RESUMO_FINANCEIRO,
    PENDENCIAS,
    STATUS_DESPESA_LIQUIDADA,
    STATUS_EXECUCAO_DESPESA,
    STATUS_REPASSE_PAGO,
)
from painel_emendas.utils.money import ZERO, safe_pct, somar, to_decimal

logger = logging.getLogger(__name__)

_ROTULO_ALTO_VALOR = "Alto valor"


# ---------------------------------------------------------------------------
# Pure aggregations
# ---------------------------------------------------------------------------


def resumo_financeiro(
    emendas: Iterable[Any],
    repasses: Iterable[Any],
    despesas: Iterable[Any],
) -> list[ResumoFinanceiroItem]:
    """Fold amendments, transfers and expenses into the dashboard cards.

    Transfers and expenses are matched to amendments through ``emenda_id``.

    Args:
        emendas: Amendments (``id``, ``tipo_recurso``, ``valor_total``).
        repasses: Transfers (``emenda_id``, ``valor``, ``status``).
        despesas: Expenses (``emenda_id``, ``valor``, ``status_execucao``).

    Returns:
        One item per group of ``GRUPOS_RESUMO_FINANCEIRO``, in its order.
    """
    emendas = list(emendas)
    repasses = list(repasses)
    despesas = list(despesas)

    itens: list[ResumoFinanceiroItem] = []
    for grupo, tipos in GRUPOS_RESUMO_FINANCEIRO.items():
        membros = [e for e in emendas if e.tipo_recurso in tipos]
        ids = {e.id for e in membros}

        total = somar(e.valor_total for e in membros)
        pago = somar(
            r.valor for r in repasses if r.emenda_id in ids and r.status == STATUS_REPASSE_PAGO
        )
        if grupo in GRUPOS_PAGAMENTO_POR_DESPESA:
            pago += somar(
                d.valor
                for d in despesas
                if d.emenda_id in ids and d.status_execucao in STATUS_DESPESA_LIQUIDADA
            )

        itens.append(
            ResumoFinanceiroItem(
                grupo=grupo,
                total=float(total),
                pago=float(pago),
                pendente=float(total - pago),
                quantidade=len(membros),
            )
        )
        logger.debug("resumo_financeiro: %s total=%s pago=%s", grupo, total, pago)
    return itens


def consolidar_por(emendas: Iterable[Any], atributo: str) -> list[ValorAgrupado]:
    """Count and sum ``valor_total`` grouped by *atributo*, largest value first."""
    grupos: dict[str, tuple[int, Decimal]] = {}
    for emenda in emendas:
        chave = getattr(emenda, atributo) or "N/D"
        quantidade, valor = grupos.get(chave, (0, ZERO))
        grupos[chave] = (quantidade + 1, valor + to_decimal(emenda.valor_total))
    ordenados = sorted(grupos.items(), key=lambda item: item[1][1], reverse=True)
    return [
        ValorAgrupado(chave=chave, quantidade=quantidade, valor=float(valor))
        for chave, (quantidade, valor) in ordenados
    ]


def despesas_por_status(despesas: Iterable[Any]) -> list[ValorAgrupado]:
    """Expense count and value per execution status, in workflow order."""
    grupos = {s: (0, ZERO) for s in STATUS_EXECUCAO_DESPESA}
    for despesa in despesas:
        quantidade, valor = grupos.get(despesa.status_execucao, (0, ZERO))
        grupos[despesa.status_execucao] = (quantidade + 1, valor + to_decimal(despesa.valor))
    return [
        ValorAgrupado(chave=chave, quantidade=quantidade, valor=float(valor))
        for chave, (quantidade, valor) in grupos.items()
    ]


def planejado_por_categoria(acoes: Iterable[Any]) -> list[ValorAgrupado]:
    """Planned value per destination category; empty categories included."""
    grupos = {c: (0, ZERO) for c in CATEGORIAS_DESTINACAO}
    for acao in acoes:
        for destinacao in acao.destinacoes or []:
            quantidade, valor = grupos.get(destinacao.tipo_destinacao, (0, ZERO))
            grupos[destinacao.tipo_destinacao] = (
                quantidade + 1,
                valor + to_decimal(destinacao.valor_destinado),
            )
    return [
        ValorAgrupado(chave=chave, quantidade=quantidade, valor=float(valor))
        for chave, (quantidade, valor) in grupos.items()
    ]


def planejado_vs_executado(
    acoes: Iterable[Any], despesas: Iterable[Any], limite: int = 10
) -> list[AcaoComparativo]:
    """Top *limite* actions by planned value with their executed value.

    Executed value is the sum of the expenses linked to the action's
    destinations.  Ties keep the input order.
    """
    executado = executado_por_destinacao(despesas)
    comparativos = []
    for acao in acoes:
        planejado = somar(d.valor_destinado for d in acao.destinacoes or [])
        gasto = somar(executado.get(d.id, ZERO) for d in acao.destinacoes or [])
        comparativos.append(
            AcaoComparativo(
                acao_id=acao.id,
                emenda_id=acao.emenda_id,
                nome_acao=acao.nome_acao,
                planejado=float(planejado),
                executado=float(gasto),
                percentual_execucao=safe_pct(gasto, planejado),
            )
        )
    comparativos.sort(key=lambda c: c.planejado, reverse=True)
    return comparativos[:limite]


# ---------------------------------------------------------------------------
# Database-backed report functions
# ---------------------------------------------------------------------------


def _coletar(emendas: list[Any]) -> tuple[list[Any], list[Any], list[Any]]:
    repasses = [r for e in emendas for r in e.repasses]
    despesas = [d for e in emendas for d in e.despesas]
    acoes = [a for e in emendas for a in e.acoes]
    return repasses, despesas, acoes


def get_resumo_financeiro(db: Session, filtros: EmendaFiltros) -> list[ResumoFinanceiroItem]:
    emendas = filtro_service.filtrar_emendas(carregar_emendas(db), filtros)
    repasses, despesas, _ = _coletar(emendas)
    return resumo_financeiro(emendas, repasses, despesas)


def get_pendencias(db: Session, filtros: EmendaFiltros) -> PendenciasResponse:
    """Group the filtered amendments into pending-item buckets."""
    settings = get_settings()
    emendas = filtro_service.filtrar_emendas(carregar_emendas(db), filtros)
    grupos = filtro_service.agrupar_pendencias(emendas, settings.LIMITE_ALTO_VALOR)
    rotulos = {**PENDENCIAS, ALTO_VALOR: _ROTULO_ALTO_VALOR}

    buckets = [
        PendenciaBucket(
            chave=chave,
            rotulo=rotulos[chave],
            quantidade=len(membros),
            emendas=[
                EmendaPendenteItem(
                    id=e.id,
                    numero_emenda=e.numero_emenda,
                    autor=e.autor,
                    valor_total=float(to_decimal(e.valor_total)),
                )
                for e in membros
            ],
        )
        for chave, membros in grupos.items()
    ]
    return PendenciasResponse(
        buckets=buckets,
        total_emendas_com_pendencias=sum(1 for e in emendas if filtro_service.tem_pendencias(e)),
    )


def get_visao_geral(db: Session, filtros: EmendaFiltros) -> VisaoGeralResponse:
    """Consolidated totals and breakdowns of the filtered amendments."""
    emendas = filtro_service.filtrar_emendas(carregar_emendas(db), filtros)
    _, despesas, acoes = _coletar(emendas)

    valor_total = somar(e.valor_total for e in emendas)
    repassado = somar(filtro_service.total_repassado(e) for e in emendas)
    gasto = somar(filtro_service.total_gasto(e) for e in emendas)

    logger.debug(
        "get_visao_geral: emendas=%d valor_total=%s repassado=%s gasto=%s",
        len(emendas), valor_total, repassado, gasto,
    )
    return VisaoGeralResponse(
        quantidade_emendas=len(emendas),
        valor_total=float(valor_total),
        total_repassado=float(repassado),
        total_gasto=float(gasto),
        percentual_execucao=safe_pct(gasto, valor_total),
        por_tipo_recurso=consolidar_por(emendas, "tipo_recurso"),
        por_situacao=consolidar_por(emendas, "situacao"),
        por_autor=consolidar_por(emendas, "autor")[:10],
        despesas_por_status=despesas_por_status(despesas),
        planejado_por_categoria=planejado_por_categoria(acoes),
    )


def get_auditoria(db: Session, filtros: EmendaFiltros, limite: int = 100) -> AuditoriaResponse:
    """Latest history entries of the filtered amendments plus the top-10 actions."""
    emendas = filtro_service.filtrar_emendas(carregar_emendas(db), filtros)
    ids = [e.id for e in emendas]
    _, despesas, acoes = _coletar(emendas)

    eventos: list[HistoricoEmenda] = []
    if ids:
        eventos = (
            db.query(HistoricoEmenda)
            .filter(HistoricoEmenda.emenda_id.in_(ids))
            .order_by(HistoricoEmenda.criado_em.desc(), HistoricoEmenda.id.desc())
            .limit(limite)
            .all()
        )
    return AuditoriaResponse(
        eventos=[AuditoriaItem.model_validate(h) for h in eventos],
        top_acoes=planejado_vs_executado(acoes, despesas),
    )


def get_relatorio_despesas(
    db: Session, filtros: EmendaFiltros, filtros_despesa: DespesaFiltros
) -> DespesaRelatorioResponse:
    """Flattened expense rows of the filtered amendments."""
    pares = filtro_service.filtrar_despesas(carregar_emendas(db), filtros, filtros_despesa)
    rows = [
        DespesaRelatorioRow(
            emenda_id=emenda.id,
            numero_emenda=emenda.numero_emenda,
            autor=emenda.autor,
            despesa_id=despesa.id,
            data=despesa.data,
            valor=float(to_decimal(despesa.valor)),
            categoria=despesa.categoria,
            descricao=despesa.descricao,
            responsavel_execucao=despesa.responsavel_execucao,
            unidade_destino=despesa.unidade_destino,
            fornecedor_nome=despesa.fornecedor_nome,
            demanda=despesa.demanda,
            status_execucao=despesa.status_execucao,
            autorizada_por=despesa.autorizada_por,
        )
        for emenda, despesa in pares
    ]
    return DespesaRelatorioResponse(
        rows=rows,
        total=len(rows),
        valor_total=float(somar(despesa.valor for _, despesa in pares)),
    )
