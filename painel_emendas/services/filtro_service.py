"""
Filter engine for the amendment list, pending-item checklist and expense report.

Every function here is pure: it takes already-loaded amendments (ORM rows
with ``repasses``, ``despesas`` and ``pendencias`` populated, or unattached
instances built in tests), never touches the session, never mutates its
input and always returns a new list.  Applying the same filter state twice
to the same collection yields identical output.

Design notes
------------
- Pending items are never persisted; they are recomputed from the current
  data on every call.  Only dismissals of document-type items are stored
  (``PendenciaEmenda``).
- ``alto_valor`` is an informational bucket.  It is reported by
  ``agrupar_pendencias`` but does not make an amendment "pending" for the
  ``apenas_pendencias`` filter.
- Sorting is a single-key stable sort; rows whose key is ``None`` always go
  last regardless of direction.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from decimal import Decimal
from typing import Any

from painel_emendas.schemas.emenda import EmendaFiltros
from painel_emendas.schemas.relatorio import DespesaFiltros
from painel_emendas.utils.constants import (
    ALTO_VALOR,
    CAMPOS_ORDENACAO_EMENDAS,
    PENDENCIAS,
    STATUS_REPASSE_PAGO,
)
from painel_emendas.utils.money import somar, to_decimal

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Derived totals
# ---------------------------------------------------------------------------


def total_repassado(emenda: Any) -> Decimal:
    """Σ of the amendment's transfers with status REPASSADO."""
    return somar(r.valor for r in emenda.repasses or [] if r.status == STATUS_REPASSE_PAGO)


def total_gasto(emenda: Any) -> Decimal:
    """Σ of all the amendment's expenses, whatever their execution status."""
    return somar(d.valor for d in emenda.despesas or [])


def alvos_dispensados(emenda: Any) -> set[str]:
    """Document targets whose pending item was dismissed or resolved."""
    return {
        p.target_id
        for p in emenda.pendencias or []
        if p.dispensada or p.resolvida
    }


# ---------------------------------------------------------------------------
# Pending-item predicates
# ---------------------------------------------------------------------------


def falta_portaria(emenda: Any) -> bool:
    return not emenda.portaria and "portaria" not in alvos_dispensados(emenda)


def falta_deliberacao_cie(emenda: Any) -> bool:
    return not emenda.deliberacao_cie and "cie" not in alvos_dispensados(emenda)


def sem_anexos_essenciais(emenda: Any) -> bool:
    dispensados = alvos_dispensados(emenda)
    return (
        not emenda.anexos_essenciais
        and "proposta" not in dispensados
        and "oficio" not in dispensados
    )


def sem_repasses(emenda: Any) -> bool:
    return total_repassado(emenda) <= 0


def despesas_sem_autorizacao(emenda: Any) -> bool:
    return any(not (d.autorizada_por or "").strip() for d in emenda.despesas or [])


def despesas_maior_repasses(emenda: Any) -> bool:
    return total_gasto(emenda) > total_repassado(emenda)


_PREDICADOS: dict[str, Callable[[Any], bool]] = {
    "falta_portaria": falta_portaria,
    "falta_deliberacao_cie": falta_deliberacao_cie,
    "sem_anexos_essenciais": sem_anexos_essenciais,
    "sem_repasses": sem_repasses,
    "despesas_sem_autorizacao": despesas_sem_autorizacao,
    "despesas_maior_repasses": despesas_maior_repasses,
}


def pendencias_da_emenda(emenda: Any, limite_alto_valor: object | None = None) -> list[str]:
    """Return the keys of the pending-item buckets *emenda* falls in.

    Args:
        emenda: Amendment with ``repasses``, ``despesas`` and ``pendencias``.
        limite_alto_valor: When given, ``alto_valor`` is appended for
            amendments whose ``valor_total`` is strictly above it.

    Returns:
        Keys in the order of ``constants.PENDENCIAS``.
    """
    chaves = [chave for chave, predicado in _PREDICADOS.items() if predicado(emenda)]
    if limite_alto_valor is not None and to_decimal(emenda.valor_total) > to_decimal(
        limite_alto_valor
    ):
        chaves.append(ALTO_VALOR)
    return chaves


def tem_pendencias(emenda: Any) -> bool:
    return any(predicado(emenda) for predicado in _PREDICADOS.values())


def agrupar_pendencias(
    emendas: Iterable[Any], limite_alto_valor: object | None = None
) -> dict[str, list[Any]]:
    """Group amendments by pending-item bucket.

    An amendment appears in every bucket whose predicate it satisfies.
    Every bucket key is present in the result, empty buckets included.
    """
    grupos: dict[str, list[Any]] = {chave: [] for chave in PENDENCIAS}
    if limite_alto_valor is not None:
        grupos[ALTO_VALOR] = []
    for emenda in emendas:
        for chave in pendencias_da_emenda(emenda, limite_alto_valor):
            grupos[chave].append(emenda)
    return grupos


# ---------------------------------------------------------------------------
# Amendment filtering
# ---------------------------------------------------------------------------


def _contem(texto: str | None, trecho: str) -> bool:
    return trecho.casefold() in (texto or "").casefold()


def _atende(emenda: Any, filtros: EmendaFiltros) -> bool:
    if filtros.autor:
        trecho = filtros.autor.strip()
        if not (_contem(emenda.autor, trecho) or _contem(emenda.parlamentar, trecho)):
            return False
    if filtros.tipo and emenda.tipo != filtros.tipo:
        return False
    if filtros.tipo_recurso and emenda.tipo_recurso != filtros.tipo_recurso:
        return False
    if filtros.situacao and emenda.situacao != filtros.situacao:
        return False
    if filtros.status_interno and emenda.status_interno != filtros.status_interno:
        return False
    if filtros.ano_exercicio is not None and emenda.ano_exercicio != filtros.ano_exercicio:
        return False

    valor = to_decimal(emenda.valor_total)
    if filtros.valor_min is not None and valor < to_decimal(filtros.valor_min):
        return False
    if filtros.valor_max is not None and valor > to_decimal(filtros.valor_max):
        return False

    if filtros.data_inicio is not None or filtros.data_fim is not None:
        if emenda.created_at is None:
            return False
        criada = emenda.created_at.date()
        if filtros.data_inicio is not None and criada < filtros.data_inicio:
            return False
        if filtros.data_fim is not None and criada > filtros.data_fim:
            return False

    # Presence flags
    if filtros.com_portaria and not emenda.portaria:
        return False
    if filtros.com_cie and not emenda.deliberacao_cie:
        return False
    if filtros.com_anexos and not emenda.anexos_essenciais:
        return False
    if filtros.com_repasses and sem_repasses(emenda):
        return False

    # Absence flags follow the pending-item predicates
    if filtros.sem_portaria and not falta_portaria(emenda):
        return False
    if filtros.sem_cie and not falta_deliberacao_cie(emenda):
        return False
    if filtros.sem_anexos and not sem_anexos_essenciais(emenda):
        return False
    if filtros.sem_repasses and not sem_repasses(emenda):
        return False
    if filtros.com_despesas_nao_autorizadas and not despesas_sem_autorizacao(emenda):
        return False
    if filtros.despesas_maior_repasses and not despesas_maior_repasses(emenda):
        return False
    if filtros.apenas_pendencias and not tem_pendencias(emenda):
        return False
    return True


def filtrar_emendas(emendas: Iterable[Any], filtros: EmendaFiltros) -> list[Any]:
    """Return the amendments matching every active criterion, in input order."""
    resultado = [emenda for emenda in emendas if _atende(emenda, filtros)]
    logger.debug("filtrar_emendas: %d emendas após filtros", len(resultado))
    return resultado


# ---------------------------------------------------------------------------
# Sorting and pagination
# ---------------------------------------------------------------------------


def _chave_ordenacao(emenda: Any, campo: str) -> Any:
    if campo == "total_repassado":
        return total_repassado(emenda)
    if campo == "total_gasto":
        return total_gasto(emenda)
    valor = getattr(emenda, campo)
    if isinstance(valor, str):
        return valor.casefold()
    if campo == "valor_total" and valor is not None:
        return to_decimal(valor)
    return valor


def ordenar_emendas(
    emendas: Sequence[Any], campo: str | None, direcao: str = "asc"
) -> list[Any]:
    """Stable single-key sort.

    Args:
        emendas: Amendments to sort (not mutated).
        campo: One of ``constants.CAMPOS_ORDENACAO_EMENDAS``; ``None`` keeps
            the input order.
        direcao: ``"asc"`` or ``"desc"``.

    Raises:
        ValueError: If *campo* is not sortable.
    """
    if campo is None:
        return list(emendas)
    if campo not in CAMPOS_ORDENACAO_EMENDAS:
        raise ValueError(f"Campo de ordenação inválido: '{campo}'.")

    chaves = [(_chave_ordenacao(e, campo), e) for e in emendas]
    com_valor = [par for par in chaves if par[0] is not None]
    sem_valor = [e for chave, e in chaves if chave is None]
    # sorted() keeps equal keys in input order for reverse=True as well
    ordenados = sorted(com_valor, key=lambda par: par[0], reverse=direcao == "desc")
    return [e for _, e in ordenados] + sem_valor


def paginar(itens: Sequence[Any], page: int, page_size: int) -> tuple[list[Any], int]:
    """Return ``(page_rows, total)``; pages past the end are empty."""
    total = len(itens)
    inicio = (page - 1) * page_size
    return list(itens[inicio : inicio + page_size]), total


# ---------------------------------------------------------------------------
# Expense report
# ---------------------------------------------------------------------------


def _despesa_atende(despesa: Any, filtros: DespesaFiltros) -> bool:
    if filtros.responsavel and not _contem(despesa.responsavel_execucao, filtros.responsavel):
        return False
    if filtros.unidade and not _contem(despesa.unidade_destino, filtros.unidade):
        return False
    if filtros.demanda and not _contem(despesa.demanda, filtros.demanda):
        return False
    if filtros.fornecedor and not _contem(despesa.fornecedor_nome, filtros.fornecedor):
        return False
    if filtros.status_execucao and despesa.status_execucao != filtros.status_execucao:
        return False
    return True


def filtrar_despesas(
    emendas: Iterable[Any],
    filtros_emenda: EmendaFiltros,
    filtros_despesa: DespesaFiltros,
) -> list[tuple[Any, Any]]:
    """Flatten the expenses of the matching amendments into ``(emenda, despesa)`` rows."""
    return [
        (emenda, despesa)
        for emenda in filtrar_emendas(emendas, filtros_emenda)
        for despesa in emenda.despesas or []
        if _despesa_atende(despesa, filtros_despesa)
    ]
