"""
Balance calculator for amendment planning.

Pure functions, with no database access, that decide how much of an
amendment's ``valor_total`` is still free to allocate to actions and
resource destinations.  They accept any objects exposing the ORM attribute
names (``valor_total``, ``acoes``, ``destinacoes``, ``id``,
``tipo_destinacao``, ``valor_destinado``), so the same code runs on loaded
``Emenda`` rows and on unattached instances built in tests.

Design notes
------------
- Both planning entry points (the whole-action form and the single
  destination dialog) go through ``calcular_saldo``; they only differ in which
  existing destinations are excluded from the "already used" sum and which
  values are proposed.
- Money is handled as ``Decimal`` quantised to centavos; callers convert to
  ``float`` only when building response schemas.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from painel_emendas.utils.constants import CATEGORIAS_EDITAVEIS_ACAO
from painel_emendas.utils.money import ZERO, somar, to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Saldo:
    """Result of a balance computation.

    Attributes:
        disponivel: Budget free for the allocation being created/edited.
        total_planejado: Sum of the values proposed for it.
        restante: ``disponivel - total_planejado``.
    """

    disponivel: Decimal
    total_planejado: Decimal
    restante: Decimal

    @property
    def excede_orcamento(self) -> bool:
        return self.restante < 0


# ---------------------------------------------------------------------------
# Sums over the planning tree
# ---------------------------------------------------------------------------


def iter_destinacoes(acoes: Iterable[Any]) -> Iterator[Any]:
    """Yield every destination of every action."""
    for acao in acoes:
        yield from acao.destinacoes or []


def total_destinado(acoes: Iterable[Any]) -> Decimal:
    """Sum of ``valor_destinado`` over all destinations of *acoes*."""
    return somar(d.valor_destinado for d in iter_destinacoes(acoes))


def total_executado(despesas: Iterable[Any], destinacao_ids: Iterable[int]) -> Decimal:
    """Sum of the expenses linked to any of the given destinations."""
    ids = set(destinacao_ids)
    return somar(
        d.valor for d in despesas if d.destinacao_id is not None and d.destinacao_id in ids
    )


def executado_por_destinacao(despesas: Iterable[Any]) -> dict[int, Decimal]:
    """Map destination id → sum of the expenses linked to it."""
    executado: dict[int, Decimal] = {}
    for despesa in despesas:
        if despesa.destinacao_id is None:
            continue
        executado[despesa.destinacao_id] = (
            executado.get(despesa.destinacao_id, ZERO) + to_decimal(despesa.valor)
        )
    return executado


# ---------------------------------------------------------------------------
# Shared balance function
# ---------------------------------------------------------------------------


def calcular_saldo(
    valor_total: object,
    destinacoes: Iterable[Any],
    valores_propostos: Iterable[object],
    excluir_ids: Iterable[int] = (),
) -> Saldo:
    """Compute the free budget for a proposed allocation.

    Every existing destination whose id is not in *excluir_ids* counts as
    already used.  Excluded destinations are the ones the proposal replaces.

    Args:
        valor_total: The amendment total.
        destinacoes: All existing destinations of the amendment.
        valores_propostos: Values being proposed.
        excluir_ids: Ids of destinations replaced by the proposal.

    Returns:
        A ``Saldo`` with ``disponivel``, ``total_planejado`` and ``restante``.
    """
    excluidos = set(excluir_ids)
    em_uso = somar(d.valor_destinado for d in destinacoes if d.id not in excluidos)
    disponivel = to_decimal(valor_total) - em_uso
    total_planejado = somar(valores_propostos)
    return Saldo(
        disponivel=disponivel,
        total_planejado=total_planejado,
        restante=disponivel - total_planejado,
    )


def calcular_saldo_acao(
    emenda: Any,
    valores: Mapping[str, object],
    acao_editada: Any | None = None,
    categorias_removidas: Iterable[str] = (),
) -> Saldo:
    """Balance for the whole-action planning form.

    When creating (``acao_editada is None``) every existing destination of
    the amendment counts as used.  When editing, the edited action's
    destinations in the categories the form touches (set or removed) return to
    the pool; its destinations in other categories stay fixed and keep
    consuming budget.

    Args:
        emenda: Amendment with ``valor_total`` and ``acoes`` loaded.
        valores: Category key → value entered in the form.
        acao_editada: The action being edited, if any.
        categorias_removidas: Categories the form explicitly removes.

    Returns:
        The ``Saldo`` for the form.

    Raises:
        ValueError: If a category outside ``CATEGORIAS_EDITAVEIS_ACAO`` is
                    proposed or removed.
    """
    removidas = set(categorias_removidas)
    invalidas = (set(valores) | removidas) - CATEGORIAS_EDITAVEIS_ACAO
    if invalidas:
        raise ValueError(
            f"Categorias não editáveis pelo formulário de ação: {sorted(invalidas)}"
        )

    tocadas = set(valores) | removidas
    excluir: set[int] = set()
    if acao_editada is not None:
        excluir = {
            d.id
            for d in acao_editada.destinacoes or []
            if d.tipo_destinacao in tocadas
        }

    saldo = calcular_saldo(
        emenda.valor_total,
        iter_destinacoes(emenda.acoes),
        valores.values(),
        excluir_ids=excluir,
    )
    logger.debug(
        "calcular_saldo_acao: emenda=%s acao=%s disponivel=%s planejado=%s restante=%s",
        getattr(emenda, "id", None),
        getattr(acao_editada, "id", None),
        saldo.disponivel, saldo.total_planejado, saldo.restante,
    )
    return saldo


def validar_destinacao(
    emenda: Any,
    novo_valor: object,
    destinacao_id: int | None = None,
) -> Saldo:
    """Balance for the single-destination dialog.

    Sums every destination of the amendment except the one being edited and
    adds *novo_valor*; the result exceeds the budget when that sum is greater
    than ``valor_total``.
    """
    excluir = () if destinacao_id is None else (destinacao_id,)
    return calcular_saldo(
        emenda.valor_total,
        iter_destinacoes(emenda.acoes),
        [novo_valor],
        excluir_ids=excluir,
    )


# ---------------------------------------------------------------------------
# Co-authorship split
# ---------------------------------------------------------------------------


def parcela_primeiro_parlamentar(
    valor_total: object, valor_segundo_responsavel: object | None
) -> Decimal:
    """Return the first parliamentarian's share of the amendment.

    Raises:
        ValueError: If the co-author value is negative or above the total.
    """
    total = to_decimal(valor_total)
    segundo = to_decimal(valor_segundo_responsavel)
    if segundo < 0:
        raise ValueError("O valor do segundo responsável não pode ser negativo.")
    if segundo > total:
        raise ValueError(
            "O valor do segundo responsável não pode exceder o valor total da emenda."
        )
    return total - segundo
