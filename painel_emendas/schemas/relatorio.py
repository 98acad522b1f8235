"""
Pydantic v2 schemas for the reports module (``/api/relatorios``).

All monetary values are expressed as ``float`` in reais.
"""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, Field


class ResumoFinanceiroItem(BaseModel):
    """One dashboard card of the financial summary.

    Attributes:
        grupo: Group label, e.g. "Incremento MAC".
        total: Σ valor_total of the member amendments.
        pago: Σ REPASSADO transfers (plus settled expenses for Equipamento).
        pendente: ``total - pago``.
    """

    grupo: str
    total: float
    pago: float
    pendente: float
    quantidade: int = Field(..., ge=0, description="Quantidade de emendas do grupo.")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "grupo": "Equipamento",
                "total": 20000.0,
                "pago": 8000.0,
                "pendente": 12000.0,
                "quantidade": 2,
            }
        }
    )


class EmendaPendenteItem(BaseModel):
    id: int
    numero_emenda: str | None
    autor: str
    valor_total: float


class PendenciaBucket(BaseModel):
    """Amendments falling in one pending-item bucket."""

    chave: str = Field(..., description="Identificador da pendência.")
    rotulo: str = Field(..., description="Rótulo exibido.")
    quantidade: int = Field(..., ge=0)
    emendas: list[EmendaPendenteItem] = Field(default_factory=list)


class PendenciasResponse(BaseModel):
    buckets: list[PendenciaBucket]
    total_emendas_com_pendencias: int = Field(..., ge=0)


class ValorAgrupado(BaseModel):
    """Generic ``(chave, quantidade, valor)`` aggregate used in charts."""

    chave: str
    quantidade: int = Field(..., ge=0)
    valor: float


class VisaoGeralResponse(BaseModel):
    """General overview report: consolidated totals and breakdowns."""

    quantidade_emendas: int
    valor_total: float
    total_repassado: float
    total_gasto: float
    percentual_execucao: float
    por_tipo_recurso: list[ValorAgrupado]
    por_situacao: list[ValorAgrupado]
    por_autor: list[ValorAgrupado] = Field(
        default_factory=list, description="Dez autores com maior volume de recursos."
    )
    despesas_por_status: list[ValorAgrupado]
    planejado_por_categoria: list[ValorAgrupado]


class AcaoComparativo(BaseModel):
    """Planned versus executed value of one action."""

    acao_id: int
    emenda_id: int
    nome_acao: str
    planejado: float
    executado: float
    percentual_execucao: float


class AuditoriaItem(BaseModel):
    id: int
    emenda_id: int
    evento: str
    detalhe: str | None
    feito_por: str | None
    criado_em: datetime.datetime

    model_config = ConfigDict(from_attributes=True)


class AuditoriaResponse(BaseModel):
    """Audit report: history entries plus the top actions by planned value."""

    eventos: list[AuditoriaItem]
    top_acoes: list[AcaoComparativo]


class DespesaFiltros(BaseModel):
    """Expense-level filters of the expense report (substring matches)."""

    responsavel: str | None = None
    unidade: str | None = None
    demanda: str | None = None
    fornecedor: str | None = None
    status_execucao: str | None = None

    model_config = ConfigDict(frozen=True)


class DespesaRelatorioRow(BaseModel):
    """Flattened (amendment, expense) row of the expense report."""

    emenda_id: int
    numero_emenda: str | None
    autor: str
    despesa_id: int
    data: datetime.date | None
    valor: float
    categoria: str | None
    descricao: str | None
    responsavel_execucao: str | None
    unidade_destino: str | None
    fornecedor_nome: str | None
    demanda: str | None
    status_execucao: str
    autorizada_por: str | None


class DespesaRelatorioResponse(BaseModel):
    rows: list[DespesaRelatorioRow]
    total: int = Field(..., ge=0)
    valor_total: float
