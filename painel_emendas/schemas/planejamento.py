"""
Pydantic v2 schemas for amendment planning (actions and resource destinations).

The action payload carries the values of the editable destination categories
as a ``{categoria: valor}`` mapping plus an explicit ``remover_categorias``
list.  A value of ``0`` is a legitimate zero-budget allocation; a category is
only removed when listed in ``remover_categorias``.
"""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from painel_emendas.utils.constants import (
    CATEGORIAS_DESTINACAO,
    CATEGORIAS_EDITAVEIS_ACAO,
    COMPLEXIDADE_PADRAO,
)


def _check_categorias_editaveis(categorias: object) -> None:
    invalidas = sorted(set(categorias) - CATEGORIAS_EDITAVEIS_ACAO)
    if invalidas:
        raise ValueError(
            f"Categorias não editáveis pelo formulário de ação: {invalidas}. "
            f"Permitidas: {sorted(CATEGORIAS_EDITAVEIS_ACAO)}."
        )


def _check_valores(valores: dict[str, float]) -> dict[str, float]:
    """Category, finiteness and sign checks for a ``{categoria: valor}`` mapping."""
    _check_categorias_editaveis(valores)
    for categoria, valor in valores.items():
        if not math.isfinite(valor):
            raise ValueError(f"Valor inválido para {categoria}.")
        if valor < 0:
            raise ValueError(f"Valor negativo para {categoria}.")
    return valores


def _check_sem_conflito(valores: dict[str, float], remover: list[str]) -> None:
    conflito = sorted(set(valores) & set(remover))
    if conflito:
        raise ValueError(
            f"Categorias não podem ser definidas e removidas ao mesmo tempo: {conflito}."
        )


# ---------------------------------------------------------------------------
# Input schemas
# ---------------------------------------------------------------------------


class AcaoSave(BaseModel):
    """Create or edit an action together with its editable destinations.

    Attributes:
        valores: Category → value for the categories the form sets.
        remover_categorias: Categories whose destination on this action must
            be deleted.  A category may not be both set and removed.
    """

    nome_acao: str = Field(..., min_length=1, max_length=300, description="Nome da ação.")
    area: str = Field(..., min_length=1, max_length=200, description="Área responsável.")
    descricao_oficial: str | None = Field(default=None, description="Descrição técnica oficial.")
    complexidade: str | None = Field(default=COMPLEXIDADE_PADRAO, max_length=50)
    publico_alvo: str | None = Field(default=None, max_length=300)
    valores: dict[str, float] = Field(
        default_factory=dict,
        description="Valor por categoria editável (SERVICOS_TERCEIROS, MATERIAL_CONSUMO, DISTRIBUICAO_GRATUITA).",
    )
    remover_categorias: list[str] = Field(
        default_factory=list,
        description="Categorias cujas destinações devem ser excluídas.",
    )

    @field_validator("valores")
    @classmethod
    def _valores(cls, v: dict[str, float]) -> dict[str, float]:
        return _check_valores(v)

    @field_validator("remover_categorias")
    @classmethod
    def _remover(cls, v: list[str]) -> list[str]:
        _check_categorias_editaveis(v)
        if len(set(v)) != len(v):
            raise ValueError("Categoria repetida em remover_categorias.")
        return v

    @model_validator(mode="after")
    def _sem_conflito(self) -> "AcaoSave":
        _check_sem_conflito(self.valores, self.remover_categorias)
        return self

    model_config = ConfigDict(
        allow_inf_nan=False,
        json_schema_extra={
            "example": {
                "nome_acao": "Cirurgias Eletivas",
                "area": "Atenção Especializada",
                "complexidade": "Média",
                "valores": {"SERVICOS_TERCEIROS": 40000.0, "MATERIAL_CONSUMO": 20000.0},
                "remover_categorias": [],
            }
        }
    )


class DestinacaoSave(BaseModel):
    """Create or edit one resource destination (single-destination dialog)."""

    tipo_destinacao: str = Field(..., description="Categoria da destinação.")
    valor_destinado: float = Field(
        ..., ge=0, allow_inf_nan=False, description="Valor destinado em reais."
    )
    grupo_despesa: str | None = Field(default=None, max_length=100)
    subtipo: str | None = Field(default=None, max_length=100)
    portaria_vinculada: str | None = Field(default=None, max_length=100)
    observacao_tecnica: str | None = None

    @field_validator("tipo_destinacao")
    @classmethod
    def _tipo(cls, v: str) -> str:
        if v not in CATEGORIAS_DESTINACAO:
            raise ValueError(f"Categoria de destinação inválida: '{v}'.")
        return v


class SaldoPreviewRequest(BaseModel):
    """Balance preview for the action form (no write).

    Attributes:
        acao_id: Action being edited; omit when creating a new action.
    """

    acao_id: int | None = Field(default=None, ge=1)
    valores: dict[str, float] = Field(default_factory=dict)
    remover_categorias: list[str] = Field(default_factory=list)

    @field_validator("valores")
    @classmethod
    def _valores(cls, v: dict[str, float]) -> dict[str, float]:
        return _check_valores(v)

    @field_validator("remover_categorias")
    @classmethod
    def _remover(cls, v: list[str]) -> list[str]:
        _check_categorias_editaveis(v)
        return v

    @model_validator(mode="after")
    def _sem_conflito(self) -> "SaldoPreviewRequest":
        _check_sem_conflito(self.valores, self.remover_categorias)
        return self

    model_config = ConfigDict(allow_inf_nan=False)


# ---------------------------------------------------------------------------
# Output schemas
# ---------------------------------------------------------------------------


class SaldoResponse(BaseModel):
    """Balance figures for an allocation being created or edited."""

    disponivel: float = Field(..., description="Orçamento livre para a alocação.")
    total_planejado: float = Field(..., description="Soma dos valores propostos.")
    restante: float = Field(..., description="disponivel - total_planejado.")
    excede_orcamento: bool


class DestinacaoResponse(BaseModel):
    id: int
    acao_id: int
    tipo_destinacao: str
    valor_destinado: float
    grupo_despesa: str | None = None
    subtipo: str | None = None
    portaria_vinculada: str | None = None
    observacao_tecnica: str | None = None
    valor_executado: float = 0.0


class AcaoResponse(BaseModel):
    """An action with its destinations and planned/executed totals."""

    id: int
    emenda_id: int
    nome_acao: str
    area: str
    descricao_oficial: str | None = None
    complexidade: str | None = None
    publico_alvo: str | None = None
    destinacoes: list[DestinacaoResponse] = Field(default_factory=list)
    total_planejado: float = 0.0
    total_executado: float = 0.0


class PlanejamentoResponse(BaseModel):
    """Planning tree of one amendment (GET /emendas/{id}/planejamento).

    Attributes:
        total_destinado: Σ valor_destinado over every destination.
        saldo_livre: ``valor_total - total_destinado``.
        percentual_alocado: ``total_destinado / valor_total × 100``.
    """

    emenda_id: int
    valor_total: float
    total_destinado: float
    saldo_livre: float
    percentual_alocado: float
    acoes: list[AcaoResponse] = Field(default_factory=list)
