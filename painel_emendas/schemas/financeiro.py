"""
Pydantic v2 schemas for fund transfers (repasses) and expenses (despesas).
"""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from painel_emendas.utils.constants import STATUS_EXECUCAO_DESPESA, STATUS_REPASSE


def _status_repasse(v: str | None) -> str | None:
    if v is not None and v not in STATUS_REPASSE:
        raise ValueError(f"Status de repasse inválido: '{v}'.")
    return v


def _status_despesa(v: str | None) -> str | None:
    if v is not None and v not in STATUS_EXECUCAO_DESPESA:
        raise ValueError(f"Status de execução inválido: '{v}'.")
    return v


# ---------------------------------------------------------------------------
# Repasses
# ---------------------------------------------------------------------------


class RepasseCreate(BaseModel):
    """Register a fund transfer. Only REPASSADO transfers count as received."""

    data: datetime.date | None = None
    valor: float = Field(
        ..., gt=0, allow_inf_nan=False, description="Valor do repasse em reais."
    )
    fonte: str | None = Field(default=None, max_length=100)
    status: str = Field(default="PENDENTE", description="REPASSADO, PENDENTE ou CANCELADO.")
    ordem_bancaria: str | None = Field(default=None, max_length=50)
    observacoes: str | None = None

    @field_validator("status")
    @classmethod
    def _status(cls, v: str | None) -> str | None:
        return _status_repasse(v)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "data": "2026-03-15",
                "valor": 5000.0,
                "fonte": "FNS",
                "status": "REPASSADO",
                "ordem_bancaria": "2026OB000123",
            }
        }
    )


class RepasseUpdate(BaseModel):
    data: datetime.date | None = None
    valor: float | None = Field(default=None, gt=0, allow_inf_nan=False)
    fonte: str | None = Field(default=None, max_length=100)
    status: str | None = None
    ordem_bancaria: str | None = Field(default=None, max_length=50)
    observacoes: str | None = None

    @field_validator("status")
    @classmethod
    def _status(cls, v: str | None) -> str | None:
        return _status_repasse(v)


class RepasseResponse(BaseModel):
    id: int
    emenda_id: int
    data: datetime.date | None
    valor: float
    fonte: str | None
    status: str
    ordem_bancaria: str | None
    observacoes: str | None

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Despesas
# ---------------------------------------------------------------------------


class DespesaCreate(BaseModel):
    """Register an expense, optionally linked to a destination of the same amendment."""

    destinacao_id: int | None = Field(default=None, ge=1)
    data: datetime.date | None = None
    valor: float = Field(
        ..., gt=0, allow_inf_nan=False, description="Valor da despesa em reais."
    )
    categoria: str | None = Field(default=None, max_length=100)
    descricao: str | None = None
    autorizada_por: str | None = Field(default=None, max_length=200)
    responsavel_execucao: str | None = Field(default=None, max_length=200)
    unidade_destino: str | None = Field(default=None, max_length=200)
    fornecedor_nome: str | None = Field(default=None, max_length=300)
    status_execucao: str = Field(default="PLANEJADA")
    demanda: str | None = Field(default=None, max_length=300)

    @field_validator("status_execucao")
    @classmethod
    def _status(cls, v: str | None) -> str | None:
        return _status_despesa(v)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "destinacao_id": 1,
                "data": "2026-04-02",
                "valor": 3000.0,
                "categoria": "MATERIAL_CONSUMO",
                "descricao": "Luvas e seringas",
                "autorizada_por": "Secretária Adjunta",
                "status_execucao": "LIQUIDADA",
            }
        }
    )


class DespesaUpdate(BaseModel):
    destinacao_id: int | None = Field(default=None, ge=1)
    data: datetime.date | None = None
    valor: float | None = Field(default=None, gt=0, allow_inf_nan=False)
    categoria: str | None = Field(default=None, max_length=100)
    descricao: str | None = None
    autorizada_por: str | None = Field(default=None, max_length=200)
    responsavel_execucao: str | None = Field(default=None, max_length=200)
    unidade_destino: str | None = Field(default=None, max_length=200)
    fornecedor_nome: str | None = Field(default=None, max_length=300)
    status_execucao: str | None = None
    demanda: str | None = Field(default=None, max_length=300)

    @field_validator("status_execucao")
    @classmethod
    def _status(cls, v: str | None) -> str | None:
        return _status_despesa(v)


class DespesaStatusUpdate(BaseModel):
    status_execucao: str = Field(..., description="Novo status de execução.")

    @field_validator("status_execucao")
    @classmethod
    def _status(cls, v: str | None) -> str | None:
        return _status_despesa(v)


class DespesaResponse(BaseModel):
    id: int
    emenda_id: int
    destinacao_id: int | None
    data: datetime.date | None
    valor: float
    categoria: str | None
    descricao: str | None
    registrada_por: str | None
    autorizada_por: str | None
    responsavel_execucao: str | None
    unidade_destino: str | None
    fornecedor_nome: str | None
    status_execucao: str
    demanda: str | None

    model_config = ConfigDict(from_attributes=True)
