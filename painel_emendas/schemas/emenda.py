"""
Pydantic v2 schemas for the amendments (Emendas) module.

These models define the JSON shapes consumed and returned by
``painel_emendas/routers/emendas.py`` plus the filter state used by the
filter engine.  They are free of SQLAlchemy imports so that the schema layer
stays decoupled from ORM internals.
"""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from painel_emendas.utils.constants import (
    ALVOS_PENDENCIA,
    ORIGENS,
    SITUACOES_OFICIAIS,
    STATUS_INTERNOS,
    TIPOS_EMENDA,
    TIPOS_RECURSO,
)


def _check_choice(value: str | None, choices: object, label: str) -> str | None:
    if value is not None and value not in choices:
        raise ValueError(f"{label} inválido: '{value}'.")
    return value


# ---------------------------------------------------------------------------
# Filter state
# ---------------------------------------------------------------------------


class EmendaFiltros(BaseModel):
    """Multi-field filter state for the amendment list.

    Every field is optional — ``None``/``False`` means "no restriction on
    that axis".  Presence flags (``com_*``) keep only amendments that have
    the item; absence flags (``sem_*`` and friends) keep only amendments
    that show the matching pending item.
    """

    autor: str | None = Field(default=None, description="Trecho do autor ou parlamentar.")
    tipo: str | None = Field(default=None, description="Tipo de emenda.")
    tipo_recurso: str | None = Field(default=None, description="Tipo de recurso.")
    situacao: str | None = Field(default=None, description="Situação oficial.")
    status_interno: str | None = Field(default=None, description="Status interno.")
    ano_exercicio: int | None = Field(default=None, ge=2000, le=2100)
    data_inicio: datetime.date | None = Field(default=None, description="Criada a partir de.")
    data_fim: datetime.date | None = Field(default=None, description="Criada até (inclusive).")
    valor_min: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    valor_max: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    com_portaria: bool = False
    com_cie: bool = False
    com_anexos: bool = False
    com_repasses: bool = False
    sem_portaria: bool = False
    sem_cie: bool = False
    sem_anexos: bool = False
    sem_repasses: bool = False
    com_despesas_nao_autorizadas: bool = False
    despesas_maior_repasses: bool = False
    apenas_pendencias: bool = False

    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Input schemas (write operations)
# ---------------------------------------------------------------------------


class EmendaCreate(BaseModel):
    """Payload for registering a new amendment (POST /emendas).

    ``valor_segundo_responsavel`` may not exceed ``valor_total``; the first
    parliamentarian's share is derived, never stored.
    """

    numero_emenda: str | None = Field(default=None, max_length=50)
    numero_proposta: str | None = Field(default=None, max_length=50)
    tipo: str = Field(default="individual", description="individual, bancada ou comissao.")
    tipo_recurso: str = Field(..., description="Tipo de recurso, ex. INCREMENTO_MAC.")
    origem: str | None = Field(default="FEDERAL")
    autor: str = Field(..., min_length=1, max_length=200)
    parlamentar: str = Field(..., min_length=1, max_length=200)
    segundo_autor: str | None = Field(default=None, max_length=200)
    segundo_parlamentar: str | None = Field(default=None, max_length=200)
    valor_total: float = Field(
        ..., ge=0, allow_inf_nan=False, description="Valor total da emenda em reais."
    )
    valor_segundo_responsavel: float | None = Field(
        default=None,
        ge=0,
        allow_inf_nan=False,
        description="Parcela do segundo parlamentar (≤ valor_total).",
    )
    situacao: str = Field(default="EM_ANALISE")
    status_interno: str = Field(default="RASCUNHO")
    portaria: str | None = Field(default=None, max_length=100)
    deliberacao_cie: str | None = Field(default=None, max_length=100)
    anexos_essenciais: bool = False
    ano_exercicio: int | None = Field(default=None, ge=2000, le=2100)
    descricao_completa: str | None = None
    objeto_emenda: str | None = None
    meta_operacional: str | None = None
    observacoes: str | None = None

    @field_validator("tipo")
    @classmethod
    def _tipo(cls, v: str) -> str:
        return _check_choice(v, TIPOS_EMENDA, "Tipo de emenda")

    @field_validator("tipo_recurso")
    @classmethod
    def _tipo_recurso(cls, v: str) -> str:
        return _check_choice(v, TIPOS_RECURSO, "Tipo de recurso")

    @field_validator("origem")
    @classmethod
    def _origem(cls, v: str | None) -> str | None:
        return _check_choice(v, ORIGENS, "Origem")

    @field_validator("situacao")
    @classmethod
    def _situacao(cls, v: str) -> str:
        return _check_choice(v, SITUACOES_OFICIAIS, "Situação oficial")

    @field_validator("status_interno")
    @classmethod
    def _status_interno(cls, v: str) -> str:
        return _check_choice(v, STATUS_INTERNOS, "Status interno")

    @model_validator(mode="after")
    def _coautoria(self) -> "EmendaCreate":
        if (
            self.valor_segundo_responsavel is not None
            and self.valor_segundo_responsavel > self.valor_total
        ):
            raise ValueError(
                "O valor do segundo responsável não pode exceder o valor total da emenda."
            )
        return self

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "numero_emenda": "202612340001",
                "numero_proposta": "36000.123456/2026-00",
                "tipo": "individual",
                "tipo_recurso": "INCREMENTO_MAC",
                "autor": "DEP. FULANO DE TAL",
                "parlamentar": "Fulano de Tal",
                "valor_total": 100000.0,
                "valor_segundo_responsavel": 25000.0,
                "segundo_parlamentar": "Beltrana Silva",
                "ano_exercicio": 2026,
            }
        }
    )


class EmendaUpdate(BaseModel):
    """Partial update of an amendment (PUT /emendas/{id}).

    Only fields present in the body are written.  The co-author limit and the
    allocated-budget floor are checked against the merged record in the
    service layer.
    """

    numero_emenda: str | None = Field(default=None, max_length=50)
    numero_proposta: str | None = Field(default=None, max_length=50)
    tipo: str | None = None
    tipo_recurso: str | None = None
    origem: str | None = None
    autor: str | None = Field(default=None, min_length=1, max_length=200)
    parlamentar: str | None = Field(default=None, min_length=1, max_length=200)
    segundo_autor: str | None = Field(default=None, max_length=200)
    segundo_parlamentar: str | None = Field(default=None, max_length=200)
    valor_total: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    valor_segundo_responsavel: float | None = Field(
        default=None, ge=0, allow_inf_nan=False
    )
    situacao: str | None = None
    status_interno: str | None = None
    portaria: str | None = Field(default=None, max_length=100)
    deliberacao_cie: str | None = Field(default=None, max_length=100)
    anexos_essenciais: bool | None = None
    ano_exercicio: int | None = Field(default=None, ge=2000, le=2100)
    descricao_completa: str | None = None
    objeto_emenda: str | None = None
    meta_operacional: str | None = None
    observacoes: str | None = None

    @field_validator("tipo")
    @classmethod
    def _tipo(cls, v: str | None) -> str | None:
        return _check_choice(v, TIPOS_EMENDA, "Tipo de emenda")

    @field_validator("tipo_recurso")
    @classmethod
    def _tipo_recurso(cls, v: str | None) -> str | None:
        return _check_choice(v, TIPOS_RECURSO, "Tipo de recurso")

    @field_validator("origem")
    @classmethod
    def _origem(cls, v: str | None) -> str | None:
        return _check_choice(v, ORIGENS, "Origem")

    @field_validator("situacao")
    @classmethod
    def _situacao(cls, v: str | None) -> str | None:
        return _check_choice(v, SITUACOES_OFICIAIS, "Situação oficial")

    @field_validator("status_interno")
    @classmethod
    def _status_interno(cls, v: str | None) -> str | None:
        return _check_choice(v, STATUS_INTERNOS, "Status interno")


class PendenciaDispensaRequest(BaseModel):
    """Dismiss a document-type pending item (POST /emendas/{id}/pendencias/dispensar)."""

    target_id: str = Field(..., description="portaria, cie, proposta ou oficio.")
    justificativa: str | None = Field(default=None, max_length=2000)

    @field_validator("target_id")
    @classmethod
    def _target(cls, v: str) -> str:
        return _check_choice(v, ALVOS_PENDENCIA, "Pendência")


# ---------------------------------------------------------------------------
# Output schemas
# ---------------------------------------------------------------------------


class HistoricoResponse(BaseModel):
    id: int
    evento: str
    detalhe: str | None
    feito_por: str | None
    criado_em: datetime.datetime

    model_config = ConfigDict(from_attributes=True)


class PendenciaDispensadaResponse(BaseModel):
    id: int
    target_id: str
    descricao: str | None
    dispensada: bool
    resolvida: bool
    justificativa: str | None

    model_config = ConfigDict(from_attributes=True)


class EmendaListItem(BaseModel):
    """One row of the amendment list, with derived financial totals.

    Attributes:
        total_repassado: Sum of REPASSADO transfers.
        total_gasto: Sum of all expenses.
        pendencias: Keys of the pending-item buckets the amendment falls in.
    """

    id: int
    numero_emenda: str | None
    tipo: str
    tipo_recurso: str
    autor: str
    parlamentar: str
    valor_total: float
    situacao: str
    status_interno: str
    ano_exercicio: int | None
    portaria: str | None
    deliberacao_cie: str | None
    anexos_essenciais: bool
    total_repassado: float
    total_gasto: float
    pendencias: list[str] = Field(default_factory=list)
    created_at: datetime.datetime


class EmendaTabelaResponse(BaseModel):
    """Paginated wrapper returned by ``GET /api/emendas``."""

    rows: list[EmendaListItem]
    total: int = Field(..., ge=0, description="Total de registros filtrados.")
    page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)


class QuadroDemonstrativo(BaseModel):
    """Financial statement of one amendment.

    Attributes:
        saldo_atual: Received minus spent.
        percentual_execucao: Spent / total × 100 (not capped).
    """

    valor_total: float
    total_repassado: float
    total_gasto: float
    saldo_atual: float
    percentual_execucao: float


class EmendaDetalheResponse(BaseModel):
    """Full amendment detail (GET /emendas/{id})."""

    id: int
    numero_emenda: str | None
    numero_proposta: str | None
    tipo: str
    tipo_recurso: str
    origem: str | None
    autor: str
    parlamentar: str
    segundo_autor: str | None
    segundo_parlamentar: str | None
    valor_total: float
    valor_segundo_responsavel: float | None
    parcela_primeiro_parlamentar: float
    situacao: str
    status_interno: str
    portaria: str | None
    deliberacao_cie: str | None
    anexos_essenciais: bool
    ano_exercicio: int | None
    descricao_completa: str | None
    objeto_emenda: str | None
    meta_operacional: str | None
    observacoes: str | None
    created_at: datetime.datetime
    updated_at: datetime.datetime
    quadro: QuadroDemonstrativo
    pendencias: list[str] = Field(default_factory=list)
    pendencias_dispensadas: list[PendenciaDispensadaResponse] = Field(default_factory=list)
