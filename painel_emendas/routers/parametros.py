"""
Query-parameter dependencies shared by the list, report and export routers.

Each function assembles a schema instance from URL query strings so that
the filter state is validated once and bookmark-friendly links work the
same on every endpoint.
"""

from __future__ import annotations

import datetime
from typing import Annotated, Literal

from fastapi import Query

from painel_emendas.config import get_settings
from painel_emendas.schemas.common import OrdenacaoParams, PaginationParams
from painel_emendas.schemas.emenda import EmendaFiltros
from painel_emendas.schemas.relatorio import DespesaFiltros


def filtros_emenda(
    autor: Annotated[
        str | None,
        Query(description="Trecho do autor ou parlamentar (sem diferenciar maiúsculas).", max_length=200),
    ] = None,
    tipo: Annotated[str | None, Query(description="individual, bancada ou comissao.")] = None,
    tipo_recurso: Annotated[str | None, Query(description="Tipo de recurso, ex. EQUIPAMENTO.")] = None,
    situacao: Annotated[str | None, Query(description="Situação oficial.")] = None,
    status_interno: Annotated[str | None, Query(description="Status interno.")] = None,
    ano_exercicio: Annotated[int | None, Query(ge=2000, le=2100)] = None,
    data_inicio: Annotated[datetime.date | None, Query(description="Criada a partir de (AAAA-MM-DD).")] = None,
    data_fim: Annotated[datetime.date | None, Query(description="Criada até (inclusive).")] = None,
    valor_min: Annotated[float | None, Query(ge=0, allow_inf_nan=False)] = None,
    valor_max: Annotated[float | None, Query(ge=0, allow_inf_nan=False)] = None,
    com_portaria: bool = False,
    com_cie: bool = False,
    com_anexos: bool = False,
    com_repasses: bool = False,
    sem_portaria: bool = False,
    sem_cie: bool = False,
    sem_anexos: bool = False,
    sem_repasses: bool = False,
    com_despesas_nao_autorizadas: bool = False,
    despesas_maior_repasses: bool = False,
    apenas_pendencias: Annotated[
        bool, Query(description="Somente emendas com ao menos uma pendência.")
    ] = False,
) -> EmendaFiltros:
    """Assemble an ``EmendaFiltros`` from URL query parameters."""
    return EmendaFiltros(
        autor=autor,
        tipo=tipo,
        tipo_recurso=tipo_recurso,
        situacao=situacao,
        status_interno=status_interno,
        ano_exercicio=ano_exercicio,
        data_inicio=data_inicio,
        data_fim=data_fim,
        valor_min=valor_min,
        valor_max=valor_max,
        com_portaria=com_portaria,
        com_cie=com_cie,
        com_anexos=com_anexos,
        com_repasses=com_repasses,
        sem_portaria=sem_portaria,
        sem_cie=sem_cie,
        sem_anexos=sem_anexos,
        sem_repasses=sem_repasses,
        com_despesas_nao_autorizadas=com_despesas_nao_autorizadas,
        despesas_maior_repasses=despesas_maior_repasses,
        apenas_pendencias=apenas_pendencias,
    )


def ordenacao(
    ordenar_por: Annotated[
        str | None,
        Query(description="Campo de ordenação, ex. valor_total. Omitir mantém a ordem padrão."),
    ] = None,
    direcao: Annotated[Literal["asc", "desc"], Query(description="asc ou desc.")] = "asc",
) -> OrdenacaoParams:
    return OrdenacaoParams(campo=ordenar_por, direcao=direcao)


def paginacao(
    page: Annotated[int, Query(description="Página (base 1).", ge=1)] = 1,
    page_size: Annotated[
        int | None, Query(description="Registros por página (máx. 200).", ge=1, le=200)
    ] = None,
) -> PaginationParams:
    """Pagination with the configured default page size (``PAGE_SIZE_EMENDAS``)."""
    return PaginationParams(
        page=page,
        page_size=page_size if page_size is not None else get_settings().PAGE_SIZE_EMENDAS,
    )


def filtros_despesa(
    responsavel: Annotated[str | None, Query(description="Trecho do responsável pela execução.")] = None,
    unidade: Annotated[str | None, Query(description="Trecho da unidade de destino.")] = None,
    demanda: Annotated[str | None, Query(description="Trecho da demanda.")] = None,
    fornecedor: Annotated[str | None, Query(description="Trecho do fornecedor.")] = None,
    status_execucao: Annotated[str | None, Query(description="Status de execução.")] = None,
) -> DespesaFiltros:
    return DespesaFiltros(
        responsavel=responsavel,
        unidade=unidade,
        demanda=demanda,
        fornecedor=fornecedor,
        status_execucao=status_execucao,
    )
