"""
Export service layer.

Builds the ``.xlsx`` export of the amendment list from the same filter and
sort pipeline the list endpoint uses, so an export always matches what the
user sees on screen (without pagination).
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from painel_emendas.exporters.excel_exporter import PlanilhaEmendas
from painel_emendas.schemas.common import OrdenacaoParams
from painel_emendas.schemas.emenda import EmendaFiltros
from painel_emendas.services import filtro_service
from painel_emendas.services.emenda_service import carregar_emendas
from painel_emendas.utils.constants import (
    PENDENCIAS,
    SITUACOES_OFICIAIS,
    STATUS_INTERNOS,
    TIPOS_RECURSO,
)
from painel_emendas.utils.money import somar, to_decimal

logger = logging.getLogger(__name__)

_COLUNAS = [
    "Nº Emenda",
    "Autor",
    "Parlamentar",
    "Tipo de Recurso",
    "Situação",
    "Status Interno",
    "Valor Total",
    "Total Repassado",
    "Total Gasto",
    "Pendências",
]
_COLUNAS_MONETARIAS = {6, 7, 8}


def _rotulos_filtros(filtros: EmendaFiltros) -> dict[str, str]:
    """Human-readable list of the active filters for the sheet header."""
    rotulos: dict[str, str] = {}
    for campo, valor in filtros.model_dump(exclude_defaults=True).items():
        rotulo = campo.replace("_", " ").capitalize()
        rotulos[rotulo] = "Sim" if valor is True else str(valor)
    return rotulos or {"Filtros": "Nenhum"}


def _linha(emenda: Any) -> list[Any]:
    return [
        emenda.numero_emenda or "",
        emenda.autor,
        emenda.parlamentar,
        TIPOS_RECURSO.get(emenda.tipo_recurso, emenda.tipo_recurso),
        SITUACOES_OFICIAIS.get(emenda.situacao, emenda.situacao),
        STATUS_INTERNOS.get(emenda.status_interno, emenda.status_interno),
        float(to_decimal(emenda.valor_total)),
        float(filtro_service.total_repassado(emenda)),
        float(filtro_service.total_gasto(emenda)),
        ", ".join(PENDENCIAS[c] for c in filtro_service.pendencias_da_emenda(emenda)),
    ]


def exportar_emendas_excel(
    db: Session, filtros: EmendaFiltros, ordenacao: OrdenacaoParams
) -> bytes:
    """Return the bytes of an ``.xlsx`` with every amendment matching *filtros*.

    Raises:
        HTTPException 422: If the sort field is not sortable.
    """
    emendas = filtro_service.filtrar_emendas(carregar_emendas(db), filtros)
    try:
        emendas = filtro_service.ordenar_emendas(emendas, ordenacao.campo, ordenacao.direcao)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc

    indicadores = {
        "Emendas": len(emendas),
        "Valor total": float(somar(e.valor_total for e in emendas)),
        "Total repassado": float(somar(filtro_service.total_repassado(e) for e in emendas)),
        "Total gasto": float(somar(filtro_service.total_gasto(e) for e in emendas)),
    }

    planilha = PlanilhaEmendas("Emendas Parlamentares", filtros=_rotulos_filtros(filtros))
    planilha.add_cabecalho(colunas=len(_COLUNAS))
    planilha.add_indicadores(indicadores)
    planilha.add_tabela(_COLUNAS, [_linha(e) for e in emendas], _COLUNAS_MONETARIAS)
    conteudo = planilha.finalize()

    logger.info("exportar_emendas_excel: %d emendas, %d bytes", len(emendas), len(conteudo))
    return conteudo
