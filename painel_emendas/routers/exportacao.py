"""
Export router.

Mounts under ``/api/exportar`` (prefix set in ``main.py``).

The amendment list is exported with the same filters and sort order as
``GET /api/emendas`` but without pagination.  The response uses the
``attachment; filename=...`` pattern so that browsers prompt a download.

Endpoints
---------
GET /emendas — Export the filtered amendment list to .xlsx.
"""

from __future__ import annotations

import io
import logging
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from painel_emendas.database import get_db
from painel_emendas.models.usuario import Usuario
from painel_emendas.routers.parametros import filtros_emenda, ordenacao
from painel_emendas.schemas.common import OrdenacaoParams
from painel_emendas.schemas.emenda import EmendaFiltros
from painel_emendas.services import exportacao_service
from painel_emendas.services.auth_service import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Exportação"])

_XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _make_filename(base: str, ext: str) -> str:
    """Build a dated filename, e.g. ``"painel_emendas_2026-03-02.xlsx"``."""
    return f"painel_{base}_{date.today().isoformat()}.{ext}"


@router.get(
    "/emendas",
    summary="Exportar emendas para Excel (.xlsx)",
    description=(
        "Gera uma planilha com cabeçalho, filtros aplicados, indicadores e a tabela de "
        "emendas. Respeita os mesmos filtros e ordenação da listagem."
    ),
    response_class=StreamingResponse,
    responses={
        200: {
            "description": "Arquivo Excel gerado.",
            "content": {_XLSX_MEDIA_TYPE: {}},
        },
        401: {"description": "Token JWT ausente ou inválido."},
        422: {"description": "Campo de ordenação inválido."},
    },
)
def export_emendas(
    filtros: Annotated[EmendaFiltros, Depends(filtros_emenda)],
    ordem: Annotated[OrdenacaoParams, Depends(ordenacao)],
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(get_current_user)],
) -> StreamingResponse:
    """Generate and stream the ``.xlsx`` export of the amendment list.

    Raises:
        HTTPException 422: If the sort field is not sortable.
    """
    logger.info("GET /exportar/emendas por=%s", current_user.username)
    file_bytes = exportacao_service.exportar_emendas_excel(db, filtros, ordem)

    filename = _make_filename("emendas", "xlsx")
    headers = {
        "Content-Disposition": f'attachment; filename="{filename}"',
        "Content-Length": str(len(file_bytes)),
    }
    return StreamingResponse(io.BytesIO(file_bytes), media_type=_XLSX_MEDIA_TYPE, headers=headers)
