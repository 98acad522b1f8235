"""
Excel export helper wrapping xlsxwriter.

``PlanilhaEmendas`` builds a styled workbook in memory and returns its bytes
for streaming through FastAPI's ``StreamingResponse``.

Usage example::

    planilha = PlanilhaEmendas("Emendas 2026", filtros={"Ano": "2026"})
    planilha.add_cabecalho()
    planilha.add_indicadores({"Emendas": 12, "Valor total": 1_250_000.0})
    planilha.add_tabela(colunas, linhas, colunas_monetarias={5, 6, 7})
    conteudo = planilha.finalize()

Design notes
------------
- In-memory workbook (``BytesIO``); nothing touches the filesystem.
- Money cells use the Brazilian real format ``R$ #,##0.00``; Excel renders
  the separators according to the reader's locale.
- Column widths follow the longest value in each column, capped at 60.
"""

from __future__ import annotations

import io
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

import xlsxwriter

_COR_PRIMARIA = "#0F766E"
_COR_ESCURA = "#134E4A"
_COR_CLARA = "#F0FDFA"
_COR_ZEBRA = "#F3F4F6"
_COR_BORDA = "#E5E7EB"
_COR_TEXTO = "#111827"

_FORMATO_BRL = '"R$" #,##0.00'
_LARGURA_MAXIMA = 60
_LARGURA_MINIMA = 8


class PlanilhaEmendas:
    """Single-sheet workbook: title block, applied filters, indicators and a table.

    Args:
        titulo: Title shown in the first row.
        filtros: Applied filters, ``{rótulo: valor}``, listed under the title.
        nome_aba: Worksheet tab name.
    """

    def __init__(
        self,
        titulo: str,
        filtros: dict[str, str] | None = None,
        nome_aba: str = "Emendas",
    ) -> None:
        self._titulo = titulo
        self._filtros = filtros or {}
        self._buffer = io.BytesIO()
        self._workbook = xlsxwriter.Workbook(self._buffer, {"in_memory": True})
        self._ws = self._workbook.add_worksheet(nome_aba)
        self._linha = 0
        self._largura_cabecalho = 8
        self._fmt = self._criar_formatos()

    def _criar_formatos(self) -> dict[str, Any]:
        celula = {"font_size": 9, "font_color": _COR_TEXTO, "valign": "vcenter",
                  "border": 1, "border_color": _COR_BORDA}
        add = self._workbook.add_format
        return {
            "titulo": add({"bold": True, "font_size": 15, "font_color": "#FFFFFF",
                           "bg_color": _COR_PRIMARIA, "align": "center", "valign": "vcenter"}),
            "subtitulo": add({"font_size": 9, "font_color": "#FFFFFF",
                              "bg_color": _COR_ESCURA, "align": "center"}),
            "filtro_rotulo": add({"bold": True, "font_size": 9, "bg_color": "#E5E7EB",
                                  "align": "right"}),
            "filtro_valor": add({"font_size": 9, "bg_color": "#F9FAFB"}),
            "indicador_rotulo": add({"bold": True, "font_size": 10, "bg_color": _COR_CLARA,
                                     "align": "center", "border": 1, "border_color": "#99F6E4"}),
            "indicador_valor": add({"bold": True, "font_size": 12, "font_color": _COR_PRIMARIA,
                                    "bg_color": _COR_CLARA, "align": "center", "border": 1,
                                    "border_color": "#99F6E4", "num_format": _FORMATO_BRL}),
            "indicador_inteiro": add({"bold": True, "font_size": 12, "font_color": _COR_PRIMARIA,
                                      "bg_color": _COR_CLARA, "align": "center", "border": 1,
                                      "border_color": "#99F6E4"}),
            "coluna": add({"bold": True, "font_size": 10, "font_color": "#FFFFFF",
                           "bg_color": _COR_ESCURA, "align": "center", "valign": "vcenter",
                           "border": 1, "text_wrap": True}),
            "texto": add({**celula, "bg_color": "#FFFFFF"}),
            "texto_zebra": add({**celula, "bg_color": _COR_ZEBRA}),
            "moeda": add({**celula, "bg_color": "#FFFFFF", "align": "right",
                          "num_format": _FORMATO_BRL}),
            "moeda_zebra": add({**celula, "bg_color": _COR_ZEBRA, "align": "right",
                                "num_format": _FORMATO_BRL}),
        }

    # -----------------------------------------------------------------------
    # Builder methods
    # -----------------------------------------------------------------------

    def add_cabecalho(self, colunas: int = 8) -> "PlanilhaEmendas":
        """Write the title, the generation timestamp and one row per filter."""
        self._largura_cabecalho = max(colunas, 2)
        ultima = self._largura_cabecalho - 1
        ws = self._ws

        ws.set_row(self._linha, 30)
        ws.merge_range(self._linha, 0, self._linha, ultima,
                       f"Painel de Emendas - {self._titulo}", self._fmt["titulo"])
        self._linha += 1

        gerado = datetime.now(timezone.utc).strftime("%d/%m/%Y %H:%M UTC")
        ws.merge_range(self._linha, 0, self._linha, ultima,
                       f"Gerado em {gerado}", self._fmt["subtitulo"])
        self._linha += 1

        for rotulo, valor in self._filtros.items():
            ws.write(self._linha, 0, rotulo, self._fmt["filtro_rotulo"])
            ws.merge_range(self._linha, 1, self._linha, ultima, valor, self._fmt["filtro_valor"])
            self._linha += 1

        self._linha += 1
        return self

    def add_indicadores(self, indicadores: dict[str, Any]) -> "PlanilhaEmendas":
        """Write label/value pairs side by side; floats get the money format."""
        for coluna, (rotulo, valor) in enumerate(indicadores.items()):
            self._ws.write(self._linha, coluna, rotulo, self._fmt["indicador_rotulo"])
            formato = "indicador_valor" if isinstance(valor, float) else "indicador_inteiro"
            self._ws.write(self._linha + 1, coluna, valor, self._fmt[formato])
        self._ws.set_row(self._linha + 1, 22)
        self._linha += 3
        return self

    def add_tabela(
        self,
        colunas: Sequence[str],
        linhas: Sequence[Sequence[Any]],
        colunas_monetarias: set[int] | None = None,
    ) -> "PlanilhaEmendas":
        """Write the data table with zebra shading.

        Args:
            colunas: Header labels.
            linhas: Rows, each as long as *colunas*.
            colunas_monetarias: Zero-based indices written with the money format.
        """
        monetarias = colunas_monetarias or set()
        larguras = [len(c) for c in colunas]

        self._ws.set_row(self._linha, 20)
        for indice, coluna in enumerate(colunas):
            self._ws.write(self._linha, indice, coluna, self._fmt["coluna"])
        self._linha += 1

        for numero, linha in enumerate(linhas):
            zebra = "_zebra" if numero % 2 else ""
            for indice, valor in enumerate(linha):
                base = "moeda" if indice in monetarias else "texto"
                self._ws.write(self._linha, indice, valor, self._fmt[base + zebra])
                texto = "" if valor is None else str(valor)
                larguras[indice] = min(_LARGURA_MAXIMA, max(larguras[indice], len(texto)))
            self._linha += 1

        for indice, largura in enumerate(larguras):
            self._ws.set_column(indice, indice, max(largura + 2, _LARGURA_MINIMA))
        self._ws.freeze_panes(self._linha - len(linhas), 0)
        return self

    def finalize(self) -> bytes:
        """Close the workbook and return the ``.xlsx`` bytes. The instance is spent afterwards."""
        self._workbook.close()
        self._buffer.seek(0)
        return self._buffer.read()
