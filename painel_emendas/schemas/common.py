"""
Shared Pydantic v2 schemas reused across multiple modules.

Provides generic pagination, sorting, and message response models so that
each domain module can compose them without duplicating field definitions.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class PaginationParams(BaseModel):
    """Pagination parameters for list endpoints.

    Attributes:
        page: 1-based page number.
        page_size: Number of rows per page (capped at 200).
    """

    page: int = Field(
        default=1,
        ge=1,
        description="Número da página (base 1).",
    )
    page_size: int = Field(
        default=10,
        ge=1,
        le=200,
        description="Registros por página (máximo 200).",
    )


class OrdenacaoParams(BaseModel):
    """Single-key sort applied after filtering.

    Attributes:
        campo: Attribute to sort by; ``None`` keeps the input order.
        direcao: ``"asc"`` or ``"desc"``.
    """

    campo: str | None = Field(
        default=None,
        description="Campo de ordenação. None = ordem original.",
    )
    direcao: Literal["asc", "desc"] = Field(
        default="asc",
        description="Direção da ordenação.",
    )


class MessageResponse(BaseModel):
    """Generic message envelope for operations that do not return a resource.

    Attributes:
        message: Short human-readable result summary.
        detail: Optional extended information.
    """

    message: str = Field(..., description="Resumo do resultado da operação.")
    detail: str | None = Field(
        default=None,
        description="Informação adicional (contexto, sugestão, etc.).",
    )
