"""
Pydantic v2 schemas for the authentication endpoints.

Covers the login request payload, the JWT token response, the public user
representation returned by ``GET /api/auth/me`` and the user-creation
payload accepted by ``POST /api/auth/usuarios``.
"""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from painel_emendas.utils.constants import PERFIS


class LoginRequest(BaseModel):
    """Payload accepted by ``POST /api/auth/login``.

    Attributes:
        username: The user's unique login name.
        password: Plain-text password (transmitted over HTTPS only).
    """

    username: str = Field(
        ...,
        min_length=3,
        max_length=100,
        description="Nome de usuário único do sistema",
    )
    password: str = Field(
        ...,
        min_length=6,
        max_length=128,
        description="Senha em texto puro (somente sobre HTTPS)",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "username": "msilva",
                "password": "segredo1234",
            }
        }
    )


class TokenResponse(BaseModel):
    """Response body returned after a successful authentication.

    Attributes:
        access_token: Signed JWT string to be sent in the
                      ``Authorization: Bearer <token>`` header.
        token_type: Always ``"bearer"`` per OAuth2 convention.
    """

    access_token: str = Field(..., description="JWT de acesso assinado com HS256")
    token_type: str = Field(default="bearer", description="Tipo de token OAuth2")


class UserResponse(BaseModel):
    """Public representation of a user; ``password_hash`` is never exposed."""

    id: int
    username: str
    email: str
    nome_completo: str | None
    perfil: str
    ativo: bool
    ultimo_acesso: datetime.datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class UsuarioCreate(BaseModel):
    """Payload for ``POST /api/auth/usuarios`` (ADMIN only)."""

    username: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    nome_completo: str | None = Field(default=None, max_length=300)
    perfil: str = Field(default="CONSULTA", description="ADMIN, GESTOR, ANALISTA ou CONSULTA.")

    @field_validator("perfil")
    @classmethod
    def _perfil(cls, v: str) -> str:
        if v not in PERFIS:
            raise ValueError(f"Perfil inválido: '{v}'. Permitidos: {PERFIS}.")
        return v
