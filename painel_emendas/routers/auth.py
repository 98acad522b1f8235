"""
Authentication router for the Painel de Emendas API.

Mounts under ``/api/auth`` (prefix set in ``main.py``).

Endpoints:
    POST /login     — Authenticate with username + password, receive JWT.
    POST /refresh   — Exchange a valid token for a new one (extend session).
    GET  /me        — Return the currently authenticated user's profile.
    POST /usuarios  — Create a user (ADMIN only).
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from painel_emendas.database import get_db
from painel_emendas.models.usuario import Usuario
from painel_emendas.schemas.auth import TokenResponse, UserResponse, UsuarioCreate
from painel_emendas.services.auth_service import (
    authenticate_user,
    criar_usuario,
    get_current_user,
    require_role,
)
from painel_emendas.utils.security import emitir_token

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


def _token_para(usuario: Usuario) -> TokenResponse:
    return TokenResponse(access_token=emitir_token(usuario))


# ---------------------------------------------------------------------------
# POST /login
# ---------------------------------------------------------------------------


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Entrar no sistema",
    description=(
        "Autentica o usuário com suas credenciais (formulário OAuth2) e retorna um JWT "
        "válido pelo tempo configurado em ``JWT_EXPIRATION_MINUTES`` (padrão 8 h)."
    ),
    responses={
        200: {"description": "Autenticação bem-sucedida; o token JWT está no corpo."},
        401: {"description": "Credenciais incorretas ou conta inativa."},
    },
)
def login(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: Annotated[Session, Depends(get_db)],
) -> TokenResponse:
    """Authenticate a user and issue a JWT access token.

    Raises:
        HTTPException 401: If credentials are invalid or the account is inactive.
    """
    user = authenticate_user(db, form_data.username, form_data.password)
    if user is None:
        logger.warning("Failed login attempt for username='%s'", form_data.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Credenciais incorretas ou conta inativa",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.info("Successful login for username='%s' perfil='%s'", user.username, user.perfil)
    return _token_para(user)


# ---------------------------------------------------------------------------
# POST /refresh
# ---------------------------------------------------------------------------


@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Renovar token",
    responses={
        200: {"description": "Token renovado."},
        401: {"description": "Token inválido ou expirado."},
    },
)
def refresh_token(
    current_user: Annotated[Usuario, Depends(get_current_user)],
) -> TokenResponse:
    logger.info("Token refreshed for username='%s'", current_user.username)
    return _token_para(current_user)


# ---------------------------------------------------------------------------
# GET /me
# ---------------------------------------------------------------------------


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Perfil do usuário autenticado",
    responses={401: {"description": "Token ausente, inválido ou expirado."}},
)
def get_me(
    current_user: Annotated[Usuario, Depends(get_current_user)],
) -> UserResponse:
    return UserResponse.model_validate(current_user)


# ---------------------------------------------------------------------------
# POST /usuarios
# ---------------------------------------------------------------------------


@router.post(
    "/usuarios",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Criar usuário",
    description="Cadastra um novo usuário. Restrito ao perfil ADMIN.",
    responses={
        201: {"description": "Usuário criado."},
        403: {"description": "Perfil sem permissão."},
        409: {"description": "Nome de usuário ou e-mail já cadastrado."},
    },
)
def post_usuario(
    data: UsuarioCreate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(require_role("ADMIN"))],
) -> UserResponse:
    usuario = criar_usuario(db, data)
    logger.info("POST /auth/usuarios username=%s por=%s", usuario.username, current_user.username)
    return UserResponse.model_validate(usuario)
