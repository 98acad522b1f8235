"""
Authentication business logic for the Painel de Emendas.

Provides:
- ``authenticate_user`` — credential verification against the DB.
- ``get_current_user`` — FastAPI dependency resolving the Bearer JWT.
- ``require_role`` — dependency factory enforcing profile-based access.
- ``criar_usuario`` / ``garantir_admin`` — user provisioning.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from painel_emendas.config import get_settings
from painel_emendas.database import get_db
from painel_emendas.models.usuario import Usuario
from painel_emendas.schemas.auth import UsuarioCreate
from painel_emendas.services.transacao import transacao
from painel_emendas.utils.security import gerar_hash_senha, ler_token, senha_confere

logger = logging.getLogger(__name__)

# tokenUrl must match the login route (relative to root)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


# ---------------------------------------------------------------------------
# Credential check
# ---------------------------------------------------------------------------


def authenticate_user(db: Session, username: str, password: str) -> Usuario | None:
    """Verify username/password against the database.

    Returns ``None`` (instead of raising) for unknown users, inactive
    accounts and wrong passwords alike, so callers choose the HTTP error.

    Args:
        db: An active SQLAlchemy session.
        username: Login name submitted by the client.
        password: Plain-text password submitted by the client.

    Returns:
        The ``Usuario`` on success, otherwise ``None``.
    """
    user: Usuario | None = (
        db.query(Usuario)
        .filter(Usuario.username == username, Usuario.ativo.is_(True))
        .first()
    )

    if user is None:
        logger.debug("authenticate_user: unknown or inactive user '%s'", username)
        return None

    if not senha_confere(password, user.password_hash):
        logger.debug("authenticate_user: wrong password for user '%s'", username)
        return None

    # Last-access timestamp is informational; a failed write does not block login
    try:
        user.ultimo_acesso = datetime.now(timezone.utc).replace(tzinfo=None)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.warning("Could not update ultimo_acesso for user '%s'", username)

    return user


# ---------------------------------------------------------------------------
# FastAPI dependencies
# ---------------------------------------------------------------------------


def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Annotated[Session, Depends(get_db)],
) -> Usuario:
    """Resolve the caller's identity from the ``Authorization: Bearer`` header.

    Raises:
        HTTPException 401: If the token is invalid or expired, the user no
                           longer exists or was deactivated, or the user's
                           profile changed after the token was issued.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Não foi possível validar as credenciais",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        sessao = ler_token(token)
    except ValueError:
        raise credentials_exception

    user: Usuario | None = (
        db.query(Usuario)
        .filter(Usuario.id == sessao.usuario_id, Usuario.ativo.is_(True))
        .first()
    )
    if user is None:
        raise credentials_exception
    if user.perfil != sessao.perfil:
        logger.info(
            "get_current_user: perfil de '%s' mudou de %s para %s; token recusado",
            user.username, sessao.perfil, user.perfil,
        )
        raise credentials_exception
    return user


def require_role(*perfis: str):
    """Return a dependency that only lets users with one of *perfis* through.

    .. code-block:: python

        @router.post("/emendas")
        def criar(usuario: Usuario = Depends(require_role(*PERFIS_EDICAO))):
            ...

    Raises:
        HTTPException 403: If the user's profile is not allowed.
    """
    permitidos = frozenset(perfis)

    def _check_role(
        current_user: Annotated[Usuario, Depends(get_current_user)],
    ) -> Usuario:
        if current_user.perfil not in permitidos:
            logger.warning(
                "require_role: usuário '%s' (%s) sem permissão",
                current_user.username, current_user.perfil,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Acesso negado. Perfis permitidos: {sorted(permitidos)}",
            )
        return current_user

    return _check_role


# ---------------------------------------------------------------------------
# User provisioning
# ---------------------------------------------------------------------------


def criar_usuario(db: Session, data: UsuarioCreate) -> Usuario:
    """Create a user.

    Raises:
        HTTPException 409: If the username or email is already registered.
    """
    existente = (
        db.query(Usuario.id)
        .filter(or_(Usuario.username == data.username, Usuario.email == data.email))
        .first()
    )
    if existente is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Já existe um usuário com este nome de usuário ou e-mail.",
        )

    usuario = Usuario(
        username=data.username,
        email=data.email,
        password_hash=gerar_hash_senha(data.password),
        nome_completo=data.nome_completo,
        perfil=data.perfil,
        ativo=True,
    )
    with transacao(db, "criar_usuario"):
        db.add(usuario)
    db.refresh(usuario)

    logger.info("criar_usuario: id=%d username=%s perfil=%s", usuario.id, usuario.username, usuario.perfil)
    return usuario


def garantir_admin(db: Session) -> None:
    """Create the configured administrator account if no user has that username."""
    settings = get_settings()
    if db.query(Usuario.id).filter(Usuario.username == settings.ADMIN_USERNAME).first():
        return
    db.add(
        Usuario(
            username=settings.ADMIN_USERNAME,
            email=settings.ADMIN_EMAIL,
            password_hash=gerar_hash_senha(settings.ADMIN_PASSWORD),
            nome_completo="Administrador",
            perfil="ADMIN",
            ativo=True,
        )
    )
    db.commit()
    logger.info("Usuário administrador '%s' criado", settings.ADMIN_USERNAME)
