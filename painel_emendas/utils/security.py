"""
Password hashing and session tokens for the Painel de Emendas.

Tokens carry the user id (``sub``), the username and the ``perfil`` the user
had when the token was issued.  ``get_current_user`` compares that profile
with the stored one, so a profile change invalidates older sessions.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, NamedTuple

import bcrypt
from jose import JWTError, jwt

from painel_emendas.config import get_settings
from painel_emendas.utils.constants import PERFIS

logger = logging.getLogger(__name__)


class SessaoToken(NamedTuple):
    """Claims of a verified access token."""

    usuario_id: int
    username: str
    perfil: str


# ---------------------------------------------------------------------------
# Senhas
# ---------------------------------------------------------------------------


def gerar_hash_senha(senha: str) -> str:
    return bcrypt.hashpw(senha.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def senha_confere(senha: str, senha_hash: str) -> bool:
    try:
        return bcrypt.checkpw(senha.encode("utf-8"), senha_hash.encode("utf-8"))
    except ValueError:
        logger.warning("senha_confere: hash bcrypt malformado no banco")
        return False


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------


def emitir_token(usuario: Any) -> str:
    """Sign an access token for *usuario*.

    Args:
        usuario: Object exposing ``id``, ``username`` and ``perfil``.

    Returns:
        A compact JWT that expires after ``JWT_EXPIRATION_MINUTES``.
    """
    settings = get_settings()
    agora = datetime.now(timezone.utc)
    claims = {
        "sub": str(usuario.id),
        "username": usuario.username,
        "perfil": usuario.perfil,
        "iat": agora,
        "exp": agora + timedelta(minutes=settings.JWT_EXPIRATION_MINUTES),
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def ler_token(token: str) -> SessaoToken:
    """Verify *token* and return its session claims.

    Raises:
        ValueError: Bad signature, expired token, or claims that do not
                    describe a user of this system.
    """
    settings = get_settings()
    try:
        claims = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as exc:
        logger.debug("ler_token: %s", exc)
        raise ValueError("Token inválido ou expirado") from exc

    try:
        usuario_id = int(claims["sub"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError("Token sem identificação de usuário") from exc

    perfil = claims.get("perfil")
    if perfil not in PERFIS:
        raise ValueError(f"Perfil desconhecido no token: {perfil!r}")

    return SessaoToken(usuario_id, claims.get("username") or "", perfil)
