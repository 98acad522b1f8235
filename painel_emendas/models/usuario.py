"""Usuario model — application user with profile-based access control."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from painel_emendas.database import Base


class Usuario(Base):
    """System user with a profile that controls what can be changed.

    Profiles:
        - ADMIN: Full access including user management.
        - GESTOR: Creates and edits amendments, planning and finances.
        - ANALISTA: Same write access as GESTOR.
        - CONSULTA: Read-only access.

    Attributes:
        id: Primary key.
        username: Unique login username.
        email: Unique email address.
        password_hash: Bcrypt-hashed password.
        nome_completo: Full display name.
        perfil: Profile code from ``constants.PERFIS``.
        ativo: Whether the account is active.
        ultimo_acesso: Timestamp of the last successful login.
    """

    __tablename__ = "usuarios"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), unique=True, nullable=False)
    email = Column(String(200), unique=True, nullable=False)
    password_hash = Column(String(200), nullable=False)
    nome_completo = Column(String(300), nullable=True)
    perfil = Column(String(20), nullable=False, default="CONSULTA")
    ativo = Column(Boolean, default=True, nullable=False)
    ultimo_acesso = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)
