"""PendenciaEmenda model — dismissal or resolution of a pending document."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from painel_emendas.database import Base


class PendenciaEmenda(Base):
    """Record that a document-type pending item was dismissed or resolved.

    Attributes:
        id: Primary key.
        emenda_id: FK to Emenda.
        target_id: "portaria", "cie", "proposta" or "oficio".
        descricao: Short description shown in the checklist.
        dispensada: The pending item was waived by a manager.
        resolvida: The pending item was resolved outside the system.
        justificativa: Optional justification text.
    """

    __tablename__ = "pendencias_emendas"

    id = Column(Integer, primary_key=True, autoincrement=True)
    emenda_id = Column(
        Integer, ForeignKey("emendas.id", ondelete="CASCADE"), nullable=False, index=True
    )
    target_id = Column(String(30), nullable=False)
    descricao = Column(String(300), nullable=True)
    dispensada = Column(Boolean, default=False, nullable=False)
    resolvida = Column(Boolean, default=False, nullable=False)
    justificativa = Column(Text, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    emenda = relationship("Emenda", back_populates="pendencias", lazy="select")
