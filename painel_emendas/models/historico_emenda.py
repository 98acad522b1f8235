"""HistoricoEmenda model — audit trail of changes made to an amendment."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from painel_emendas.database import Base


class HistoricoEmenda(Base):
    """One audit-trail entry.

    Attributes:
        id: Primary key.
        emenda_id: FK to Emenda.
        evento: Event code, see ``constants.EVENTO_*``.
        detalhe: Human-readable description of the change.
        feito_por: Username of the author of the change.
        criado_em: Event timestamp.
    """

    __tablename__ = "historico_emendas"

    id = Column(Integer, primary_key=True, autoincrement=True)
    emenda_id = Column(
        Integer, ForeignKey("emendas.id", ondelete="CASCADE"), nullable=False, index=True
    )
    evento = Column(String(50), nullable=False)
    detalhe = Column(Text, nullable=True)
    feito_por = Column(String(100), nullable=True)
    criado_em = Column(DateTime, default=func.now(), nullable=False)

    emenda = relationship("Emenda", back_populates="historico", lazy="select")
