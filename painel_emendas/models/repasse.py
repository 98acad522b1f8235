"""Repasse model — fund transfer received against an amendment."""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from painel_emendas.database import Base


class Repasse(Base):
    """Fund movement from the source (FNS, state fund) to the secretariat.

    Only ``status == "REPASSADO"`` transfers count as money received.

    Attributes:
        id: Primary key.
        emenda_id: FK to Emenda.
        data: Transfer date.
        valor: Amount in reais.
        fonte: Funding source description.
        status: "REPASSADO", "PENDENTE" or "CANCELADO".
        ordem_bancaria: Bank order number.
        observacoes: Free-form notes.
    """

    __tablename__ = "repasses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    emenda_id = Column(
        Integer, ForeignKey("emendas.id", ondelete="CASCADE"), nullable=False, index=True
    )
    data = Column(Date, nullable=True)
    valor = Column(Numeric(15, 2), nullable=False)
    fonte = Column(String(100), nullable=True)
    status = Column(String(20), nullable=False, default="PENDENTE")
    ordem_bancaria = Column(String(50), nullable=True)
    observacoes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    # Relationships
    emenda = relationship("Emenda", back_populates="repasses", lazy="select")
