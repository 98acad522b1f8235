"""Despesa model — expenditure executed with amendment resources."""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from painel_emendas.database import Base


class Despesa(Base):
    """Actual expenditure, optionally linked to the destination it executes.

    Attributes:
        id: Primary key.
        emenda_id: FK to Emenda.
        destinacao_id: Optional FK to DestinacaoRecurso.
        data: Expense date.
        valor: Amount in reais.
        categoria: Expense category label.
        descricao: Description of the purchase or service.
        registrada_por: Who recorded the expense.
        autorizada_por: Who authorised it (``None`` = unauthorised).
        responsavel_execucao: Person responsible for execution.
        unidade_destino: Health unit receiving the goods/services.
        fornecedor_nome: Supplier name.
        status_execucao: "PLANEJADA", "EMPENHADA", "LIQUIDADA" or "PAGA".
        demanda: Originating demand.
    """

    __tablename__ = "despesas"

    id = Column(Integer, primary_key=True, autoincrement=True)
    emenda_id = Column(
        Integer, ForeignKey("emendas.id", ondelete="CASCADE"), nullable=False, index=True
    )
    destinacao_id = Column(
        Integer, ForeignKey("destinacoes_recursos.id", ondelete="SET NULL"), nullable=True
    )
    data = Column(Date, nullable=True)
    valor = Column(Numeric(15, 2), nullable=False)
    categoria = Column(String(100), nullable=True)
    descricao = Column(Text, nullable=True)
    registrada_por = Column(String(200), nullable=True)
    autorizada_por = Column(String(200), nullable=True)
    responsavel_execucao = Column(String(200), nullable=True)
    unidade_destino = Column(String(200), nullable=True)
    fornecedor_nome = Column(String(300), nullable=True)
    status_execucao = Column(String(20), nullable=False, default="PLANEJADA")
    demanda = Column(String(300), nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    # Relationships
    emenda = relationship("Emenda", back_populates="despesas", lazy="select")
    destinacao = relationship("DestinacaoRecurso", back_populates="despesas", lazy="select")
