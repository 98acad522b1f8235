"""DestinacaoRecurso model — categorised monetary allocation of an action."""

from sqlalchemy import Column, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from painel_emendas.database import Base


class DestinacaoRecurso(Base):
    """Resource destination: part of an action's budget assigned to a category.

    The sum of ``valor_destinado`` over every destination of every action of
    an amendment never exceeds ``Emenda.valor_total``; the check lives in
    ``planejamento_service``.

    Attributes:
        id: Primary key.
        acao_id: FK to AcaoEmenda.
        tipo_destinacao: Category key from ``constants.CATEGORIAS_DESTINACAO``.
        valor_destinado: Allocated value in reais (zero is a valid allocation).
        grupo_despesa: Expense group label.
        subtipo: Free-form subtype.
        portaria_vinculada: Ordinance linked to this allocation.
        observacao_tecnica: Technical note.
    """

    __tablename__ = "destinacoes_recursos"

    id = Column(Integer, primary_key=True, autoincrement=True)
    acao_id = Column(
        Integer, ForeignKey("acoes_emendas.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tipo_destinacao = Column(String(40), nullable=False)
    valor_destinado = Column(Numeric(15, 2), default=0, nullable=False)
    grupo_despesa = Column(String(100), nullable=True)
    subtipo = Column(String(100), nullable=True)
    portaria_vinculada = Column(String(100), nullable=True)
    observacao_tecnica = Column(Text, nullable=True)

    # Relationships
    acao = relationship("AcaoEmenda", back_populates="destinacoes", lazy="select")
    despesas = relationship("Despesa", back_populates="destinacao", lazy="select")
