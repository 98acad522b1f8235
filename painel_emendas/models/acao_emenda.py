"""AcaoEmenda model — planning action ("eixo/ação") under an amendment."""

from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from painel_emendas.database import Base


class AcaoEmenda(Base):
    """Named sub-program that groups the planned spending of an amendment.

    Deleting an action deletes all of its resource destinations.

    Attributes:
        id: Primary key.
        emenda_id: FK to Emenda.
        nome_acao: Action name, e.g. "Cirurgias Eletivas".
        area: Responsible area, e.g. "Atenção Especializada".
        descricao_oficial: Official technical description.
        complexidade: Complexity label (default "Média").
        publico_alvo: Target population.
    """

    __tablename__ = "acoes_emendas"

    id = Column(Integer, primary_key=True, autoincrement=True)
    emenda_id = Column(
        Integer, ForeignKey("emendas.id", ondelete="CASCADE"), nullable=False, index=True
    )
    nome_acao = Column(String(300), nullable=False)
    area = Column(String(200), nullable=False)
    descricao_oficial = Column(Text, nullable=True)
    complexidade = Column(String(50), nullable=True)
    publico_alvo = Column(String(300), nullable=True)

    # Relationships
    emenda = relationship("Emenda", back_populates="acoes", lazy="select")
    destinacoes = relationship(
        "DestinacaoRecurso",
        back_populates="acao",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="DestinacaoRecurso.id",
    )
