"""Emenda model — parliamentary budget amendment destined to the health secretariat."""

from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from painel_emendas.database import Base


class Emenda(Base):
    """Parliamentary amendment: the root monetary entity of the system.

    The total value may be split with a co-author; the first parliamentarian's
    share is always ``valor_total - valor_segundo_responsavel``.  Amendments
    are never physically deleted through the API.

    Attributes:
        id: Primary key.
        numero_emenda: Official amendment number.
        numero_proposta: Ministry of Health proposal number.
        tipo: "individual", "bancada" or "comissao".
        tipo_recurso: Resource type, see ``constants.TIPOS_RECURSO``.
        origem: "FEDERAL" or "ESTADUAL".
        autor: Author as registered in the official system.
        parlamentar: Responsible parliamentarian.
        segundo_autor: Optional co-author.
        segundo_parlamentar: Optional co-author parliamentarian.
        valor_total: Total amendment value in reais.
        valor_segundo_responsavel: Share assigned to the co-author.
        situacao: Official status, see ``constants.SITUACOES_OFICIAIS``.
        status_interno: Internal workflow status.
        portaria: Ordinance number, ``None`` while not published.
        deliberacao_cie: CIE deliberation number, ``None`` while missing.
        anexos_essenciais: Whether the essential attachments were received.
        ano_exercicio: Fiscal year.
    """

    __tablename__ = "emendas"

    id = Column(Integer, primary_key=True, autoincrement=True)
    numero_emenda = Column(String(50), nullable=True)
    numero_proposta = Column(String(50), nullable=True)
    tipo = Column(String(20), nullable=False, default="individual")
    tipo_recurso = Column(String(30), nullable=False)
    origem = Column(String(20), nullable=True, default="FEDERAL")
    autor = Column(String(200), nullable=False)
    parlamentar = Column(String(200), nullable=False)
    segundo_autor = Column(String(200), nullable=True)
    segundo_parlamentar = Column(String(200), nullable=True)
    valor_total = Column(Numeric(15, 2), default=0, nullable=False)
    valor_segundo_responsavel = Column(Numeric(15, 2), nullable=True)
    situacao = Column(String(50), nullable=False, default="EM_ANALISE")
    status_interno = Column(String(60), nullable=False, default="RASCUNHO")
    portaria = Column(String(100), nullable=True)
    deliberacao_cie = Column(String(100), nullable=True)
    anexos_essenciais = Column(Boolean, default=False, nullable=False)
    ano_exercicio = Column(Integer, nullable=True)
    descricao_completa = Column(Text, nullable=True)
    objeto_emenda = Column(Text, nullable=True)
    meta_operacional = Column(Text, nullable=True)
    observacoes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    acoes = relationship(
        "AcaoEmenda",
        back_populates="emenda",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="AcaoEmenda.id",
    )
    repasses = relationship(
        "Repasse",
        back_populates="emenda",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="Repasse.id",
    )
    despesas = relationship(
        "Despesa",
        back_populates="emenda",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="Despesa.id",
    )
    historico = relationship(
        "HistoricoEmenda",
        back_populates="emenda",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="HistoricoEmenda.id.desc()",
    )
    pendencias = relationship(
        "PendenciaEmenda",
        back_populates="emenda",
        lazy="select",
        cascade="all, delete-orphan",
    )
