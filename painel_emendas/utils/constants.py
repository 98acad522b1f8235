"""
Application-wide constants for the Painel de Emendas system.

Defines domain enumerations, business rule thresholds, and
lookup lists used across routers, services, and models.
"""

from typing import Final

# ---------------------------------------------------------------------------
# User profiles
# ---------------------------------------------------------------------------

PERFIS: Final[list[str]] = [
    "ADMIN",
    "GESTOR",
    "ANALISTA",
    "CONSULTA",
]

# Profiles allowed to create or change amendments and their children
PERFIS_EDICAO: Final[tuple[str, ...]] = ("ADMIN", "GESTOR", "ANALISTA")

# ---------------------------------------------------------------------------
# Amendment classification
# ---------------------------------------------------------------------------

TIPOS_EMENDA: Final[dict[str, str]] = {
    "individual": "Individual",
    "bancada": "Bancada",
    "comissao": "Comissão",
}

TIPOS_RECURSO: Final[dict[str, str]] = {
    "CUSTEIO_MAC": "Custeio MAC",
    "CUSTEIO_PAP": "Custeio PAP",
    "EQUIPAMENTO": "Equipamento",
    "INCREMENTO_MAC": "Incremento MAC",
    "INCREMENTO_PAP": "Incremento PAP",
    "OUTRO": "Outro",
}

ORIGENS: Final[list[str]] = ["FEDERAL", "ESTADUAL"]

SITUACOES_OFICIAIS: Final[dict[str, str]] = {
    "PAGA": "Paga",
    "EMPENHADA_AGUARDANDO_FORMALIZACAO": "Empenhada (Aguardando Formalização)",
    "FAVORAVEL": "Favorável",
    "EM_ANALISE": "Em Análise",
    "LIBERADO_PAGAMENTO_FNS": "Liberado Pagamento FNS",
    "OUTRA": "Outra",
}

STATUS_INTERNOS: Final[dict[str, str]] = {
    "RASCUNHO": "Rascunho",
    "EM_EXECUCAO": "Em Execução",
    "PAGA_SEM_DOCUMENTOS": "Paga (Sem Documentos)",
    "PAGA_COM_PENDENCIAS": "Paga (Com Pendências)",
    "CONCLUIDA": "Concluída",
    "PROPOSTA_PAGA": "Proposta Paga",
    "EM_ANALISE_PAGAMENTO": "Proposta em Análise de Pagamento",
    "APROVADA_PAGAMENTO": "Proposta aprovada para Pagamento",
    "EMPENHADA_AGUARDANDO_FORMALIZACAO": "Proposta Empenhada aguardando Formalização",
    "AUTORIZADA_AGUARDANDO_EMPENHO": "Proposta Autorizada aguardando Empenho",
    "AGUARDANDO_AUTORIZACAO_FNS": "Proposta aguardando autorização do FNS",
    "PORTARIA_PUBLICADA_AGUARDANDO_FNS": "Proposta com Portaria publicada aguardando autorização do FNS",
    "ENVIADA_PUBLICACAO_PORTARIA": "Proposta enviada para publicação de Portaria",
    "PROPOSTA_APROVADA": "Proposta Aprovada",
    "CLASSIFICADA_AGUARDANDO_SECRETARIA": "Proposta Classificada aguardando autorização Secretaria",
}

# ---------------------------------------------------------------------------
# Resource destination categories
# ---------------------------------------------------------------------------

CATEGORIAS_DESTINACAO: Final[dict[str, str]] = {
    "SERVICOS_TERCEIROS": "SERVIÇOS TERCEIROS (PJ)",
    "MATERIAL_CONSUMO": "MATERIAL DE CONSUMO",
    "DISTRIBUICAO_GRATUITA": "DISTRIBUIÇÃO GRATUITA",
    "EQUIPAMENTOS": "EQUIPAMENTOS",
    "OUTROS": "OUTROS",
}

# Categories exposed by the action planning form; anything else on an
# action is fixed from the form's point of view and still consumes budget.
CATEGORIAS_EDITAVEIS_ACAO: Final[frozenset[str]] = frozenset({
    "SERVICOS_TERCEIROS",
    "MATERIAL_CONSUMO",
    "DISTRIBUICAO_GRATUITA",
})

COMPLEXIDADE_PADRAO: Final[str] = "Média"

# ---------------------------------------------------------------------------
# Transfers and expenses
# ---------------------------------------------------------------------------

STATUS_REPASSE: Final[list[str]] = ["REPASSADO", "PENDENTE", "CANCELADO"]
STATUS_REPASSE_PAGO: Final[str] = "REPASSADO"

STATUS_EXECUCAO_DESPESA: Final[list[str]] = [
    "PLANEJADA",
    "EMPENHADA",
    "LIQUIDADA",
    "PAGA",
]

# Expense statuses that count as money already settled
STATUS_DESPESA_LIQUIDADA: Final[frozenset[str]] = frozenset({"LIQUIDADA", "PAGA"})

# ---------------------------------------------------------------------------
# Financial summary groups (dashboard cards)
# ---------------------------------------------------------------------------

GRUPOS_RESUMO_FINANCEIRO: Final[dict[str, frozenset[str]]] = {
    "Incremento MAC": frozenset({"INCREMENTO_MAC"}),
    "Incremento PAP": frozenset({"INCREMENTO_PAP"}),
    "Equipamento": frozenset({"EQUIPAMENTO"}),
}

# Groups whose "paid" amount also draws from settled expenses
GRUPOS_PAGAMENTO_POR_DESPESA: Final[frozenset[str]] = frozenset({"Equipamento"})

# ---------------------------------------------------------------------------
# Pending items
# ---------------------------------------------------------------------------

# Dismissible document targets
ALVOS_PENDENCIA: Final[dict[str, str]] = {
    "portaria": "Portaria",
    "cie": "Deliberação CIE",
    "proposta": "Proposta",
    "oficio": "Ofício",
}

PENDENCIAS: Final[dict[str, str]] = {
    "falta_portaria": "Falta Portaria",
    "falta_deliberacao_cie": "Falta Deliberação CIE",
    "sem_anexos_essenciais": "Sem Anexos Essenciais",
    "sem_repasses": "Sem Repasses",
    "despesas_sem_autorizacao": "Despesas sem autorização",
    "despesas_maior_repasses": "Despesas > Repasses",
}

ALTO_VALOR: Final[str] = "alto_valor"

# ---------------------------------------------------------------------------
# History events
# ---------------------------------------------------------------------------

EVENTO_CRIACAO: Final[str] = "CRIACAO"
EVENTO_ATUALIZACAO: Final[str] = "ATUALIZACAO"
EVENTO_STATUS_INTERNO: Final[str] = "INTERNAL_STATUS_CHANGE"
EVENTO_PLANEJAMENTO: Final[str] = "PLANEJAMENTO"
EVENTO_REPASSE: Final[str] = "REPASSE"
EVENTO_DESPESA: Final[str] = "DESPESA"
EVENTO_PENDENCIA: Final[str] = "PENDENCIA_DISPENSADA"

# ---------------------------------------------------------------------------
# Sorting
# ---------------------------------------------------------------------------

CAMPOS_ORDENACAO_EMENDAS: Final[frozenset[str]] = frozenset({
    "numero_emenda",
    "autor",
    "parlamentar",
    "valor_total",
    "situacao",
    "status_interno",
    "ano_exercicio",
    "created_at",
    "total_repassado",
    "total_gasto",
})
