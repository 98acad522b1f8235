from decimal import Decimal

from painel_emendas.models.acao_emenda import AcaoEmenda
from painel_emendas.models.despesa import Despesa
from painel_emendas.models.destinacao_recurso import DestinacaoRecurso
from painel_emendas.models.emenda import Emenda
from painel_emendas.models.repasse import Repasse
from painel_emendas.services.resumo_service import (
    consolidar_por,
    despesas_por_status,
    planejado_por_categoria,
    planejado_vs_executado,
    resumo_financeiro,
)


def _por_grupo(itens):
    return {item.grupo: item for item in itens}


def test_equipamento_soma_repasses_e_despesas_liquidadas():
    emendas = [
        Emenda(id=1, tipo_recurso="EQUIPAMENTO", valor_total=Decimal("12000")),
        Emenda(id=2, tipo_recurso="EQUIPAMENTO", valor_total=Decimal("8000")),
    ]
    repasses = [Repasse(emenda_id=1, valor=Decimal("5000"), status="REPASSADO")]
    despesas = [Despesa(emenda_id=2, valor=Decimal("3000"), status_execucao="LIQUIDADA")]

    equipamento = _por_grupo(resumo_financeiro(emendas, repasses, despesas))["Equipamento"]

    assert equipamento.total == 20000.0
    assert equipamento.pago == 8000.0
    assert equipamento.pendente == 12000.0
    assert equipamento.quantidade == 2


def test_grupos_sem_despesa_contam_apenas_repasses_pagos():
    emendas = [
        Emenda(id=1, tipo_recurso="INCREMENTO_MAC", valor_total=Decimal("10000")),
        Emenda(id=2, tipo_recurso="INCREMENTO_PAP", valor_total=Decimal("4000")),
    ]
    repasses = [
        Repasse(emenda_id=1, valor=Decimal("2500"), status="REPASSADO"),
        Repasse(emenda_id=1, valor=Decimal("1000"), status="PENDENTE"),
    ]
    despesas = [Despesa(emenda_id=1, valor=Decimal("9000"), status_execucao="PAGA")]

    grupos = _por_grupo(resumo_financeiro(emendas, repasses, despesas))

    assert grupos["Incremento MAC"].pago == 2500.0
    assert grupos["Incremento MAC"].pendente == 7500.0
    assert grupos["Incremento PAP"].pago == 0.0
    assert grupos["Equipamento"].total == 0.0
    assert list(grupos) == ["Incremento MAC", "Incremento PAP", "Equipamento"]


def test_despesas_nao_liquidadas_nao_contam_como_pagas():
    emendas = [Emenda(id=1, tipo_recurso="EQUIPAMENTO", valor_total=Decimal("1000"))]
    despesas = [
        Despesa(emenda_id=1, valor=Decimal("300"), status_execucao="EMPENHADA"),
        Despesa(emenda_id=1, valor=Decimal("200"), status_execucao="PAGA"),
    ]

    equipamento = _por_grupo(resumo_financeiro(emendas, [], despesas))["Equipamento"]

    assert equipamento.pago == 200.0


def test_consolidar_por_ordena_por_valor():
    emendas = [
        Emenda(id=1, situacao="PAGA", valor_total=Decimal("100")),
        Emenda(id=2, situacao="EM_ANALISE", valor_total=Decimal("500")),
        Emenda(id=3, situacao="PAGA", valor_total=Decimal("50")),
    ]

    grupos = consolidar_por(emendas, "situacao")

    assert [(g.chave, g.quantidade, g.valor) for g in grupos] == [
        ("EM_ANALISE", 1, 500.0),
        ("PAGA", 2, 150.0),
    ]


def test_despesas_por_status_inclui_status_vazios():
    grupos = despesas_por_status(
        [Despesa(valor=Decimal("10"), status_execucao="PAGA")]
    )

    assert [g.chave for g in grupos] == ["PLANEJADA", "EMPENHADA", "LIQUIDADA", "PAGA"]
    assert grupos[-1].valor == 10.0
    assert grupos[0].quantidade == 0


def test_planejado_por_categoria_e_comparativo():
    acao_a = AcaoEmenda(
        id=1,
        emenda_id=1,
        nome_acao="Cirurgias",
        area="Especializada",
        destinacoes=[
            DestinacaoRecurso(id=1, tipo_destinacao="SERVICOS_TERCEIROS", valor_destinado=Decimal("4000")),
            DestinacaoRecurso(id=2, tipo_destinacao="MATERIAL_CONSUMO", valor_destinado=Decimal("1000")),
        ],
    )
    acao_b = AcaoEmenda(
        id=2,
        emenda_id=1,
        nome_acao="Vacinação",
        area="Básica",
        destinacoes=[
            DestinacaoRecurso(id=3, tipo_destinacao="SERVICOS_TERCEIROS", valor_destinado=Decimal("8000")),
        ],
    )
    despesas = [Despesa(destinacao_id=1, valor=Decimal("2500"))]

    categorias = {g.chave: g for g in planejado_por_categoria([acao_a, acao_b])}
    assert categorias["SERVICOS_TERCEIROS"].valor == 12000.0
    assert categorias["SERVICOS_TERCEIROS"].quantidade == 2
    assert categorias["EQUIPAMENTOS"].valor == 0.0

    comparativo = planejado_vs_executado([acao_a, acao_b], despesas, limite=1)
    assert len(comparativo) == 1
    assert comparativo[0].acao_id == 2

    comparativo = planejado_vs_executado([acao_a, acao_b], despesas)
    cirurgias = next(c for c in comparativo if c.acao_id == 1)
    assert cirurgias.planejado == 5000.0
    assert cirurgias.executado == 2500.0
    assert cirurgias.percentual_execucao == 50.0
