from decimal import Decimal

import pytest

from painel_emendas.models.acao_emenda import AcaoEmenda
from painel_emendas.models.despesa import Despesa
from painel_emendas.models.destinacao_recurso import DestinacaoRecurso
from painel_emendas.models.emenda import Emenda
from painel_emendas.services.saldo_service import (
    calcular_saldo,
    calcular_saldo_acao,
    executado_por_destinacao,
    parcela_primeiro_parlamentar,
    total_destinado,
    validar_destinacao,
)


def _destinacao(id_, categoria, valor):
    return DestinacaoRecurso(id=id_, tipo_destinacao=categoria, valor_destinado=Decimal(valor))


@pytest.fixture()
def emenda():
    """valor_total 100000 with one action planned at 30000."""
    existente = AcaoEmenda(
        id=1,
        nome_acao="Cirurgias Eletivas",
        area="Atenção Especializada",
        destinacoes=[
            _destinacao(1, "SERVICOS_TERCEIROS", "20000"),
            _destinacao(2, "MATERIAL_CONSUMO", "10000"),
        ],
    )
    return Emenda(id=1, valor_total=Decimal("100000"), acoes=[existente])


def test_nova_acao_dentro_do_saldo(emenda):
    saldo = calcular_saldo_acao(
        emenda, {"SERVICOS_TERCEIROS": 40000, "MATERIAL_CONSUMO": 20000}
    )

    assert saldo.disponivel == Decimal("70000")
    assert saldo.total_planejado == Decimal("60000")
    assert saldo.restante == Decimal("10000")
    assert saldo.excede_orcamento is False


def test_nova_acao_acima_do_saldo(emenda):
    saldo = calcular_saldo_acao(
        emenda, {"SERVICOS_TERCEIROS": 50000, "MATERIAL_CONSUMO": 30000}
    )

    assert saldo.total_planejado == Decimal("80000")
    assert saldo.restante == Decimal("-10000")
    assert saldo.excede_orcamento is True


def test_restante_zero_nao_excede(emenda):
    saldo = calcular_saldo_acao(emenda, {"SERVICOS_TERCEIROS": 70000})

    assert saldo.restante == Decimal("0")
    assert saldo.excede_orcamento is False


def test_edicao_devolve_apenas_categorias_tocadas(emenda):
    acao = emenda.acoes[0]
    acao.destinacoes.append(_destinacao(3, "EQUIPAMENTOS", "5000"))

    saldo = calcular_saldo_acao(emenda, {"SERVICOS_TERCEIROS": 60000}, acao_editada=acao)

    # MATERIAL_CONSUMO (10000) and EQUIPAMENTOS (5000) stay allocated
    assert saldo.disponivel == Decimal("85000")
    assert saldo.restante == Decimal("25000")


def test_edicao_com_remocao_libera_categoria(emenda):
    acao = emenda.acoes[0]

    saldo = calcular_saldo_acao(
        emenda,
        {"SERVICOS_TERCEIROS": 90000},
        acao_editada=acao,
        categorias_removidas=["MATERIAL_CONSUMO"],
    )

    assert saldo.disponivel == Decimal("100000")
    assert saldo.excede_orcamento is False


def test_categoria_nao_editavel_rejeitada(emenda):
    with pytest.raises(ValueError):
        calcular_saldo_acao(emenda, {"EQUIPAMENTOS": 1000})


def test_destinacao_individual_exclui_a_editada(emenda):
    saldo = validar_destinacao(emenda, 90000, destinacao_id=1)

    assert saldo.disponivel == Decimal("90000")
    assert saldo.excede_orcamento is False

    saldo = validar_destinacao(emenda, 90000.01, destinacao_id=1)
    assert saldo.excede_orcamento is True


def test_destinacao_nova_soma_todas(emenda):
    saldo = validar_destinacao(emenda, 70000.01)

    assert saldo.excede_orcamento is True


def test_pontos_de_entrada_concordam(emenda):
    """Whole-action form and single-destination dialog agree on the same proposal."""
    acao = emenda.acoes[0]
    pelo_formulario = calcular_saldo_acao(
        emenda, {"SERVICOS_TERCEIROS": 45000}, acao_editada=acao
    )
    pelo_dialogo = validar_destinacao(emenda, 45000, destinacao_id=1)

    assert pelo_formulario == pelo_dialogo


def test_calcular_saldo_sem_destinacoes():
    saldo = calcular_saldo(1000, [], [250, 250.5])

    assert saldo.disponivel == Decimal("1000.00")
    assert saldo.total_planejado == Decimal("500.50")
    assert saldo.restante == Decimal("499.50")


def test_total_destinado_ignora_acoes_sem_destinacoes(emenda):
    emenda.acoes.append(AcaoEmenda(id=2, nome_acao="Vazia", area="Atenção Básica"))

    assert total_destinado(emenda.acoes) == Decimal("30000")


def test_executado_por_destinacao_ignora_despesas_sem_vinculo():
    despesas = [
        Despesa(id=1, destinacao_id=1, valor=Decimal("100")),
        Despesa(id=2, destinacao_id=1, valor=Decimal("50.25")),
        Despesa(id=3, destinacao_id=None, valor=Decimal("999")),
    ]

    assert executado_por_destinacao(despesas) == {1: Decimal("150.25")}


@pytest.mark.parametrize(
    ("segundo", "esperado"),
    [(25000, Decimal("75000")), (100000, Decimal("0")), (None, Decimal("100000"))],
)
def test_parcela_primeiro_parlamentar(segundo, esperado):
    assert parcela_primeiro_parlamentar(100000, segundo) == esperado


def test_parcela_acima_do_total_rejeitada():
    with pytest.raises(ValueError):
        parcela_primeiro_parlamentar(100000, 100000.01)
