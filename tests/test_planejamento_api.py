import pytest


def _url(emenda_id, *partes):
    return "/".join([f"/api/emendas/{emenda_id}", *map(str, partes)])


def _acao(valores=None, remover=None, nome="Cirurgias Eletivas"):
    return {
        "nome_acao": nome,
        "area": "Atenção Especializada",
        "valores": valores or {},
        "remover_categorias": remover or [],
    }


def _planejamento(client, headers, emenda_id):
    response = client.get(_url(emenda_id, "planejamento"), headers=headers)
    assert response.status_code == 200
    return response.json()


@pytest.fixture()
def emenda(nova_emenda):
    return nova_emenda(valor_total=100000.0)


@pytest.fixture()
def acao_existente(client, auth_gestor, emenda):
    response = client.post(
        _url(emenda["id"], "acoes"),
        json=_acao({"SERVICOS_TERCEIROS": 20000, "MATERIAL_CONSUMO": 10000}),
        headers=auth_gestor,
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_criar_acao_grava_destinacoes(client, auth_gestor, emenda, acao_existente):
    assert acao_existente["total_planejado"] == 30000.0
    assert {d["tipo_destinacao"] for d in acao_existente["destinacoes"]} == {
        "SERVICOS_TERCEIROS",
        "MATERIAL_CONSUMO",
    }

    plano = _planejamento(client, auth_gestor, emenda["id"])
    assert plano["total_destinado"] == 30000.0
    assert plano["saldo_livre"] == 70000.0
    assert plano["percentual_alocado"] == 30.0


def test_previa_de_saldo_nova_acao(client, auth_consulta, emenda, acao_existente):
    response = client.post(
        _url(emenda["id"], "planejamento", "saldo"),
        json={"valores": {"SERVICOS_TERCEIROS": 40000, "MATERIAL_CONSUMO": 20000}},
        headers=auth_consulta,
    )

    assert response.status_code == 200
    assert response.json() == {
        "disponivel": 70000.0,
        "total_planejado": 60000.0,
        "restante": 10000.0,
        "excede_orcamento": False,
    }


def test_previa_de_saldo_rejeita_valor_negativo(client, auth_consulta, emenda):
    response = client.post(
        _url(emenda["id"], "planejamento", "saldo"),
        json={"valores": {"SERVICOS_TERCEIROS": -50000}},
        headers=auth_consulta,
    )

    assert response.status_code == 422


def test_previa_e_gravacao_rejeitam_as_mesmas_propostas(client, auth_gestor, emenda):
    for valores in ({"SERVICOS_TERCEIROS": -1}, {"EQUIPAMENTOS": 10}):
        previa = client.post(
            _url(emenda["id"], "planejamento", "saldo"),
            json={"valores": valores},
            headers=auth_gestor,
        )
        gravacao = client.post(_url(emenda["id"], "acoes"), json=_acao(valores), headers=auth_gestor)

        assert (previa.status_code, gravacao.status_code) == (422, 422)


@pytest.mark.parametrize("literal", ["Infinity", "-Infinity", "NaN"])
def test_valor_nao_finito_na_acao_rejeitado(client, auth_gestor, emenda, json_bruto, literal):
    corpo = (
        '{"nome_acao": "Cirurgias", "area": "Especializada", '
        f'"valores": {{"SERVICOS_TERCEIROS": {literal}}}}}'
    )

    response = json_bruto("POST", _url(emenda["id"], "acoes"), corpo, auth_gestor)

    assert response.status_code == 422
    assert _planejamento(client, auth_gestor, emenda["id"])["acoes"] == []


@pytest.mark.parametrize("literal", ["Infinity", "NaN"])
def test_valor_nao_finito_na_previa_e_na_destinacao(
    auth_gestor, emenda, acao_existente, json_bruto, literal
):
    previa = json_bruto(
        "POST",
        _url(emenda["id"], "planejamento", "saldo"),
        f'{{"valores": {{"MATERIAL_CONSUMO": {literal}}}}}',
        auth_gestor,
    )
    destinacao = json_bruto(
        "POST",
        _url(emenda["id"], "acoes", acao_existente["id"], "destinacoes"),
        f'{{"tipo_destinacao": "EQUIPAMENTOS", "valor_destinado": {literal}}}',
        auth_gestor,
    )

    assert previa.status_code == 422
    assert destinacao.status_code == 422


def test_acao_acima_do_saldo_rejeitada_sem_gravar(client, auth_gestor, emenda, acao_existente):
    response = client.post(
        _url(emenda["id"], "acoes"),
        json=_acao({"SERVICOS_TERCEIROS": 50000, "MATERIAL_CONSUMO": 30000}, nome="Nova"),
        headers=auth_gestor,
    )

    assert response.status_code == 422
    assert "excede o saldo" in response.json()["detail"]
    plano = _planejamento(client, auth_gestor, emenda["id"])
    assert len(plano["acoes"]) == 1
    assert plano["total_destinado"] == 30000.0


def test_edicao_pode_usar_o_proprio_valor(client, auth_gestor, emenda, acao_existente):
    response = client.put(
        _url(emenda["id"], "acoes", acao_existente["id"]),
        json=_acao({"SERVICOS_TERCEIROS": 90000}),
        headers=auth_gestor,
    )

    assert response.status_code == 200, response.text
    assert response.json()["total_planejado"] == 100000.0


def test_valor_zero_mantem_destinacao_e_remocao_explicita_exclui(
    client, auth_gestor, emenda, acao_existente
):
    url = _url(emenda["id"], "acoes", acao_existente["id"])

    response = client.put(url, json=_acao({"MATERIAL_CONSUMO": 0}), headers=auth_gestor)
    assert response.status_code == 200
    destinacoes = {d["tipo_destinacao"]: d["valor_destinado"] for d in response.json()["destinacoes"]}
    assert destinacoes == {"SERVICOS_TERCEIROS": 20000.0, "MATERIAL_CONSUMO": 0.0}

    response = client.put(url, json=_acao(remover=["MATERIAL_CONSUMO"]), headers=auth_gestor)
    assert response.status_code == 200
    assert [d["tipo_destinacao"] for d in response.json()["destinacoes"]] == ["SERVICOS_TERCEIROS"]


def test_definir_e_remover_mesma_categoria_invalido(client, auth_gestor, emenda, acao_existente):
    response = client.put(
        _url(emenda["id"], "acoes", acao_existente["id"]),
        json=_acao({"MATERIAL_CONSUMO": 10}, remover=["MATERIAL_CONSUMO"]),
        headers=auth_gestor,
    )

    assert response.status_code == 422


def test_destinacao_individual(client, auth_gestor, emenda, acao_existente):
    url = _url(emenda["id"], "acoes", acao_existente["id"], "destinacoes")

    response = client.post(
        url, json={"tipo_destinacao": "EQUIPAMENTOS", "valor_destinado": 70000}, headers=auth_gestor
    )
    assert response.status_code == 201, response.text
    equipamentos = response.json()

    response = client.post(
        url, json={"tipo_destinacao": "OUTROS", "valor_destinado": 0.01}, headers=auth_gestor
    )
    assert response.status_code == 422

    response = client.post(
        url, json={"tipo_destinacao": "EQUIPAMENTOS", "valor_destinado": 1}, headers=auth_gestor
    )
    assert response.status_code == 409

    response = client.put(
        f"{url}/{equipamentos['id']}",
        json={"tipo_destinacao": "EQUIPAMENTOS", "valor_destinado": 60000},
        headers=auth_gestor,
    )
    assert response.status_code == 200
    assert response.json()["valor_destinado"] == 60000.0

    response = client.delete(f"{url}/{equipamentos['id']}", headers=auth_gestor)
    assert response.status_code == 200
    assert _planejamento(client, auth_gestor, emenda["id"])["total_destinado"] == 30000.0


def test_conservacao_apos_sequencia_de_operacoes(client, auth_gestor, emenda, acao_existente):
    emenda_id = emenda["id"]
    operacoes = [
        ("post", _url(emenda_id, "acoes"), _acao({"DISTRIBUICAO_GRATUITA": 50000}, nome="B")),
        ("post", _url(emenda_id, "acoes"), _acao({"SERVICOS_TERCEIROS": 30000}, nome="C")),
        ("put", _url(emenda_id, "acoes", acao_existente["id"]), _acao({"SERVICOS_TERCEIROS": 40000})),
        ("put", _url(emenda_id, "acoes", acao_existente["id"]), _acao(remover=["MATERIAL_CONSUMO"])),
        ("post", _url(emenda_id, "acoes"), _acao({"MATERIAL_CONSUMO": 25000}, nome="D")),
    ]
    for metodo, url, payload in operacoes:
        response = getattr(client, metodo)(url, json=payload, headers=auth_gestor)
        assert response.status_code in (200, 201, 422)
        plano = _planejamento(client, auth_gestor, emenda_id)
        assert plano["total_destinado"] <= plano["valor_total"]


def test_reduzir_valor_total_abaixo_do_destinado(client, auth_gestor, emenda, acao_existente):
    url = f"/api/emendas/{emenda['id']}"

    response = client.put(url, json={"valor_total": 29999.99}, headers=auth_gestor)
    assert response.status_code == 422

    response = client.put(url, json={"valor_total": 30000}, headers=auth_gestor)
    assert response.status_code == 200
    assert response.json()["valor_total"] == 30000.0


def test_excluir_acao_remove_destinacoes(client, auth_gestor, emenda, acao_existente):
    response = client.delete(_url(emenda["id"], "acoes", acao_existente["id"]), headers=auth_gestor)

    assert response.status_code == 200
    plano = _planejamento(client, auth_gestor, emenda["id"])
    assert plano["acoes"] == []
    assert plano["total_destinado"] == 0.0


def test_perfil_consulta_nao_edita(client, auth_consulta, emenda):
    response = client.post(
        _url(emenda["id"], "acoes"), json=_acao({"SERVICOS_TERCEIROS": 1}), headers=auth_consulta
    )

    assert response.status_code == 403


def test_acao_inexistente(client, auth_gestor, emenda):
    response = client.put(
        _url(emenda["id"], "acoes", 999), json=_acao({"SERVICOS_TERCEIROS": 1}), headers=auth_gestor
    )

    assert response.status_code == 404
