import pytest


@pytest.fixture()
def emenda(nova_emenda):
    return nova_emenda(tipo_recurso="EQUIPAMENTO", valor_total=20000.0)


def _repasse(client, headers, emenda_id, valor, status="REPASSADO"):
    response = client.post(
        f"/api/emendas/{emenda_id}/repasses",
        json={"valor": valor, "status": status, "data": "2026-03-15", "fonte": "FNS"},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


def _despesa(client, headers, emenda_id, valor, **campos):
    payload = {"valor": valor, "data": "2026-04-02", **campos}
    response = client.post(f"/api/emendas/{emenda_id}/despesas", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_repasse_pendente_nao_conta_como_recebido(client, auth_gestor, emenda):
    _repasse(client, auth_gestor, emenda["id"], 5000)
    pendente = _repasse(client, auth_gestor, emenda["id"], 2000, status="PENDENTE")

    detalhe = client.get(f"/api/emendas/{emenda['id']}", headers=auth_gestor).json()
    assert detalhe["quadro"]["total_repassado"] == 5000.0

    response = client.put(
        f"/api/emendas/{emenda['id']}/repasses/{pendente['id']}",
        json={"status": "REPASSADO"},
        headers=auth_gestor,
    )
    assert response.status_code == 200
    detalhe = client.get(f"/api/emendas/{emenda['id']}", headers=auth_gestor).json()
    assert detalhe["quadro"]["total_repassado"] == 7000.0


def test_status_de_repasse_invalido(client, auth_gestor, emenda):
    response = client.post(
        f"/api/emendas/{emenda['id']}/repasses",
        json={"valor": 10, "status": "PAGO"},
        headers=auth_gestor,
    )

    assert response.status_code == 422


def test_despesa_registrada_pelo_usuario_e_status(client, auth_gestor, emenda):
    despesa = _despesa(client, auth_gestor, emenda["id"], 3000, descricao="Monitor")
    assert despesa["registrada_por"] == "gestor"
    assert despesa["status_execucao"] == "PLANEJADA"

    response = client.patch(
        f"/api/emendas/{emenda['id']}/despesas/{despesa['id']}/status",
        json={"status_execucao": "LIQUIDADA"},
        headers=auth_gestor,
    )
    assert response.status_code == 200
    assert response.json()["status_execucao"] == "LIQUIDADA"

    listadas = client.get(f"/api/emendas/{emenda['id']}/despesas", headers=auth_gestor).json()
    assert [d["id"] for d in listadas] == [despesa["id"]]


def test_despesa_vinculada_a_destinacao(client, auth_gestor, emenda, nova_emenda):
    acao = client.post(
        f"/api/emendas/{emenda['id']}/acoes",
        json={"nome_acao": "Equipar UBS", "area": "Atenção Básica",
              "valores": {"MATERIAL_CONSUMO": 4000}},
        headers=auth_gestor,
    ).json()
    destinacao_id = acao["destinacoes"][0]["id"]

    _despesa(client, auth_gestor, emenda["id"], 1500, destinacao_id=destinacao_id)

    plano = client.get(f"/api/emendas/{emenda['id']}/planejamento", headers=auth_gestor).json()
    assert plano["acoes"][0]["destinacoes"][0]["valor_executado"] == 1500.0
    assert plano["acoes"][0]["total_executado"] == 1500.0

    outra = nova_emenda()
    response = client.post(
        f"/api/emendas/{outra['id']}/despesas",
        json={"valor": 10, "destinacao_id": destinacao_id},
        headers=auth_gestor,
    )
    assert response.status_code == 422


def test_excluir_destinacao_mantem_despesa_sem_vinculo(client, auth_gestor, emenda):
    acao = client.post(
        f"/api/emendas/{emenda['id']}/acoes",
        json={"nome_acao": "Equipar UBS", "area": "Atenção Básica",
              "valores": {"MATERIAL_CONSUMO": 4000}},
        headers=auth_gestor,
    ).json()
    destinacao_id = acao["destinacoes"][0]["id"]
    despesa = _despesa(client, auth_gestor, emenda["id"], 100, destinacao_id=destinacao_id)

    response = client.delete(
        f"/api/emendas/{emenda['id']}/acoes/{acao['id']}/destinacoes/{destinacao_id}",
        headers=auth_gestor,
    )
    assert response.status_code == 200

    listadas = client.get(f"/api/emendas/{emenda['id']}/despesas", headers=auth_gestor).json()
    assert [(d["id"], d["destinacao_id"]) for d in listadas] == [(despesa["id"], None)]


def test_excluir_repasse_e_despesa(client, auth_gestor, emenda):
    repasse = _repasse(client, auth_gestor, emenda["id"], 100)
    despesa = _despesa(client, auth_gestor, emenda["id"], 50)

    assert client.delete(
        f"/api/emendas/{emenda['id']}/repasses/{repasse['id']}", headers=auth_gestor
    ).status_code == 200
    assert client.delete(
        f"/api/emendas/{emenda['id']}/despesas/{despesa['id']}", headers=auth_gestor
    ).status_code == 200
    assert client.get(f"/api/emendas/{emenda['id']}/repasses", headers=auth_gestor).json() == []

    eventos = [
        h["evento"]
        for h in client.get(f"/api/emendas/{emenda['id']}/historico", headers=auth_gestor).json()
    ]
    assert eventos.count("REPASSE") == 2
    assert eventos.count("DESPESA") == 2


def test_repasse_de_outra_emenda_nao_encontrado(client, auth_gestor, emenda, nova_emenda):
    repasse = _repasse(client, auth_gestor, emenda["id"], 100)
    outra = nova_emenda()

    response = client.put(
        f"/api/emendas/{outra['id']}/repasses/{repasse['id']}",
        json={"valor": 1},
        headers=auth_gestor,
    )

    assert response.status_code == 404


@pytest.mark.parametrize(
    "recurso, corpo",
    [
        ("repasses", '{"valor": Infinity, "status": "REPASSADO"}'),
        ("repasses", '{"valor": NaN}'),
        ("despesas", '{"valor": Infinity}'),
        ("despesas", '{"valor": NaN, "status_execucao": "PAGA"}'),
    ],
)
def test_valor_nao_finito_rejeitado(client, auth_gestor, emenda, json_bruto, recurso, corpo):
    url = f"/api/emendas/{emenda['id']}/{recurso}"

    response = json_bruto("POST", url, corpo, auth_gestor)

    assert response.status_code == 422
    assert client.get(url, headers=auth_gestor).json() == []


def test_edicao_de_despesa_com_valor_infinito_rejeitada(client, auth_gestor, emenda, json_bruto):
    despesa = _despesa(client, auth_gestor, emenda["id"], 50)
    url = f"/api/emendas/{emenda['id']}/despesas/{despesa['id']}"

    response = json_bruto("PUT", url, '{"valor": Infinity}', auth_gestor)

    assert response.status_code == 422
    listadas = client.get(f"/api/emendas/{emenda['id']}/despesas", headers=auth_gestor).json()
    assert listadas[0]["valor"] == 50.0
