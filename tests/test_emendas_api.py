import pytest


def test_criar_emenda_calcula_parcela_e_historico(client, auth_gestor, nova_emenda):
    emenda = nova_emenda(
        valor_total=100000.0,
        valor_segundo_responsavel=25000.0,
        segundo_parlamentar="Beltrana Silva",
    )

    assert emenda["parcela_primeiro_parlamentar"] == 75000.0
    assert emenda["quadro"]["total_repassado"] == 0.0
    assert "sem_repasses" in emenda["pendencias"]

    historico = client.get(f"/api/emendas/{emenda['id']}/historico", headers=auth_gestor).json()
    assert [h["evento"] for h in historico] == ["CRIACAO"]
    assert historico[0]["feito_por"] == "gestor"


def test_coautor_igual_ao_total_resulta_em_zero(nova_emenda):
    emenda = nova_emenda(valor_total=100000.0, valor_segundo_responsavel=100000.0)

    assert emenda["parcela_primeiro_parlamentar"] == 0.0


def test_coautor_acima_do_total_rejeitado(client, auth_gestor, nova_emenda):
    payload = {
        "tipo_recurso": "INCREMENTO_MAC",
        "autor": "DEP. X",
        "parlamentar": "X",
        "valor_total": 1000.0,
        "valor_segundo_responsavel": 1000.01,
    }
    assert client.post("/api/emendas", json=payload, headers=auth_gestor).status_code == 422

    emenda = nova_emenda(valor_total=1000.0)
    response = client.put(
        f"/api/emendas/{emenda['id']}",
        json={"valor_segundo_responsavel": 1500.0},
        headers=auth_gestor,
    )
    assert response.status_code == 422


@pytest.mark.parametrize("literal", ["Infinity", "NaN"])
def test_valor_total_nao_finito_rejeitado(client, auth_gestor, auth_consulta, json_bruto, literal):
    corpo = (
        '{"tipo_recurso": "INCREMENTO_MAC", "autor": "DEP. X", "parlamentar": "X", '
        f'"valor_total": {literal}}}'
    )

    response = json_bruto("POST", "/api/emendas", corpo, auth_gestor)

    assert response.status_code == 422
    assert client.get("/api/emendas", headers=auth_consulta).json()["total"] == 0


@pytest.mark.parametrize("campo", ["valor_total", "valor_segundo_responsavel"])
def test_atualizacao_com_valor_nao_finito_rejeitada(
    client, auth_gestor, nova_emenda, json_bruto, campo
):
    emenda = nova_emenda(valor_total=1000.0)

    response = json_bruto(
        "PUT", f"/api/emendas/{emenda['id']}", f'{{"{campo}": Infinity}}', auth_gestor
    )

    assert response.status_code == 422
    detalhe = client.get(f"/api/emendas/{emenda['id']}", headers=auth_gestor).json()
    assert detalhe["valor_total"] == 1000.0


def test_tipo_recurso_invalido(client, auth_gestor):
    payload = {"tipo_recurso": "XYZ", "autor": "A", "parlamentar": "B", "valor_total": 10}

    assert client.post("/api/emendas", json=payload, headers=auth_gestor).status_code == 422


def test_listagem_filtra_ordena_e_pagina(client, auth_consulta, nova_emenda):
    nova_emenda(autor="DEP. ANA", parlamentar="Ana", valor_total=300.0)
    nova_emenda(autor="DEP. BRUNO", parlamentar="Bruno", valor_total=100.0)
    nova_emenda(autor="DEP. ANABELA", parlamentar="Anabela", valor_total=200.0)

    response = client.get(
        "/api/emendas",
        params={"autor": "ana", "ordenar_por": "valor_total", "direcao": "asc", "page_size": 1},
        headers=auth_consulta,
    )

    assert response.status_code == 200
    corpo = response.json()
    assert corpo["total"] == 2
    assert corpo["page_size"] == 1
    assert [r["autor"] for r in corpo["rows"]] == ["DEP. ANABELA"]

    segunda = client.get(
        "/api/emendas",
        params={"autor": "ana", "ordenar_por": "valor_total", "page": 2, "page_size": 1},
        headers=auth_consulta,
    ).json()
    assert [r["autor"] for r in segunda["rows"]] == ["DEP. ANA"]


def test_listagem_tamanho_padrao_de_pagina(client, auth_consulta, nova_emenda):
    for i in range(12):
        nova_emenda(autor=f"DEP. {i}", parlamentar=f"P{i}")

    corpo = client.get("/api/emendas", headers=auth_consulta).json()

    assert corpo["total"] == 12
    assert len(corpo["rows"]) == 10


def test_listagem_campo_de_ordenacao_invalido(client, auth_consulta):
    response = client.get(
        "/api/emendas", params={"ordenar_por": "password_hash"}, headers=auth_consulta
    )

    assert response.status_code == 422


def test_atualizar_status_interno_registra_evento(client, auth_gestor, nova_emenda):
    emenda = nova_emenda()

    response = client.put(
        f"/api/emendas/{emenda['id']}",
        json={"status_interno": "EM_EXECUCAO", "portaria": "PRT-123"},
        headers=auth_gestor,
    )

    assert response.status_code == 200
    assert response.json()["status_interno"] == "EM_EXECUCAO"
    assert "falta_portaria" not in response.json()["pendencias"]
    eventos = {
        h["evento"]
        for h in client.get(f"/api/emendas/{emenda['id']}/historico", headers=auth_gestor).json()
    }
    assert {"CRIACAO", "INTERNAL_STATUS_CHANGE", "ATUALIZACAO"} <= eventos


def test_campo_obrigatorio_nulo_rejeitado(client, auth_gestor, nova_emenda):
    emenda = nova_emenda()

    response = client.put(
        f"/api/emendas/{emenda['id']}", json={"autor": None}, headers=auth_gestor
    )

    assert response.status_code == 422


def test_dispensar_pendencia(client, auth_gestor, nova_emenda):
    emenda = nova_emenda()
    assert "falta_portaria" in emenda["pendencias"]

    response = client.post(
        f"/api/emendas/{emenda['id']}/pendencias/dispensar",
        json={"target_id": "portaria", "justificativa": "Portaria dispensada pela SES"},
        headers=auth_gestor,
    )
    assert response.status_code == 200
    assert response.json()["dispensada"] is True

    detalhe = client.get(f"/api/emendas/{emenda['id']}", headers=auth_gestor).json()
    assert "falta_portaria" not in detalhe["pendencias"]
    assert [p["target_id"] for p in detalhe["pendencias_dispensadas"]] == ["portaria"]


def test_dispensar_alvo_invalido(client, auth_gestor, nova_emenda):
    emenda = nova_emenda()

    response = client.post(
        f"/api/emendas/{emenda['id']}/pendencias/dispensar",
        json={"target_id": "repasse"},
        headers=auth_gestor,
    )

    assert response.status_code == 422


def test_emenda_inexistente(client, auth_consulta):
    assert client.get("/api/emendas/999", headers=auth_consulta).status_code == 404


def test_sem_token(client):
    assert client.get("/api/emendas").status_code == 401


def test_filtro_de_valor_nao_finito_rejeitado(client, auth_consulta):
    response = client.get("/api/emendas", params={"valor_max": "inf"}, headers=auth_consulta)

    assert response.status_code == 422
