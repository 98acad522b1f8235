import io

import pytest
from openpyxl import load_workbook


@pytest.fixture()
def carteira(client, auth_gestor, nova_emenda):
    """Two equipment amendments and one MAC amendment with transfers and expenses."""
    equip_a = nova_emenda(tipo_recurso="EQUIPAMENTO", valor_total=12000.0, autor="DEP. ANA")
    equip_b = nova_emenda(tipo_recurso="EQUIPAMENTO", valor_total=8000.0, autor="DEP. BIA")
    mac = nova_emenda(
        tipo_recurso="INCREMENTO_MAC",
        valor_total=600000.0,
        autor="SEN. CAIO",
        portaria="PRT-9",
        deliberacao_cie="CIE-9",
        anexos_essenciais=True,
    )

    client.post(
        f"/api/emendas/{equip_a['id']}/repasses",
        json={"valor": 5000, "status": "REPASSADO"},
        headers=auth_gestor,
    )
    client.post(
        f"/api/emendas/{equip_b['id']}/despesas",
        json={"valor": 3000, "status_execucao": "LIQUIDADA", "fornecedor_nome": "MedEquip",
              "autorizada_por": "Secretária"},
        headers=auth_gestor,
    )
    client.post(
        f"/api/emendas/{mac['id']}/repasses",
        json={"valor": 100000, "status": "REPASSADO"},
        headers=auth_gestor,
    )
    client.post(
        f"/api/emendas/{mac['id']}/acoes",
        json={"nome_acao": "Cirurgias", "area": "Especializada",
              "valores": {"SERVICOS_TERCEIROS": 250000}},
        headers=auth_gestor,
    )
    return equip_a, equip_b, mac


def test_resumo_financeiro_equipamento(client, auth_consulta, carteira):
    response = client.get("/api/relatorios/resumo-financeiro", headers=auth_consulta)

    assert response.status_code == 200
    grupos = {item["grupo"]: item for item in response.json()}
    assert grupos["Equipamento"]["total"] == 20000.0
    assert grupos["Equipamento"]["pago"] == 8000.0
    assert grupos["Equipamento"]["pendente"] == 12000.0
    assert grupos["Incremento MAC"]["pago"] == 100000.0


def test_resumo_financeiro_respeita_filtros(client, auth_consulta, carteira):
    response = client.get(
        "/api/relatorios/resumo-financeiro", params={"autor": "ana"}, headers=auth_consulta
    )

    grupos = {item["grupo"]: item for item in response.json()}
    assert grupos["Equipamento"]["total"] == 12000.0
    assert grupos["Equipamento"]["pago"] == 5000.0


def test_pendencias_agrupadas(client, auth_consulta, carteira):
    equip_a, equip_b, mac = carteira

    corpo = client.get("/api/relatorios/pendencias", headers=auth_consulta).json()

    buckets = {b["chave"]: {e["id"] for e in b["emendas"]} for b in corpo["buckets"]}
    assert buckets["falta_portaria"] == {equip_a["id"], equip_b["id"]}
    assert buckets["sem_repasses"] == {equip_b["id"]}
    assert buckets["despesas_maior_repasses"] == {equip_b["id"]}
    assert buckets["alto_valor"] == {mac["id"]}
    assert corpo["total_emendas_com_pendencias"] == 2


def test_visao_geral_e_auditoria(client, auth_consulta, carteira):
    visao = client.get("/api/relatorios/visao-geral", headers=auth_consulta).json()
    assert visao["quantidade_emendas"] == 3
    assert visao["valor_total"] == 620000.0
    assert visao["total_repassado"] == 105000.0
    categorias = {c["chave"]: c["valor"] for c in visao["planejado_por_categoria"]}
    assert categorias["SERVICOS_TERCEIROS"] == 250000.0

    auditoria = client.get(
        "/api/relatorios/auditoria", params={"limite": 2}, headers=auth_consulta
    ).json()
    assert len(auditoria["eventos"]) == 2
    assert auditoria["top_acoes"][0]["nome_acao"] == "Cirurgias"
    assert auditoria["top_acoes"][0]["planejado"] == 250000.0


def test_relatorio_de_despesas(client, auth_consulta, carteira):
    corpo = client.get(
        "/api/relatorios/despesas", params={"fornecedor": "medequip"}, headers=auth_consulta
    ).json()

    assert corpo["total"] == 1
    assert corpo["valor_total"] == 3000.0
    assert corpo["rows"][0]["status_execucao"] == "LIQUIDADA"


def test_exportar_emendas_excel(client, auth_consulta, carteira):
    response = client.get(
        "/api/exportar/emendas",
        params={"tipo_recurso": "EQUIPAMENTO", "ordenar_por": "valor_total"},
        headers=auth_consulta,
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert "attachment; filename=" in response.headers["content-disposition"]

    planilha = load_workbook(io.BytesIO(response.content)).active
    autores = [
        linha[1] for linha in planilha.iter_rows(values_only=True) if linha[1] in ("DEP. ANA", "DEP. BIA")
    ]
    assert autores == ["DEP. BIA", "DEP. ANA"]


def test_exportar_campo_de_ordenacao_invalido(client, auth_consulta):
    response = client.get(
        "/api/exportar/emendas", params={"ordenar_por": "senha"}, headers=auth_consulta
    )

    assert response.status_code == 422


def test_visao_geral_top_autores(client, auth_consulta, carteira, nova_emenda):
    nova_emenda(autor="SEN. CAIO", valor_total=50000.0)
    for i in range(10):
        nova_emenda(autor=f"DEP. EXTRA {i:02d}", valor_total=1.0)

    visao = client.get("/api/relatorios/visao-geral", headers=auth_consulta).json()

    autores = visao["por_autor"]
    assert len(autores) == 10
    assert autores[0] == {"chave": "SEN. CAIO", "quantidade": 2, "valor": 650000.0}
    assert [a["chave"] for a in autores[1:3]] == ["DEP. ANA", "DEP. BIA"]
