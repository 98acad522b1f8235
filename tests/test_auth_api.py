from datetime import datetime, timedelta, timezone

from jose import jwt

from painel_emendas.config import get_settings
from painel_emendas.models.usuario import Usuario
from painel_emendas.services.auth_service import garantir_admin
from painel_emendas.utils.security import ler_token


def test_login_e_perfil(client, gestor):
    response = client.post("/api/auth/login", data={"username": "gestor", "password": "senha123"})

    assert response.status_code == 200
    token = response.json()["access_token"]
    assert response.json()["token_type"] == "bearer"

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["perfil"] == "GESTOR"
    assert me.json()["ultimo_acesso"] is not None
    assert "password_hash" not in me.json()


def test_login_senha_errada(client, gestor):
    response = client.post("/api/auth/login", data={"username": "gestor", "password": "errada"})

    assert response.status_code == 401


def test_usuario_inativo_nao_entra(client, db, gestor):
    gestor.ativo = False
    db.commit()

    response = client.post("/api/auth/login", data={"username": "gestor", "password": "senha123"})

    assert response.status_code == 401


def test_token_invalido(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer invalido"})

    assert response.status_code == 401


def test_refresh(client, auth_gestor):
    response = client.post("/api/auth/refresh", headers=auth_gestor)

    assert response.status_code == 200
    assert response.json()["access_token"]


def test_admin_cria_usuario(client, auth_admin):
    payload = {
        "username": "analista1",
        "email": "analista1@saude.gov.br",
        "password": "segredo1",
        "perfil": "ANALISTA",
    }

    response = client.post("/api/auth/usuarios", json=payload, headers=auth_admin)
    assert response.status_code == 201
    assert response.json()["perfil"] == "ANALISTA"

    repetido = client.post("/api/auth/usuarios", json=payload, headers=auth_admin)
    assert repetido.status_code == 409


def test_somente_admin_cria_usuario(client, auth_gestor):
    payload = {"username": "outro", "email": "outro@saude.gov.br", "password": "segredo1"}

    response = client.post("/api/auth/usuarios", json=payload, headers=auth_gestor)

    assert response.status_code == 403


def test_garantir_admin_idempotente(db):
    garantir_admin(db)
    garantir_admin(db)

    username = get_settings().ADMIN_USERNAME
    assert db.query(Usuario).filter(Usuario.username == username).count() == 1


def test_health(client):
    assert client.get("/api/health").json()["status"] == "ok"


def test_token_anterior_a_mudanca_de_perfil_recusado(client, db, gestor, auth_gestor):
    assert client.get("/api/auth/me", headers=auth_gestor).status_code == 200

    gestor.perfil = "CONSULTA"
    db.commit()

    assert client.get("/api/auth/me", headers=auth_gestor).status_code == 401


def test_token_sem_perfil_recusado(client, gestor):
    settings = get_settings()
    token = jwt.encode(
        {"sub": str(gestor.id), "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )

    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_token_carrega_perfil_do_usuario(client, gestor):
    token = client.post(
        "/api/auth/login", data={"username": "gestor", "password": "senha123"}
    ).json()["access_token"]

    sessao = ler_token(token)

    assert sessao == (gestor.id, "gestor", "GESTOR")
