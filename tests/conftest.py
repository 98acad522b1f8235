"""Shared fixtures: in-memory SQLite database, API client and users per profile."""

import os

os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import painel_emendas.models  # noqa: F401
from painel_emendas.database import Base, get_db
from painel_emendas.main import app
from painel_emendas.models.usuario import Usuario
from painel_emendas.utils.security import emitir_token, gerar_hash_senha

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db):
    def _override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _criar_usuario(db, username: str, perfil: str) -> Usuario:
    usuario = Usuario(
        username=username,
        email=f"{username}@saude.gov.br",
        password_hash=gerar_hash_senha("senha123"),
        nome_completo=username.title(),
        perfil=perfil,
        ativo=True,
    )
    db.add(usuario)
    db.commit()
    db.refresh(usuario)
    return usuario


def _headers(usuario: Usuario) -> dict[str, str]:
    return {"Authorization": f"Bearer {emitir_token(usuario)}"}


@pytest.fixture()
def gestor(db):
    return _criar_usuario(db, "gestor", "GESTOR")


@pytest.fixture()
def auth_gestor(gestor):
    return _headers(gestor)


@pytest.fixture()
def auth_consulta(db):
    return _headers(_criar_usuario(db, "consulta", "CONSULTA"))


@pytest.fixture()
def auth_admin(db):
    return _headers(_criar_usuario(db, "admin", "ADMIN"))


@pytest.fixture()
def nova_emenda(client, auth_gestor):
    """Factory that creates an amendment through the API and returns its JSON."""

    def _nova(**campos):
        payload = {
            "tipo_recurso": "INCREMENTO_MAC",
            "autor": "DEP. FULANO DE TAL",
            "parlamentar": "Fulano de Tal",
            "valor_total": 100000.0,
        }
        payload.update(campos)
        response = client.post("/api/emendas", json=payload, headers=auth_gestor)
        assert response.status_code == 201, response.text
        return response.json()

    return _nova


@pytest.fixture()
def json_bruto(client):
    """Send a JSON body as literal text (e.g. with ``Infinity`` or ``NaN`` tokens)."""

    def _enviar(metodo, url, corpo, headers):
        return client.request(
            metodo, url, content=corpo, headers={**headers, "Content-Type": "application/json"}
        )

    return _enviar
