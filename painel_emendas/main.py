import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from painel_emendas.config import get_settings

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def _preparar_banco() -> None:
    """Create missing tables and make sure the administrator account exists."""
    from sqlalchemy.exc import SQLAlchemyError

    import painel_emendas.models  # noqa: F401
    from painel_emendas.database import Base, SessionLocal, engine
    from painel_emendas.services.auth_service import garantir_admin

    try:
        Base.metadata.create_all(bind=engine)
        db = SessionLocal()
        try:
            garantir_admin(db)
        finally:
            db.close()
    except SQLAlchemyError:
        logger.exception("Falha ao preparar o banco de dados na inicialização")
        raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    _preparar_banco()
    logger.info("%s iniciado", settings.APP_NAME)
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get(f"{settings.API_PREFIX}/health")
def health_check():
    return {"status": "ok", "app": settings.APP_NAME}


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

from painel_emendas.routers import auth  # noqa: E402

app.include_router(auth.router, prefix=f"{settings.API_PREFIX}/auth", tags=["Auth"])

# Cadastro e consulta de emendas
from painel_emendas.routers import emendas  # noqa: E402

app.include_router(emendas.router, prefix=f"{settings.API_PREFIX}/emendas", tags=["Emendas"])

# Planejamento: ações e destinações
from painel_emendas.routers import planejamento  # noqa: E402

app.include_router(
    planejamento.router,
    prefix=f"{settings.API_PREFIX}/emendas",
    tags=["Planejamento"],
)

# Execução financeira: repasses e despesas
from painel_emendas.routers import financeiro  # noqa: E402

app.include_router(
    financeiro.router,
    prefix=f"{settings.API_PREFIX}/emendas",
    tags=["Financeiro"],
)

# Relatórios e painéis
from painel_emendas.routers import relatorios  # noqa: E402

app.include_router(
    relatorios.router,
    prefix=f"{settings.API_PREFIX}/relatorios",
    tags=["Relatórios"],
)

# Exportação (Excel)
from painel_emendas.routers import exportacao  # noqa: E402

app.include_router(
    exportacao.router,
    prefix=f"{settings.API_PREFIX}/exportar",
    tags=["Exportação"],
)
