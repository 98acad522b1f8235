"""SQLAlchemy models package for the Painel de Emendas.

Importing all models here ensures that SQLAlchemy's mapper registry is
populated before ``Base.metadata.create_all()`` runs.  The import order
follows the foreign-key dependency graph so that parent tables are always
registered before their children.

Usage from other modules:
    from painel_emendas.models import Emenda, AcaoEmenda
"""

# Root entity
from painel_emendas.models.emenda import Emenda  # noqa: F401

# Planning chain
from painel_emendas.models.acao_emenda import AcaoEmenda  # noqa: F401
from painel_emendas.models.destinacao_recurso import DestinacaoRecurso  # noqa: F401

# Financial execution
from painel_emendas.models.repasse import Repasse  # noqa: F401
from painel_emendas.models.despesa import Despesa  # noqa: F401

# Audit trail and checklist
from painel_emendas.models.historico_emenda import HistoricoEmenda  # noqa: F401
from painel_emendas.models.pendencia_emenda import PendenciaEmenda  # noqa: F401

# Access control
from painel_emendas.models.usuario import Usuario  # noqa: F401

__all__ = [
    "Emenda",
    "AcaoEmenda",
    "DestinacaoRecurso",
    "Repasse",
    "Despesa",
    "HistoricoEmenda",
    "PendenciaEmenda",
    "Usuario",
]
