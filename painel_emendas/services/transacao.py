"""
Transaction boundary shared by the write services.

Usage::

    with transacao(db, "salvar_acao"):
        ...  # add / update / delete rows
    # committed here; any failure inside rolled everything back

``HTTPException`` raised inside the block (validation failures) rolls back
and propagates unchanged.  Integrity violations become HTTP 409 and any
other ``SQLAlchemyError`` becomes HTTP 500; both are logged with traceback.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


@contextmanager
def transacao(db: Session, operacao: str) -> Iterator[Session]:
    try:
        yield db
        db.commit()
    except HTTPException:
        db.rollback()
        raise
    except IntegrityError as exc:
        db.rollback()
        logger.exception("%s: violação de integridade", operacao)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Operação conflita com dados existentes (violação de integridade).",
        ) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("%s: erro de persistência", operacao)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Erro ao gravar no banco de dados. Nenhuma alteração foi aplicada.",
        ) from exc
