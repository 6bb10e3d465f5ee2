from __future__ import annotations

import logging
import re
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.core.errors import ConflictoError, ErrorInterno, NoEncontradoError
from app.models.caso import Caso

logger = logging.getLogger("gabinete.casos")

PREFIJO_CODIGO = "CUB"

# Reservado para los códigos generados (CUB-00042)
CODIGO_GENERADO_RE = re.compile(rf"^{PREFIJO_CODIGO}-\d+$", re.IGNORECASE)


def get_caso(db: Session, caso_id: int) -> Caso:
    caso = db.query(Caso).filter(Caso.id == caso_id).first()
    if not caso:
        raise NoEncontradoError(f"Caso con ID {caso_id} no encontrado.")
    return caso


def generar_codigo_personalizado(caso_id: int) -> str:
    return f"{PREFIJO_CODIGO}-{caso_id:05d}"


def es_codigo_reservado(codigo: str) -> bool:
    return bool(CODIGO_GENERADO_RE.match(codigo))


def codigo_en_uso(db: Session, codigo: str, excluir_id: Optional[int] = None) -> bool:
    q = db.query(Caso.id).filter(Caso.codigo_personalizado == codigo)
    if excluir_id is not None:
        q = q.filter(Caso.id != excluir_id)
    return q.first() is not None


def _commit(db: Session, caso_id: Optional[int]) -> None:
    try:
        db.commit()
    except StaleDataError:
        db.rollback()
        logger.warning("Conflicto de versión guardando caso %s", caso_id)
        raise ConflictoError(
            "El caso fue modificado por otro usuario. Recargue e intente de nuevo."
        )
    except IntegrityError as ie:
        db.rollback()
        if "codigo_personalizado" in str(ie).lower():
            raise ConflictoError("Ya existe un caso con ese código personalizado.")
        logger.exception("Error de integridad guardando caso %s", caso_id)
        raise ErrorInterno()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error de base de datos guardando caso %s", caso_id)
        raise ErrorInterno()


def guardar(db: Session, caso: Caso) -> Caso:
    """
    Única escritura de una operación: commit + refresh.
    Cualquier fallo deja la sesión en rollback (sin escrituras parciales).
    """
    caso_id = caso.id
    _commit(db, caso_id)
    db.refresh(caso)
    return caso


def eliminar(db: Session, caso: Caso) -> None:
    caso_id = caso.id
    db.delete(caso)
    _commit(db, caso_id)
