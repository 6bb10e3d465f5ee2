from __future__ import annotations

from typing import List

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import ErrorInterno
from app.models.caso import Caso
from app.models.comuna import Comuna, ConsejoComunal
from app.schemas.comuna import ComunaCreate

logger = logging.getLogger("gabinete.comunas")


def crear_comuna(db: Session, payload: ComunaCreate) -> Comuna:
    comuna = Comuna(
        nombre=payload.nombre.strip(),
        codigo_circuito_comunal=payload.codigo_circuito_comunal.strip(),
        parroquia=payload.parroquia.strip(),
        consejos_comunales=[
            ConsejoComunal(nombre=c.nombre.strip(), codigo_situr=c.codigo_situr.strip())
            for c in payload.consejos_comunales
        ],
    )
    db.add(comuna)

    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error creando comuna %s", payload.nombre)
        raise ErrorInterno()

    db.refresh(comuna)
    return comuna


def comunas_por_parroquia(db: Session, parroquia: str) -> List[Comuna]:
    return (
        db.query(Comuna)
        .filter(Comuna.parroquia == parroquia)
        .order_by(Comuna.nombre.asc())
        .all()
    )


def comunas_no_contactadas(db: Session) -> List[Comuna]:
    """
    Comunas cuyo nombre no aparece en ningún caso.
    """
    con_casos = select(Caso.comuna).distinct()
    return (
        db.query(Comuna)
        .filter(Comuna.nombre.notin_(con_casos))
        .order_by(Comuna.parroquia.asc(), Comuna.nombre.asc())
        .all()
    )
