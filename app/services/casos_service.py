from __future__ import annotations

import logging
from typing import List

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.auth import resolver_usuario
from app.core.errors import ConflictoError, ErrorInterno, ValidacionError
from app.models.caso import Caso
from app.models.caso_actuacion import CasoActuacion
from app.models.caso_modificacion import CasoModificacion
from app.schemas.caso import (
    CasoCreate,
    CasoListItem,
    CasoListResponse,
    CasoUpdate,
    EstadoCaso,
)
from app.services.casos_repository import (
    PREFIJO_CODIGO,
    codigo_en_uso,
    es_codigo_reservado,
    generar_codigo_personalizado,
    get_caso,
    guardar,
)
from app.services.estado_caso_service import (
    assert_no_entregado,
    normalizar_estado,
    validar_estado_no_terminal,
)
from app.services.historial_service import HistorialService
from app.services.utils import norm_str, total_paginas

logger = logging.getLogger("gabinete.casos")

# Campos editables por la vía general (PATCH /casos/{id})
CAMPOS_EDITABLES = frozenset(CasoUpdate.model_fields) - {"usuario"}

# Campos que admiten null en edición
CAMPOS_ANULABLES = frozenset({"nombre_obra"})


# =====================================================
# CRUD
# =====================================================

def crear_caso(db: Session, payload: CasoCreate, usuario: str | None = None) -> Caso:
    data = payload.model_dump()

    estado = data.pop("estado", None)
    estado = validar_estado_no_terminal(estado) if estado else EstadoCaso.CARGADO

    codigo = norm_str(data.pop("codigo_personalizado", None))
    if codigo and es_codigo_reservado(codigo):
        raise ValidacionError(
            f"El prefijo {PREFIJO_CODIGO}- está reservado para los códigos generados."
        )
    if codigo and codigo_en_uso(db, codigo):
        raise ConflictoError("Ya existe un caso con ese código personalizado.")

    caso = Caso(**data, estado=estado.value, codigo_personalizado=codigo)
    db.add(caso)

    try:
        db.flush()  # caso.id disponible (antes de commit)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error insertando caso")
        raise ErrorInterno()

    if not caso.codigo_personalizado:
        caso.codigo_personalizado = generar_codigo_personalizado(caso.id)

    guardar(db, caso)
    logger.info(
        "Caso %s (%s) creado por %s en estado %s",
        caso.id, caso.codigo_personalizado, resolver_usuario(usuario), caso.estado,
    )
    return caso


def obtener_caso(db: Session, caso_id: int) -> Caso:
    return get_caso(db, caso_id)


def listar_casos(
    db: Session,
    page: int = 1,
    limit: int = 10,
    estado: str | None = None,
    parroquia: str | None = None,
) -> CasoListResponse:
    filters = []
    if estado:
        filters.append(Caso.estado == normalizar_estado(estado).value)
    if parroquia:
        filters.append(Caso.parroquia == parroquia)

    total_q = db.query(func.count(Caso.id))
    if filters:
        total_q = total_q.filter(*filters)
    total = total_q.scalar() or 0

    offset = (page - 1) * limit

    q = db.query(Caso)
    if filters:
        q = q.filter(*filters)

    rows = (
        q.order_by(Caso.created_at.desc(), Caso.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )

    return CasoListResponse(
        casos=[CasoListItem.model_validate(r) for r in rows],
        currentPage=page,
        totalPages=total_paginas(total, limit),
        totalCount=total,
    )


def actualizar_campos(
    db: Session,
    caso_id: int,
    payload: CasoUpdate,
    usuario: str | None = None,
) -> Caso:
    """
    Vía general de edición: merge de campos + historial de modificaciones.
    """
    cambios = {
        c: (v.strip() if isinstance(v, str) else v)
        for c, v in payload.model_dump(exclude_unset=True).items()
    }
    usuario = cambios.pop("usuario", None) or usuario

    fuera = set(cambios) - CAMPOS_EDITABLES
    if fuera:
        raise ValidacionError(f"Campos no editables: {', '.join(sorted(fuera))}.")

    nulos = [c for c, v in cambios.items() if v is None and c not in CAMPOS_ANULABLES]
    if nulos:
        raise ValidacionError(f"Los campos no pueden ser nulos: {', '.join(sorted(nulos))}.")

    caso = get_caso(db, caso_id)
    assert_no_entregado(caso, "modificar")

    HistorialService.registrar_edicion(caso, cambios, usuario)

    for campo, valor in cambios.items():
        setattr(caso, campo, valor)

    return guardar(db, caso)


# =====================================================
# ACTUACIONES / HISTORIAL
# =====================================================

def agregar_actuacion(
    db: Session,
    caso_id: int,
    descripcion: str,
    usuario: str | None = None,
) -> Caso:
    texto = norm_str(descripcion)
    if not texto:
        raise ValidacionError("La descripción de la actuación es requerida.")

    caso = get_caso(db, caso_id)
    assert_no_entregado(caso, "agregar actuaciones a")

    HistorialService.registrar_actuacion(caso, texto, usuario=usuario)
    return guardar(db, caso)


def listar_actuaciones(db: Session, caso_id: int) -> List[CasoActuacion]:
    get_caso(db, caso_id)
    return (
        db.query(CasoActuacion)
        .filter(CasoActuacion.caso_id == caso_id)
        .order_by(CasoActuacion.id.asc())
        .all()
    )


def listar_modificaciones(db: Session, caso_id: int) -> List[CasoModificacion]:
    get_caso(db, caso_id)
    return (
        db.query(CasoModificacion)
        .filter(CasoModificacion.caso_id == caso_id)
        .order_by(CasoModificacion.id.asc())
        .all()
    )
