from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.core.auth import resolver_usuario
from app.core.errors import TransicionProhibidaError, ValidacionError
from app.models.caso import Caso
from app.schemas.caso import (
    ESTADO_TERMINAL,
    ESTADOS_NO_TERMINALES,
    EstadoCaso,
    NOMBRES_ESTADO,
)
from app.services.casos_repository import get_caso, guardar
from app.services.historial_service import HistorialService
from app.services.utils import norm_codigo

logger = logging.getLogger("gabinete.casos")


def normalizar_estado(valor: str | None) -> EstadoCaso:
    """
    'Supervisado' | 'en desarrollo' | 'EN_DESARROLLO' -> EstadoCaso.
    """
    codigo = norm_codigo(valor)
    if not codigo:
        raise ValidacionError("El nuevo estado es un campo requerido.")
    try:
        return EstadoCaso(codigo)
    except ValueError:
        validos = ", ".join(e.value for e in EstadoCaso)
        raise ValidacionError(f"El estado '{valor}' no es válido ({validos}).")


def validar_estado_no_terminal(valor: str | None) -> EstadoCaso:
    estado = normalizar_estado(valor)
    if estado not in ESTADOS_NO_TERMINALES:
        raise ValidacionError(
            f"El estado '{NOMBRES_ESTADO[estado]}' no es válido para esta operación. "
            "Use la confirmación de entrega."
        )
    return estado


def es_terminal(caso: Caso) -> bool:
    return caso.estado == ESTADO_TERMINAL.value


def assert_no_entregado(caso: Caso, accion: str) -> None:
    if es_terminal(caso):
        raise TransicionProhibidaError(
            f"No se puede {accion} un caso que ya ha sido marcado como entregado."
        )


def cambiar_estado(
    db: Session,
    caso_id: int,
    estado: str,
    usuario: str | None = None,
) -> Caso:
    """
    Transición genérica (solo estados no terminales).
    Orden de validación: estado solicitado (400) -> existencia (404) -> terminal (403).
    """
    nuevo = validar_estado_no_terminal(estado)

    caso = get_caso(db, caso_id)
    assert_no_entregado(caso, "cambiar el estado de")

    usuario = resolver_usuario(usuario)
    anterior = caso.estado

    HistorialService.registrar_cambio_estado(caso, nuevo.value, usuario)
    caso.estado = nuevo.value

    guardar(db, caso)
    logger.info("Caso %s: estado %s -> %s (%s)", caso.id, anterior, nuevo.value, usuario)
    return caso
