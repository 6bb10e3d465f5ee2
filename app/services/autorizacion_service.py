from __future__ import annotations

from datetime import datetime
import logging

from sqlalchemy.orm import Session

from app.core.actor_context import get_current_usuario
from app.core.auth import parse_usuario
from app.core.config import settings
from app.core.errors import NoAutorizadoError, ValidacionError
from app.models.caso import Caso
from app.schemas.caso import CasoOut, ESTADO_TERMINAL
from app.services.casos_repository import eliminar, get_caso, guardar
from app.services.historial_service import HistorialService

logger = logging.getLogger("gabinete.autorizacion")


def clave_valida(enviada: str | None, configurada: str | None) -> bool:
    """
    Comparación literal contra la clave de proceso.
    Una clave no configurada (vacía) nunca autoriza.
    """
    if not configurada:
        return False
    return enviada == configurada


# =====================================================
# CONFIRMAR ENTREGA
# =====================================================

def confirmar_entrega(
    db: Session,
    caso_id: int,
    clave: str | None,
    usuario: str | None,
) -> Caso:
    """
    Única vía hacia ENTREGADO.
    - fecha_entrega se fija solo la primera vez.
    - cada confirmación exitosa agrega una actuación.
    - clave incorrecta => 401 sin tocar el caso.
    """
    usuario = parse_usuario(usuario) or get_current_usuario()
    if not usuario:
        raise ValidacionError("Nombre de usuario no proporcionado para registrar la entrega.")

    if not clave_valida(clave, settings.CONFIRM_CASE_TOKEN):
        logger.warning("Clave de entrega incorrecta para caso %s (usuario=%s)", caso_id, usuario)
        raise NoAutorizadoError("Clave de seguridad incorrecta. No se puede confirmar la entrega.")

    caso = get_caso(db, caso_id)

    ahora = datetime.utcnow()
    if caso.fecha_entrega is None:
        caso.fecha_entrega = ahora
    caso.estado = ESTADO_TERMINAL.value

    HistorialService.caso_entregado(caso, usuario, ahora)

    guardar(db, caso)
    logger.info("Caso %s marcado como entregado por %s", caso.id, usuario)
    return caso


# =====================================================
# ELIMINAR
# =====================================================

def eliminar_caso(db: Session, caso_id: int, clave: str | None) -> CasoOut:
    """
    Borrado definitivo (el historial se elimina junto con el caso).
    Devuelve la representación del caso tal como estaba antes de borrarlo.
    """
    if not clave_valida(clave, settings.DELETE_CASE_TOKEN):
        logger.warning("Clave de eliminación incorrecta para caso %s", caso_id)
        raise NoAutorizadoError("Clave de seguridad incorrecta. No se puede eliminar el caso.")

    caso = get_caso(db, caso_id)
    eliminado = CasoOut.model_validate(caso)

    eliminar(db, caso)
    logger.warning(
        "Caso %s (%s) eliminado; se descartan %d actuaciones y %d modificaciones",
        eliminado.id,
        eliminado.codigo_personalizado,
        len(eliminado.actuaciones),
        len(eliminado.modificaciones),
    )
    return eliminado
