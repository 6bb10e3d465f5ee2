from __future__ import annotations

from datetime import date, datetime
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm.attributes import flag_modified

from app.core.auth import resolver_usuario
from app.models.caso import Caso
from app.models.caso_actuacion import CasoActuacion
from app.models.caso_modificacion import CasoModificacion
from app.services.utils import to_date

logger = logging.getLogger("gabinete.historial")


class HistorialService:
    """
    Historial por CASO (modificaciones + actuaciones).

    - Solo agrega entradas a la colección en memoria del caso.
    - Nunca hace commit: la persistencia es la única escritura del llamador.
    - Las entradas existentes no se tocan (ver eventos before_update en models).
    """

    # =========================
    # CAMPOS ESPECIALES
    # =========================
    CAMPO_ESTADO = "estado"
    CAMPO_REVISION = "review"
    VALOR_REVISION = "N/A"

    # Se comparan a nivel de día calendario
    CAMPOS_FECHA = frozenset({"case_date"})

    # =========================
    # ACTUACIONES DEL SISTEMA
    # =========================
    ACTUACION_ENTREGA = "Caso entregado."

    # =========================
    # NORMALIZACIÓN
    # =========================
    @classmethod
    def normalizar_valor(cls, valor: Any, campo: Optional[str] = None) -> str:
        if valor is None:
            return ""
        if campo in cls.CAMPOS_FECHA or isinstance(valor, (date, datetime)):
            d = to_date(valor)
            return d.isoformat() if d else str(valor).strip()
        if hasattr(valor, "value"):
            valor = valor.value
        return str(valor).strip()

    # =========================
    # MÉTODOS BASE INTERNOS
    # =========================
    @staticmethod
    def _tocar_caso(caso: Caso, fecha: datetime) -> None:
        # Toda entrada nueva actualiza la fila del caso: el UPDATE lleva
        # el chequeo de version (un caso entregado en paralelo da 409).
        caso.updated_at = fecha
        flag_modified(caso, "updated_at")

    @staticmethod
    def _registrar_modificacion(
        caso: Caso,
        *,
        campo: str,
        valor_antiguo: Optional[str],
        valor_nuevo: Optional[str],
        usuario: str,
        fecha: datetime,
    ) -> CasoModificacion:
        mod = CasoModificacion(
            campo=campo,
            valor_antiguo=valor_antiguo,
            valor_nuevo=valor_nuevo,
            fecha=fecha,
            usuario=usuario,
        )
        caso.modificaciones.append(mod)
        HistorialService._tocar_caso(caso, fecha)
        return mod

    @staticmethod
    def _registrar_actuacion(
        caso: Caso,
        *,
        descripcion: str,
        usuario: str,
        fecha: datetime,
    ) -> CasoActuacion:
        act = CasoActuacion(descripcion=descripcion, fecha=fecha, usuario=usuario)
        caso.actuaciones.append(act)
        HistorialService._tocar_caso(caso, fecha)
        return act

    # =========================================================
    # MODIFICACIONES
    # =========================================================
    @classmethod
    def registrar_edicion(
        cls,
        caso: Caso,
        propuestos: Dict[str, Any],
        usuario: str | None = None,
    ) -> List[CasoModificacion]:
        """
        Compara cada campo propuesto contra el valor actual del caso
        (antes de aplicar cambios) y agrega una modificación por diferencia.
        Todas comparten la misma fecha. Sin diferencias => una entrada 'review'.
        """
        fecha = datetime.utcnow()
        usuario = resolver_usuario(usuario)

        entradas: List[CasoModificacion] = []
        for campo, nuevo in propuestos.items():
            antiguo_n = cls.normalizar_valor(getattr(caso, campo, None), campo)
            nuevo_n = cls.normalizar_valor(nuevo, campo)
            if antiguo_n == nuevo_n:
                continue
            entradas.append(
                cls._registrar_modificacion(
                    caso,
                    campo=campo,
                    valor_antiguo=antiguo_n,
                    valor_nuevo=nuevo_n,
                    usuario=usuario,
                    fecha=fecha,
                )
            )

        if not entradas:
            entradas.append(
                cls._registrar_modificacion(
                    caso,
                    campo=cls.CAMPO_REVISION,
                    valor_antiguo=cls.VALOR_REVISION,
                    valor_nuevo=cls.VALOR_REVISION,
                    usuario=usuario,
                    fecha=fecha,
                )
            )

        logger.debug(
            "Caso %s: %d modificación(es) registradas por %s",
            caso.id, len(entradas), usuario,
        )
        return entradas

    @classmethod
    def registrar_cambio_estado(
        cls,
        caso: Caso,
        estado_nuevo: str,
        usuario: str | None = None,
    ) -> CasoModificacion:
        return cls._registrar_modificacion(
            caso,
            campo=cls.CAMPO_ESTADO,
            valor_antiguo=cls.normalizar_valor(caso.estado),
            valor_nuevo=cls.normalizar_valor(estado_nuevo),
            usuario=resolver_usuario(usuario),
            fecha=datetime.utcnow(),
        )

    # =========================================================
    # ACTUACIONES
    # =========================================================
    @classmethod
    def registrar_actuacion(
        cls,
        caso: Caso,
        descripcion: str,
        usuario: str | None = None,
        fecha: datetime | None = None,
    ) -> CasoActuacion:
        return cls._registrar_actuacion(
            caso,
            descripcion=descripcion,
            usuario=resolver_usuario(usuario),
            fecha=fecha or datetime.utcnow(),
        )

    @classmethod
    def caso_entregado(cls, caso: Caso, usuario: str, fecha: datetime) -> CasoActuacion:
        return cls.registrar_actuacion(
            caso,
            cls.ACTUACION_ENTREGA,
            usuario=usuario,
            fecha=fecha,
        )
