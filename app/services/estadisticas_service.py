from __future__ import annotations

from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.caso import Caso
from app.schemas.caso import EstadoCaso, NOMBRES_ESTADO


class EstadisticasService:
    def __init__(self, db: Session):
        self.db = db

    def _conteo_por(self, columna, etiqueta: str) -> dict:
        rows = (
            self.db.query(columna.label("clave"), func.count(Caso.id).label("total_casos"))
            .group_by(columna)
            .order_by(func.count(Caso.id).desc(), columna.asc())
            .all()
        )

        items = [
            {etiqueta: r.clave, "total_casos": int(r.total_casos or 0)}
            for r in rows
        ]

        return {
            "total": sum(x["total_casos"] for x in items),
            "items": items,
            "generado_en": datetime.utcnow().isoformat(),
        }

    def casos_por_parroquia(self) -> dict:
        return self._conteo_por(Caso.parroquia, "parroquia")

    def casos_por_consejo_comunal(self) -> dict:
        return self._conteo_por(Caso.consejo_comunal_ejecuta, "consejo_comunal")

    def casos_por_estado(self) -> dict:
        """
        Siempre devuelve los cinco estados (con 0 si no hay casos).
        """
        rows = (
            self.db.query(Caso.estado, func.count(Caso.id))
            .group_by(Caso.estado)
            .all()
        )
        conteos = {estado: int(total or 0) for estado, total in rows}

        items = [
            {
                "estado": e.value,
                "nombre": NOMBRES_ESTADO[e],
                "total_casos": conteos.get(e.value, 0),
            }
            for e in EstadoCaso
        ]

        return {
            "total": sum(x["total_casos"] for x in items),
            "items": items,
            "generado_en": datetime.utcnow().isoformat(),
        }
