from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db import Base, BigIntPK
from app.core.errors import HistorialInmutableError


class CasoActuacion(Base):
    __tablename__ = "caso_actuacion"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)

    caso_id: Mapped[int] = mapped_column(
        BigIntPK,
        ForeignKey("caso.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    descripcion: Mapped[str] = mapped_column(Text, nullable=False)
    fecha: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    usuario: Mapped[str] = mapped_column(String(255), nullable=False)

    caso = relationship("Caso", back_populates="actuaciones")


@event.listens_for(CasoActuacion, "before_update")
def actuacion_before_update(_mapper, _connection, target: CasoActuacion) -> None:
    raise HistorialInmutableError(
        f"La actuación {target.id} es de solo lectura."
    )
