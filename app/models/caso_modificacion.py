from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db import Base, BigIntPK
from app.core.errors import HistorialInmutableError


class CasoModificacion(Base):
    __tablename__ = "caso_modificacion"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)

    caso_id: Mapped[int] = mapped_column(
        BigIntPK,
        ForeignKey("caso.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    campo: Mapped[str] = mapped_column(String(80), nullable=False)
    valor_antiguo: Mapped[str | None] = mapped_column(Text)
    valor_nuevo: Mapped[str | None] = mapped_column(Text)
    fecha: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    usuario: Mapped[str] = mapped_column(String(255), nullable=False)

    caso = relationship("Caso", back_populates="modificaciones")


@event.listens_for(CasoModificacion, "before_update")
def modificacion_before_update(_mapper, _connection, target: CasoModificacion) -> None:
    raise HistorialInmutableError(
        f"La modificación {target.id} es de solo lectura."
    )
