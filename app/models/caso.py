from datetime import date, datetime

from sqlalchemy import Date, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db import Base, BigIntPK


class Caso(Base):
    __tablename__ = "caso"

    # ✅ PK numérica
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, index=True
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    # Bloqueo optimista: cada UPDATE del caso compara y aumenta la versión
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Identificación de la obra
    tipo_obra: Mapped[str] = mapped_column(String(120), nullable=False)
    nombre_obra: Mapped[str | None] = mapped_column(String(255))
    codigo_personalizado: Mapped[str | None] = mapped_column(String(30), unique=True)

    # Territorio
    parroquia: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    circuito: Mapped[str] = mapped_column(String(120), nullable=False)
    eje: Mapped[str] = mapped_column(String(120), nullable=False)
    comuna: Mapped[str] = mapped_column(String(255), nullable=False)
    codigo_comuna: Mapped[str] = mapped_column(String(60), nullable=False)

    # Responsables
    name_jc: Mapped[str] = mapped_column(String(255), nullable=False)
    name_ju: Mapped[str] = mapped_column(String(255), nullable=False)
    enlace_comunal: Mapped[str] = mapped_column(String(255), nullable=False)
    ente_responsable: Mapped[str] = mapped_column(String(255), nullable=False, default="N/A")
    consejo_comunal_ejecuta: Mapped[str] = mapped_column(String(255), nullable=False, default="N/A")
    responsable_sala_autogobierno: Mapped[str] = mapped_column(String(255), nullable=False, default="N/A")
    jefe_calle: Mapped[str] = mapped_column(String(255), nullable=False, default="N/A")
    jefe_politico_eje: Mapped[str] = mapped_column(String(255), nullable=False, default="N/A")
    jefe_juventud_circuito_comunal: Mapped[str] = mapped_column(String(255), nullable=False, default="N/A")

    # Detalle
    case_description: Mapped[str] = mapped_column(Text, nullable=False)
    case_date: Mapped[date] = mapped_column(Date, nullable=False)
    direccion_exacta: Mapped[str] = mapped_column(String(500), nullable=False, default="N/A")
    cantidad_consejos_comunales: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    cantidad_familiares: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Referencia opaca al adjunto (la devuelve el servicio de archivos)
    archivo: Mapped[str] = mapped_column(String(500), nullable=False, default="")

    # Ciclo de vida
    estado: Mapped[str] = mapped_column(
        String(30), nullable=False, default="CARGADO", index=True
    )
    fecha_entrega: Mapped[datetime | None] = mapped_column(DateTime)

    # Historial (solo se agrega; se borra únicamente junto con el caso)
    actuaciones = relationship(
        "CasoActuacion",
        back_populates="caso",
        order_by="CasoActuacion.id",
        cascade="all, delete-orphan",
    )
    modificaciones = relationship(
        "CasoModificacion",
        back_populates="caso",
        order_by="CasoModificacion.id",
        cascade="all, delete-orphan",
    )

    __mapper_args__ = {"version_id_col": version}
