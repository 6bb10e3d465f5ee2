from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db import Base, BigIntPK


class Comuna(Base):
    __tablename__ = "comuna"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    nombre: Mapped[str] = mapped_column(String(255), nullable=False)
    codigo_circuito_comunal: Mapped[str] = mapped_column(String(60), nullable=False)
    parroquia: Mapped[str] = mapped_column(String(120), nullable=False, index=True)

    consejos_comunales = relationship(
        "ConsejoComunal",
        back_populates="comuna",
        order_by="ConsejoComunal.id",
        cascade="all, delete-orphan",
    )


class ConsejoComunal(Base):
    __tablename__ = "consejo_comunal"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)

    comuna_id: Mapped[int] = mapped_column(
        BigIntPK,
        ForeignKey("comuna.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    nombre: Mapped[str] = mapped_column(String(255), nullable=False)
    codigo_situr: Mapped[str] = mapped_column(String(60), nullable=False)

    comuna = relationship("Comuna", back_populates="consejos_comunales")
