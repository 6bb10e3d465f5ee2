from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List
from datetime import date, datetime
from enum import Enum

from app.services.utils import to_date


# =========================
# ESTADOS
# =========================

class EstadoCaso(str, Enum):
    CARGADO = "CARGADO"
    SUPERVISADO = "SUPERVISADO"
    EN_DESARROLLO = "EN_DESARROLLO"
    INACTIVO = "INACTIVO"
    ENTREGADO = "ENTREGADO"


NOMBRES_ESTADO = {
    EstadoCaso.CARGADO: "Cargado",
    EstadoCaso.SUPERVISADO: "Supervisado",
    EstadoCaso.EN_DESARROLLO: "En Desarrollo",
    EstadoCaso.INACTIVO: "Inactivo",
    EstadoCaso.ENTREGADO: "Entregado",
}

ESTADO_TERMINAL = EstadoCaso.ENTREGADO

ESTADOS_NO_TERMINALES = tuple(e for e in EstadoCaso if e is not ESTADO_TERMINAL)


# =========================
# CAMPOS DE OBRA
# =========================

class _CaseDateMixin(BaseModel):
    @field_validator("case_date", mode="before", check_fields=False)
    @classmethod
    def _case_date_dia(cls, v):
        # "2024-05-01T23:30:00Z" -> 2024-05-01 (granularidad de día)
        if v is None or v == "":
            return v
        d = to_date(v)
        if d is None:
            raise ValueError("El formato de la fecha del caso es inválido.")
        return d


class CasoCreate(_CaseDateMixin):
    tipo_obra: str = Field(..., min_length=1, max_length=120)
    nombre_obra: Optional[str] = Field(default=None, max_length=255)

    parroquia: str = Field(..., min_length=1, max_length=120)
    circuito: str = Field(..., min_length=1, max_length=120)
    eje: str = Field(..., min_length=1, max_length=120)
    comuna: str = Field(..., min_length=1, max_length=255)
    codigo_comuna: str = Field(..., min_length=1, max_length=60)

    name_jc: str = Field(..., min_length=1, max_length=255)
    name_ju: str = Field(..., min_length=1, max_length=255)
    enlace_comunal: str = Field(..., min_length=1, max_length=255)

    case_description: str = Field(..., min_length=1)
    case_date: date

    # ✅ referencia devuelta por POST /casos/upload
    archivo: str = ""

    ente_responsable: str = "N/A"
    cantidad_consejos_comunales: int = Field(default=0, ge=0)
    consejo_comunal_ejecuta: str = "N/A"
    cantidad_familiares: int = Field(default=0, ge=0)
    direccion_exacta: str = "N/A"
    responsable_sala_autogobierno: str = "N/A"
    jefe_calle: str = "N/A"
    jefe_politico_eje: str = "N/A"
    jefe_juventud_circuito_comunal: str = "N/A"

    codigo_personalizado: Optional[str] = Field(default=None, max_length=30)

    # Estado inicial (opcional). ENTREGADO no se admite al crear.
    estado: Optional[str] = None

    model_config = ConfigDict(str_strip_whitespace=True)


class CasoUpdate(_CaseDateMixin):
    """
    Edición parcial (PATCH). Solo campos de obra y archivo:
    id, estado, fecha_entrega e historial NO son editables por esta vía.
    """

    tipo_obra: Optional[str] = Field(default=None, min_length=1, max_length=120)
    nombre_obra: Optional[str] = Field(default=None, max_length=255)

    parroquia: Optional[str] = Field(default=None, min_length=1, max_length=120)
    circuito: Optional[str] = Field(default=None, min_length=1, max_length=120)
    eje: Optional[str] = Field(default=None, min_length=1, max_length=120)
    comuna: Optional[str] = Field(default=None, min_length=1, max_length=255)
    codigo_comuna: Optional[str] = Field(default=None, min_length=1, max_length=60)

    name_jc: Optional[str] = Field(default=None, min_length=1, max_length=255)
    name_ju: Optional[str] = Field(default=None, min_length=1, max_length=255)
    enlace_comunal: Optional[str] = Field(default=None, min_length=1, max_length=255)

    case_description: Optional[str] = Field(default=None, min_length=1)
    case_date: Optional[date] = None

    archivo: Optional[str] = None

    ente_responsable: Optional[str] = None
    cantidad_consejos_comunales: Optional[int] = Field(default=None, ge=0)
    consejo_comunal_ejecuta: Optional[str] = None
    cantidad_familiares: Optional[int] = Field(default=None, ge=0)
    direccion_exacta: Optional[str] = None
    responsable_sala_autogobierno: Optional[str] = None
    jefe_calle: Optional[str] = None
    jefe_politico_eje: Optional[str] = None
    jefe_juventud_circuito_comunal: Optional[str] = None

    # Actor de la edición (no es un campo del caso)
    usuario: Optional[str] = Field(default=None, max_length=255)

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


# =========================
# HISTORIAL
# =========================

class ActuacionOut(BaseModel):
    id: int
    descripcion: str
    fecha: datetime
    usuario: str

    model_config = ConfigDict(from_attributes=True)


class ModificacionOut(BaseModel):
    id: int
    campo: str
    valor_antiguo: Optional[str] = None
    valor_nuevo: Optional[str] = None
    fecha: datetime
    usuario: str

    model_config = ConfigDict(from_attributes=True)


class ActuacionCreate(BaseModel):
    descripcion: str = Field(..., max_length=2000)
    usuario: Optional[str] = Field(default=None, max_length=255)


# =========================
# SALIDA
# =========================

class CasoListItem(BaseModel):
    id: int
    created_at: datetime
    updated_at: datetime
    version: int

    tipo_obra: str
    nombre_obra: Optional[str] = None
    codigo_personalizado: Optional[str] = None

    parroquia: str
    circuito: str
    eje: str
    comuna: str
    codigo_comuna: str

    name_jc: str
    name_ju: str
    enlace_comunal: str
    ente_responsable: str
    consejo_comunal_ejecuta: str
    responsable_sala_autogobierno: str
    jefe_calle: str
    jefe_politico_eje: str
    jefe_juventud_circuito_comunal: str

    case_description: str
    case_date: date
    direccion_exacta: str
    cantidad_consejos_comunales: int
    cantidad_familiares: int

    archivo: str

    estado: str
    fecha_entrega: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CasoOut(CasoListItem):
    actuaciones: List[ActuacionOut] = []
    modificaciones: List[ModificacionOut] = []


class CasoListResponse(BaseModel):
    casos: List[CasoListItem]
    currentPage: int
    totalPages: int
    totalCount: int


class CasoCreateResponse(BaseModel):
    id: int
    caso: CasoOut


class CasoResponse(BaseModel):
    caso: CasoOut


# =========================
# CICLO DE VIDA
# =========================

class EstadoUpdateIn(BaseModel):
    estado: str = Field(..., min_length=1)
    usuario: Optional[str] = Field(default=None, max_length=255)


class ConfirmarEntregaIn(BaseModel):
    clave: str = ""
    usuario: Optional[str] = Field(default=None, max_length=255)


class EliminarCasoIn(BaseModel):
    clave: str = ""
