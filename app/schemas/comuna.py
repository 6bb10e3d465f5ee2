from pydantic import BaseModel, Field, ConfigDict
from typing import List


class ConsejoComunalIn(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=255)
    codigo_situr: str = Field(..., min_length=1, max_length=60)


class ConsejoComunalOut(ConsejoComunalIn):
    id: int

    model_config = ConfigDict(from_attributes=True)


class ComunaCreate(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=255)
    codigo_circuito_comunal: str = Field(..., min_length=1, max_length=60)
    parroquia: str = Field(..., min_length=1, max_length=120)
    consejos_comunales: List[ConsejoComunalIn] = []


class ComunaOut(BaseModel):
    id: int
    nombre: str
    codigo_circuito_comunal: str
    parroquia: str
    consejos_comunales: List[ConsejoComunalOut] = []

    model_config = ConfigDict(from_attributes=True)
