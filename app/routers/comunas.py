from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth import ROL_ADMIN, ROL_SUPERADMIN, require_rol
from app.core.db import get_db
from app.schemas.comuna import ComunaCreate, ComunaOut
from app.services import comunas_service

router = APIRouter(prefix="/comunas", tags=["Comunas"])


@router.post("", response_model=ComunaOut, status_code=201)
def crear_comuna(
    payload: ComunaCreate,
    db: Session = Depends(get_db),
    _ctx=Depends(require_rol(ROL_SUPERADMIN, ROL_ADMIN)),
):
    return comunas_service.crear_comuna(db, payload)


@router.get("/parroquia/{parroquia}", response_model=list[ComunaOut])
def listar_comunas_por_parroquia(parroquia: str, db: Session = Depends(get_db)):
    return comunas_service.comunas_por_parroquia(db, parroquia)


@router.get("/no-contactadas", response_model=list[ComunaOut])
def listar_comunas_no_contactadas(db: Session = Depends(get_db)):
    return comunas_service.comunas_no_contactadas(db)
