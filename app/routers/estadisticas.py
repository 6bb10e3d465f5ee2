from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.services.estadisticas_service import EstadisticasService

router = APIRouter(prefix="/estadisticas", tags=["Estadísticas"])


@router.get("/parroquias")
def get_casos_por_parroquia(db: Session = Depends(get_db)):
    svc = EstadisticasService(db)
    return svc.casos_por_parroquia()


@router.get("/consejos-comunales")
def get_casos_por_consejo_comunal(db: Session = Depends(get_db)):
    svc = EstadisticasService(db)
    return svc.casos_por_consejo_comunal()


@router.get("/estados")
def get_casos_por_estado(db: Session = Depends(get_db)):
    svc = EstadisticasService(db)
    return svc.casos_por_estado()
