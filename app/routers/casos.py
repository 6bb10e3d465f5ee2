from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.orm import Session

from app.core.auth import ActorContext, ROL_ADMIN, ROL_SUPERADMIN, require_rol
from app.core.db import get_db
from app.core.minio import get_storage_client

from app.schemas.caso import (
    ActuacionCreate,
    ActuacionOut,
    CasoCreate,
    CasoCreateResponse,
    CasoListResponse,
    CasoOut,
    CasoResponse,
    CasoUpdate,
    ConfirmarEntregaIn,
    EliminarCasoIn,
    EstadoUpdateIn,
    ModificacionOut,
)
from app.services import archivos_service, autorizacion_service, casos_service
from app.services.estado_caso_service import cambiar_estado

router = APIRouter(prefix="/casos", tags=["Casos"])

EDITORES = (ROL_SUPERADMIN, ROL_ADMIN)


# =====================================================
# Listado / Crear
# =====================================================

@router.get("", response_model=CasoListResponse)
def listar_casos(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=10000),
    estado: Optional[str] = Query(None, description="Filtro opcional por estado"),
    parroquia: Optional[str] = Query(None, description="Filtro opcional por parroquia"),
    db: Session = Depends(get_db),
):
    return casos_service.listar_casos(db, page=page, limit=limit, estado=estado, parroquia=parroquia)


@router.post("", response_model=CasoCreateResponse, status_code=201)
def crear_caso(
    payload: CasoCreate,
    db: Session = Depends(get_db),
    ctx: ActorContext = Depends(require_rol(*EDITORES)),
):
    caso = casos_service.crear_caso(db, payload, usuario=ctx.usuario)
    return {"id": caso.id, "caso": caso}


# =====================================================
# Adjuntos (colaborador de almacenamiento)
# =====================================================

@router.post("/upload")
async def subir_archivo(
    archivo: UploadFile = File(...),
    storage=Depends(get_storage_client),
    _ctx: ActorContext = Depends(require_rol(*EDITORES)),
):
    content = await archivo.read()
    return archivos_service.subir_archivo_caso(
        storage,
        filename=archivo.filename,
        content_type=archivo.content_type,
        content=content,
    )


# =====================================================
# Caso individual
# =====================================================

@router.get("/{caso_id}", response_model=CasoOut)
def obtener_caso(caso_id: int, db: Session = Depends(get_db)):
    return casos_service.obtener_caso(db, caso_id)


@router.patch("/{caso_id}", response_model=CasoResponse)
def actualizar_caso(
    caso_id: int,
    payload: CasoUpdate,
    db: Session = Depends(get_db),
    ctx: ActorContext = Depends(require_rol(*EDITORES)),
):
    caso = casos_service.actualizar_campos(db, caso_id, payload, usuario=ctx.usuario)
    return {"caso": caso}


@router.delete("/{caso_id}", response_model=CasoResponse)
def eliminar_caso(
    caso_id: int,
    payload: Optional[EliminarCasoIn] = None,
    db: Session = Depends(get_db),
    _ctx: ActorContext = Depends(require_rol(ROL_SUPERADMIN)),
):
    eliminado = autorizacion_service.eliminar_caso(
        db, caso_id, payload.clave if payload else None
    )
    return {"caso": eliminado}


# =====================================================
# Ciclo de vida
# =====================================================

@router.patch("/{caso_id}/estado", response_model=CasoResponse)
def actualizar_estado(
    caso_id: int,
    payload: EstadoUpdateIn,
    db: Session = Depends(get_db),
    ctx: ActorContext = Depends(require_rol(*EDITORES)),
):
    caso = cambiar_estado(db, caso_id, payload.estado, usuario=payload.usuario or ctx.usuario)
    return {"caso": caso}


@router.patch("/{caso_id}/confirmar-entrega", response_model=CasoResponse)
def confirmar_entrega(
    caso_id: int,
    payload: ConfirmarEntregaIn,
    db: Session = Depends(get_db),
    ctx: ActorContext = Depends(require_rol(*EDITORES)),
):
    caso = autorizacion_service.confirmar_entrega(
        db, caso_id, payload.clave, payload.usuario or ctx.usuario
    )
    return {"caso": caso}


# =====================================================
# HISTORIAL
# =====================================================

@router.post("/{caso_id}/actuaciones", response_model=CasoResponse, status_code=201)
def agregar_actuacion(
    caso_id: int,
    payload: ActuacionCreate,
    db: Session = Depends(get_db),
    ctx: ActorContext = Depends(require_rol(*EDITORES)),
):
    caso = casos_service.agregar_actuacion(
        db, caso_id, payload.descripcion, usuario=payload.usuario or ctx.usuario
    )
    return {"caso": caso}


@router.get("/{caso_id}/actuaciones", response_model=List[ActuacionOut])
def listar_actuaciones(caso_id: int, db: Session = Depends(get_db)):
    return casos_service.listar_actuaciones(db, caso_id)


@router.get("/{caso_id}/modificaciones", response_model=List[ModificacionOut])
def listar_modificaciones(caso_id: int, db: Session = Depends(get_db)):
    return casos_service.listar_modificaciones(db, caso_id)
