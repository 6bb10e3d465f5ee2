from dotenv import load_dotenv
from pathlib import Path

# =====================================================
# Cargar variables de entorno (.env)
# =====================================================
# main.py está en /app
# .env está en la raíz del proyecto
env_path = Path(__file__).resolve().parents[1] / ".env"
load_dotenv(dotenv_path=env_path)

import logging

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.actor_context_mw import ActorContextMiddleware
from app.core.config import settings
from app.core.db import get_db
from app.core.errors import CasoError

from app.routers.casos import router as casos_router
from app.routers.comunas import router as comunas_router
from app.routers.estadisticas import router as estadisticas_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("gabinete")

# =====================================================
# App
# =====================================================
app = FastAPI(title="Gabinete - Casos API")

# =====================================================
# Identidad del actor (X-Usuario / X-Rol, confiados tal cual)
# =====================================================
app.add_middleware(ActorContextMiddleware)

# =====================================================
# CORS
# =====================================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"],
    allow_headers=["Content-Type", "Authorization", "X-Usuario", "X-Rol"],
)

# =====================================================
# Manejo de errores (borde de la petición)
# =====================================================
@app.exception_handler(CasoError)
async def caso_error_handler(request: Request, exc: CasoError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
        for e in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"detail": "Error de validación en los datos enviados.", "errors": errors},
    )


@app.exception_handler(SQLAlchemyError)
async def db_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Error de base de datos en %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Error interno del servidor."})

# =====================================================
# Routers
# =====================================================
app.include_router(casos_router)
app.include_router(comunas_router)
app.include_router(estadisticas_router)

# =====================================================
# Endpoints base
# =====================================================
@app.get("/")
def root():
    return {"service": "Gabinete - Casos API"}

@app.get("/health")
def health():
    return {"status": "ok"}

@app.get("/db-check")
def db_check(db: Session = Depends(get_db)):
    result = db.execute(text("SELECT 1")).scalar()
    return {"db": "ok", "result": result}
