from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from app.core.actor_context import get_current_usuario
from app.core.errors import AccesoDenegadoError

HEADER_USUARIO = "X-Usuario"
HEADER_ROL = "X-Rol"

ROL_SUPERADMIN = "superadmin"
ROL_ADMIN = "admin"
ROL_USER = "user"
ROLES = (ROL_SUPERADMIN, ROL_ADMIN, ROL_USER)

# Etiqueta usada cuando la identidad del actor no llega en la petición
USUARIO_SISTEMA = "Sistema"


@dataclass(frozen=True)
class ActorContext:
    usuario: Optional[str] = None
    rol: str = ROL_USER


def parse_usuario(raw: Optional[str]) -> Optional[str]:
    if raw is None:
        return None
    usuario = raw.strip()
    return usuario or None


def parse_rol(raw: Optional[str]) -> str:
    """
    El rol lo declara el cliente y se confía tal cual (no hay sesión).
    Valores desconocidos o ausentes se degradan a 'user' (solo lectura).
    """
    rol = (raw or "").strip().lower()
    return rol if rol in ROLES else ROL_USER


def get_actor_context(request: Request) -> ActorContext:
    return ActorContext(
        usuario=parse_usuario(request.headers.get(HEADER_USUARIO)),
        rol=parse_rol(request.headers.get(HEADER_ROL)),
    )


def require_rol(*roles_permitidos: str):
    """
    Dependencia FastAPI: exige que el rol declarado esté en roles_permitidos.
    """
    def _validar(request: Request) -> ActorContext:
        ctx = get_actor_context(request)
        if ctx.rol not in roles_permitidos:
            raise AccesoDenegadoError(
                f"El rol '{ctx.rol}' no tiene permiso para esta operación."
            )
        return ctx

    return _validar


def resolver_usuario(usuario: Optional[str]) -> str:
    """
    Actor de una mutación: el explícito, el del header o 'Sistema'.
    """
    return parse_usuario(usuario) or get_current_usuario() or USUARIO_SISTEMA
