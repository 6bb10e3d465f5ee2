from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from app.core.actor_context import set_current_actor
from app.core.auth import HEADER_ROL, HEADER_USUARIO, parse_rol, parse_usuario


class ActorContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        usuario = parse_usuario(request.headers.get(HEADER_USUARIO))
        rol = parse_rol(request.headers.get(HEADER_ROL))
        set_current_actor(usuario, rol)
        return await call_next(request)
