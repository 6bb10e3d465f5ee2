from contextvars import ContextVar
from typing import Optional

_current_usuario: ContextVar[Optional[str]] = ContextVar("current_usuario", default=None)
_current_rol: ContextVar[Optional[str]] = ContextVar("current_rol", default=None)

def set_current_actor(usuario: Optional[str], rol: Optional[str]) -> None:
    _current_usuario.set(usuario)
    _current_rol.set(rol)

def get_current_usuario() -> Optional[str]:
    return _current_usuario.get()

def get_current_rol() -> Optional[str]:
    return _current_rol.get()
