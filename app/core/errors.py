from __future__ import annotations


class CasoError(Exception):
    """
    Base de errores de dominio.
    Cada subclase define el status HTTP con el que se responde en el borde
    (ver handler registrado en app.main).
    """

    status_code: int = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidacionError(CasoError):
    status_code = 400


class NoAutorizadoError(CasoError):
    """Clave compartida incorrecta."""

    status_code = 401


class TransicionProhibidaError(CasoError):
    """Mutación sobre un caso ENTREGADO."""

    status_code = 403


class AccesoDenegadoError(CasoError):
    """El rol declarado no permite la operación."""

    status_code = 403


class NoEncontradoError(CasoError):
    status_code = 404


class ConflictoError(CasoError):
    status_code = 409


class HistorialInmutableError(CasoError):
    status_code = 500


class ErrorInterno(CasoError):
    status_code = 500

    def __init__(self, detail: str = "Error interno del servidor."):
        super().__init__(detail)
