from __future__ import annotations


class ErrorConfiguracion(ValueError):
    """Faltan parámetros legales o tabla ISR, o la tabla está mal formada."""


class ErrorTransicion(ValueError):
    """Cambio de estado no permitido para un registro calculado."""
