from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from planilla.models import ParametroLegal

from .dinero import a_decimal, porcentaje

logger = logging.getLogger(__name__)

# Tasas por defecto (%) cuando la compañía no tiene un parámetro activo del tipo.
# Deben coincidir con los registros ya calculados.
TASAS_POR_DEFECTO: Dict[str, float] = {
    "seguro_social_empleado": 9.75,
    "seguro_social_empleador": 13.25,
    "seguro_educativo": 1.25,
    "seguro_educativo_empleador": 1.50,
    "riesgo_profesional": 0.98,
    "fondo_cesantia": 2.25,
}

# CSS sobre el décimo tercer mes (no lleva seguro educativo)
TASA_CSS_DECIMO_EMPLEADO = 7.25
TASA_CSS_DECIMO_EMPLEADOR = 10.75


@dataclass(frozen=True)
class Tasas:
    seguro_social_empleado: float
    seguro_social_empleador: float
    seguro_educativo: float
    seguro_educativo_empleador: float
    riesgo_profesional: float
    fondo_cesantia: float


@dataclass(frozen=True)
class Aportes:
    seguro_social_empleado: float
    seguro_social_empleador: float
    seguro_educativo_empleado: float
    seguro_educativo_empleador: float
    riesgo_profesional: float
    fondo_cesantia: float


def obtener_tasa(parametros: Optional[Sequence[ParametroLegal]], tipo: str) -> float:
    """Porcentaje vigente para 'tipo'.

    Entre los parámetros activos del tipo se toma el de fecha de vigencia más
    reciente; si no hay ninguno se usa la tasa por defecto.
    """
    vigentes = [p for p in (parametros or []) if p.tipo == tipo and p.activo]
    if not vigentes:
        defecto = TASAS_POR_DEFECTO[tipo]
        logger.warning("Sin parámetro activo '%s'; usando tasa por defecto %s%%", tipo, defecto)
        return defecto
    return max(vigentes, key=lambda p: p.fecha_vigencia).porcentaje


def resolver_tasas(parametros: Optional[Sequence[ParametroLegal]]) -> Tasas:
    return Tasas(**{tipo: obtener_tasa(parametros, tipo) for tipo in TASAS_POR_DEFECTO})


def calcular_aportes(base_ss: Any, base_se: Any, tasas: Tasas) -> Aportes:
    """Aportes de empleado y empleador, cada uno redondeado al centavo.

    base_ss: base para seguro social, riesgo profesional y cesantía.
    base_se: base para seguro educativo (puede diferir, p.ej. el décimo está exento).
    """
    if a_decimal(base_ss) < 0 or a_decimal(base_se) < 0:
        raise ValueError(f"Base de aportes negativa (ss={base_ss}, se={base_se})")

    return Aportes(
        seguro_social_empleado=porcentaje(base_ss, tasas.seguro_social_empleado),
        seguro_social_empleador=porcentaje(base_ss, tasas.seguro_social_empleador),
        seguro_educativo_empleado=porcentaje(base_se, tasas.seguro_educativo),
        seguro_educativo_empleador=porcentaje(base_se, tasas.seguro_educativo_empleador),
        riesgo_profesional=porcentaje(base_ss, tasas.riesgo_profesional),
        fondo_cesantia=porcentaje(base_ss, tasas.fondo_cesantia),
    )
