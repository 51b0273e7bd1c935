from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, List, Optional, Sequence

from planilla.models import CalculoISR, Empleado, ResumenISR, TramoISR

from .dinero import a_decimal, dividir, round2, sumar
from .errores import ErrorConfiguracion

logger = logging.getLogger(__name__)

# Tramos DGI: 0-11,000 exento; 11,000-50,000 15% del excedente;
# > 50,000 = 5,850 + 25% del excedente.
EXENCION_ANUAL = Decimal("11000")
LIMITE_TRAMO_15 = Decimal("50000")
TASA_TRAMO_15 = Decimal("0.15")
TASA_TRAMO_25 = Decimal("0.25")
IMPUESTO_FIJO_TRAMO_25 = Decimal("5850")

# 12 salarios + décimo
SALARIOS_POR_ANIO = 13

TRAMOS_PANAMA = (
    TramoISR(desde=0, hasta=11000, porcentaje=0, deduccion_fija=0),
    TramoISR(desde=11000, hasta=50000, porcentaje=15, deduccion_fija=1650),
    TramoISR(desde=50000, hasta=None, porcentaje=25, deduccion_fija=6650),
)

# Separación máxima admitida entre tramos (p.ej. 11,000.00 -> 11,000.01)
HOLGURA_TRAMOS = Decimal("0.01")


def calcular_isr(ingreso_anual: Any) -> float:
    """ISR anual según la escala fija de tres tramos.

    No redondea: el redondeo al centavo lo aplica quien prorratea el
    impuesto al período (ver impuesto_anual).
    """
    base = a_decimal(ingreso_anual)
    if base <= EXENCION_ANUAL:
        return 0.0
    if base <= LIMITE_TRAMO_15:
        return float((base - EXENCION_ANUAL) * TASA_TRAMO_15)
    return float(IMPUESTO_FIJO_TRAMO_25 + (base - LIMITE_TRAMO_15) * TASA_TRAMO_25)


def tasa_aplicada(ingreso_anual: Any) -> str:
    base = a_decimal(ingreso_anual)
    if base <= EXENCION_ANUAL:
        return "0% (Exento)"
    if base <= LIMITE_TRAMO_15:
        return "15%"
    return "15% + 25%"


def validar_tramos(tramos: Optional[Sequence[TramoISR]]) -> List[TramoISR]:
    """Ordena por 'desde' y verifica que los tramos no se solapen.

    El último tramo debe ser abierto (hasta=None).
    """
    if not tramos:
        raise ErrorConfiguracion("No hay tramos de ISR configurados para la compañía")

    ordenados = sorted(tramos, key=lambda t: t.desde)
    for actual, siguiente in zip(ordenados, ordenados[1:]):
        if actual.hasta is None:
            raise ErrorConfiguracion(f"Tramo ISR abierto desde {actual.desde} no es el último")
        if actual.hasta <= actual.desde:
            raise ErrorConfiguracion(f"Tramo ISR inválido: desde {actual.desde} hasta {actual.hasta}")
        if siguiente.desde < actual.hasta:
            raise ErrorConfiguracion(
                f"Tramos ISR solapados: {actual.desde}-{actual.hasta} y {siguiente.desde}"
            )
        if a_decimal(siguiente.desde) - a_decimal(actual.hasta) > HOLGURA_TRAMOS:
            raise ErrorConfiguracion(
                f"Hueco entre tramos ISR: {actual.hasta} y {siguiente.desde}"
            )
    if ordenados[-1].hasta is not None:
        raise ErrorConfiguracion("El tramo ISR más alto debe ser abierto (hasta vacío)")
    return ordenados


def tramo_aplicable(ingreso_anual: Any, tramos: Optional[Sequence[TramoISR]]) -> TramoISR:
    """Último tramo cuyo 'desde' no supera al ingreso.

    Un ingreso dentro de la holgura entre dos tramos cae en el inferior.
    """
    ordenados = validar_tramos(tramos)
    base = a_decimal(ingreso_anual)
    aplicable = ordenados[0]
    for t in ordenados[1:]:
        if base >= a_decimal(t.desde):
            aplicable = t
    return aplicable


def calcular_isr_por_tramos(ingreso_anual: Any, tramos: Optional[Sequence[TramoISR]]) -> float:
    """ISR anual evaluando la tabla de tramos de la compañía.

    impuesto = ingreso x porcentaje / 100 - deduccion_fija
    del tramo que contiene al ingreso, nunca negativo.
    """
    t = tramo_aplicable(ingreso_anual, tramos)
    base = a_decimal(ingreso_anual)
    if base <= 0:
        return 0.0
    impuesto = base * a_decimal(t.porcentaje) / 100 - a_decimal(t.deduccion_fija)
    return float(max(Decimal("0"), impuesto))


def etiqueta_tramo(tramo: TramoISR) -> str:
    if not tramo.porcentaje:
        return "0% (Exento)"
    return f"{tramo.porcentaje:g}%"


def impuesto_anual(
    salario_mensual: Any,
    tramos: Optional[Sequence[TramoISR]] = None,
    usar_tramos: bool = False,
) -> float:
    """ISR anual sobre salario x 13, redondeado al centavo."""
    base = a_decimal(salario_mensual) * SALARIOS_POR_ANIO
    if usar_tramos:
        return round2(calcular_isr_por_tramos(base, tramos))
    return round2(calcular_isr(base))


def calcular_isr_empleado(
    empleado: Empleado,
    tramos: Optional[Sequence[TramoISR]] = None,
    usar_tramos: bool = False,
) -> CalculoISR:
    salario_anual = round2(a_decimal(empleado.salario_base) * SALARIOS_POR_ANIO)
    isr_anual = impuesto_anual(empleado.salario_base, tramos, usar_tramos)
    return CalculoISR(
        empleado_id=empleado.id,
        salario_mensual=round2(empleado.salario_base),
        salario_anual=salario_anual,
        monto_exento=float(EXENCION_ANUAL),
        base_imponible=max(0.0, round2(a_decimal(salario_anual) - EXENCION_ANUAL)),
        isr_anual=isr_anual,
        isr_mensual=dividir(isr_anual, SALARIOS_POR_ANIO),
        tasa_aplicada=tasa_aplicada(salario_anual),
    )


def resumen_isr(
    empleados: Sequence[Empleado],
    tramos: Optional[Sequence[TramoISR]] = None,
    usar_tramos: bool = False,
) -> ResumenISR:
    """Reporte anual de ISR para los empleados activos."""
    detalle = [
        calcular_isr_empleado(e, tramos, usar_tramos)
        for e in empleados
        if e.estado == "activo"
    ]
    logger.debug("Resumen ISR: %d empleados activos", len(detalle))
    return ResumenISR(
        empleados_con_isr=sum(1 for c in detalle if c.isr_anual > 0),
        total_salario_anual=sumar(*(c.salario_anual for c in detalle)),
        total_isr_anual=sumar(*(c.isr_anual for c in detalle)),
        total_isr_mensual=sumar(*(c.isr_mensual for c in detalle)),
        detalle=detalle,
    )
