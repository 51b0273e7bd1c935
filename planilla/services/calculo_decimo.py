from __future__ import annotations

import logging
from datetime import datetime
from enum import IntEnum
from typing import List, Optional, Sequence, Tuple

from planilla.models import (
    DecimoTercerMes,
    Empleado,
    EntradaPlanilla,
    ParametroLegal,
    TramoISR,
)

from .aportes import TASA_CSS_DECIMO_EMPLEADO, TASA_CSS_DECIMO_EMPLEADOR
from .calculo_planilla import verificar_configuracion
from .dinero import a_decimal, dividir, porcentaje, restar, round2, sumar
from .isr import impuesto_anual
from .periodos import NOMBRES_MESES, anio_de_periodo, mes_de_periodo, ym

logger = logging.getLogger(__name__)

CUOTAS = 3


class DivisorISRDecimo(IntEnum):
    """Porción del ISR anual que se retiene sobre el décimo."""

    TRECEAVO = 13  # un salario de los 13 del año
    DOCEAVO = 12  # variante de la pantalla de décimo


def ingresos_del_anio(
    empleado_id: str,
    entradas: Sequence[EntradaPlanilla],
    anio: int,
) -> Tuple[float, List[str]]:
    """Total bruto y meses distintos (YYYY-MM, ordenados) con planilla no borrador."""
    del_anio = [
        e for e in entradas
        if e.empleado_id == empleado_id
        and e.estado != "borrador"
        and anio_de_periodo(e.periodo) == anio
    ]
    total = sumar(*(e.salario_bruto for e in del_anio))
    meses = sorted({ym(e.periodo) for e in del_anio})
    return total, meses


def meses_por_ingreso(empleado: Empleado, anio: int) -> int:
    ingreso = empleado.fecha_ingreso
    if ingreso.year < anio:
        return 12
    if ingreso.year == anio:
        return 12 - (ingreso.month - 1)
    return 0


def calcular_decimo(
    empleado: Empleado,
    entradas: Sequence[EntradaPlanilla],
    anio: int,
    parametros: Sequence[ParametroLegal],
    tramos_isr: Sequence[TramoISR],
    *,
    divisor_isr: DivisorISRDecimo = DivisorISRDecimo.TRECEAVO,
    usar_tramos: bool = False,
    fecha_calculo: Optional[datetime] = None,
) -> DecimoTercerMes:
    """Décimo tercer mes proporcional de un empleado para un año.

    Con planillas del año (no borrador) se usan sus ingresos reales; sin
    ellas se estima con el salario base y los meses desde el ingreso.
    Monto = ingresos x 4 / 12, pagado en tres partidas iguales
    (abril, agosto, diciembre).
    """
    verificar_configuracion(parametros, tramos_isr)
    divisor_isr = DivisorISRDecimo(int(divisor_isr))

    total_ingresos, meses = ingresos_del_anio(empleado.id, entradas, anio)
    if meses:
        meses_trabajados = len(meses)
        meses_detalle = [NOMBRES_MESES[mes_de_periodo(m) - 1] for m in meses]
        salario_promedio = dividir(total_ingresos, meses_trabajados)
    else:
        meses_trabajados = meses_por_ingreso(empleado, anio)
        meses_detalle = NOMBRES_MESES[12 - meses_trabajados:] if meses_trabajados else []
        total_ingresos = round2(a_decimal(empleado.salario_base) * meses_trabajados)
        salario_promedio = round2(empleado.salario_base)

    if meses_trabajados == 0:
        logger.debug("Empleado %s sin meses trabajados en %s; décimo en cero", empleado.id, anio)
        monto_total = css = css_patrono = isr = 0.0
    else:
        monto_total = round2(a_decimal(total_ingresos) * 4 / 12)
        css = porcentaje(monto_total, TASA_CSS_DECIMO_EMPLEADO)
        css_patrono = porcentaje(monto_total, TASA_CSS_DECIMO_EMPLEADOR)
        isr = dividir(impuesto_anual(empleado.salario_base, tramos_isr, usar_tramos), int(divisor_isr))

    total_deducciones = sumar(css, isr)
    monto_neto = restar(monto_total, total_deducciones)
    if monto_neto < 0:
        logger.warning(
            "Décimo neto negativo para empleado %s (%s): total=%.2f deducciones=%.2f",
            empleado.id, anio, monto_total, total_deducciones,
        )
    cuota = dividir(monto_neto, CUOTAS)

    logger.debug(
        "Décimo %s %s: ingresos=%.2f meses=%d total=%.2f css=%.2f isr=%.2f neto=%.2f",
        empleado.id, anio, total_ingresos, meses_trabajados, monto_total, css, isr, monto_neto,
    )

    return DecimoTercerMes(
        compania_id=empleado.compania_id,
        empleado_id=empleado.id,
        anio=anio,
        salario_promedio=salario_promedio,
        total_ingresos=total_ingresos,
        meses_trabajados=meses_trabajados,
        meses_detalle=meses_detalle,
        monto_total=monto_total,
        css=css,
        css_patrono=css_patrono,
        isr=isr,
        divisor_isr=int(divisor_isr),
        total_deducciones=total_deducciones,
        total_aportes_patronales=css_patrono,
        monto_neto=monto_neto,
        pago_abril=cuota,
        pago_agosto=cuota,
        pago_diciembre=cuota,
        estado="calculado",
        fecha_calculo=fecha_calculo,
    )
