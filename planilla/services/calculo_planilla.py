from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, List, Optional, Sequence

from planilla.models import (
    DeduccionFija,
    Empleado,
    EntradaPlanilla,
    LineaDeduccion,
    ParametroLegal,
    ResumenPlanilla,
    TramoISR,
)

from .aportes import calcular_aportes, resolver_tasas
from .dinero import a_decimal, dividir, porcentaje, restar, round2, sumar
from .errores import ErrorConfiguracion
from .isr import impuesto_anual
from .periodos import mes_de_periodo, ym

logger = logging.getLogger(__name__)

TIPOS_PERIODO = ("quincenal", "mensual")

# Divisores del ISR anual por tipo de período. Constantes de política:
# no se derivan del número real de pagos.
DIVISOR_ISR_PERIODO = {
    "quincenal": 26,
    "mensual": 13,
}


def aplica_en_mes(meses: Optional[Sequence[int]], mes: int) -> bool:
    """Lista vacía o ausente = todos los meses."""
    return not meses or mes in meses


def verificar_configuracion(
    parametros: Sequence[ParametroLegal],
    tramos_isr: Sequence[TramoISR],
) -> None:
    if not parametros:
        raise ErrorConfiguracion("No hay parámetros legales configurados para la compañía")
    if not tramos_isr:
        raise ErrorConfiguracion("No hay tramos de ISR configurados para la compañía")


def _no_negativo(nombre: str, valor: Any) -> float:
    if a_decimal(valor) < 0:
        raise ValueError(f"{nombre} no puede ser negativo ({valor})")
    return round2(valor)


def _deduccion_mensual(monto: Any, quincenal: bool) -> float:
    if quincenal:
        return dividir(monto, 2)
    return round2(monto)


def calcular_deducciones_personalizadas(
    empleado: Empleado,
    mes: int,
    salario_bruto: float,
    quincenal: bool,
) -> List[LineaDeduccion]:
    """Deducciones personalizadas activas que aplican en el mes.

    Fijas: monto mensual, a la mitad en planilla quincenal.
    Porcentuales: porcentaje del salario bruto del período.
    """
    lineas: List[LineaDeduccion] = []
    for d in empleado.otras_deducciones_personalizadas:
        if not d.activo or not aplica_en_mes(d.meses_aplicacion, mes):
            continue
        if isinstance(d, DeduccionFija):
            monto = _deduccion_mensual(d.monto, quincenal)
        else:
            monto = porcentaje(salario_bruto, d.porcentaje)
        lineas.append(LineaDeduccion(concepto=d.concepto, monto=monto))
    return lineas


def calcular_planilla(
    empleado: Empleado,
    periodo: str,
    tipo_periodo: str,
    parametros: Sequence[ParametroLegal],
    tramos_isr: Sequence[TramoISR],
    *,
    horas_extras: float = 0,
    bonificaciones: float = 0,
    otros_ingresos: float = 0,
    otras_retenciones: float = 0,
    usar_tramos: bool = False,
    fecha_calculo: Optional[datetime] = None,
) -> EntradaPlanilla:
    """Planilla de un empleado para un período (quincenal o mensual).

    Cada importe intermedio se redondea al centavo en el paso en que se
    calcula; los totales se suman en centavos.
    """
    verificar_configuracion(parametros, tramos_isr)
    if tipo_periodo not in TIPOS_PERIODO:
        raise ValueError(f"Tipo de período inválido: {tipo_periodo!r} (quincenal | mensual)")
    if a_decimal(empleado.salario_base) <= 0:
        raise ValueError(f"Salario base inválido para empleado {empleado.id}: {empleado.salario_base}")
    if empleado.estado != "activo":
        logger.warning("Calculando planilla de empleado inactivo %s (%s)", empleado.id, periodo)

    mes = mes_de_periodo(periodo)
    quincenal = tipo_periodo == "quincenal"

    horas_extras = _no_negativo("horas_extras", horas_extras)
    bonificaciones = _no_negativo("bonificaciones", bonificaciones)
    otros_ingresos = _no_negativo("otros_ingresos", otros_ingresos)
    otras_retenciones = _no_negativo("otras_retenciones", otras_retenciones)

    # 1-2. Salario del período y bruto
    salario_base_periodo = _deduccion_mensual(empleado.salario_base, quincenal)
    salario_bruto = sumar(salario_base_periodo, horas_extras, bonificaciones, otros_ingresos)

    # 3. Aportes sobre el bruto (misma base para SS y SE)
    tasas = resolver_tasas(parametros)
    aportes = calcular_aportes(salario_bruto, salario_bruto, tasas)

    # 4. ISR: anual sobre salario x 13, prorrateado al período
    isr_anual = impuesto_anual(empleado.salario_base, tramos_isr, usar_tramos)
    isr = dividir(isr_anual, DIVISOR_ISR_PERIODO[tipo_periodo])

    # 5. Préstamos bancarios y personales según meses de aplicación
    deducciones_bancarias = 0.0
    if aplica_en_mes(empleado.meses_deducciones_bancarias, mes):
        deducciones_bancarias = _deduccion_mensual(empleado.deducciones_bancarias, quincenal)

    prestamos = 0.0
    if aplica_en_mes(empleado.meses_prestamos, mes):
        prestamos = _deduccion_mensual(empleado.prestamos, quincenal)

    # 6. Deducciones personalizadas
    detalle = calcular_deducciones_personalizadas(empleado, mes, salario_bruto, quincenal)
    otras_personalizadas = sumar(*(l.monto for l in detalle))

    # 7-8. Totales
    total_deducciones = sumar(
        aportes.seguro_social_empleado,
        aportes.seguro_educativo_empleado,
        isr,
        deducciones_bancarias,
        prestamos,
        otras_personalizadas,
        otras_retenciones,
    )
    salario_neto = restar(salario_bruto, total_deducciones)
    if salario_neto < 0:
        logger.warning(
            "Salario neto negativo para empleado %s en %s: bruto=%.2f deducciones=%.2f",
            empleado.id, periodo, salario_bruto, total_deducciones,
        )

    logger.debug(
        "Planilla %s %s (%s): bruto=%.2f ss=%.2f se=%.2f isr=%.2f neto=%.2f",
        empleado.id, periodo, tipo_periodo, salario_bruto,
        aportes.seguro_social_empleado, aportes.seguro_educativo_empleado, isr, salario_neto,
    )

    return EntradaPlanilla(
        compania_id=empleado.compania_id,
        empleado_id=empleado.id,
        periodo=periodo,
        tipo_periodo=tipo_periodo,
        salario_base_periodo=salario_base_periodo,
        horas_extras=horas_extras,
        bonificaciones=bonificaciones,
        otros_ingresos=otros_ingresos,
        salario_bruto=salario_bruto,
        seguro_social_empleado=aportes.seguro_social_empleado,
        seguro_educativo=aportes.seguro_educativo_empleado,
        isr=isr,
        deducciones_bancarias=deducciones_bancarias,
        prestamos=prestamos,
        otras_deducciones_personalizadas=otras_personalizadas,
        detalle_deducciones=detalle,
        otras_retenciones=otras_retenciones,
        total_deducciones=total_deducciones,
        salario_neto=salario_neto,
        seguro_social_empleador=aportes.seguro_social_empleador,
        seguro_educativo_empleador=aportes.seguro_educativo_empleador,
        riesgo_profesional=aportes.riesgo_profesional,
        fondo_cesantia=aportes.fondo_cesantia,
        estado="borrador",
        fecha_calculo=fecha_calculo,
    )


def resumen_planilla(entradas: Sequence[EntradaPlanilla], periodo: str) -> ResumenPlanilla:
    """Totales de la planilla de un mes (incluye ambas quincenas)."""
    mes = ym(periodo)
    del_mes = [e for e in entradas if ym(e.periodo) == mes]
    return ResumenPlanilla(
        periodo=mes,
        total_empleados=len({e.empleado_id for e in del_mes}),
        total_salario_bruto=sumar(*(e.salario_bruto for e in del_mes)),
        total_deducciones=sumar(*(e.total_deducciones for e in del_mes)),
        total_salario_neto=sumar(*(e.salario_neto for e in del_mes)),
        total_seguro_social_empleador=sumar(*(e.seguro_social_empleador for e in del_mes)),
    )
