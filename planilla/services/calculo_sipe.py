from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import reduce
from typing import Sequence

from planilla.models import Empleado, EntradaPlanilla, PagoSIPE, ParametroLegal, TramoISR

from .aportes import (
    TASA_CSS_DECIMO_EMPLEADO,
    TASA_CSS_DECIMO_EMPLEADOR,
    calcular_aportes,
    resolver_tasas,
)
from .calculo_decimo import CUOTAS, DivisorISRDecimo, calcular_decimo
from .calculo_planilla import verificar_configuracion
from .dinero import a_centavos, de_centavos, dividir, porcentaje
from .isr import SALARIOS_POR_ANIO, impuesto_anual
from .periodos import anio_de_periodo, es_mes_decimo, fecha_limite_sipe, ym

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Acumulado:
    """Totales SIPE en centavos."""

    ss_empleado: int = 0
    ss_empleador: int = 0
    se_empleado: int = 0
    se_empleador: int = 0
    riesgo_profesional: int = 0
    isr: int = 0
    decimo_ss_empleado: int = 0
    decimo_ss_empleador: int = 0
    decimo_isr: int = 0

    def __add__(self, otro: "Acumulado") -> "Acumulado":
        return Acumulado(
            ss_empleado=self.ss_empleado + otro.ss_empleado,
            ss_empleador=self.ss_empleador + otro.ss_empleador,
            se_empleado=self.se_empleado + otro.se_empleado,
            se_empleador=self.se_empleador + otro.se_empleador,
            riesgo_profesional=self.riesgo_profesional + otro.riesgo_profesional,
            isr=self.isr + otro.isr,
            decimo_ss_empleado=self.decimo_ss_empleado + otro.decimo_ss_empleado,
            decimo_ss_empleador=self.decimo_ss_empleador + otro.decimo_ss_empleador,
            decimo_isr=self.decimo_isr + otro.decimo_isr,
        )

    @property
    def total(self) -> int:
        return (
            self.ss_empleado
            + self.ss_empleador
            + self.se_empleado
            + self.se_empleador
            + self.riesgo_profesional
            + self.isr
        )


def de_entrada(e: EntradaPlanilla) -> Acumulado:
    return Acumulado(
        ss_empleado=a_centavos(e.seguro_social_empleado),
        ss_empleador=a_centavos(e.seguro_social_empleador),
        se_empleado=a_centavos(e.seguro_educativo),
        se_empleador=a_centavos(e.seguro_educativo_empleador),
        riesgo_profesional=a_centavos(e.riesgo_profesional),
        isr=a_centavos(e.isr),
    )


def partida_decimo(
    empleado: Empleado,
    entradas: Sequence[EntradaPlanilla],
    anio: int,
    parametros: Sequence[ParametroLegal],
    tramos_isr: Sequence[TramoISR],
    divisor_isr: DivisorISRDecimo,
    usar_tramos: bool,
) -> Acumulado:
    """Aportes de una de las tres partidas del décimo (un tercio del monto)."""
    decimo = calcular_decimo(
        empleado, entradas, anio, parametros, tramos_isr,
        divisor_isr=divisor_isr, usar_tramos=usar_tramos,
    )
    base = dividir(decimo.monto_total, CUOTAS)
    ss_emp = a_centavos(porcentaje(base, TASA_CSS_DECIMO_EMPLEADO))
    ss_pat = a_centavos(porcentaje(base, TASA_CSS_DECIMO_EMPLEADOR))
    isr = a_centavos(dividir(decimo.isr, CUOTAS))
    return Acumulado(
        ss_empleado=ss_emp,
        ss_empleador=ss_pat,
        isr=isr,
        decimo_ss_empleado=ss_emp,
        decimo_ss_empleador=ss_pat,
        decimo_isr=isr,
    )


def sin_planilla(
    empleado: Empleado,
    parametros: Sequence[ParametroLegal],
    tramos_isr: Sequence[TramoISR],
    usar_tramos: bool,
) -> Acumulado:
    """Aportes de un empleado activo sin planilla en el mes, sobre su salario base."""
    a = calcular_aportes(empleado.salario_base, empleado.salario_base, resolver_tasas(parametros))
    isr = dividir(impuesto_anual(empleado.salario_base, tramos_isr, usar_tramos), SALARIOS_POR_ANIO)
    return Acumulado(
        ss_empleado=a_centavos(a.seguro_social_empleado),
        ss_empleador=a_centavos(a.seguro_social_empleador),
        se_empleado=a_centavos(a.seguro_educativo_empleado),
        se_empleador=a_centavos(a.seguro_educativo_empleador),
        riesgo_profesional=a_centavos(a.riesgo_profesional),
        isr=a_centavos(isr),
    )


def calcular_sipe(
    entradas: Sequence[EntradaPlanilla],
    periodo: str,
    empleados: Sequence[Empleado],
    parametros: Sequence[ParametroLegal],
    tramos_isr: Sequence[TramoISR],
    *,
    compania_id: str = "",
    divisor_isr: DivisorISRDecimo = DivisorISRDecimo.TRECEAVO,
    usar_tramos: bool = False,
) -> PagoSIPE:
    """Pago SIPE de la compañía para un mes (YYYY-MM).

    Cada empleado activo aporta una sola vez por categoría: por sus
    planillas del mes (ambas quincenas) o, si no tiene, por su salario base.
    En abril, agosto y diciembre se suma además la partida del décimo.
    """
    mes = ym(periodo)
    anio = anio_de_periodo(mes)
    mes_decimo = es_mes_decimo(mes)

    del_mes = [e for e in entradas if ym(e.periodo) == mes]
    con_planilla = {e.empleado_id for e in del_mes}
    activos = [emp for emp in empleados if emp.estado == "activo"]
    if activos:
        verificar_configuracion(parametros, tramos_isr)

    partes = [de_entrada(e) for e in del_mes]
    if mes_decimo:
        partes += [
            partida_decimo(emp, entradas, anio, parametros, tramos_isr, divisor_isr, usar_tramos)
            for emp in activos
        ]
    faltantes = [emp for emp in activos if emp.id not in con_planilla]
    if faltantes:
        logger.info(
            "SIPE %s: %d empleados activos sin planilla, se usan salarios base",
            mes, len(faltantes),
        )
    partes += [sin_planilla(emp, parametros, tramos_isr, usar_tramos) for emp in faltantes]

    acc = reduce(lambda a, b: a + b, partes, Acumulado())

    logger.debug(
        "SIPE %s: entradas=%d activos=%d decimo=%s total=%.2f",
        mes, len(del_mes), len(activos), mes_decimo, de_centavos(acc.total),
    )

    return PagoSIPE(
        compania_id=compania_id,
        periodo=mes,
        fecha_limite=fecha_limite_sipe(mes),
        es_mes_decimo=mes_decimo,
        total_seguro_social_empleado=de_centavos(acc.ss_empleado),
        total_seguro_social_empleador=de_centavos(acc.ss_empleador),
        total_seguro_educativo_empleado=de_centavos(acc.se_empleado),
        total_seguro_educativo_empleador=de_centavos(acc.se_empleador),
        total_riesgo_profesional=de_centavos(acc.riesgo_profesional),
        total_isr=de_centavos(acc.isr),
        total_decimo_ss_empleado=de_centavos(acc.decimo_ss_empleado),
        total_decimo_ss_empleador=de_centavos(acc.decimo_ss_empleador),
        total_decimo_isr=de_centavos(acc.decimo_isr),
        total_a_pagar=de_centavos(acc.total),
        estado="pendiente",
    )
