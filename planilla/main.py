from __future__ import annotations

import logging
from datetime import date, datetime
from typing import List, Literal, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from planilla import config
from planilla.models import (
    DecimoTercerMes,
    Empleado,
    EntradaPlanilla,
    EstadoPlanilla,
    Mes,
    PagoSIPE,
    ParametroLegal,
    TipoPeriodo,
    TramoISR,
)
from planilla.services.calculo_decimo import DivisorISRDecimo, calcular_decimo
from planilla.services.calculo_planilla import calcular_planilla, resumen_planilla
from planilla.services.calculo_sipe import calcular_sipe
from planilla.services.estados import (
    cambiar_estado_planilla,
    marcar_sipe_pagado,
    registrar_pago_decimo,
)
from planilla.services.isr import (
    calcular_isr,
    calcular_isr_por_tramos,
    etiqueta_tramo,
    resumen_isr,
    tasa_aplicada,
    tramo_aplicable,
)
from planilla.services.repo import find_parametro, meta, parametros_por_defecto, tramos_por_defecto

config.configurar_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Planilla Panamá - Motor de cálculo")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -----------------------------
# Models
# -----------------------------
class ConfigCompania(BaseModel):
    # Vacíos = datos maestros por defecto
    parametros: List[ParametroLegal] = Field(default_factory=list)
    tramos_isr: List[TramoISR] = Field(default_factory=list)

    def resolver(self):
        parametros = self.parametros or parametros_por_defecto()
        tramos = self.tramos_isr or tramos_por_defecto()
        return parametros, tramos


class PlanillaIn(ConfigCompania):
    empleado: Empleado
    periodo: str
    tipo_periodo: TipoPeriodo = "quincenal"
    horas_extras: float = 0
    bonificaciones: float = 0
    otros_ingresos: float = 0
    otras_retenciones: float = 0
    fecha_calculo: Optional[datetime] = None


class DecimoIn(ConfigCompania):
    empleado: Empleado
    entradas: List[EntradaPlanilla] = Field(default_factory=list)
    anio: int
    divisor_isr: Optional[Literal[12, 13]] = None
    fecha_calculo: Optional[datetime] = None


class SIPEIn(ConfigCompania):
    compania_id: str = ""
    periodo: str
    empleados: List[Empleado] = Field(default_factory=list)
    entradas: List[EntradaPlanilla] = Field(default_factory=list)
    divisor_isr: Optional[Literal[12, 13]] = None


class ISRIn(BaseModel):
    ingreso_anual: float = Field(ge=0)
    tramos_isr: List[TramoISR] = Field(default_factory=list)


class ISREmpleadosIn(BaseModel):
    empleados: List[Empleado]
    tramos_isr: List[TramoISR] = Field(default_factory=list)


class ResumenIn(BaseModel):
    periodo: str
    entradas: List[EntradaPlanilla] = Field(default_factory=list)


class EstadoPlanillaIn(BaseModel):
    entrada: EntradaPlanilla
    estado: EstadoPlanilla


class PagoDecimoIn(BaseModel):
    decimo: DecimoTercerMes
    mes: Mes


class PagoSIPEIn(BaseModel):
    pago: PagoSIPE
    fecha_pago: date
    referencia: Optional[str] = None


def _divisor(valor: Optional[int]) -> DivisorISRDecimo:
    return DivisorISRDecimo(valor or config.DIVISOR_ISR_DECIMO)


# -----------------------------
# Endpoints
# -----------------------------
@app.get("/api/meta")
def api_meta():
    return meta()


@app.get("/api/parametro")
def api_parametro(tipo: str):
    r = find_parametro(tipo)
    if not r:
        raise HTTPException(status_code=404, detail="Parámetro legal no encontrado")
    return r


@app.post("/api/calc/planilla")
def api_calc_planilla(inp: PlanillaIn):
    try:
        parametros, tramos = inp.resolver()
        return calcular_planilla(
            inp.empleado,
            inp.periodo,
            inp.tipo_periodo,
            parametros,
            tramos,
            horas_extras=inp.horas_extras,
            bonificaciones=inp.bonificaciones,
            otros_ingresos=inp.otros_ingresos,
            otras_retenciones=inp.otras_retenciones,
            usar_tramos=config.ISR_DESDE_TRAMOS,
            fecha_calculo=inp.fecha_calculo or datetime.now(),
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@app.post("/api/calc/decimo")
def api_calc_decimo(inp: DecimoIn):
    try:
        parametros, tramos = inp.resolver()
        return calcular_decimo(
            inp.empleado,
            inp.entradas,
            inp.anio,
            parametros,
            tramos,
            divisor_isr=_divisor(inp.divisor_isr),
            usar_tramos=config.ISR_DESDE_TRAMOS,
            fecha_calculo=inp.fecha_calculo or datetime.now(),
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@app.post("/api/calc/sipe")
def api_calc_sipe(inp: SIPEIn):
    try:
        parametros, tramos = inp.resolver()
        return calcular_sipe(
            inp.entradas,
            inp.periodo,
            inp.empleados,
            parametros,
            tramos,
            compania_id=inp.compania_id,
            divisor_isr=_divisor(inp.divisor_isr),
            usar_tramos=config.ISR_DESDE_TRAMOS,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@app.post("/api/calc/isr")
def api_calc_isr(inp: ISRIn):
    try:
        if inp.tramos_isr:
            isr_anual = calcular_isr_por_tramos(inp.ingreso_anual, inp.tramos_isr)
            tasa = etiqueta_tramo(tramo_aplicable(inp.ingreso_anual, inp.tramos_isr))
        else:
            isr_anual = calcular_isr(inp.ingreso_anual)
            tasa = tasa_aplicada(inp.ingreso_anual)
        return {
            "ingreso_anual": inp.ingreso_anual,
            "isr_anual": isr_anual,
            "tasa_aplicada": tasa,
        }
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@app.post("/api/calc/isr/empleados")
def api_calc_isr_empleados(inp: ISREmpleadosIn):
    try:
        return resumen_isr(
            inp.empleados,
            inp.tramos_isr or tramos_por_defecto(),
            usar_tramos=config.ISR_DESDE_TRAMOS,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@app.post("/api/calc/planilla/resumen")
def api_calc_resumen(inp: ResumenIn):
    try:
        return resumen_planilla(inp.entradas, inp.periodo)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@app.post("/api/planilla/estado")
def api_planilla_estado(inp: EstadoPlanillaIn):
    try:
        return cambiar_estado_planilla(inp.entrada, inp.estado)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@app.post("/api/decimo/pago")
def api_decimo_pago(inp: PagoDecimoIn):
    try:
        return registrar_pago_decimo(inp.decimo, inp.mes)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@app.post("/api/sipe/pago")
def api_sipe_pago(inp: PagoSIPEIn):
    try:
        return marcar_sipe_pagado(inp.pago, inp.fecha_pago, inp.referencia)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
