from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field

Mes = Annotated[int, Field(ge=1, le=12)]

TipoPeriodo = Literal["quincenal", "mensual"]

TipoParametro = Literal[
    "seguro_social_empleado",
    "seguro_social_empleador",
    "seguro_educativo",
    "seguro_educativo_empleador",
    "riesgo_profesional",
    "fondo_cesantia",
    "otro",
]

EstadoPlanilla = Literal["borrador", "aprobado", "pagado"]
EstadoDecimo = Literal["calculado", "pagado_parcial", "pagado_completo"]
EstadoSIPE = Literal["pendiente", "pagado"]


# --- 1. DEDUCCIONES PERSONALIZADAS ---
class DeduccionFija(BaseModel):
    tipo: Literal["fijo"] = "fijo"
    concepto: str
    monto: float = Field(ge=0, description="Monto mensual")
    activo: bool = True
    meses_aplicacion: List[Mes] = Field(default_factory=list, description="Vacío = todos los meses")


class DeduccionPorcentual(BaseModel):
    tipo: Literal["porcentual"] = "porcentual"
    concepto: str
    porcentaje: float = Field(ge=0, description="Porcentaje sobre el salario bruto del período")
    activo: bool = True
    meses_aplicacion: List[Mes] = Field(default_factory=list, description="Vacío = todos los meses")


DeduccionPersonalizada = Annotated[Union[DeduccionFija, DeduccionPorcentual], Field(discriminator="tipo")]


# --- 2. DATOS DE ENTRADA (externos, solo lectura) ---
class Empleado(BaseModel):
    id: str
    compania_id: str = ""
    cedula: str = ""
    nombre: str = ""
    apellido: str = ""
    fecha_ingreso: date
    salario_base: float = Field(gt=0, description="Salario mensual")
    estado: Literal["activo", "inactivo"] = "activo"

    deducciones_bancarias: float = Field(default=0, ge=0)
    meses_deducciones_bancarias: Optional[List[Mes]] = None
    prestamos: float = Field(default=0, ge=0)
    meses_prestamos: Optional[List[Mes]] = None
    otras_deducciones_personalizadas: List[DeduccionPersonalizada] = Field(default_factory=list)


class ParametroLegal(BaseModel):
    id: Optional[str] = None
    compania_id: str = ""
    nombre: str = ""
    tipo: TipoParametro
    porcentaje: float = Field(ge=0)
    activo: bool = True
    fecha_vigencia: date


class TramoISR(BaseModel):
    id: Optional[str] = None
    compania_id: str = ""
    desde: float = Field(ge=0)
    hasta: Optional[float] = Field(default=None, description="None = sin tope")
    porcentaje: float = Field(ge=0)
    deduccion_fija: float = Field(default=0, ge=0)


# --- 3. RESULTADOS ---
class LineaDeduccion(BaseModel):
    concepto: str
    monto: float


class EntradaPlanilla(BaseModel):
    id: Optional[str] = None
    compania_id: str = ""
    empleado_id: str
    periodo: str = Field(..., description="YYYY-MM o YYYY-MM-DD")
    tipo_periodo: TipoPeriodo = "mensual"

    salario_base_periodo: float = 0
    horas_extras: float = 0
    bonificaciones: float = 0
    otros_ingresos: float = 0
    salario_bruto: float

    seguro_social_empleado: float = 0
    seguro_educativo: float = 0
    isr: float = 0
    deducciones_bancarias: float = 0
    prestamos: float = 0
    otras_deducciones_personalizadas: float = 0
    detalle_deducciones: List[LineaDeduccion] = Field(default_factory=list)
    otras_retenciones: float = 0
    total_deducciones: float = 0
    salario_neto: float = 0

    seguro_social_empleador: float = 0
    seguro_educativo_empleador: float = 0
    riesgo_profesional: float = 0
    fondo_cesantia: float = 0

    estado: EstadoPlanilla = "borrador"
    fecha_calculo: Optional[datetime] = None


class DecimoTercerMes(BaseModel):
    id: Optional[str] = None
    compania_id: str = ""
    empleado_id: str
    anio: int

    salario_promedio: float
    total_ingresos: float
    meses_trabajados: int
    meses_detalle: List[str] = Field(default_factory=list)

    monto_total: float
    css: float
    css_patrono: float
    isr: float
    divisor_isr: int
    total_deducciones: float
    total_aportes_patronales: float
    monto_neto: float

    pago_abril: float
    pago_agosto: float
    pago_diciembre: float
    cuotas_pagadas: List[Mes] = Field(default_factory=list)

    estado: EstadoDecimo = "calculado"
    fecha_calculo: Optional[datetime] = None


class PagoSIPE(BaseModel):
    compania_id: str = ""
    periodo: str
    fecha_limite: date
    es_mes_decimo: bool = False

    total_seguro_social_empleado: float = 0
    total_seguro_social_empleador: float = 0
    total_seguro_educativo_empleado: float = 0
    total_seguro_educativo_empleador: float = 0
    total_riesgo_profesional: float = 0
    total_isr: float = 0

    # Parte de los totales anteriores que corresponde a la partida del décimo
    total_decimo_ss_empleado: float = 0
    total_decimo_ss_empleador: float = 0
    total_decimo_isr: float = 0

    total_a_pagar: float = 0
    estado: EstadoSIPE = "pendiente"
    fecha_pago: Optional[date] = None
    referencia_pago: Optional[str] = None


class ResumenPlanilla(BaseModel):
    periodo: str
    total_empleados: int
    total_salario_bruto: float
    total_deducciones: float
    total_salario_neto: float
    total_seguro_social_empleador: float


class CalculoISR(BaseModel):
    empleado_id: str
    salario_mensual: float
    salario_anual: float
    monto_exento: float
    base_imponible: float
    isr_anual: float
    isr_mensual: float
    tasa_aplicada: str


class ResumenISR(BaseModel):
    empleados_con_isr: int
    total_salario_anual: float
    total_isr_anual: float
    total_isr_mensual: float
    detalle: List[CalculoISR] = Field(default_factory=list)
