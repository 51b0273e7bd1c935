from datetime import datetime

import pytest

from planilla.models import DeduccionFija, DeduccionPorcentual
from planilla.services.calculo_planilla import calcular_planilla, resumen_planilla
from planilla.services.errores import ErrorConfiguracion


def test_planilla_mensual_2500(nuevo_empleado, parametros, tramos):
    e = calcular_planilla(nuevo_empleado(salario_base=2500), "2025-03", "mensual", parametros, tramos)
    assert e.salario_bruto == 2500.0
    assert e.seguro_social_empleado == 243.75
    assert e.seguro_educativo == 31.25
    assert e.isr == 248.08
    assert e.total_deducciones == 523.08
    assert e.salario_neto == 1976.92
    assert e.seguro_social_empleador == 331.25
    assert e.seguro_educativo_empleador == 37.5
    assert e.riesgo_profesional == 24.5
    assert e.fondo_cesantia == 56.25
    assert e.estado == "borrador"
    assert e.compania_id == "C1"


def test_planilla_quincenal_2500(nuevo_empleado, parametros, tramos):
    e = calcular_planilla(nuevo_empleado(salario_base=2500), "2025-03-15", "quincenal", parametros, tramos)
    assert e.salario_base_periodo == 1250.0
    assert e.seguro_social_empleado == 121.88
    assert e.seguro_educativo == 15.63
    assert e.isr == 124.04
    assert e.salario_neto == 988.45


def test_planilla_exenta_de_isr(nuevo_empleado, parametros, tramos):
    e = calcular_planilla(nuevo_empleado(salario_base=800), "2025-03", "mensual", parametros, tramos)
    assert e.isr == 0.0
    assert e.salario_neto == 800 - 78 - 10


def test_ingresos_adicionales_suman_al_bruto(nuevo_empleado, parametros, tramos):
    e = calcular_planilla(
        nuevo_empleado(salario_base=1000), "2025-03", "mensual", parametros, tramos,
        horas_extras=100, bonificaciones=50.5, otros_ingresos=0.5, otras_retenciones=10,
    )
    assert e.salario_bruto == 1151.0
    # el ISR se calcula sobre el salario base, no sobre el bruto
    assert e.isr == 23.08
    assert e.seguro_social_empleado == 112.22
    assert e.otras_retenciones == 10.0
    assert e.total_deducciones == pytest.approx(112.22 + 14.39 + 23.08 + 10)


def test_prestamos_por_mes_de_aplicacion(nuevo_empleado, parametros, tramos):
    emp = nuevo_empleado(
        salario_base=1000,
        deducciones_bancarias=200,
        meses_deducciones_bancarias=[1, 2],
        prestamos=100,
        meses_prestamos=[],
    )
    enero = calcular_planilla(emp, "2025-01-15", "quincenal", parametros, tramos)
    assert enero.deducciones_bancarias == 100.0
    assert enero.prestamos == 50.0

    marzo = calcular_planilla(emp, "2025-03", "mensual", parametros, tramos)
    assert marzo.deducciones_bancarias == 0.0
    assert marzo.prestamos == 100.0


def test_deducciones_personalizadas(nuevo_empleado, parametros, tramos):
    emp = nuevo_empleado(
        salario_base=1000,
        otras_deducciones_personalizadas=[
            DeduccionFija(concepto="Cooperativa", monto=40),
            DeduccionPorcentual(concepto="Sindicato", porcentaje=1.5),
            DeduccionFija(concepto="Uniforme", monto=25, meses_aplicacion=[6]),
            DeduccionFija(concepto="Inactiva", monto=99, activo=False),
        ],
    )
    e = calcular_planilla(emp, "2025-03-31", "quincenal", parametros, tramos)
    assert [(l.concepto, l.monto) for l in e.detalle_deducciones] == [
        ("Cooperativa", 20.0),
        ("Sindicato", 7.5),
    ]
    assert e.otras_deducciones_personalizadas == 27.5


def test_deducciones_desde_dict(nuevo_empleado, parametros, tramos):
    emp = nuevo_empleado(
        salario_base=1000,
        otras_deducciones_personalizadas=[{"tipo": "porcentual", "concepto": "Ahorro", "porcentaje": 10}],
    )
    e = calcular_planilla(emp, "2025-03", "mensual", parametros, tramos)
    assert e.detalle_deducciones[0].monto == 100.0


def test_neto_negativo_se_registra(nuevo_empleado, parametros, tramos, caplog):
    emp = nuevo_empleado(salario_base=1000, prestamos=5000)
    e = calcular_planilla(emp, "2025-03", "mensual", parametros, tramos)
    assert e.salario_neto < 0
    assert "Salario neto negativo" in caplog.text


def test_es_determinista(nuevo_empleado, parametros, tramos):
    ts = datetime(2025, 3, 31, 12, 0)
    a = calcular_planilla(nuevo_empleado(), "2025-03", "mensual", parametros, tramos, fecha_calculo=ts)
    b = calcular_planilla(nuevo_empleado(), "2025-03", "mensual", parametros, tramos, fecha_calculo=ts)
    assert a == b


def test_sin_configuracion(nuevo_empleado, parametros, tramos):
    with pytest.raises(ErrorConfiguracion):
        calcular_planilla(nuevo_empleado(), "2025-03", "mensual", [], tramos)
    with pytest.raises(ErrorConfiguracion):
        calcular_planilla(nuevo_empleado(), "2025-03", "mensual", parametros, [])


@pytest.mark.parametrize(
    "periodo, tipo, extras",
    [
        ("2025-03", "semanal", {}),
        ("2025-3", "mensual", {}),
        ("2025-03", "mensual", {"horas_extras": -1}),
        ("2025-03", "mensual", {"otras_retenciones": -0.01}),
    ],
)
def test_entradas_invalidas(nuevo_empleado, parametros, tramos, periodo, tipo, extras):
    with pytest.raises(ValueError):
        calcular_planilla(nuevo_empleado(), periodo, tipo, parametros, tramos, **extras)


def test_resumen_planilla(nuevo_empleado, parametros, tramos):
    emp = nuevo_empleado(salario_base=2500)
    otro = nuevo_empleado("E2", salario_base=1000)
    entradas = [
        calcular_planilla(emp, "2025-03-15", "quincenal", parametros, tramos),
        calcular_planilla(emp, "2025-03-31", "quincenal", parametros, tramos),
        calcular_planilla(otro, "2025-03", "mensual", parametros, tramos),
        calcular_planilla(otro, "2025-04", "mensual", parametros, tramos),
    ]
    r = resumen_planilla(entradas, "2025-03")
    assert r.periodo == "2025-03"
    assert r.total_empleados == 2
    assert r.total_salario_bruto == 3500.0
    assert r.total_seguro_social_empleador == 463.76
    assert r.total_salario_neto == pytest.approx(988.45 * 2 + entradas[2].salario_neto)
