from datetime import date

import pytest

from planilla.services.calculo_planilla import calcular_planilla
from planilla.services.calculo_sipe import Acumulado, calcular_sipe
from planilla.services.errores import ErrorConfiguracion


def test_sipe_mes_ordinario(nuevo_empleado, parametros, tramos):
    a = nuevo_empleado("A", 2500)
    b = nuevo_empleado("B", 1000)
    c = nuevo_empleado("C", 3000, estado="inactivo")
    entradas = [calcular_planilla(a, "2025-03", "mensual", parametros, tramos)]

    p = calcular_sipe(entradas, "2025-03", [a, b, c], parametros, tramos, compania_id="C1")

    assert p.compania_id == "C1"
    assert p.periodo == "2025-03"
    assert not p.es_mes_decimo
    assert p.total_seguro_social_empleado == 341.25
    assert p.total_seguro_social_empleador == 463.75
    assert p.total_seguro_educativo_empleado == 43.75
    assert p.total_seguro_educativo_empleador == 52.5
    assert p.total_riesgo_profesional == 34.3
    assert p.total_isr == 271.16
    assert p.total_a_pagar == 1206.71
    assert p.total_decimo_ss_empleado == 0
    assert p.fecha_limite == date(2025, 4, 15)
    assert p.estado == "pendiente"


def test_sipe_cuenta_ambas_quincenas_una_vez(nuevo_empleado, parametros, tramos):
    a = nuevo_empleado("A", 2500)
    entradas = [
        calcular_planilla(a, "2025-03-15", "quincenal", parametros, tramos),
        calcular_planilla(a, "2025-03-31", "quincenal", parametros, tramos),
        calcular_planilla(a, "2025-02", "mensual", parametros, tramos),
    ]
    p = calcular_sipe(entradas, "2025-03", [a], parametros, tramos)
    # 2 x 121.88, sin aporte por salario base
    assert p.total_seguro_social_empleado == 243.76
    assert p.total_isr == 248.08


def test_sipe_mes_decimo(nuevo_empleado, parametros, tramos):
    b = nuevo_empleado("B", 1000)
    p = calcular_sipe([], "2025-04", [b], parametros, tramos)

    assert p.es_mes_decimo
    assert p.total_decimo_ss_empleado == 96.67
    assert p.total_decimo_ss_empleador == 143.33
    assert p.total_decimo_isr == 7.69
    assert p.total_seguro_social_empleado == 194.17
    assert p.total_seguro_social_empleador == 275.83
    assert p.total_isr == 30.77
    assert p.total_a_pagar == 538.07


def test_sipe_total_es_suma_de_categorias(nuevo_empleado, parametros, tramos):
    empleados = [nuevo_empleado(f"E{i}", 700 + 613.37 * i) for i in range(6)]
    entradas = [
        calcular_planilla(e, "2025-12-15", "quincenal", parametros, tramos)
        for e in empleados[:3]
    ]
    p = calcular_sipe(entradas, "2025-12", empleados, parametros, tramos)
    categorias = (
        p.total_seguro_social_empleado,
        p.total_seguro_social_empleador,
        p.total_seguro_educativo_empleado,
        p.total_seguro_educativo_empleador,
        p.total_riesgo_profesional,
        p.total_isr,
    )
    assert p.total_a_pagar == pytest.approx(sum(categorias), abs=0.001)
    assert p.fecha_limite == date(2026, 1, 15)


def test_sipe_sin_empleados():
    p = calcular_sipe([], "2025-05", [], [], [])
    assert p.total_a_pagar == 0


def test_acumulado_suma():
    a = Acumulado(ss_empleado=100, isr=5) + Acumulado(ss_empleado=1, se_empleador=2)
    assert a == Acumulado(ss_empleado=101, se_empleador=2, isr=5)
    assert a.total == 108


def test_sipe_mes_decimo_con_planilla_suma_la_partida(nuevo_empleado, parametros, tramos):
    a = nuevo_empleado("A", 2500)
    entrada = calcular_planilla(a, "2025-04", "mensual", parametros, tramos)
    p = calcular_sipe([entrada], "2025-04", [a], parametros, tramos)

    # décimo 10,000 -> partida de 3,333.33
    assert p.total_decimo_ss_empleado == 241.67
    assert p.total_decimo_ss_empleador == 358.33
    assert p.total_decimo_isr == 82.69
    assert p.total_seguro_social_empleado == pytest.approx(entrada.seguro_social_empleado + 241.67)
    assert p.total_seguro_social_empleado == 485.42
    assert p.total_seguro_social_empleador == 689.58
    assert p.total_isr == 330.77
    # sin aporte adicional por salario base
    assert p.total_seguro_educativo_empleado == entrada.seguro_educativo


def test_sipe_sin_configuracion(nuevo_empleado, parametros, tramos):
    a = nuevo_empleado("A", 2500)
    with pytest.raises(ErrorConfiguracion):
        calcular_sipe([], "2025-03", [a], [], tramos)
    with pytest.raises(ErrorConfiguracion):
        calcular_sipe([], "2025-03", [a], parametros, [])
    # solo inactivos: nada que calcular
    inactivo = nuevo_empleado("B", 1000, estado="inactivo")
    assert calcular_sipe([], "2025-03", [inactivo], [], []).total_a_pagar == 0
