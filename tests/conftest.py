from datetime import date

import pytest

from planilla.models import Empleado, ParametroLegal
from planilla.services.aportes import TASAS_POR_DEFECTO
from planilla.services.isr import TRAMOS_PANAMA


@pytest.fixture
def parametros():
    return [
        ParametroLegal(tipo=tipo, porcentaje=pct, fecha_vigencia=date(2025, 1, 1))
        for tipo, pct in TASAS_POR_DEFECTO.items()
    ]


@pytest.fixture
def tramos():
    return list(TRAMOS_PANAMA)


@pytest.fixture
def nuevo_empleado():
    def _nuevo(id="E1", salario_base=2500, fecha_ingreso=date(2020, 1, 6), **kw):
        return Empleado(id=id, compania_id="C1", salario_base=salario_base, fecha_ingreso=fecha_ingreso, **kw)

    return _nuevo
