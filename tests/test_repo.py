import json

import pytest

from planilla import config
from planilla.services import repo
from planilla.services.aportes import TASAS_POR_DEFECTO, resolver_tasas
from planilla.services.isr import calcular_isr_por_tramos


@pytest.fixture(autouse=True)
def limpiar_cache():
    repo.load_maestro.cache_clear()
    yield
    repo.load_maestro.cache_clear()


def test_parametros_por_defecto_coinciden_con_tasas():
    parametros = repo.parametros_por_defecto("C9")
    assert {p.compania_id for p in parametros} == {"C9"}
    tasas = resolver_tasas(parametros)
    for tipo, pct in TASAS_POR_DEFECTO.items():
        assert getattr(tasas, tipo) == pct


def test_tramos_por_defecto():
    tramos = repo.tramos_por_defecto()
    assert [t.desde for t in tramos] == [0, 11000, 50000]
    assert tramos[-1].hasta is None
    assert calcular_isr_por_tramos(32500, tramos) == 3225.0


def test_find_parametro():
    assert repo.find_parametro("riesgo_profesional")["porcentaje"] == 0.98
    assert repo.find_parametro("no_existe") is None


def test_meta():
    m = repo.meta()
    assert len(m["parametros_legales"]) == 6
    assert m["tramos_isr"][2]["hasta"] is None
    assert m["divisor_isr_decimo"] in (12, 13)


def test_maestro_desde_otra_ruta(tmp_path, monkeypatch):
    ruta = tmp_path / "maestro.json"
    ruta.write_text(json.dumps({"parametros_legales": [], "tramos_isr": []}), encoding="utf-8")
    monkeypatch.setattr(config, "MAESTRO_PATH", ruta)
    assert repo.parametros_por_defecto() == []


def test_maestro_inexistente(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "MAESTRO_PATH", tmp_path / "no.json")
    with pytest.raises(FileNotFoundError):
        repo.load_maestro()
