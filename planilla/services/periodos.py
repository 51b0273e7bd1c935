from __future__ import annotations

import calendar
import re
from datetime import date
from typing import Optional, Tuple

# YYYY-MM (mensual) o YYYY-MM-DD (quincena: día 15 o último día del mes)
PERIODO_RE = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])(?:-(\d{2}))?$")

MESES_DECIMO = (4, 8, 12)

NOMBRES_MESES = [
    "Enero", "Febrero", "Marzo", "Abril", "Mayo", "Junio",
    "Julio", "Agosto", "Septiembre", "Octubre", "Noviembre", "Diciembre",
]


def parse_periodo(periodo: str) -> Tuple[int, int, Optional[int]]:
    """Devuelve (anio, mes, dia) validando el identificador de período."""
    s = str(periodo or "").strip()
    m = PERIODO_RE.match(s)
    if not m:
        raise ValueError(f"Periodo inválido: {periodo!r} (formato esperado YYYY-MM o YYYY-MM-DD)")
    anio, mes = int(m.group(1)), int(m.group(2))
    dia = int(m.group(3)) if m.group(3) else None
    if dia is not None:
        ultimo = calendar.monthrange(anio, mes)[1]
        if dia not in (15, ultimo):
            raise ValueError(f"Periodo quincenal inválido: {periodo!r} (día 15 o {ultimo})")
    return anio, mes, dia


def ym(periodo: str) -> str:
    """Recorta un período a su mes (YYYY-MM)."""
    anio, mes, _ = parse_periodo(periodo)
    return f"{anio:04d}-{mes:02d}"


def mes_de_periodo(periodo: str) -> int:
    return parse_periodo(periodo)[1]


def anio_de_periodo(periodo: str) -> int:
    return parse_periodo(periodo)[0]


def es_mes_decimo(periodo: str) -> bool:
    """Abril, agosto y diciembre: meses de pago de las partidas del décimo."""
    return mes_de_periodo(periodo) in MESES_DECIMO


def periodo_quincenal(periodo_mes: str, mitad: str) -> str:
    """'primera' -> YYYY-MM-15, 'segunda' -> YYYY-MM-<último día>."""
    anio, mes, dia = parse_periodo(periodo_mes)
    if dia is not None:
        raise ValueError(f"Se esperaba un período mensual (YYYY-MM), no {periodo_mes!r}")
    mitad = (mitad or "").strip().lower()
    if mitad == "primera":
        d = 15
    elif mitad == "segunda":
        d = calendar.monthrange(anio, mes)[1]
    else:
        raise ValueError(f"Quincena inválida: {mitad!r} (primera | segunda)")
    return f"{anio:04d}-{mes:02d}-{d:02d}"


def fecha_limite_sipe(periodo: str) -> date:
    """El SIPE de un mes vence el 15 del mes siguiente."""
    anio, mes, _ = parse_periodo(periodo)
    if mes == 12:
        return date(anio + 1, 1, 15)
    return date(anio, mes + 1, 15)
