from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Any

CENTAVO = Decimal("0.01")
UNIDAD = Decimal("1")


def a_decimal(x: Any) -> Decimal:
    """Convierte un importe a Decimal sin arrastrar el error binario del float."""
    if isinstance(x, Decimal):
        return x
    if x is None:
        return Decimal("0")
    return Decimal(str(x))


def a_centavos(x: Any) -> int:
    """Importe -> centavos enteros (half up)."""
    return int((a_decimal(x) * 100).quantize(UNIDAD, rounding=ROUND_HALF_UP))


def de_centavos(c: int) -> float:
    return float(Decimal(int(c)) / 100)


def round2(x: Any) -> float:
    """Redondeo a 2 decimales (half up) para importes."""
    return float(a_decimal(x).quantize(CENTAVO, rounding=ROUND_HALF_UP))


def sumar(*montos: Any) -> float:
    """Suma en centavos; cada sumando se redondea al centavo antes de sumar."""
    return de_centavos(sum(a_centavos(m) for m in montos))


def restar(minuendo: Any, sustraendo: Any) -> float:
    return de_centavos(a_centavos(minuendo) - a_centavos(sustraendo))


def porcentaje_centavos(centavos: int, tasa: Any) -> int:
    v = Decimal(int(centavos)) * a_decimal(tasa) / 100
    return int(v.quantize(UNIDAD, rounding=ROUND_HALF_UP))


def porcentaje(monto: Any, tasa: Any) -> float:
    """monto x tasa / 100, redondeado al centavo."""
    return de_centavos(porcentaje_centavos(a_centavos(monto), tasa))


def dividir(monto: Any, divisor: Any) -> float:
    return round2(a_decimal(monto) / a_decimal(divisor))
