from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from planilla.models import DecimoTercerMes, EntradaPlanilla, PagoSIPE

from .errores import ErrorTransicion
from .periodos import MESES_DECIMO, NOMBRES_MESES

logger = logging.getLogger(__name__)

# Solo hacia adelante
TRANSICIONES_PLANILLA = {
    "borrador": ("aprobado",),
    "aprobado": ("pagado",),
    "pagado": (),
}


def cambiar_estado_planilla(entrada: EntradaPlanilla, nuevo: str) -> EntradaPlanilla:
    permitidos = TRANSICIONES_PLANILLA.get(entrada.estado, ())
    if nuevo not in permitidos:
        raise ErrorTransicion(
            f"Planilla {entrada.empleado_id} {entrada.periodo}: no se puede pasar de "
            f"'{entrada.estado}' a '{nuevo}'"
        )
    logger.info("Planilla %s %s: %s -> %s", entrada.empleado_id, entrada.periodo, entrada.estado, nuevo)
    return entrada.model_copy(update={"estado": nuevo})


def puede_recalcular(entrada: Optional[EntradaPlanilla]) -> bool:
    return entrada is None or entrada.estado != "pagado"


def reemplazar_entrada(existente: Optional[EntradaPlanilla], nueva: EntradaPlanilla) -> EntradaPlanilla:
    """Recalcular (upsert por empleado y período). Conserva el id del registro existente."""
    if existente is None:
        return nueva
    if (existente.empleado_id, existente.periodo) != (nueva.empleado_id, nueva.periodo):
        raise ErrorTransicion(
            f"La planilla {nueva.empleado_id} {nueva.periodo} no reemplaza a "
            f"{existente.empleado_id} {existente.periodo}"
        )
    if not puede_recalcular(existente):
        raise ErrorTransicion(f"Planilla {existente.empleado_id} {existente.periodo} ya pagada")
    return nueva.model_copy(update={"id": existente.id})


def reemplazar_decimo(existente: Optional[DecimoTercerMes], nuevo: DecimoTercerMes) -> DecimoTercerMes:
    """Recalcular el décimo (upsert por empleado y año) mientras no tenga partidas pagadas."""
    if existente is None:
        return nuevo
    if (existente.empleado_id, existente.anio) != (nuevo.empleado_id, nuevo.anio):
        raise ErrorTransicion(
            f"El décimo {nuevo.empleado_id} {nuevo.anio} no reemplaza a "
            f"{existente.empleado_id} {existente.anio}"
        )
    if existente.estado != "calculado":
        raise ErrorTransicion(
            f"Décimo {existente.empleado_id} {existente.anio} con partidas pagadas ({existente.estado})"
        )
    return nuevo.model_copy(update={"id": existente.id})


def registrar_pago_decimo(decimo: DecimoTercerMes, mes: int) -> DecimoTercerMes:
    if mes not in MESES_DECIMO:
        raise ErrorTransicion(f"Mes {mes} no es mes de pago del décimo (abril, agosto, diciembre)")
    if mes in decimo.cuotas_pagadas:
        raise ErrorTransicion(
            f"Partida de {NOMBRES_MESES[mes - 1]} del décimo {decimo.empleado_id} {decimo.anio} ya pagada"
        )
    cuotas = sorted(decimo.cuotas_pagadas + [mes])
    estado = "pagado_completo" if len(cuotas) == len(MESES_DECIMO) else "pagado_parcial"
    logger.info("Décimo %s %s: partida %s pagada (%s)", decimo.empleado_id, decimo.anio, mes, estado)
    return decimo.model_copy(update={"cuotas_pagadas": cuotas, "estado": estado})


def marcar_sipe_pagado(pago: PagoSIPE, fecha_pago: date, referencia: Optional[str] = None) -> PagoSIPE:
    if pago.estado == "pagado":
        raise ErrorTransicion(f"SIPE {pago.periodo} ya pagado el {pago.fecha_pago}")
    if fecha_pago > pago.fecha_limite:
        logger.warning("SIPE %s pagado fuera de plazo (%s > %s)", pago.periodo, fecha_pago, pago.fecha_limite)
    return pago.model_copy(
        update={"estado": "pagado", "fecha_pago": fecha_pago, "referencia_pago": referencia}
    )
