from __future__ import annotations

import json
import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional

from planilla import config
from planilla.models import ParametroLegal, TramoISR

from .isr import validar_tramos

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def load_maestro() -> Dict[str, Any]:
    if not config.MAESTRO_PATH.exists():
        raise FileNotFoundError(f"Missing maestro.json at {config.MAESTRO_PATH}")
    logger.info("Cargando datos maestros desde %s", config.MAESTRO_PATH)
    return json.loads(config.MAESTRO_PATH.read_text(encoding="utf-8"))


def parametros_por_defecto(compania_id: str = "") -> List[ParametroLegal]:
    """Parámetros legales con que se siembra una compañía nueva."""
    return [
        ParametroLegal(**{**r, "compania_id": compania_id})
        for r in load_maestro().get("parametros_legales", [])
    ]


def tramos_por_defecto(compania_id: str = "") -> List[TramoISR]:
    tramos = [
        TramoISR(**{**r, "compania_id": compania_id})
        for r in load_maestro().get("tramos_isr", [])
    ]
    return validar_tramos(tramos)


def find_parametro(tipo: str) -> Optional[Dict[str, Any]]:
    for r in load_maestro().get("parametros_legales", []):
        if r.get("tipo") == tipo:
            return r
    return None


def meta() -> Dict[str, Any]:
    """Datos maestros para poblar los formularios."""
    return {
        "parametros_legales": [p.model_dump(mode="json") for p in parametros_por_defecto()],
        "tramos_isr": [t.model_dump(mode="json") for t in tramos_por_defecto()],
        "divisor_isr_decimo": config.DIVISOR_ISR_DECIMO,
        "isr_desde_tramos": config.ISR_DESDE_TRAMOS,
    }
