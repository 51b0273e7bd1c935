from __future__ import annotations

import logging
import logging.config
import os
from pathlib import Path
from typing import Any, Dict

BASE_DIR = Path(__file__).resolve().parents[1]
DATA_DIR = BASE_DIR / "data"

# --- Datos maestros ---
MAESTRO_PATH = Path(os.getenv("MAESTRO_PATH", str(DATA_DIR / "maestro.json")))

# --- Cálculo ---
# 13: ISR anual / 13 sobre el décimo (histórico). 12: variante de la pantalla de décimo.
DIVISOR_ISR_DECIMO = int(os.getenv("PLANILLA_DIVISOR_ISR_DECIMO", "13"))
if DIVISOR_ISR_DECIMO not in (12, 13):
    raise ValueError(f"PLANILLA_DIVISOR_ISR_DECIMO debe ser 12 o 13 (no {DIVISOR_ISR_DECIMO})")

# 0: escala fija de tres tramos. 1: tabla de tramos de la compañía.
ISR_DESDE_TRAMOS = os.getenv("PLANILLA_ISR_DESDE_TRAMOS", "0").strip().lower() in ("1", "true", "si", "sí")

# --- Logging ---
LOG_LEVEL = os.getenv("PLANILLA_LOG_LEVEL", "INFO").upper()
LOG_FILE_PATH = os.getenv("PLANILLA_LOG_FILE", "")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(module)s.%(funcName)s:%(lineno)d - %(message)s"


def logging_config(level: str = LOG_LEVEL, log_file: str = LOG_FILE_PATH) -> Dict[str, Any]:
    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "level": level,
        },
    }
    if log_file:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "standard",
            "filename": log_file,
            "maxBytes": 1024 * 1024 * 5,  # 5 MB
            "backupCount": 5,
            "level": level,
            "encoding": "utf-8",
        }
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {"format": LOG_FORMAT},
        },
        "handlers": handlers,
        "root": {
            "handlers": list(handlers),
            "level": level,
        },
    }


def configurar_logging(level: str = LOG_LEVEL, log_file: str = LOG_FILE_PATH) -> None:
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(logging_config(level, log_file))
