import json
import re
import sys
from datetime import date, datetime
from pathlib import Path

import openpyxl

SRC = Path(__file__).resolve().parent / "maestro_planilla.xlsx"
OUT = Path(__file__).resolve().parent / "data" / "maestro.json"

PARAMETROS_COLS = ["id", "nombre", "tipo", "porcentaje", "activo", "fecha_vigencia"]
TRAMOS_COLS = ["id", "desde", "hasta", "porcentaje", "deduccion_fija"]


def norm(h):
    if h is None:
        return None
    h = re.sub(r"\s+", " ", str(h).strip())
    return h


def export_sheet_rows(ws, required):
    headers = [norm(ws.cell(1, c).value) for c in range(1, ws.max_column + 1)]
    h2i = {h: i + 1 for i, h in enumerate(headers) if h}
    required_norm = {}
    for want in required:
        for h in headers:
            if not h:
                continue
            if h.lower().replace(" ", "_") == want.strip().lower():
                required_norm[want] = h
                break
    missing = [w for w in required if w not in required_norm]
    if missing:
        raise ValueError(f"Hoja {ws.title}: faltan columnas {missing}")

    out = []
    for r in range(2, ws.max_row + 1):
        row = {}
        empty = True
        for want, real in required_norm.items():
            v = ws.cell(r, h2i[real]).value
            if v not in (None, ""):
                empty = False
            row[want] = v
        if not empty:
            out.append(row)
    return out


def fecha_iso(v):
    if isinstance(v, datetime):
        return v.date().isoformat()
    if isinstance(v, date):
        return v.isoformat()
    return str(v).strip()[:10]


def activo(v):
    if isinstance(v, bool):
        return v
    if v in (None, ""):
        return True
    return str(v).strip().lower() in ("1", "true", "si", "sí", "x")


def limpiar_parametro(row):
    return {
        "id": norm(row["id"]),
        "nombre": norm(row["nombre"]) or "",
        "tipo": norm(row["tipo"]),
        "porcentaje": float(row["porcentaje"] or 0),
        "activo": activo(row["activo"]),
        "fecha_vigencia": fecha_iso(row["fecha_vigencia"]),
    }


def limpiar_tramo(row):
    return {
        "id": norm(row["id"]),
        "desde": float(row["desde"] or 0),
        # celda vacía = tramo sin tope
        "hasta": None if row["hasta"] in (None, "") else float(row["hasta"]),
        "porcentaje": float(row["porcentaje"] or 0),
        "deduccion_fija": float(row["deduccion_fija"] or 0),
    }


def main(src=SRC, out=OUT):
    src, out = Path(src), Path(out)
    if not src.exists():
        raise SystemExit(f"No existe {src}")

    wb = openpyxl.load_workbook(src, data_only=True)

    parametros = []
    if "ParametrosLegales" in wb.sheetnames:
        parametros = [limpiar_parametro(r) for r in export_sheet_rows(wb["ParametrosLegales"], PARAMETROS_COLS)]

    tramos = []
    if "TramosISR" in wb.sheetnames:
        tramos = [limpiar_tramo(r) for r in export_sheet_rows(wb["TramosISR"], TRAMOS_COLS)]
        tramos.sort(key=lambda t: t["desde"])

    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(
        json.dumps({"parametros_legales": parametros, "tramos_isr": tramos}, ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    print(f"OK -> {out} (parametros={len(parametros)}, tramos={len(tramos)})")
    return out


if __name__ == "__main__":
    main(*sys.argv[1:3])
