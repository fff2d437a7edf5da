# dashboard/services/montos.py
"""
Importes de texto libre ("$ 12.345,67", "1,234.56", "$ 500") a número,
y formato de moneda ARS para los indicadores.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

_NO_NUMERICO_SIMPLE = re.compile(r"[^0-9.\-]")
_NO_NUMERICO = re.compile(r"[^0-9.,\-]")


class ModoImporte(Enum):
    # SIMPLE: descarta todo salvo dígitos, punto y signo. "1.234,56" -> 1.23456
    SIMPLE = "simple"
    # LOCALE: el último separador que aparece es el decimal.
    LOCALE = "locale"


def _normalizar_separadores(texto: str) -> str:
    punto = texto.rfind(".")
    coma = texto.rfind(",")
    if punto >= 0 and coma >= 0:
        if coma > punto:
            # 1.234,56
            return texto.replace(".", "").replace(",", ".")
        # 1,234.56
        return texto.replace(",", "")
    if coma >= 0:
        return texto.replace(",", ".")
    return texto


def parse_importe(raw, modo: ModoImporte = ModoImporte.LOCALE) -> float:
    """Nunca lanza: lo que no se puede interpretar vale 0."""
    if raw is None or raw == "":
        return 0.0
    if isinstance(raw, (int, float, Decimal)):
        valor = float(raw)
    else:
        texto = str(raw).strip()
        if modo is ModoImporte.SIMPLE:
            limpio = _NO_NUMERICO_SIMPLE.sub("", texto)
        else:
            limpio = _normalizar_separadores(_NO_NUMERICO.sub("", texto))
        try:
            valor = float(limpio)
        except ValueError:
            return 0.0
    if math.isnan(valor) or math.isinf(valor):
        return 0.0
    return valor


def formato_ars(valor, decimales: int = 2) -> str:
    """1234.5 -> "$ 1.234,50" """
    numero = float(valor or 0)
    texto = f"{abs(numero):,.{decimales}f}"
    texto = texto.translate(str.maketrans({",": ".", ".": ","}))
    signo = "-" if numero < 0 else ""
    return f"{signo}$ {texto}"


@dataclass(frozen=True)
class Variacion:
    etiqueta: str
    positiva: bool


def variacion_porcentual(actual: float, anterior: float) -> Variacion:
    """(A - B) / B * 100; con B == 0 la variación es 0."""
    pct = 0.0 if not anterior else (actual - anterior) / anterior * 100
    positiva = pct >= 0
    return Variacion(f"{'+' if positiva else '-'}{abs(pct):.0f}%", positiva)
