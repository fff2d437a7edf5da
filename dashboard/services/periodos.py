# dashboard/services/periodos.py
"""
Etiquetas de periodo -> rango de fechas.

  dia     "DD/MM" (año actual, o el anterior si cae en el futuro) | "DD/MM/YYYY"
  semana  "Sem WW" (año actual) | "Sem WW YYYY"   (semana ISO, lunes a domingo)
  mes     "Mmm YYYY" con abreviatura en español ("Feb 2025")
  ano     "YYYY"

Una etiqueta que no se puede interpretar resuelve al día de hoy, nunca lanza.
"""
from __future__ import annotations

import calendar
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import List, Optional, Tuple

from django.utils import timezone

logger = logging.getLogger(__name__)

MESES_ABREV = ["Ene", "Feb", "Mar", "Abr", "May", "Jun", "Jul", "Ago", "Sep", "Oct", "Nov", "Dic"]
DIAS_ABREV = ["Lun", "Mar", "Mié", "Jue", "Vie", "Sáb", "Dom"]

_MES_POR_ABREV = {m.lower(): i for i, m in enumerate(MESES_ABREV, start=1)}

_RE_DIA_ANIO = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_RE_DIA = re.compile(r"^(\d{1,2})/(\d{1,2})$")
_RE_SEMANA = re.compile(r"^sem\s+(\d{1,2})(?:\s+(\d{4}))?$", re.IGNORECASE)
_RE_MES = re.compile(r"^([a-záéíóú]{3,4})\.?\s+(\d{4})$", re.IGNORECASE)
_RE_ANIO = re.compile(r"^(\d{4})$")


class Granularidad(str, Enum):
    DIA = "dia"
    SEMANA = "semana"
    MES = "mes"
    ANO = "ano"

    @classmethod
    def parse(cls, valor) -> "Granularidad":
        if isinstance(valor, cls):
            return valor
        clave = str(valor or "").strip().lower()
        alias = {
            "day": cls.DIA, "día": cls.DIA,
            "week": cls.SEMANA,
            "month": cls.MES,
            "year": cls.ANO, "año": cls.ANO,
        }
        if clave in alias:
            return alias[clave]
        return cls(clave)  # ValueError si no existe


@dataclass(frozen=True)
class RangoPeriodo:
    """Inicio 00:00 del primer día, fin 23:59:59.999999 del último (hora local)."""
    start: datetime
    end: datetime

    @property
    def fecha_inicio(self) -> date:
        return timezone.localdate(self.start)

    @property
    def fecha_fin(self) -> date:
        return timezone.localdate(self.end)

    def dias(self) -> List[date]:
        inicio, fin = self.fecha_inicio, self.fecha_fin
        return [inicio + timedelta(days=i) for i in range((fin - inicio).days + 1)]

    def contiene(self, dia: date) -> bool:
        return self.fecha_inicio <= dia <= self.fecha_fin


def rango_de_fechas(inicio: date, fin: date) -> RangoPeriodo:
    return RangoPeriodo(
        start=timezone.make_aware(datetime.combine(inicio, time.min)),
        end=timezone.make_aware(datetime.combine(fin, time.max)),
    )


def _hoy(ahora: Optional[datetime]) -> date:
    if ahora is None:
        return timezone.localdate()
    if timezone.is_aware(ahora):
        return timezone.localdate(ahora)
    return ahora.date()


def _fechas(granularidad: Granularidad, etiqueta: str, hoy: date) -> Tuple[date, date]:
    if granularidad is Granularidad.DIA:
        m = _RE_DIA_ANIO.match(etiqueta)
        if m:
            dia = date(int(m.group(3)), int(m.group(2)), int(m.group(1)))
            return dia, dia
        m = _RE_DIA.match(etiqueta)
        if not m:
            raise ValueError("formato de día")
        d, mes = int(m.group(1)), int(m.group(2))
        dia = date(hoy.year, mes, d)
        if dia > hoy:
            dia = date(hoy.year - 1, mes, d)
        return dia, dia

    if granularidad is Granularidad.SEMANA:
        m = _RE_SEMANA.match(etiqueta)
        if not m:
            raise ValueError("formato de semana")
        semana = int(m.group(1))
        anio = int(m.group(2)) if m.group(2) else hoy.year
        # fromisocalendar rechaza la semana 53 en años de 52 semanas
        lunes = date.fromisocalendar(anio, semana, 1)
        return lunes, lunes + timedelta(days=6)

    if granularidad is Granularidad.MES:
        m = _RE_MES.match(etiqueta)
        if not m:
            raise ValueError("formato de mes")
        mes = _MES_POR_ABREV.get(m.group(1)[:3].lower())
        if mes is None:
            raise ValueError(f"mes desconocido {m.group(1)!r}")
        anio = int(m.group(2))
        return date(anio, mes, 1), date(anio, mes, calendar.monthrange(anio, mes)[1])

    if granularidad is Granularidad.ANO:
        m = _RE_ANIO.match(etiqueta)
        if not m:
            raise ValueError("formato de año")
        anio = int(m.group(1))
        return date(anio, 1, 1), date(anio, 12, 31)

    raise ValueError(f"granularidad {granularidad!r}")


def resolver_periodo(granularidad, etiqueta: str, *, ahora: Optional[datetime] = None) -> RangoPeriodo:
    hoy = _hoy(ahora)
    try:
        gran = Granularidad.parse(granularidad)
        inicio, fin = _fechas(gran, str(etiqueta or "").strip(), hoy)
    except (ValueError, OverflowError) as exc:
        logger.warning("Etiqueta de periodo inválida (%s, %r): %s. Se usa hoy.", granularidad, etiqueta, exc)
        inicio = fin = hoy
    return rango_de_fechas(inicio, fin)


# ---------------------------------------------------------------------
# Etiquetas (selector de periodos)
# ---------------------------------------------------------------------

def etiqueta_semana(dia: date, con_anio: bool = True) -> str:
    anio, semana, _ = dia.isocalendar()
    if con_anio:
        return f"Sem {semana:02d} {anio}"
    return f"Sem {semana:02d}"


def etiqueta_mes(dia: date) -> str:
    return f"{MESES_ABREV[dia.month - 1]} {dia.year}"


def etiqueta_actual(granularidad, hoy: Optional[date] = None) -> str:
    """Etiqueta del periodo que contiene a hoy."""
    hoy = hoy or timezone.localdate()
    gran = Granularidad.parse(granularidad)
    if gran is Granularidad.DIA:
        return hoy.strftime("%d/%m/%Y")
    if gran is Granularidad.SEMANA:
        return etiqueta_semana(hoy)
    if gran is Granularidad.MES:
        return etiqueta_mes(hoy)
    return str(hoy.year)


def etiqueta_anterior(granularidad, hoy: Optional[date] = None) -> str:
    """Etiqueta del periodo inmediatamente anterior al que contiene a hoy."""
    hoy = hoy or timezone.localdate()
    gran = Granularidad.parse(granularidad)
    if gran is Granularidad.DIA:
        return (hoy - timedelta(days=1)).strftime("%d/%m/%Y")
    if gran is Granularidad.SEMANA:
        # la semana ISO 01 puede empezar en diciembre: isocalendar resuelve el año
        return etiqueta_semana(hoy - timedelta(days=7))
    if gran is Granularidad.MES:
        if hoy.month == 1:
            return etiqueta_mes(date(hoy.year - 1, 12, 1))
        return etiqueta_mes(date(hoy.year, hoy.month - 1, 1))
    return str(hoy.year - 1)


def opciones_dia(hoy: Optional[date] = None, cantidad: int = 30) -> List[str]:
    """Últimos N días como "DD/MM", de hoy hacia atrás."""
    hoy = hoy or timezone.localdate()
    return [(hoy - timedelta(days=i)).strftime("%d/%m") for i in range(cantidad)]
