# dashboard/services/cobro_teorico.py
"""
Cobro teórico vs. cobro real por día.

Teórico = alquiler diario de cada conductor elegible (según el concepto
de su vínculo) + cuota de garantía canónica prorrateada a 7 días.
Real = cobro_app del histórico de la plataforma, deduplicado por
(dni, día) quedándose con la corrida más reciente.
"""
from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence

from django.conf import settings
from django.utils import timezone

from asignaciones.models import Asignacion, AsignacionConductor
from facturacion.models import CabifyHistorico, ConceptoNomina, Garantia

from .alcance import aplicar_filtro_sede
from .montos import parse_importe
from .periodos import DIAS_ABREV, MESES_ABREV, Granularidad, RangoPeriodo, resolver_periodo

logger = logging.getLogger(__name__)


def _conf(clave):
    return settings.FLOTA[clave]


# ---------------------------------------------------------------------
# Filas de entrada
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class VinculoCobro:
    conductor_id: int
    dni: str
    horario: str
    estado: str
    fecha_inicio: Optional[date]
    fecha_fin: Optional[date]
    asignacion_horario: str
    asignacion_estado: str
    asignacion_inicio: Optional[date]
    asignacion_fin: Optional[date]


@dataclass(frozen=True)
class GarantiaCobro:
    conductor_id: int
    estado: str
    monto_cuota_semanal: Optional[float]
    cuotas_pagadas: int = 0
    cuotas_totales: int = 0

    @property
    def finalizada(self) -> bool:
        if self.estado in (Garantia.Estado.COMPLETADA, Garantia.Estado.CANCELADA):
            return True
        return self.cuotas_totales > 0 and self.cuotas_pagadas >= self.cuotas_totales


@dataclass(frozen=True)
class RegistroHistorico:
    id: int
    dni: str
    fecha_inicio: datetime
    fecha_guardado: Optional[datetime]
    cobro_app: Optional[float]

    @property
    def dia(self) -> date:
        return timezone.localdate(self.fecha_inicio)


# ---------------------------------------------------------------------
# Resultado
# ---------------------------------------------------------------------

@dataclass
class PuntoCobro:
    etiqueta: str
    teorico: float = 0.0
    real: float = 0.0
    fecha: Optional[date] = None

    def as_dict(self) -> dict:
        return {
            "label": self.etiqueta,
            "fecha": self.fecha.isoformat() if self.fecha else None,
            "teorico": round(self.teorico, 2),
            "real": round(self.real, 2),
        }


@dataclass
class SerieCobro:
    granularidad: Granularidad
    rango: RangoPeriodo
    puntos: List[PuntoCobro] = field(default_factory=list)
    conductores: int = 0

    @property
    def total_teorico(self) -> float:
        return sum(p.teorico for p in self.puntos)

    @property
    def total_real(self) -> float:
        return sum(p.real for p in self.puntos)

    def as_dict(self) -> dict:
        return {
            "granularidad": self.granularidad.value,
            "desde": self.rango.fecha_inicio.isoformat(),
            "hasta": self.rango.fecha_fin.isoformat(),
            "conductores": self.conductores,
            "total_teorico": round(self.total_teorico, 2),
            "total_real": round(self.total_real, 2),
            "puntos": [p.as_dict() for p in self.puntos],
        }


# ---------------------------------------------------------------------
# Reglas
# ---------------------------------------------------------------------

def codigo_concepto(horario_asignacion: str, horario_vinculo: str) -> str:
    """A cargo o todo el día -> P002; turno nocturno -> P013; turno diurno -> P001."""
    vinculo = (horario_vinculo or "").lower()
    if horario_asignacion == Asignacion.Horario.CARGO or vinculo == "todo_dia":
        return _conf("CONCEPTO_CARGO")
    if vinculo in ("nocturno", "n"):
        return _conf("CONCEPTO_TURNO_NOCTURNO")
    return _conf("CONCEPTO_TURNO_DIURNO")


def _huerfano(v: VinculoCobro) -> bool:
    # asignación cerrada que nunca registró fin: no se puede acotar
    return (
        v.asignacion_estado in Asignacion.ESTADOS_TERMINALES
        and v.fecha_fin is None
        and v.asignacion_fin is None
    )


def intervalo_efectivo(v: VinculoCobro, rango: RangoPeriodo):
    """Intersección del vínculo (y su asignación) con el periodo, o None."""
    inicios = [d for d in (v.fecha_inicio, v.asignacion_inicio) if d is not None]
    finales = [d for d in (v.fecha_fin, v.asignacion_fin) if d is not None]
    inicio = max(inicios) if inicios else rango.fecha_inicio
    fin = min(finales) if finales else rango.fecha_fin
    inicio = max(inicio, rango.fecha_inicio)
    fin = min(fin, rango.fecha_fin)
    if inicio > fin:
        return None
    return inicio, fin


def acumular_alquiler(
    vinculos: Iterable[VinculoCobro],
    precios: Dict[str, float],
    rango: RangoPeriodo,
) -> Dict[int, Dict[date, float]]:
    """
    Alquiler diario por conductor. Un conductor cobra un solo alquiler por
    día: si dos vínculos cubren el mismo día gana el primero visto.
    Los conductores presentes en el resultado son los activos del periodo.
    """
    alquiler: Dict[int, Dict[date, float]] = {}
    for v in vinculos:
        if v.asignacion_estado in Asignacion.ESTADOS_PROGRAMADOS or _huerfano(v):
            continue
        intervalo = intervalo_efectivo(v, rango)
        if intervalo is None:
            continue
        precio = precios.get(codigo_concepto(v.asignacion_horario, v.horario), 0.0)
        dias = alquiler.setdefault(v.conductor_id, {})
        for dia in rango.dias():
            if intervalo[0] <= dia <= intervalo[1]:
                dias.setdefault(dia, precio)
    return alquiler


def conductores_elegibles(
    conductores: Iterable[int],
    garantias: Dict[int, GarantiaCobro],
    canonico: float,
) -> List[int]:
    """Sin garantía registrada, o con garantía vigente de cuota canónica."""
    elegibles = []
    for conductor_id in conductores:
        g = garantias.get(conductor_id)
        if g is None:
            elegibles.append(conductor_id)
        elif not g.finalizada and g.monto_cuota_semanal == canonico:
            elegibles.append(conductor_id)
    return elegibles


def deduplicar_historico(registros: Iterable[RegistroHistorico]) -> List[RegistroHistorico]:
    """Un registro por (dni, día): el de fecha_guardado más reciente; a igual fecha, el de mayor id."""
    minimo = timezone.make_aware(datetime(1970, 1, 1))
    elegido: Dict[tuple, RegistroHistorico] = {}
    for r in registros:
        clave = (r.dni, r.dia)
        actual = elegido.get(clave)
        orden = (r.fecha_guardado or minimo, r.id)
        if actual is None or orden > (actual.fecha_guardado or minimo, actual.id):
            elegido[clave] = r
    return list(elegido.values())


def cobro_real_por_dia(registros: Iterable[RegistroHistorico]) -> Dict[date, float]:
    total: Dict[date, float] = {}
    for r in registros:
        total[r.dia] = total.get(r.dia, 0.0) + parse_importe(r.cobro_app)
    return total


def armar_serie(
    granularidad: Granularidad,
    rango: RangoPeriodo,
    alquiler: Dict[int, Dict[date, float]],
    elegibles: Sequence[int],
    real: Dict[date, float],
    canonico: float,
) -> SerieCobro:
    garantia_diaria = canonico * len(elegibles) / 7
    puntos = []
    for dia in rango.dias():
        teorico = garantia_diaria + sum(alquiler.get(c, {}).get(dia, 0.0) for c in elegibles)
        puntos.append(PuntoCobro(DIAS_ABREV[dia.weekday()], teorico, real.get(dia, 0.0), dia))
    serie = SerieCobro(granularidad, rango, puntos, conductores=len(elegibles))
    return agrupar_serie(serie)


def agrupar_serie(serie: SerieCobro) -> SerieCobro:
    """Mes -> por semana ISO ("Sem WW"); año -> por mes ("Ene".."Dic"); el resto por día."""
    if serie.granularidad is Granularidad.MES:
        clave = lambda d: f"Sem {d.isocalendar()[1]:02d}"
    elif serie.granularidad is Granularidad.ANO:
        clave = lambda d: MESES_ABREV[d.month - 1]
    else:
        return serie
    grupos: "OrderedDict[str, PuntoCobro]" = OrderedDict()
    for p in serie.puntos:
        etiqueta = clave(p.fecha)
        grupo = grupos.setdefault(etiqueta, PuntoCobro(etiqueta, fecha=p.fecha))
        grupo.teorico += p.teorico
        grupo.real += p.real
    return SerieCobro(serie.granularidad, serie.rango, list(grupos.values()), serie.conductores)


# ---------------------------------------------------------------------
# Consultas
# ---------------------------------------------------------------------

def _fecha(valor) -> Optional[date]:
    return timezone.localdate(valor) if valor is not None else None


async def _precios() -> Dict[str, float]:
    codigos = (_conf("CONCEPTO_TURNO_DIURNO"), _conf("CONCEPTO_CARGO"), _conf("CONCEPTO_TURNO_NOCTURNO"))
    return {
        c.codigo: float(c.precio_vigente)
        async for c in ConceptoNomina.objects.filter(codigo__in=codigos)
    }


async def _vinculos(sede_id: Optional[int]) -> List[VinculoCobro]:
    qs = (
        AsignacionConductor.objects
        .filter(estado__in=AsignacionConductor.ESTADOS_CONCILIABLES)
        .select_related("asignacion", "conductor")
        .order_by("id")
    )
    qs = aplicar_filtro_sede(qs, sede_id, campo="conductor__sede_id")
    return [
        VinculoCobro(
            conductor_id=v.conductor_id,
            dni=v.conductor.numero_dni,
            horario=v.horario,
            estado=v.estado,
            fecha_inicio=_fecha(v.fecha_inicio),
            fecha_fin=_fecha(v.fecha_fin),
            asignacion_horario=v.asignacion.horario,
            asignacion_estado=v.asignacion.estado,
            asignacion_inicio=_fecha(v.asignacion.fecha_inicio),
            asignacion_fin=_fecha(v.asignacion.fecha_fin),
        )
        async for v in qs
    ]


async def _garantias(conductor_ids: List[int]) -> Dict[int, GarantiaCobro]:
    garantias: Dict[int, GarantiaCobro] = {}
    if not conductor_ids:
        return garantias
    qs = Garantia.objects.filter(conductor_id__in=conductor_ids).order_by("created_at", "id")
    async for g in qs:
        # con varias garantías por conductor vale la última
        garantias[g.conductor_id] = GarantiaCobro(
            conductor_id=g.conductor_id,
            estado=g.estado,
            monto_cuota_semanal=float(g.monto_cuota_semanal) if g.monto_cuota_semanal is not None else None,
            cuotas_pagadas=g.cuotas_pagadas,
            cuotas_totales=g.cuotas_totales,
        )
    return garantias


async def _historico(dnis: List[str], rango: RangoPeriodo) -> List[RegistroHistorico]:
    if not dnis:
        return []
    qs = CabifyHistorico.objects.filter(
        dni__in=dnis,
        fecha_inicio__gte=rango.start,
        fecha_inicio__lte=rango.end,
    ).values_list("id", "dni", "fecha_inicio", "fecha_guardado", "cobro_app")
    return [
        RegistroHistorico(pk, dni, inicio, guardado, float(cobro) if cobro is not None else None)
        async for pk, dni, inicio, guardado, cobro in qs
    ]


async def cobro_teorico_vs_real(
    granularidad,
    etiqueta: str,
    sede_id: Optional[int] = None,
    *,
    ahora: Optional[datetime] = None,
) -> SerieCobro:
    gran = Granularidad.parse(granularidad)
    if gran is Granularidad.DIA:
        raise ValueError("El cobro teórico se consulta por semana, mes o año.")
    rango = resolver_periodo(gran, etiqueta, ahora=ahora)
    canonico = float(_conf("GARANTIA_CANONICA"))

    precios, vinculos = await asyncio.gather(_precios(), _vinculos(sede_id))
    alquiler = acumular_alquiler(vinculos, precios, rango)
    dni_por_conductor = {v.conductor_id: v.dni for v in vinculos if v.conductor_id in alquiler}

    garantias = await _garantias(list(alquiler))
    elegibles = conductores_elegibles(alquiler, garantias, canonico)
    dnis = sorted({dni_por_conductor[c] for c in elegibles if dni_por_conductor.get(c)})

    registros = deduplicar_historico(await _historico(dnis, rango))
    logger.info(
        "Cobro teórico %s %r sede=%s: %s conductores elegibles, %s registros de plataforma",
        gran.value, etiqueta, sede_id, len(elegibles), len(registros),
    )
    return armar_serie(gran, rango, alquiler, elegibles, cobro_real_por_dia(registros), canonico)
