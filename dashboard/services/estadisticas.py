# dashboard/services/estadisticas.py
"""
Agregadores de comparación A/B: multas, telepase, incidencias y permanencia.
Los dos periodos se consultan en paralelo.
"""
from __future__ import annotations

import asyncio
import logging
import math
from collections import defaultdict
from datetime import datetime
from typing import Dict, Optional

from django.utils import timezone

from asignaciones.models import AsignacionConductor
from conductores.models import Conductor
from facturacion.models import CabifyHistorico
from incidencias.models import Penalidad
from multas.models import Multa

from .alcance import aplicar_filtro_sede, dnis_de_sede
from .comparativa import ComparacionPermanencia, ComparacionTotales, ParametrosComparacion
from .montos import parse_importe
from .periodos import RangoPeriodo

logger = logging.getLogger(__name__)


async def _sumar(qs) -> float:
    total = 0.0
    async for raw in qs:
        total += parse_importe(raw)
    return total


# ---------------------------------------------------------------------
# Totales por periodo
# ---------------------------------------------------------------------

async def total_multas(rango: RangoPeriodo, sede_id: Optional[int] = None) -> float:
    qs = Multa.objects.filter(
        fecha_infraccion__gte=rango.start,
        fecha_infraccion__lte=rango.end,
    )
    qs = aplicar_filtro_sede(qs, sede_id)
    return await _sumar(qs.values_list("importe", flat=True))


async def total_telepase(rango: RangoPeriodo, sede_id: Optional[int] = None) -> float:
    dnis = await dnis_de_sede(sede_id)
    if dnis is not None and not dnis:
        return 0.0
    qs = CabifyHistorico.objects.filter(
        fecha_guardado__gte=rango.start,
        fecha_guardado__lte=rango.end,
    )
    if dnis is not None:
        qs = qs.filter(dni__in=dnis)
    return await _sumar(qs.values_list("peajes", flat=True))


async def total_incidencias(rango: RangoPeriodo, sede_id: Optional[int] = None) -> float:
    qs = Penalidad.objects.filter(
        aplicado=True,
        created_at__gte=rango.start,
        created_at__lte=rango.end,
    )
    qs = aplicar_filtro_sede(qs, sede_id, campo="conductor__sede_id")
    return await _sumar(qs.values_list("monto", flat=True))


def dias_de_permanencia(link: AsignacionConductor, rango: RangoPeriodo, ahora: datetime) -> int:
    """
    Días de un vínculo conductor-asignación dentro del periodo: intersección
    de [inicio del vínculo / asignación, fin del vínculo / asignación] con el
    periodo y con "ahora". Días enteros redondeando hacia arriba, nunca negativo.
    """
    asignacion = link.asignacion
    if link.fecha_inicio is None and asignacion.fecha_inicio is None:
        return 0
    inicios = [d for d in (link.fecha_inicio, asignacion.fecha_inicio, rango.start) if d is not None]
    finales = [d for d in (link.fecha_fin, asignacion.fecha_fin, rango.end, ahora) if d is not None]
    segundos = (min(finales) - max(inicios)).total_seconds()
    if segundos <= 0:
        return 0
    return math.ceil(segundos / 86400)


async def promedio_permanencia(
    rango: RangoPeriodo,
    sede_id: Optional[int] = None,
    *,
    ahora: Optional[datetime] = None,
) -> float:
    """Promedio de días trabajados por los conductores dados de baja en el periodo."""
    ahora = ahora or timezone.now()
    qs = Conductor.objects.filter(
        fecha_terminacion__isnull=False,
        fecha_terminacion__gte=rango.start,
        fecha_terminacion__lte=rango.end,
    )
    qs = aplicar_filtro_sede(qs, sede_id)
    ids = [pk async for pk in qs.values_list("pk", flat=True)]
    if not ids:
        return 0.0

    dias: Dict[int, int] = defaultdict(int)
    links = AsignacionConductor.objects.filter(conductor_id__in=ids).select_related("asignacion")
    async for link in links:
        dias[link.conductor_id] += dias_de_permanencia(link, rango, ahora)
    return sum(dias.values()) / len(ids)


# ---------------------------------------------------------------------
# Agregadores A/B
# ---------------------------------------------------------------------

async def _comparar_totales(fn, params: ParametrosComparacion, ahora=None) -> ComparacionTotales:
    rango_a, rango_b = params.rangos(ahora)
    total_a, total_b = await asyncio.gather(
        fn(rango_a, params.sede_id),
        fn(rango_b, params.sede_id),
    )
    logger.debug("%s %s: A=%s B=%s", fn.__name__, params.clave(), total_a, total_b)
    return ComparacionTotales(total_a=total_a, total_b=total_b)


async def comparar_multas(params: ParametrosComparacion, *, ahora=None) -> ComparacionTotales:
    return await _comparar_totales(total_multas, params, ahora)


async def comparar_telepase(params: ParametrosComparacion, *, ahora=None) -> ComparacionTotales:
    return await _comparar_totales(total_telepase, params, ahora)


async def comparar_incidencias(params: ParametrosComparacion, *, ahora=None) -> ComparacionTotales:
    return await _comparar_totales(total_incidencias, params, ahora)


async def comparar_permanencia(params: ParametrosComparacion, *, ahora=None) -> ComparacionPermanencia:
    rango_a, rango_b = params.rangos(ahora)
    avg_a, avg_b = await asyncio.gather(
        promedio_permanencia(rango_a, params.sede_id, ahora=ahora),
        promedio_permanencia(rango_b, params.sede_id, ahora=ahora),
    )
    return ComparacionPermanencia(avg_dias_a=avg_a, avg_dias_b=avg_b)
