# dashboard/services/flota.py
"""
Snapshot de indicadores de la flota y distribución de vehículos por estado.

Las cinco consultas base (asignaciones activas, vehículos, siniestros,
garantías y saldos) se lanzan en paralelo. Si una falla, el snapshot entero falla:
no se devuelven indicadores parciales.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from django.utils import timezone

from asignaciones.models import Asignacion, AsignacionConductor
from facturacion.models import Garantia, SaldoConductor
from incidencias.models import Siniestro
from vehiculos.models import Vehiculo, VehiculoEstado

from .alcance import aplicar_filtro_sede
from .montos import formato_ars

logger = logging.getLogger(__name__)

Codigo = VehiculoEstado.Codigo

CATEGORIAS_ROBO = ("robo", "robo parcial")

PALETA_ESTADOS = (
    "#10B981", "#3B82F6", "#F59E0B", "#EF4444", "#8B5CF6", "#EC4899",
    "#6366F1", "#14B8A6", "#F97316", "#06B6D4", "#A855F7", "#D946EF",
    "#84CC16", "#EAB308", "#22C55E", "#0EA5E9", "#64748B",
)


# ---------------------------------------------------------------------
# Filas de entrada (una por forma de consulta)
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class VinculoFila:
    conductor_id: Optional[int]
    horario: str
    estado: str

    @property
    def cancelado(self) -> bool:
        return (self.estado or "").lower() in ("cancelado", "cancelada")


@dataclass(frozen=True)
class AsignacionFila:
    vehiculo_id: int
    horario: str
    vinculos: Tuple[VinculoFila, ...] = ()


@dataclass(frozen=True)
class VehiculoFila:
    id: int
    estado_codigo: str
    estado_descripcion: str


@dataclass(frozen=True)
class SiniestroFila:
    categoria: str
    fecha: Optional[date]


@dataclass(frozen=True)
class GarantiaFila:
    estado: str
    monto_pagado: float
    monto_devuelto: float
    conductor_de_baja: bool


@dataclass(frozen=True)
class SaldoFila:
    saldo_actual: float
    monto_mora_acumulada: float


# ---------------------------------------------------------------------
# Resultado
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class Indicador:
    valor: object
    subtitulo: str = ""


@dataclass(frozen=True)
class SnapshotFlota:
    total_flota: Indicador
    vehiculos_activos: Indicador
    vehiculos_disponibles: Indicador
    turnos_disponibles: Indicador
    ocupacion: Indicador
    operatividad: Indicador
    vehiculos_en_taller: Indicador
    dias_sin_siniestro: Indicador
    dias_sin_robo: Indicador
    fondo_garantia: Indicador
    garantia_por_devolver: Indicador
    saldo_conductores: Indicador

    def as_dict(self) -> dict:
        return {
            nombre: {"value": ind["valor"], "subtitle": ind["subtitulo"]}
            for nombre, ind in asdict(self).items()
        }


def porcentaje(parte: int, total: int) -> str:
    """"0%" con total 0; sin decimales innecesarios ("100%", "62.5%")."""
    if not total:
        return "0%"
    pct = round(parte / total * 100, 1)
    if pct == int(pct):
        return f"{int(pct)}%"
    return f"{pct}%"


def _dias_desde(ultimo: Optional[date], hoy: date):
    if ultimo is None:
        return "-", "Último: -"
    return max((hoy - ultimo).days, 0), f"Último: {ultimo:%d/%m/%Y}"


def componer_snapshot(
    asignaciones: Sequence[AsignacionFila],
    vehiculos: Sequence[VehiculoFila],
    siniestros: Sequence[SiniestroFila],
    garantias: Sequence[GarantiaFila],
    saldos: Sequence[SaldoFila],
    hoy: date,
) -> SnapshotFlota:
    con_asignacion = {a.vehiculo_id for a in asignaciones}

    total_flota = en_uso = pkg_on_base = disponibles = en_taller = 0
    for v in vehiculos:
        if v.estado_codigo not in VehiculoEstado.EXCLUIDOS_DE_FLOTA:
            total_flota += 1
        if v.estado_codigo == Codigo.EN_USO:
            en_uso += 1
        elif v.estado_codigo == Codigo.PKG_ON_BASE:
            pkg_on_base += 1
            if v.id not in con_asignacion:
                disponibles += 1
        if "taller" in (v.estado_descripcion or "").lower():
            en_taller += 1
    operativos = en_uso + pkg_on_base

    cupos = ocupados = 0
    for a in asignaciones:
        vigentes = [c for c in a.vinculos if c.conductor_id and not c.cancelado]
        if a.horario == Asignacion.Horario.TURNO:
            cupos += 2
            if any(c.horario in AsignacionConductor.HORARIOS_DIURNOS for c in vigentes):
                ocupados += 1
            if any(c.horario in AsignacionConductor.HORARIOS_NOCTURNOS for c in vigentes):
                ocupados += 1
        else:
            cupos += 1
            if vigentes:
                ocupados += 1
    libres = cupos - ocupados

    ultimo_siniestro = ultimo_robo = None
    for s in siniestros:
        if s.fecha is None:
            continue
        if (s.categoria or "").strip().lower() in CATEGORIAS_ROBO:
            ultimo_robo = max(ultimo_robo or s.fecha, s.fecha)
        else:
            ultimo_siniestro = max(ultimo_siniestro or s.fecha, s.fecha)
    dias_siniestro, sub_siniestro = _dias_desde(ultimo_siniestro, hoy)
    dias_robo, sub_robo = _dias_desde(ultimo_robo, hoy)

    fondo = sum(g.monto_pagado for g in garantias)
    en_curso = sum(1 for g in garantias if g.estado == Garantia.Estado.EN_CURSO)
    por_devolver = 0.0
    pendientes = 0
    for g in garantias:
        pendiente = g.estado == Garantia.Estado.EN_DEVOLUCION or (
            g.estado != Garantia.Estado.CANCELADA and g.conductor_de_baja and g.monto_pagado > 0
        )
        if pendiente:
            pendientes += 1
            por_devolver += max(g.monto_pagado - g.monto_devuelto, 0)

    # la deuda cuenta en valor absoluto
    total_saldo = sum(abs(s.saldo_actual) for s in saldos) + sum(s.monto_mora_acumulada for s in saldos)

    return SnapshotFlota(
        total_flota=Indicador(
            total_flota,
            f"{en_uso} en uso, {en_taller} en taller, {pkg_on_base} en base, {len(vehiculos) - total_flota} fuera de flota",
        ),
        vehiculos_activos=Indicador(len(con_asignacion), f"de {total_flota} en flota"),
        vehiculos_disponibles=Indicador(disponibles, "en base sin asignación"),
        turnos_disponibles=Indicador(libres, f"de {cupos} turnos"),
        ocupacion=Indicador(porcentaje(ocupados, cupos), f"{ocupados} de {cupos} turnos ocupados"),
        operatividad=Indicador(porcentaje(operativos, total_flota), f"{operativos} operativos"),
        vehiculos_en_taller=Indicador(en_taller, "mecánico y chapa"),
        dias_sin_siniestro=Indicador(dias_siniestro, sub_siniestro),
        dias_sin_robo=Indicador(dias_robo, sub_robo),
        fondo_garantia=Indicador(formato_ars(fondo), f"{en_curso} conductores activos"),
        garantia_por_devolver=Indicador(formato_ars(por_devolver), f"{pendientes} conductores"),
        saldo_conductores=Indicador(formato_ars(total_saldo), "Saldo actual + mora"),
    )


# ---------------------------------------------------------------------
# Consultas
# ---------------------------------------------------------------------

async def _asignaciones_activas(sede_id: Optional[int]) -> List[AsignacionFila]:
    qs = Asignacion.objects.filter(estado__in=Asignacion.ESTADOS_ACTIVOS).prefetch_related("conductores")
    qs = aplicar_filtro_sede(qs, sede_id)
    filas = []
    async for a in qs:
        vinculos = tuple(
            VinculoFila(c.conductor_id, c.horario, c.estado) for c in a.conductores.all()
        )
        filas.append(AsignacionFila(a.vehiculo_id, a.horario, vinculos))
    return filas


async def _vehiculos(sede_id: Optional[int]) -> List[VehiculoFila]:
    qs = Vehiculo.objects.filter(deleted_at__isnull=True).select_related("estado")
    qs = aplicar_filtro_sede(qs, sede_id)
    return [
        VehiculoFila(
            v.pk,
            v.estado.codigo if v.estado else "",
            v.estado.descripcion if v.estado else "",
        )
        async for v in qs
    ]


async def _siniestros(sede_id: Optional[int]) -> List[SiniestroFila]:
    qs = Siniestro.objects.filter(fecha_siniestro__isnull=False).values_list("categoria__nombre", "fecha_siniestro")
    qs = aplicar_filtro_sede(qs, sede_id)
    return [SiniestroFila(categoria or "", fecha) async for categoria, fecha in qs]


async def _garantias(sede_id: Optional[int]) -> List[GarantiaFila]:
    qs = Garantia.objects.values_list("estado", "monto_pagado", "monto_devuelto", "conductor__fecha_terminacion")
    qs = aplicar_filtro_sede(qs, sede_id)
    return [
        GarantiaFila(estado, float(pagado or 0), float(devuelto or 0), baja is not None)
        async for estado, pagado, devuelto, baja in qs
    ]


async def _saldos(sede_id: Optional[int]) -> List[SaldoFila]:
    qs = SaldoConductor.objects.values_list("saldo_actual", "monto_mora_acumulada")
    qs = aplicar_filtro_sede(qs, sede_id)
    return [SaldoFila(float(saldo or 0), float(mora or 0)) async for saldo, mora in qs]


async def kpis_flota(sede_id: Optional[int] = None, hoy: Optional[date] = None) -> SnapshotFlota:
    hoy = hoy or timezone.localdate()
    asignaciones, vehiculos, siniestros, garantias, saldos = await asyncio.gather(
        _asignaciones_activas(sede_id),
        _vehiculos(sede_id),
        _siniestros(sede_id),
        _garantias(sede_id),
        _saldos(sede_id),
    )
    logger.debug(
        "KPIs sede=%s: %s asignaciones, %s vehículos, %s siniestros, %s garantías, %s saldos",
        sede_id, len(asignaciones), len(vehiculos), len(siniestros), len(garantias), len(saldos),
    )
    return componer_snapshot(asignaciones, vehiculos, siniestros, garantias, saldos, hoy)


# ---------------------------------------------------------------------
# Distribución por estado
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class EstadoCantidad:
    nombre: str
    cantidad: int
    porcentaje: float
    color: str


def distribuir_estados(vehiculos: Iterable[VehiculoFila]) -> List[EstadoCantidad]:
    """Cantidad por estado, mayor primero; los devueltos al proveedor no cuentan."""
    conteo: Dict[str, int] = {}
    for v in vehiculos:
        nombre = v.estado_descripcion or v.estado_codigo or "Sin estado"
        upper = nombre.upper()
        if "DEVUELTO" in upper or "PROVEEDOR" in upper:
            continue
        conteo[nombre] = conteo.get(nombre, 0) + 1
    total = sum(conteo.values())
    ordenados = sorted(conteo.items(), key=lambda kv: kv[1], reverse=True)
    return [
        EstadoCantidad(
            nombre=nombre,
            cantidad=cantidad,
            porcentaje=round(cantidad / total * 100, 1) if total else 0.0,
            color=PALETA_ESTADOS[i % len(PALETA_ESTADOS)],
        )
        for i, (nombre, cantidad) in enumerate(ordenados)
    ]


async def estado_flota(sede_id: Optional[int] = None) -> List[EstadoCantidad]:
    return distribuir_estados(await _vehiculos(sede_id))
