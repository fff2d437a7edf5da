from datetime import date

import pytest
from asgiref.sync import async_to_sync

from asignaciones.models import Asignacion, AsignacionConductor
from conductores.models import Conductor
from dashboard.services.flota import (
    PALETA_ESTADOS,
    AsignacionFila,
    GarantiaFila,
    SaldoFila,
    SiniestroFila,
    VehiculoFila,
    VinculoFila,
    componer_snapshot,
    distribuir_estados,
    estado_flota,
    kpis_flota,
    porcentaje,
)
from facturacion.models import Garantia, SaldoConductor
from incidencias.models import CategoriaSiniestro, Siniestro
from tests.utils import aware
from vehiculos.models import Vehiculo

HOY = date(2025, 3, 10)


def _vehiculos():
    return [
        VehiculoFila(1, "EN_USO", "En uso"),
        VehiculoFila(2, "PKG_ON_BASE", "Disponible en base"),
        VehiculoFila(3, "PKG_ON_BASE", "Disponible en base"),
        VehiculoFila(4, "TALLER_MECANICO", "Taller mecánico"),
        VehiculoFila(5, "ROBO", "Robo"),
        VehiculoFila(6, "DEVUELTO_PROVEEDOR", "Devuelto a proveedor"),
    ]


def _asignaciones():
    return [
        AsignacionFila(1, "TURNO", (
            VinculoFila(10, "diurno", "activo"),
            VinculoFila(11, "NOCTURNO", "asignado"),
        )),
        AsignacionFila(2, "CARGO", (VinculoFila(12, "todo_dia", "cancelado"),)),
    ]


def _garantias():
    return [
        GarantiaFila("en_curso", 30000, 0, False),
        GarantiaFila("en_devolucion", 50000, 20000, False),
        GarantiaFila("cancelada", 10000, 0, True),
        GarantiaFila("en_curso", 5000, 0, True),
    ]


def _saldos():
    # deuda de 10000 con 2500 de mora, y un saldo a favor de 4000
    return [SaldoFila(-10000, 2500), SaldoFila(4000, 0)]


def test_snapshot_compuesto():
    siniestros = [
        SiniestroFila("Choque", date(2025, 3, 1)),
        SiniestroFila("Robo parcial", date(2025, 2, 1)),
        SiniestroFila("Robo", date(2025, 3, 20)),
    ]
    s = componer_snapshot(_asignaciones(), _vehiculos(), siniestros, _garantias(), _saldos(), HOY)

    assert s.total_flota.valor == 4
    assert s.total_flota.subtitulo == "1 en uso, 1 en taller, 2 en base, 2 fuera de flota"
    # vehículos 1 y 2 tienen asignación activa
    assert s.vehiculos_activos.valor == 2
    assert s.vehiculos_disponibles.valor == 1
    assert s.vehiculos_en_taller.valor == 1
    assert s.operatividad.valor == "75%"
    assert s.turnos_disponibles.valor == 1
    assert s.ocupacion.valor == "66.7%"
    assert s.dias_sin_siniestro.valor == 9
    assert s.dias_sin_siniestro.subtitulo == "Último: 01/03/2025"
    # fecha futura: nunca negativo
    assert s.dias_sin_robo.valor == 0
    assert s.fondo_garantia.valor == "$ 95.000,00"
    assert s.fondo_garantia.subtitulo == "2 conductores activos"
    assert s.garantia_por_devolver.valor == "$ 35.000,00"
    assert s.garantia_por_devolver.subtitulo == "2 conductores"
    assert s.saldo_conductores.valor == "$ 16.500,00"
    assert s.saldo_conductores.subtitulo == "Saldo actual + mora"


def test_vehiculos_activos_cuentan_asignaciones_no_codigo_de_estado():
    vehiculos = [VehiculoFila(1, "PKG_ON_BASE", "Disponible en base")]
    asignaciones = [AsignacionFila(1, "CARGO", (VinculoFila(10, "todo_dia", "activo"),))]
    s = componer_snapshot(asignaciones, vehiculos, [], [], [], HOY)
    assert s.vehiculos_activos.valor == 1
    assert s.vehiculos_disponibles.valor == 0


def test_snapshot_sin_siniestros_muestra_guion():
    s = componer_snapshot([], [], [], [], [], HOY)
    assert s.dias_sin_siniestro.valor == "-"
    assert s.dias_sin_robo.subtitulo == "Último: -"
    assert s.ocupacion.valor == "0%"
    assert s.operatividad.valor == "0%"


def test_turnos_completos_ocupacion_total():
    asignaciones = [
        AsignacionFila(v, "TURNO", (VinculoFila(v * 10, "D", "activo"), VinculoFila(v * 10 + 1, "N", "activo")))
        for v in (1, 2, 3)
    ]
    s = componer_snapshot(asignaciones, [], [], [], [], HOY)
    assert s.ocupacion.valor == "100%"
    assert s.turnos_disponibles.valor == 0


def test_as_dict_para_json():
    d = componer_snapshot([], _vehiculos(), [], [], [], HOY).as_dict()
    assert len(d) == 12
    assert d["total_flota"] == {"value": 4, "subtitle": "1 en uso, 1 en taller, 2 en base, 2 fuera de flota"}


@pytest.mark.parametrize("parte, total, esperado", [(4, 4, "100%"), (0, 0, "0%"), (1, 3, "33.3%"), (1, 8, "12.5%")])
def test_porcentaje(parte, total, esperado):
    assert porcentaje(parte, total) == esperado


def test_distribucion_por_estado():
    vehiculos = _vehiculos() + [VehiculoFila(7, "PKG_ON_BASE", "Disponible en base")]
    estados = distribuir_estados(vehiculos)

    assert [e.nombre for e in estados][0] == "Disponible en base"
    assert estados[0].cantidad == 3
    assert estados[0].color == PALETA_ESTADOS[0]
    assert all("Devuelto" not in e.nombre for e in estados)
    assert sum(e.cantidad for e in estados) == 6
    assert estados[0].porcentaje == 50.0


# ---------------------------------------------------------------------
# Contra la base
# ---------------------------------------------------------------------

@pytest.mark.django_db
def test_kpis_desde_la_base(estados, sede, otra_sede):
    en_uso = Vehiculo.objects.create(patente="AA111AA", estado=estados["EN_USO"], sede=sede)
    Vehiculo.objects.create(patente="AA222AA", estado=estados["PKG_ON_BASE"], sede=sede)
    Vehiculo.objects.create(patente="AA333AA", estado=estados["EN_USO"], sede=sede, deleted_at=aware(2025, 1, 1))
    Vehiculo.objects.create(patente="BB111BB", estado=estados["EN_USO"], sede=otra_sede)

    asignacion = Asignacion.objects.create(vehiculo=en_uso, horario="TURNO", estado="activo", sede=sede)
    ana = Conductor.objects.create(nombres="Ana", sede=sede)
    beto = Conductor.objects.create(nombres="Beto", sede=sede)
    AsignacionConductor.objects.create(asignacion=asignacion, conductor=ana, horario="diurno")
    AsignacionConductor.objects.create(asignacion=asignacion, conductor=beto, horario="nocturno")

    choque = CategoriaSiniestro.objects.create(nombre="Choque")
    Siniestro.objects.create(categoria=choque, fecha_siniestro=date(2025, 3, 7), sede=sede)
    Garantia.objects.create(conductor=ana, monto_pagado=12500, sede=sede)
    SaldoConductor.objects.create(conductor=ana, saldo_actual=-3000, monto_mora_acumulada=500, sede=sede)
    SaldoConductor.objects.create(conductor=beto, saldo_actual=-9999, sede=otra_sede)

    s = async_to_sync(kpis_flota)(sede.pk, HOY)

    assert s.total_flota.valor == 2
    assert s.vehiculos_activos.valor == 1
    assert s.vehiculos_disponibles.valor == 1
    assert s.ocupacion.valor == "100%"
    assert s.operatividad.valor == "100%"
    assert s.dias_sin_siniestro.valor == 3
    assert s.dias_sin_robo.valor == "-"
    assert s.fondo_garantia.valor == "$ 12.500,00"
    assert s.saldo_conductores.valor == "$ 3.500,00"

    todas = async_to_sync(kpis_flota)(None, HOY)
    assert todas.total_flota.valor == 3


@pytest.mark.django_db
def test_estado_flota_desde_la_base(estados):
    Vehiculo.objects.create(patente="AA111AA", estado=estados["EN_USO"])
    Vehiculo.objects.create(patente="AA222AA", estado=estados["EN_USO"])
    Vehiculo.objects.create(patente="AA333AA", estado=estados["DEVUELTO_PROVEEDOR"])

    resultado = async_to_sync(estado_flota)()

    assert [(e.nombre, e.cantidad) for e in resultado] == [("En uso", 2)]
