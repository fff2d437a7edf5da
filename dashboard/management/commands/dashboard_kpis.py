# dashboard/management/commands/dashboard_kpis.py
# Imprime el snapshot de indicadores y la comparativa de periodos
# Sirve para revisar números sin levantar el front (o desde un cron)

import asyncio
import json

from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand, CommandError
from django.utils.timezone import localdate

from dashboard.services.comparativa import ParametrosComparacion
from dashboard.services.estadisticas import (
    comparar_incidencias,
    comparar_multas,
    comparar_permanencia,
    comparar_telepase,
)
from dashboard.services.flota import kpis_flota
from dashboard.services.montos import formato_ars, variacion_porcentual
from dashboard.services.periodos import Granularidad, etiqueta_actual, etiqueta_anterior


class Command(BaseCommand):
    help = "Muestra los KPIs de flota y la comparativa A/B de multas, telepase, incidencias y permanencia."

    def add_arguments(self, parser):
        parser.add_argument("--sede", type=int, default=None, help="ID de sede (por defecto todas)")
        parser.add_argument("--granularidad", default="semana")
        parser.add_argument("--periodo-a", default="")
        parser.add_argument("--periodo-b", default="")
        parser.add_argument("--json", action="store_true", help="Salida JSON")

    def handle(self, *args, **options):
        try:
            gran = Granularidad.parse(options["granularidad"])
        except ValueError:
            raise CommandError(f"Granularidad inválida: {options['granularidad']}")

        hoy = localdate()
        params = ParametrosComparacion(
            granularidad=gran,
            periodo_a=options["periodo_a"] or etiqueta_actual(gran, hoy),
            periodo_b=options["periodo_b"] or etiqueta_anterior(gran, hoy),
            sede_id=options["sede"],
        )

        async def calcular():
            return await asyncio.gather(
                kpis_flota(params.sede_id, hoy),
                comparar_multas(params),
                comparar_telepase(params),
                comparar_incidencias(params),
                comparar_permanencia(params),
            )

        snapshot, multas, telepase, incidencias, permanencia = async_to_sync(calcular)()

        if options["json"]:
            self.stdout.write(json.dumps({
                "kpis": snapshot.as_dict(),
                "multas": multas.as_dict(),
                "telepase": telepase.as_dict(),
                "incidencias": incidencias.as_dict(),
                "permanencia": permanencia.as_dict(),
            }, ensure_ascii=False, default=str))
            return

        self.stdout.write(self.style.MIGRATE_HEADING(f"KPIs (sede={params.sede_id or 'todas'}, hoy={hoy})"))
        for nombre, ind in snapshot.as_dict().items():
            self.stdout.write(f"  {nombre:<24} {ind['value']!s:>14}  {ind['subtitle']}")

        self.stdout.write(self.style.MIGRATE_HEADING(f"{params.periodo_a} vs {params.periodo_b}"))
        for nombre, r in (("multas", multas), ("telepase", telepase), ("incidencias", incidencias)):
            var = variacion_porcentual(r.total_a, r.total_b)
            self.stdout.write(f"  {nombre:<12} {formato_ars(r.total_a):>16} {formato_ars(r.total_b):>16}  {var.etiqueta}")
        var = variacion_porcentual(permanencia.avg_dias_a, permanencia.avg_dias_b)
        self.stdout.write(
            f"  {'permanencia':<12} {permanencia.avg_dias_a:>13.1f} d {permanencia.avg_dias_b:>13.1f} d  {var.etiqueta}"
        )
        self.stdout.write(self.style.SUCCESS("OK"))
