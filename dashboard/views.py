import asyncio
import logging

from asgiref.sync import async_to_sync
from django.db import DatabaseError
from django.http import JsonResponse
from django.utils import timezone
from django.views import View

from dashboard.mixins import MenuPermisoRequiredMixin
from dashboard.services.alcance import resolver_sede
from dashboard.services.cobro_teorico import cobro_teorico_vs_real
from dashboard.services.comparativa import (
    ComparacionPermanencia,
    ComparacionTotales,
    EstadoAgregador,
    ParametrosComparacion,
    con_cache,
)
from dashboard.services.estadisticas import (
    comparar_incidencias,
    comparar_multas,
    comparar_permanencia,
    comparar_telepase,
)
from dashboard.services.flota import estado_flota, kpis_flota
from dashboard.services.montos import formato_ars, variacion_porcentual
from dashboard.services.periodos import Granularidad, etiqueta_actual, etiqueta_anterior, opciones_dia

logger = logging.getLogger(__name__)

AGREGADORES = {
    "multas": (comparar_multas, ComparacionTotales),
    "telepase": (comparar_telepase, ComparacionTotales),
    "incidencias": (comparar_incidencias, ComparacionTotales),
    "permanencia": (comparar_permanencia, ComparacionPermanencia),
}


def _granularidad(request, default="semana"):
    return Granularidad.parse(request.GET.get("granularidad") or default)


def _error(mensaje, status=400):
    return JsonResponse({"error": mensaje}, status=status)


class DashboardView(MenuPermisoRequiredMixin, View):
    def _sede(self, request):
        return resolver_sede(getattr(request, "sesion", None), request.GET.get("sede"))


class KpisView(DashboardView):
    def get(self, request):
        sede_id = self._sede(request)
        try:
            snapshot = async_to_sync(kpis_flota)(sede_id, timezone.localdate())
        except DatabaseError:
            # sin indicadores parciales: o todos o ninguno
            logger.exception("No se pudo armar el snapshot de KPIs (sede=%s)", sede_id)
            return JsonResponse({"sede": sede_id, "kpis": None}, status=503)
        return JsonResponse({"sede": sede_id, "kpis": snapshot.as_dict()})


class EstadoFlotaView(DashboardView):
    def get(self, request):
        sede_id = self._sede(request)
        estados = async_to_sync(estado_flota)(sede_id)
        data = [
            {"name": e.nombre, "count": e.cantidad, "percentage": e.porcentaje, "color": e.color}
            for e in estados
        ]
        return JsonResponse({"sede": sede_id, "total": sum(e.cantidad for e in estados), "results": data})


class PeriodosView(DashboardView):
    """Etiquetas por defecto para el selector."""

    def get(self, request):
        hoy = timezone.localdate()
        return JsonResponse({
            "actual": {g.value: etiqueta_actual(g, hoy) for g in Granularidad},
            "anterior": {g.value: etiqueta_anterior(g, hoy) for g in Granularidad},
            "dias": opciones_dia(hoy),
        })


class ComparativaView(DashboardView):
    def get(self, request, indicador=None):
        try:
            gran = _granularidad(request)
        except ValueError:
            return _error("Granularidad inválida.")

        nombres = [indicador] if indicador else list(AGREGADORES)
        if any(n not in AGREGADORES for n in nombres):
            return _error("Indicador desconocido.", status=404)

        hoy = timezone.localdate()
        params = ParametrosComparacion(
            granularidad=gran,
            periodo_a=request.GET.get("periodo_a") or etiqueta_actual(gran, hoy),
            periodo_b=request.GET.get("periodo_b") or etiqueta_anterior(gran, hoy),
            sede_id=self._sede(request),
        )
        estados = {
            n: EstadoAgregador(con_cache(n, AGREGADORES[n][0]), AGREGADORES[n][1]())
            for n in nombres
        }

        async def ejecutar():
            await asyncio.gather(*(e.ejecutar(params) for e in estados.values()))

        async_to_sync(ejecutar)()

        data = {}
        for n, estado in estados.items():
            resultado = estado.resultado.as_dict()
            if isinstance(estado.resultado, ComparacionTotales):
                var = variacion_porcentual(estado.resultado.total_a, estado.resultado.total_b)
                resultado["total_a_fmt"] = formato_ars(estado.resultado.total_a)
                resultado["total_b_fmt"] = formato_ars(estado.resultado.total_b)
            else:
                var = variacion_porcentual(estado.resultado.avg_dias_a, estado.resultado.avg_dias_b)
            resultado["variacion"] = var.etiqueta
            data[n] = resultado

        return JsonResponse({
            "granularidad": gran.value,
            "periodo_a": params.periodo_a,
            "periodo_b": params.periodo_b,
            "sede": params.sede_id,
            "resultados": data,
        })


class CobroTeoricoView(DashboardView):
    def get(self, request):
        try:
            gran = _granularidad(request, default="mes")
            etiqueta = request.GET.get("periodo") or etiqueta_actual(gran)
            serie = async_to_sync(cobro_teorico_vs_real)(gran, etiqueta, self._sede(request))
        except ValueError as e:
            return _error(str(e) or "Granularidad inválida.")
        except DatabaseError:
            logger.exception("No se pudo calcular el cobro teórico (%s %r)", gran.value, etiqueta)
            return JsonResponse({"granularidad": gran.value, "puntos": []}, status=503)
        return JsonResponse(serie.as_dict())
