from django.urls import path

from dashboard import views

app_name = "dashboard"

urlpatterns = [
    path("kpis/", views.KpisView.as_view(), name="kpis"),
    path("estado-flota/", views.EstadoFlotaView.as_view(), name="estado_flota"),
    path("periodos/", views.PeriodosView.as_view(), name="periodos"),
    path("comparativa/", views.ComparativaView.as_view(), name="comparativa"),
    path("comparativa/<slug:indicador>/", views.ComparativaView.as_view(), name="comparativa_indicador"),
    path("cobro-teorico/", views.CobroTeoricoView.as_view(), name="cobro_teorico"),
]
