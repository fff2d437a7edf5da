from django.contrib import admin
from .models import ConceptoNomina, Garantia, CabifyHistorico, SaldoConductor


@admin.register(ConceptoNomina)
class ConceptoNominaAdmin(admin.ModelAdmin):
    list_display = ("codigo", "descripcion", "precio_base", "precio_final", "activo")
    list_filter = ("activo",)
    search_fields = ("codigo", "descripcion")


@admin.register(Garantia)
class GarantiaAdmin(admin.ModelAdmin):
    list_display = (
        "conductor",
        "monto_cuota_semanal",
        "estado",
        "cuotas_pagadas",
        "cuotas_totales",
        "monto_pagado",
        "monto_devuelto",
    )
    list_filter = ("estado", "sede")
    search_fields = ("conductor__nombres", "conductor__apellidos", "conductor__numero_dni", "conductor_nombre")
    list_select_related = ("conductor",)
    autocomplete_fields = ("conductor",)


@admin.register(CabifyHistorico)
class CabifyHistoricoAdmin(admin.ModelAdmin):
    list_display = ("dni", "fecha_inicio", "fecha_guardado", "cobro_app", "peajes")
    search_fields = ("dni", "cabify_driver_id")
    date_hierarchy = "fecha_inicio"
    ordering = ("-fecha_inicio", "-fecha_guardado")


@admin.register(SaldoConductor)
class SaldoConductorAdmin(admin.ModelAdmin):
    list_display = ("conductor", "saldo_actual", "dias_mora", "monto_mora_acumulada", "fecha_referencia", "sede")
    list_filter = ("sede",)
    search_fields = ("conductor__nombres", "conductor__apellidos", "conductor__numero_dni", "conductor_nombre")
    list_select_related = ("conductor", "sede")
    autocomplete_fields = ("conductor",)
