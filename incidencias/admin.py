from django.contrib import admin
from .models import CategoriaSiniestro, Siniestro, Penalidad


@admin.register(CategoriaSiniestro)
class CategoriaSiniestroAdmin(admin.ModelAdmin):
    search_fields = ("nombre",)


@admin.register(Siniestro)
class SiniestroAdmin(admin.ModelAdmin):
    list_display = ("fecha_siniestro", "categoria", "vehiculo", "conductor", "sede")
    list_filter = ("categoria", "sede")
    search_fields = ("vehiculo__patente", "conductor__nombres", "conductor__apellidos")
    list_select_related = ("categoria", "vehiculo", "conductor", "sede")
    date_hierarchy = "fecha_siniestro"


@admin.register(Penalidad)
class PenalidadAdmin(admin.ModelAdmin):
    list_display = ("conductor", "monto", "aplicado", "fraccionado", "cantidad_cuotas", "created_at")
    list_filter = ("aplicado", "fraccionado")
    search_fields = ("conductor__nombres", "conductor__apellidos", "detalle")
    list_select_related = ("conductor",)
    readonly_fields = ("created_at", "updated_at")
