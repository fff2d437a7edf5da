from django.contrib import admin
from .models import Vehiculo, VehiculoEstado


@admin.register(VehiculoEstado)
class VehiculoEstadoAdmin(admin.ModelAdmin):
    list_display = ("codigo", "descripcion")
    search_fields = ("codigo", "descripcion")


@admin.register(Vehiculo)
class VehiculoAdmin(admin.ModelAdmin):
    list_display = ("patente", "marca", "modelo", "anio", "estado", "sede", "deleted_at")
    list_filter = ("estado", "sede")
    search_fields = ("patente", "marca", "modelo")
    list_select_related = ("estado", "sede")
    readonly_fields = ("created_at", "updated_at")
