from django.contrib import admin
from .models import Asignacion, AsignacionConductor


class AsignacionConductorInline(admin.TabularInline):
    model = AsignacionConductor
    extra = 0
    autocomplete_fields = ("conductor",)
    fields = ("conductor", "horario", "estado", "fecha_inicio", "fecha_fin", "confirmado")


@admin.register(Asignacion)
class AsignacionAdmin(admin.ModelAdmin):
    list_display = ("codigo", "vehiculo", "horario", "estado", "fecha_inicio", "fecha_fin", "sede")
    list_filter = ("horario", "estado", "sede")
    search_fields = ("codigo", "vehiculo__patente")
    list_select_related = ("vehiculo", "sede")
    inlines = [AsignacionConductorInline]
    readonly_fields = ("created_at", "updated_at")


@admin.register(AsignacionConductor)
class AsignacionConductorAdmin(admin.ModelAdmin):
    list_display = ("asignacion", "conductor", "horario", "estado", "fecha_inicio", "fecha_fin")
    list_filter = ("horario", "estado")
    search_fields = ("conductor__nombres", "conductor__apellidos", "conductor__numero_dni", "asignacion__codigo")
    list_select_related = ("asignacion", "conductor")
