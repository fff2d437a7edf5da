from django.contrib import admin
from .models import Conductor


@admin.register(Conductor)
class ConductorAdmin(admin.ModelAdmin):
    list_display = ("nombres", "apellidos", "numero_dni", "zona", "sede", "activo", "fecha_terminacion")
    list_filter = ("sede", "zona", "activo")
    search_fields = ("nombres", "apellidos", "numero_dni", "numero_licencia")
    list_select_related = ("sede",)
    readonly_fields = ("created_at", "updated_at")
