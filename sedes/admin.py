from django.contrib import admin
from .models import Sede


@admin.register(Sede)
class SedeAdmin(admin.ModelAdmin):
    list_display = ("nombre", "codigo", "es_principal", "activo")
    list_filter = ("es_principal", "activo")
    search_fields = ("nombre", "codigo")
