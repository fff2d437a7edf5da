from django.contrib import admin
from .models import Multa


@admin.register(Multa)
class MultaAdmin(admin.ModelAdmin):
    list_display = ("patente", "acta", "fecha_infraccion", "importe", "sede")
    list_filter = ("sede",)
    search_fields = ("patente", "acta")
    date_hierarchy = "fecha_infraccion"
