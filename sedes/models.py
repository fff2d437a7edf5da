from django.db import models
from core.models import TimeStampedModel

# ---------------------------------------------------------------------
# Sedes: sucursales operativas
# ---------------------------------------------------------------------

class Sede(TimeStampedModel):
    nombre = models.CharField(max_length=120, unique=True)
    codigo = models.CharField(max_length=20, blank=True, default="", db_index=True)
    es_principal = models.BooleanField(default=False, db_index=True)
    activo = models.BooleanField(default=True, db_index=True)

    class Meta:
        ordering = ("nombre",)

    def __str__(self):
        return self.nombre
