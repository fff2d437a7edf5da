from django.db import models
from core.models import TimeStampedModel, SedeScopedModel

# ---------------------------------------------------------------------
# Multas de tránsito (histórico importado)
# ---------------------------------------------------------------------

class Multa(TimeStampedModel, SedeScopedModel):
    patente = models.CharField(max_length=15, blank=True, default="", db_index=True)
    acta = models.CharField(max_length=60, blank=True, default="")
    fecha_infraccion = models.DateTimeField(db_index=True)
    # Importe tal como llega del portal de infracciones ("$ 12.345,67")
    importe = models.CharField(max_length=40, blank=True, default="")
    detalle = models.CharField(max_length=240, blank=True, default="")

    def __str__(self):
        return f"{self.patente} {self.fecha_infraccion:%d/%m/%Y} {self.importe}"
