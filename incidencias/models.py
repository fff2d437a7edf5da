from django.db import models
from core.models import TimeStampedModel, SedeScopedModel
from conductores.models import Conductor
from vehiculos.models import Vehiculo

# ---------------------------------------------------------------------
# Incidencias: siniestros y penalidades
# ---------------------------------------------------------------------

class CategoriaSiniestro(models.Model):
    nombre = models.CharField(max_length=80, unique=True)

    def __str__(self):
        return self.nombre


class Siniestro(TimeStampedModel, SedeScopedModel):
    categoria = models.ForeignKey(
        CategoriaSiniestro, on_delete=models.SET_NULL, null=True, blank=True, related_name="siniestros"
    )
    vehiculo = models.ForeignKey(Vehiculo, on_delete=models.SET_NULL, null=True, blank=True, related_name="siniestros")
    conductor = models.ForeignKey(
        Conductor, on_delete=models.SET_NULL, null=True, blank=True, related_name="siniestros"
    )
    fecha_siniestro = models.DateField(null=True, blank=True, db_index=True)
    descripcion = models.TextField(blank=True, default="")

    class Meta:
        indexes = [models.Index(fields=["sede", "fecha_siniestro"])]

    def __str__(self):
        return f"{self.categoria or 'Siniestro'} {self.fecha_siniestro or ''}".strip()


class Penalidad(TimeStampedModel):
    conductor = models.ForeignKey(Conductor, on_delete=models.PROTECT, related_name="penalidades")
    siniestro = models.ForeignKey(Siniestro, on_delete=models.SET_NULL, null=True, blank=True, related_name="penalidades")
    detalle = models.CharField(max_length=240, blank=True, default="")
    monto = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    aplicado = models.BooleanField(default=False, db_index=True)
    # Plan de cobro en cuotas (opcional)
    fraccionado = models.BooleanField(default=False)
    cantidad_cuotas = models.PositiveIntegerField(null=True, blank=True)

    class Meta:
        indexes = [models.Index(fields=["aplicado", "created_at"])]

    def __str__(self):
        return f"Penalidad {self.conductor} ${self.monto}"
