from django.db import models
from core.models import TimeStampedModel, SedeScopedModel

# ---------------------------------------------------------------------
# Conductores
# ---------------------------------------------------------------------

class Conductor(TimeStampedModel, SedeScopedModel):
    nombres = models.CharField(max_length=120)
    apellidos = models.CharField(max_length=120, blank=True, default="")
    # El DNI es la clave con la que la plataforma (Cabify) identifica al conductor
    numero_dni = models.CharField(max_length=20, blank=True, default="", db_index=True)
    numero_licencia = models.CharField(max_length=40, blank=True, default="")
    telefono_contacto = models.CharField(max_length=30, blank=True, default="")
    zona = models.CharField(max_length=80, blank=True, default="", db_index=True)
    activo = models.BooleanField(default=True, db_index=True)
    # Baja: null mientras el conductor sigue activo
    fecha_terminacion = models.DateTimeField(null=True, blank=True, db_index=True)

    class Meta:
        indexes = [
            models.Index(fields=["sede", "fecha_terminacion"]),
        ]

    @property
    def nombre_completo(self) -> str:
        return f"{self.nombres} {self.apellidos}".strip()

    def __str__(self):
        return self.nombre_completo
