from django.db import models
from core.models import TimeStampedModel, SoftDeleteModel, SedeScopedModel

# ---------------------------------------------------------------------
# Vehículos + catálogo de estados
# ---------------------------------------------------------------------

class VehiculoEstado(models.Model):
    class Codigo(models.TextChoices):
        EN_USO = "EN_USO", "En uso"
        PKG_ON_BASE = "PKG_ON_BASE", "Disponible en base"
        TALLER_MECANICO = "TALLER_MECANICO", "Taller mecánico"
        TALLER_CHAPA = "TALLER_CHAPA", "Taller chapa y pintura"
        ROBO = "ROBO", "Robo"
        DESTRUCCION_TOTAL = "DESTRUCCION_TOTAL", "Destrucción total"
        JUBILADO = "JUBILADO", "Jubilado"
        DEVUELTO_PROVEEDOR = "DEVUELTO_PROVEEDOR", "Devuelto a proveedor"

    codigo = models.CharField(max_length=30, unique=True)
    descripcion = models.CharField(max_length=120, blank=True, default="")

    # Estados que no cuentan dentro de la flota total
    EXCLUIDOS_DE_FLOTA = (
        Codigo.ROBO,
        Codigo.DESTRUCCION_TOTAL,
        Codigo.JUBILADO,
        Codigo.DEVUELTO_PROVEEDOR,
    )
    OPERATIVOS = (Codigo.EN_USO, Codigo.PKG_ON_BASE)

    def __str__(self):
        return self.descripcion or self.codigo


class Vehiculo(TimeStampedModel, SoftDeleteModel, SedeScopedModel):
    patente = models.CharField(max_length=15, unique=True)
    marca = models.CharField(max_length=80, blank=True, default="")
    modelo = models.CharField(max_length=80, blank=True, default="")
    anio = models.PositiveIntegerField(null=True, blank=True)
    estado = models.ForeignKey(
        VehiculoEstado, on_delete=models.SET_NULL, null=True, blank=True, related_name="vehiculos"
    )

    class Meta:
        indexes = [
            models.Index(fields=["sede", "deleted_at"]),
        ]

    def __str__(self):
        return self.patente
