from django.db import models
from core.models import TimeStampedModel, SedeScopedModel
from conductores.models import Conductor

# ---------------------------------------------------------------------
# Facturación: conceptos, garantías y el histórico de la plataforma
# ---------------------------------------------------------------------

class ConceptoNomina(TimeStampedModel):
    codigo = models.CharField(max_length=10, unique=True)
    descripcion = models.CharField(max_length=160, blank=True, default="")
    precio_base = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    precio_final = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    activo = models.BooleanField(default=True, db_index=True)

    @property
    def precio_vigente(self):
        return self.precio_final or self.precio_base or 0

    def __str__(self):
        return f"{self.codigo} {self.descripcion}".strip()


class Garantia(TimeStampedModel, SedeScopedModel):
    class Estado(models.TextChoices):
        EN_CURSO = "en_curso", "En curso"
        COMPLETADA = "completada", "Completada"
        CANCELADA = "cancelada", "Cancelada"
        EN_DEVOLUCION = "en_devolucion", "En devolución"

    conductor = models.ForeignKey(Conductor, on_delete=models.CASCADE, related_name="garantias")
    conductor_nombre = models.CharField(max_length=240, blank=True, default="")
    monto_cuota_semanal = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    estado = models.CharField(max_length=15, choices=Estado.choices, default=Estado.EN_CURSO, db_index=True)
    cuotas_pagadas = models.PositiveIntegerField(default=0)
    cuotas_totales = models.PositiveIntegerField(default=0)
    monto_pagado = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    monto_devuelto = models.DecimalField(max_digits=14, decimal_places=2, default=0)

    class Meta:
        indexes = [
            models.Index(fields=["conductor", "estado"]),
        ]

    @property
    def finalizada(self) -> bool:
        """Completada/cancelada, o con todas sus cuotas pagas."""
        if self.estado in (self.Estado.COMPLETADA, self.Estado.CANCELADA):
            return True
        return self.cuotas_totales > 0 and self.cuotas_pagadas >= self.cuotas_totales

    def __str__(self):
        return f"Garantía {self.conductor_nombre or self.conductor_id} ({self.estado})"


class CabifyHistorico(models.Model):
    """
    Una fila por conductor, día y corrida de sincronización.
    Varias corridas del mismo día generan filas repetidas; la válida es la
    de fecha_guardado más reciente.
    """
    dni = models.CharField(max_length=20, blank=True, default="", db_index=True)
    cabify_driver_id = models.CharField(max_length=60, blank=True, default="")
    fecha_inicio = models.DateTimeField(db_index=True)
    fecha_guardado = models.DateTimeField(null=True, blank=True, db_index=True)
    cobro_app = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    # La plataforma exporta peajes como texto con separadores mixtos
    peajes = models.CharField(max_length=40, blank=True, default="")

    class Meta:
        indexes = [
            models.Index(fields=["dni", "fecha_inicio"]),
        ]

    def __str__(self):
        return f"{self.dni} {self.fecha_inicio:%Y-%m-%d}"


class SaldoConductor(TimeStampedModel, SedeScopedModel):
    """Cuenta corriente del conductor: saldo negativo = deuda."""
    conductor = models.ForeignKey(Conductor, on_delete=models.CASCADE, related_name="saldos")
    conductor_nombre = models.CharField(max_length=240, blank=True, default="")
    saldo_actual = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    dias_mora = models.PositiveIntegerField(null=True, blank=True)
    monto_mora_acumulada = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    # Desde cuándo corre la mora
    fecha_referencia = models.DateField(null=True, blank=True)

    def __str__(self):
        return f"Saldo {self.conductor_nombre or self.conductor_id}: {self.saldo_actual}"
