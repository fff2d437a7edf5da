from django.db import models
from core.models import TimeStampedModel, SedeScopedModel
from conductores.models import Conductor
from vehiculos.models import Vehiculo

# ---------------------------------------------------------------------
# Asignaciones: vehículo <-> conductores (por turno o a cargo)
# ---------------------------------------------------------------------

class Asignacion(TimeStampedModel, SedeScopedModel):
    class Horario(models.TextChoices):
        TURNO = "TURNO", "Turno (diurno + nocturno)"
        CARGO = "CARGO", "A cargo (todo el día)"

    class Estado(models.TextChoices):
        PROGRAMADO = "programado", "Programado"
        ACTIVO = "activo", "Activo"
        FINALIZADO = "finalizado", "Finalizado"
        CANCELADO = "cancelado", "Cancelado"

    codigo = models.CharField(max_length=40, blank=True, default="", db_index=True)
    vehiculo = models.ForeignKey(Vehiculo, on_delete=models.PROTECT, related_name="asignaciones")
    horario = models.CharField(max_length=10, choices=Horario.choices, default=Horario.CARGO, db_index=True)
    estado = models.CharField(max_length=12, choices=Estado.choices, default=Estado.PROGRAMADO, db_index=True)
    fecha_programada = models.DateTimeField(null=True, blank=True)
    fecha_inicio = models.DateTimeField(null=True, blank=True, db_index=True)
    fecha_fin = models.DateTimeField(null=True, blank=True, db_index=True)

    # Variantes de estado que el backend ha escrito históricamente
    ESTADOS_ACTIVOS = ("activo", "activa")
    ESTADOS_PROGRAMADOS = ("programado", "programada")
    ESTADOS_TERMINALES = ("finalizado", "finalizada", "cancelado", "cancelada")

    class Meta:
        indexes = [
            models.Index(fields=["estado", "fecha_inicio"]),
        ]

    def __str__(self):
        return self.codigo or f"Asignación {self.pk}"


class AsignacionConductor(TimeStampedModel):
    class Horario(models.TextChoices):
        DIURNO = "diurno", "Diurno"
        NOCTURNO = "nocturno", "Nocturno"
        TODO_DIA = "todo_dia", "Todo el día"

    class Estado(models.TextChoices):
        ASIGNADO = "asignado", "Asignado"
        ACTIVO = "activo", "Activo"
        FINALIZADO = "finalizado", "Finalizado"
        CANCELADO = "cancelado", "Cancelado"

    asignacion = models.ForeignKey(Asignacion, on_delete=models.CASCADE, related_name="conductores")
    conductor = models.ForeignKey(Conductor, on_delete=models.PROTECT, related_name="asignaciones")
    horario = models.CharField(max_length=10, blank=True, default="", db_index=True)
    estado = models.CharField(max_length=12, default=Estado.ASIGNADO, db_index=True)
    fecha_inicio = models.DateTimeField(null=True, blank=True)
    fecha_fin = models.DateTimeField(null=True, blank=True)
    confirmado = models.BooleanField(default=False)
    fecha_confirmacion = models.DateTimeField(null=True, blank=True)

    # Estados que entran en la conciliación de ingresos
    ESTADOS_CONCILIABLES = (
        "asignado", "activo", "activa",
        "finalizado", "finalizada", "completado",
        "cancelado", "cancelada",
    )
    HORARIOS_DIURNOS = ("diurno", "DIURNO", "D")
    HORARIOS_NOCTURNOS = ("nocturno", "NOCTURNO", "N")

    class Meta:
        indexes = [
            models.Index(fields=["conductor", "estado"]),
        ]

    def __str__(self):
        return f"{self.asignacion} / {self.conductor} ({self.horario or '-'})"
