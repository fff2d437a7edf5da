from django.db import models

# ---------------------------------------------------------------------
# Base / Utilidades
# ---------------------------------------------------------------------

class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True, db_index=True)

    class Meta:
        abstract = True


class SoftDeleteModel(models.Model):
    # El backend nunca borra filas; las marca con deleted_at.
    deleted_at = models.DateTimeField(null=True, blank=True, db_index=True)

    class Meta:
        abstract = True


class SedeScopedModel(models.Model):
    # Sede operativa; null = sin sede asignada (sólo visible con "todas las sedes")
    sede = models.ForeignKey(
        "sedes.Sede", on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )

    class Meta:
        abstract = True
