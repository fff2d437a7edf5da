from core.models.base import TimeStampedModel, SoftDeleteModel, SedeScopedModel

__all__ = ["TimeStampedModel", "SoftDeleteModel", "SedeScopedModel"]
