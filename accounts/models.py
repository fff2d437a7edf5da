from django.conf import settings
from django.db import models
from django.db.models.constraints import UniqueConstraint
from core.models import TimeStampedModel


# ---------------------------------------------------------------------
# Seguridad / Usuarios (roles, perfiles y permisos por menú)
# ---------------------------------------------------------------------
# Nota: los permisos del back-office no usan los permisos por modelo de Django;
# se definen por menú/submenú, primero por rol y opcionalmente por usuario.

class Rol(TimeStampedModel):
    ADMIN = "admin"

    name = models.CharField(max_length=60, unique=True)
    descripcion = models.CharField(max_length=200, blank=True, default="")

    def __str__(self):
        return self.name


class UserProfile(TimeStampedModel):
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="perfil")
    rol = models.ForeignKey(Rol, on_delete=models.SET_NULL, null=True, blank=True, related_name="perfiles")
    sede = models.ForeignKey("sedes.Sede", on_delete=models.SET_NULL, null=True, blank=True, related_name="perfiles")
    telefono = models.CharField(max_length=30, blank=True, default="")
    activo = models.BooleanField(default=True, db_index=True)
    # Token de la última sesión iniciada; otra sesión con token distinto queda invalidada
    session_token = models.CharField(max_length=64, blank=True, default="")

    @property
    def rol_nombre(self) -> str:
        return (self.rol.name if self.rol else "").lower()

    def __str__(self):
        return f"{self.user} ({self.rol_nombre or 'sin rol'})"


class Menu(TimeStampedModel):
    name = models.CharField(max_length=60, unique=True)
    label = models.CharField(max_length=120, blank=True, default="")
    route = models.CharField(max_length=120, blank=True, default="")
    order_index = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        ordering = ("order_index", "name")

    def __str__(self):
        return self.label or self.name


class Submenu(TimeStampedModel):
    menu = models.ForeignKey(Menu, on_delete=models.CASCADE, related_name="submenus")
    parent = models.ForeignKey("self", on_delete=models.CASCADE, null=True, blank=True, related_name="hijos")
    name = models.CharField(max_length=60, unique=True)
    label = models.CharField(max_length=120, blank=True, default="")
    route = models.CharField(max_length=120, blank=True, default="")
    level = models.PositiveSmallIntegerField(default=1)
    order_index = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        ordering = ("menu", "order_index", "name")

    def __str__(self):
        return self.label or self.name


class PermisoAcciones(models.Model):
    can_view = models.BooleanField(default=False)
    can_create = models.BooleanField(default=False)
    can_edit = models.BooleanField(default=False)
    can_delete = models.BooleanField(default=False)

    class Meta:
        abstract = True


class RoleMenuPermission(PermisoAcciones):
    rol = models.ForeignKey(Rol, on_delete=models.CASCADE, related_name="permisos_menu")
    menu = models.ForeignKey(Menu, on_delete=models.CASCADE, related_name="permisos_rol")

    class Meta:
        constraints = [UniqueConstraint(fields=["rol", "menu"], name="uq_rol_menu")]


class RoleSubmenuPermission(PermisoAcciones):
    rol = models.ForeignKey(Rol, on_delete=models.CASCADE, related_name="permisos_submenu")
    submenu = models.ForeignKey(Submenu, on_delete=models.CASCADE, related_name="permisos_rol")

    class Meta:
        constraints = [UniqueConstraint(fields=["rol", "submenu"], name="uq_rol_submenu")]


class UserMenuPermission(PermisoAcciones):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="permisos_menu")
    menu = models.ForeignKey(Menu, on_delete=models.CASCADE, related_name="permisos_usuario")

    class Meta:
        constraints = [UniqueConstraint(fields=["user", "menu"], name="uq_user_menu")]


class UserSubmenuPermission(PermisoAcciones):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="permisos_submenu")
    submenu = models.ForeignKey(Submenu, on_delete=models.CASCADE, related_name="permisos_usuario")

    class Meta:
        constraints = [UniqueConstraint(fields=["user", "submenu"], name="uq_user_submenu")]
