# accounts/services/permisos.py
"""
Permiso efectivo por menú/submenú.

Orden de resolución para (usuario, entidad, acción):
  1. fila explícita del usuario para esa entidad (manda aunque niegue),
  2. fila del rol del usuario,
  3. nada => denegado.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from django.db import transaction

from accounts.models import (
    Menu,
    Rol,
    Submenu,
    RoleMenuPermission,
    RoleSubmenuPermission,
    UserMenuPermission,
    UserSubmenuPermission,
)

logger = logging.getLogger(__name__)

USER_OVERRIDE = "user_override"
ROLE_INHERITED = "role_inherited"


class Accion(Enum):
    VER = "view"
    CREAR = "create"
    EDITAR = "edit"
    ELIMINAR = "delete"


def _campo(accion: Accion) -> str:
    if accion is Accion.VER:
        return "can_view"
    if accion is Accion.CREAR:
        return "can_create"
    if accion is Accion.EDITAR:
        return "can_edit"
    if accion is Accion.ELIMINAR:
        return "can_delete"
    raise ValueError(f"Acción desconocida: {accion!r}")


@dataclass(frozen=True)
class Flags:
    ver: bool = False
    crear: bool = False
    editar: bool = False
    eliminar: bool = False

    @classmethod
    def from_row(cls, row) -> "Flags":
        return cls(
            ver=bool(row.can_view),
            crear=bool(row.can_create),
            editar=bool(row.can_edit),
            eliminar=bool(row.can_delete),
        )

    def permite(self, accion: Accion) -> bool:
        if accion is Accion.VER:
            return self.ver
        if accion is Accion.CREAR:
            return self.crear
        if accion is Accion.EDITAR:
            return self.editar
        if accion is Accion.ELIMINAR:
            return self.eliminar
        raise ValueError(f"Acción desconocida: {accion!r}")


DENEGADO = Flags()


@dataclass(frozen=True)
class PermisoEfectivo:
    entidad_id: int
    flags: Flags
    origen: str

    @property
    def heredado(self) -> bool:
        return self.origen == ROLE_INHERITED


class ResolutorPermisos:
    """Dos tablas de búsqueda (usuario y rol) indexadas por id de entidad."""

    def __init__(self, por_usuario: Dict[int, Flags], por_rol: Dict[int, Flags]):
        self._por_usuario = dict(por_usuario)
        self._por_rol = dict(por_rol)

    def permiso(self, entidad_id: int) -> PermisoEfectivo:
        if entidad_id in self._por_usuario:
            return PermisoEfectivo(entidad_id, self._por_usuario[entidad_id], USER_OVERRIDE)
        return PermisoEfectivo(entidad_id, self._por_rol.get(entidad_id, DENEGADO), ROLE_INHERITED)

    def efectivo(self, entidad_id: int, accion: Accion) -> bool:
        return self.permiso(entidad_id).flags.permite(accion)

    def heredado(self, entidad_id: int) -> bool:
        # Independiente de la acción consultada
        return entidad_id not in self._por_usuario


# ---------------------------------------------------------------------
# Carga desde BD
# ---------------------------------------------------------------------

def _rol_de(user) -> Optional[Rol]:
    perfil = getattr(user, "perfil", None)
    return perfil.rol if perfil else None


def es_admin(user) -> bool:
    if user.is_superuser:
        return True
    rol = _rol_de(user)
    return bool(rol and rol.name.lower() == Rol.ADMIN)


def resolutor_menus(user) -> ResolutorPermisos:
    rol = _rol_de(user)
    por_usuario = {p.menu_id: Flags.from_row(p) for p in UserMenuPermission.objects.filter(user=user)}
    por_rol = {}
    if rol:
        por_rol = {p.menu_id: Flags.from_row(p) for p in RoleMenuPermission.objects.filter(rol=rol)}
    return ResolutorPermisos(por_usuario, por_rol)


def resolutor_submenus(user) -> ResolutorPermisos:
    rol = _rol_de(user)
    por_usuario = {p.submenu_id: Flags.from_row(p) for p in UserSubmenuPermission.objects.filter(user=user)}
    por_rol = {}
    if rol:
        por_rol = {p.submenu_id: Flags.from_row(p) for p in RoleSubmenuPermission.objects.filter(rol=rol)}
    return ResolutorPermisos(por_usuario, por_rol)


def permiso_efectivo(user, entidad, accion: Accion) -> bool:
    """Permiso sin atajos de admin: override de usuario, luego rol, luego False."""
    if isinstance(entidad, Submenu):
        return resolutor_submenus(user).efectivo(entidad.pk, accion)
    if isinstance(entidad, Menu):
        return resolutor_menus(user).efectivo(entidad.pk, accion)
    raise TypeError(f"Entidad no soportada: {type(entidad).__name__}")


def puede(user, entidad, accion: Accion) -> bool:
    """Helper para vistas: admin puede todo."""
    if not user.is_authenticated:
        return False
    if es_admin(user):
        return True
    return permiso_efectivo(user, entidad, accion)


@dataclass(frozen=True)
class MenuVisible:
    id: int
    name: str
    label: str
    route: str
    order_index: int
    flags: Flags
    origen: str


def menus_visibles(user) -> List[MenuVisible]:
    """Menús activos con can_view efectivo, en orden de presentación."""
    menus = Menu.objects.filter(is_active=True).order_by("order_index", "name")
    if es_admin(user):
        todo = Flags(ver=True, crear=True, editar=True, eliminar=True)
        return [
            MenuVisible(m.pk, m.name, m.label, m.route, m.order_index, todo, ROLE_INHERITED)
            for m in menus
        ]

    resolutor = resolutor_menus(user)
    visibles = []
    for m in menus:
        p = resolutor.permiso(m.pk)
        if p.flags.ver:
            visibles.append(MenuVisible(m.pk, m.name, m.label, m.route, m.order_index, p.flags, p.origen))
    return visibles


# ---------------------------------------------------------------------
# Override explícito por usuario
# ---------------------------------------------------------------------

@transaction.atomic
def alternar_permiso_usuario(user, entidad, accion: Accion) -> bool:
    """
    Invierte la acción en la fila del usuario; si no existe la crea
    con sólo esa acción habilitada. Regresa el nuevo valor.
    """
    campo = _campo(accion)
    if isinstance(entidad, Submenu):
        row, created = UserSubmenuPermission.objects.select_for_update().get_or_create(
            user=user, submenu=entidad, defaults={campo: True}
        )
    elif isinstance(entidad, Menu):
        row, created = UserMenuPermission.objects.select_for_update().get_or_create(
            user=user, menu=entidad, defaults={campo: True}
        )
    else:
        raise TypeError(f"Entidad no soportada: {type(entidad).__name__}")

    if created:
        nuevo = True
    else:
        nuevo = not Flags.from_row(row).permite(accion)
        type(row).objects.filter(pk=row.pk).update(**{campo: nuevo})

    logger.info("Permiso %s de %s sobre %s => %s", campo, user, entidad, nuevo)
    return nuevo
