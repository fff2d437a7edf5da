# Aqui se definen los roles y el árbol de menús con sus permisos por rol
# hay 4 roles: admin, supervisor, operador y lectura

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from django.core.management.base import BaseCommand
from django.db import transaction

from accounts.models import Menu, Rol, RoleMenuPermission, RoleSubmenuPermission, Submenu


@dataclass(frozen=True)
class MenuPolicy:
    """
    Permisos de un rol sobre un menú.
    actions: subconjunto de {"view","create","edit","delete"}.
    submenus: si aplica la misma política a todos los submenús del menú.
    """
    actions: Tuple[str, ...]
    submenus: bool = True

    def as_fields(self) -> Dict[str, bool]:
        return {
            "can_view": "view" in self.actions,
            "can_create": "create" in self.actions,
            "can_edit": "edit" in self.actions,
            "can_delete": "delete" in self.actions,
        }


COMPLETO = MenuPolicy(actions=("view", "create", "edit", "delete"))
OPERA = MenuPolicy(actions=("view", "create", "edit"))
VER = MenuPolicy(actions=("view",))

# name -> (label, route, [(submenu_name, label, route)])
MENUS = {
    "dashboard": ("Dashboard", "/dashboard", [
        ("dashboard_kpis", "Indicadores", "/dashboard/kpis"),
        ("dashboard_comparativa", "Comparativa de periodos", "/dashboard/comparativa"),
        ("dashboard_cobro", "Cobro teórico vs real", "/dashboard/cobro-teorico"),
    ]),
    "vehiculos": ("Vehículos", "/vehiculos", []),
    "conductores": ("Conductores", "/conductores", []),
    "asignaciones": ("Asignaciones", "/asignaciones", []),
    "incidencias": ("Incidencias", "/incidencias", [
        ("siniestros", "Siniestros", "/incidencias/siniestros"),
        ("penalidades", "Penalidades", "/incidencias/penalidades"),
    ]),
    "multas": ("Multas", "/multas", []),
    "facturacion": ("Facturación", "/facturacion", [
        ("garantias", "Garantías", "/facturacion/garantias"),
        ("conceptos", "Conceptos de nómina", "/facturacion/conceptos"),
    ]),
    "usuarios": ("Usuarios y permisos", "/usuarios", []),
}


class Command(BaseCommand):
    help = "Crea/actualiza roles (admin, supervisor, operador, lectura), menús y permisos por rol."

    @transaction.atomic
    def handle(self, *args, **options):
        # ------------------------------------------------------------------
        # Políticas por rol (admin no necesita filas: tiene bypass)
        # ------------------------------------------------------------------
        roles: Dict[str, Dict[str, MenuPolicy]] = {
            Rol.ADMIN: {},

            # Supervisor: opera todo salvo usuarios, facturación solo consulta
            "supervisor": {
                "dashboard": VER,
                "vehiculos": COMPLETO,
                "conductores": COMPLETO,
                "asignaciones": COMPLETO,
                "incidencias": COMPLETO,
                "multas": OPERA,
                "facturacion": VER,
            },

            # Operador: captura y seguimiento, sin eliminar
            "operador": {
                "vehiculos": OPERA,
                "conductores": OPERA,
                "asignaciones": OPERA,
                "incidencias": OPERA,
                "multas": OPERA,
            },

            # Lectura: view en todo menos usuarios
            "lectura": {name: VER for name in MENUS if name != "usuarios"},
        }

        # ------------------------------------------------------------------
        # Menús
        # ------------------------------------------------------------------
        for orden, (name, (label, route, subs)) in enumerate(MENUS.items(), start=1):
            menu, _ = Menu.objects.update_or_create(
                name=name, defaults={"label": label, "route": route, "order_index": orden, "is_active": True}
            )
            for sub_orden, (sub_name, sub_label, sub_route) in enumerate(subs, start=1):
                Submenu.objects.update_or_create(
                    name=sub_name,
                    defaults={
                        "menu": menu, "label": sub_label, "route": sub_route,
                        "level": 1, "order_index": sub_orden, "is_active": True,
                    },
                )
        self.stdout.write(self.style.SUCCESS(f"[OK] {len(MENUS)} menús sincronizados."))

        # ------------------------------------------------------------------
        # Sincronización de roles
        # ------------------------------------------------------------------
        for role_name, policies in roles.items():
            rol, created = Rol.objects.get_or_create(name=role_name)
            n = self._sync_role(rol, policies)
            self.stdout.write(
                self.style.SUCCESS(
                    f"[OK] Rol '{role_name}' {'creado' if created else 'actualizado'} con {n} permisos."
                )
            )

        self.stdout.write(self.style.SUCCESS("Roles, menús y permisos sembrados correctamente."))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _sync_role(self, rol: Rol, policies: Dict[str, MenuPolicy]) -> int:
        """Reemplaza los permisos del rol por los de la política."""
        RoleMenuPermission.objects.filter(rol=rol).delete()
        RoleSubmenuPermission.objects.filter(rol=rol).delete()

        n = 0
        for menu in Menu.objects.filter(name__in=policies.keys()).prefetch_related("submenus"):
            policy = policies[menu.name]
            RoleMenuPermission.objects.create(rol=rol, menu=menu, **policy.as_fields())
            n += 1
            if not policy.submenus:
                continue
            for sub in menu.submenus.all():
                RoleSubmenuPermission.objects.create(rol=rol, submenu=sub, **policy.as_fields())
                n += 1
        return n
