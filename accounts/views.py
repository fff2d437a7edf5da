from django.contrib.auth import get_user_model
from django.contrib.auth.mixins import LoginRequiredMixin
from django.core.exceptions import PermissionDenied
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views import View

from accounts.models import Menu, Submenu
from accounts.services.permisos import (
    ROLE_INHERITED,
    Accion,
    Flags,
    alternar_permiso_usuario,
    es_admin,
    menus_visibles,
    resolutor_submenus,
)


PERMISO_TOTAL = Flags(ver=True, crear=True, editar=True, eliminar=True)


def _acciones(flags: Flags, origen: str) -> dict:
    return {
        "can_view": flags.ver,
        "can_create": flags.crear,
        "can_edit": flags.editar,
        "can_delete": flags.eliminar,
        "origen": origen,
    }


class MisMenusView(LoginRequiredMixin, View):
    """Menús y submenús visibles para el usuario en sesión, con sus acciones efectivas."""

    def get(self, request):
        user = request.user
        admin = es_admin(user)
        subs = resolutor_submenus(user)
        data = []
        for m in menus_visibles(user):
            submenus = []
            for s in Submenu.objects.filter(menu_id=m.id, is_active=True).order_by("order_index", "name"):
                if admin:
                    flags, origen = PERMISO_TOTAL, ROLE_INHERITED
                else:
                    p = subs.permiso(s.pk)
                    flags, origen = p.flags, p.origen
                if not flags.ver:
                    continue
                submenus.append({
                    "id": s.id,
                    "name": s.name,
                    "label": s.label,
                    "route": s.route,
                    **_acciones(flags, origen),
                })
            data.append({
                "id": m.id,
                "name": m.name,
                "label": m.label,
                "route": m.route,
                **_acciones(m.flags, m.origen),
                "submenus": submenus,
            })
        return JsonResponse({"results": data})


class AlternarPermisoView(LoginRequiredMixin, View):
    """POST user_id, tipo (menu|submenu), entidad_id, accion (view|create|edit|delete)."""

    def post(self, request):
        if not es_admin(request.user):
            raise PermissionDenied("Solo administradores pueden editar permisos.")

        tipo = request.POST.get("tipo")
        modelo = {"menu": Menu, "submenu": Submenu}.get(tipo)
        if modelo is None:
            return JsonResponse({"error": "Tipo inválido."}, status=400)
        try:
            accion = Accion(request.POST.get("accion"))
        except ValueError:
            return JsonResponse({"error": "Acción inválida."}, status=400)

        usuario = get_object_or_404(get_user_model(), pk=request.POST.get("user_id"))
        entidad = get_object_or_404(modelo, pk=request.POST.get("entidad_id"))
        nuevo = alternar_permiso_usuario(usuario, entidad, accion)
        return JsonResponse({"ok": True, "accion": accion.value, "valor": nuevo})
