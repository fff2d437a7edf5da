from django.contrib.auth.mixins import LoginRequiredMixin
from django.core.exceptions import PermissionDenied

from accounts.models import Menu
from accounts.services.permisos import Accion, es_admin, puede


class MenuPermisoRequiredMixin(LoginRequiredMixin):
    """Exige can_view efectivo sobre el menú `menu_name`."""
    menu_name = "dashboard"

    def dispatch(self, request, *args, **kwargs):
        # Si no está logueado, LoginRequiredMixin redirige y termina aquí
        if not request.user.is_authenticated:
            return self.handle_no_permission()

        menu = Menu.objects.filter(name=self.menu_name, is_active=True).first()
        if menu is None:
            # Menú sin configurar: solo administradores
            if not es_admin(request.user):
                raise PermissionDenied("Menú no habilitado.")
        elif not puede(request.user, menu, Accion.VER):
            raise PermissionDenied("No tienes acceso a este menú.")

        return super().dispatch(request, *args, **kwargs)
