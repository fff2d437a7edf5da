import logging

from django.contrib.auth import logout
from django.shortcuts import redirect

from accounts.sesion import SESSION_KEY, identidad_de

logger = logging.getLogger(__name__)


class SesionIdentidadMiddleware:
    """
    Adjunta request.sesion (SesionIdentidad) a usuarios autenticados.
    Si el usuario inició sesión en otro lado, esta sesión se cierra.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.sesion = None
        user = getattr(request, "user", None)

        if user is not None and user.is_authenticated:
            token = request.session.get(SESSION_KEY, "")
            perfil = getattr(user, "perfil", None)

            if perfil is not None and perfil.session_token and token != perfil.session_token:
                logger.warning("Sesión superada por un login más reciente: %s", user)
                logout(request)
                return redirect("accounts:login")

            request.sesion = identidad_de(user, token)

        return self.get_response(request)
