import logging

from django.contrib.auth.signals import user_logged_in
from django.dispatch import receiver

from accounts.models import UserProfile
from accounts.sesion import SESSION_KEY, nuevo_token

logger = logging.getLogger(__name__)


@receiver(user_logged_in)
def registrar_token_sesion(sender, request, user, **kwargs):
    """Cada login genera un token nuevo; las sesiones anteriores quedan superadas."""
    token = nuevo_token()
    perfil, _ = UserProfile.objects.get_or_create(user=user)
    perfil.session_token = token
    perfil.save(update_fields=["session_token", "updated_at"])
    if request is not None and hasattr(request, "session"):
        request.session[SESSION_KEY] = token
    logger.info("Sesión iniciada para %s", user)
