from datetime import datetime

from django.utils import timezone


def aware(*args):
    """datetime local (America/Argentina/Buenos_Aires) con zona."""
    return timezone.make_aware(datetime(*args))
