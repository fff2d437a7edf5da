# accounts/sesion.py
"""
Identidad de sesión explícita: se crea una vez al iniciar sesión y viaja
en request.sesion; no hay estado global de proceso.
"""
from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Optional

SESSION_KEY = "flota_sesion_token"


@dataclass(frozen=True)
class SesionIdentidad:
    user_id: int
    rol: str
    sede_id: Optional[int]
    token: str

    @property
    def es_admin(self) -> bool:
        return self.rol in ("admin", "superadmin", "administrador")


def nuevo_token() -> str:
    return secrets.token_hex(16)


def identidad_de(user, token: str) -> SesionIdentidad:
    perfil = getattr(user, "perfil", None)
    rol = ""
    sede_id = None
    if perfil is not None:
        rol = perfil.rol_nombre
        sede_id = perfil.sede_id
    if user.is_superuser and not rol:
        rol = "admin"
    return SesionIdentidad(user_id=user.pk, rol=rol, sede_id=sede_id, token=token)
