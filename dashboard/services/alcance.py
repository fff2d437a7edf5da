# dashboard/services/alcance.py
from __future__ import annotations

import logging
from typing import List, Optional

from conductores.models import Conductor

logger = logging.getLogger(__name__)

TODAS = ("", "todas", "all", "null", "none")


def aplicar_filtro_sede(qs, sede_id: Optional[int], campo: str = "sede_id"):
    """Sin sede no se filtra: el usuario ve todas."""
    if sede_id is None:
        return qs
    return qs.filter(**{campo: sede_id})


async def dnis_de_sede(sede_id: Optional[int]) -> Optional[List[str]]:
    """
    DNIs de los conductores de la sede, para tablas que no tienen sede propia.
    None = sin restricción. Lista vacía = la sede no tiene conductores y el
    agregado correspondiente debe dar 0 sin consultar.
    """
    if sede_id is None:
        return None
    qs = Conductor.objects.filter(sede_id=sede_id).values_list("numero_dni", flat=True)
    dnis = [dni async for dni in qs if dni]
    logger.debug("Sede %s: %s DNIs de conductores", sede_id, len(dnis))
    return dnis


def resolver_sede(sesion, solicitada=None) -> Optional[int]:
    """
    Sede efectiva de una consulta. Los administradores pueden elegir una
    sede o "todas"; el resto queda fijo en la sede de su perfil.
    """
    if sesion is None:
        return None
    if sesion.es_admin:
        if solicitada is None or str(solicitada).strip().lower() in TODAS:
            return None
        try:
            return int(solicitada)
        except (TypeError, ValueError):
            logger.warning("Sede solicitada inválida: %r", solicitada)
            return None
    return sesion.sede_id
