# dashboard/services/comparativa.py
"""
Comparación de dos periodos (A = actual, B = referencia).

Cada agregador es una función async pura de ParametrosComparacion.
EstadoAgregador conserva el último resultado, marca loading mientras hay
una consulta en curso y descarta respuestas viejas cuando los parámetros
cambian antes de que termine la anterior.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Awaitable, Callable, Optional, Tuple, TypeVar

from django.conf import settings
from django.core.cache import cache

from .periodos import Granularidad, RangoPeriodo, resolver_periodo

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ParametrosComparacion:
    granularidad: Granularidad
    periodo_a: str
    periodo_b: str
    sede_id: Optional[int] = None

    def rangos(self, ahora: Optional[datetime] = None) -> Tuple[RangoPeriodo, RangoPeriodo]:
        return (
            resolver_periodo(self.granularidad, self.periodo_a, ahora=ahora),
            resolver_periodo(self.granularidad, self.periodo_b, ahora=ahora),
        )

    def clave(self) -> str:
        sede = "todas" if self.sede_id is None else self.sede_id
        return f"{self.granularidad.value}|{self.periodo_a}|{self.periodo_b}|{sede}"


@dataclass(frozen=True)
class ComparacionTotales:
    total_a: float = 0.0
    total_b: float = 0.0
    loading: bool = False

    def as_dict(self) -> dict:
        return {"total_a": self.total_a, "total_b": self.total_b, "loading": self.loading}


@dataclass(frozen=True)
class ComparacionPermanencia:
    avg_dias_a: float = 0.0
    avg_dias_b: float = 0.0
    loading: bool = False

    def as_dict(self) -> dict:
        return {"avg_dias_a": self.avg_dias_a, "avg_dias_b": self.avg_dias_b, "loading": self.loading}


Agregador = Callable[[ParametrosComparacion], Awaitable[T]]


class EstadoAgregador:
    """
    Estado de un agregador para un consumidor (un panel, una vista).

    Solo se aplica el resultado de la última ejecución iniciada y solo si
    el consumidor sigue vivo. Si falla la consulta se conservan los valores
    anteriores y loading vuelve a False.
    """

    def __init__(self, agregador: Agregador, inicial):
        self.agregador = agregador
        self.resultado = replace(inicial, loading=True)
        self._generacion = 0
        self._vivo = True

    @property
    def vivo(self) -> bool:
        return self._vivo

    def cerrar(self) -> None:
        self._vivo = False

    async def ejecutar(self, params: ParametrosComparacion):
        self._generacion += 1
        generacion = self._generacion
        self.resultado = replace(self.resultado, loading=True)
        try:
            nuevo = await self.agregador(params)
        except Exception:
            logger.exception("Error en agregador %s (%s)", _nombre(self.agregador), params.clave())
            if self._vigente(generacion):
                self.resultado = replace(self.resultado, loading=False)
            return self.resultado
        if self._vigente(generacion):
            self.resultado = replace(nuevo, loading=False)
        else:
            logger.debug("Resultado descartado de %s (%s)", _nombre(self.agregador), params.clave())
        return self.resultado

    def _vigente(self, generacion: int) -> bool:
        return self._vivo and generacion == self._generacion


def _nombre(fn) -> str:
    return getattr(fn, "__name__", repr(fn))


def con_cache(prefijo: str, agregador: Agregador, ttl: Optional[int] = None) -> Agregador:
    """
    Memoiza un agregador en el cache de Django por (prefijo, parámetros).
    ttl=None toma FLOTA["CACHE_AGREGADOS_TTL"]; 0 desactiva el cache.
    """

    async def cacheado(params: ParametrosComparacion):
        segundos = settings.FLOTA.get("CACHE_AGREGADOS_TTL", 0) if ttl is None else ttl
        if not segundos:
            return await agregador(params)
        clave = f"agregados:{prefijo}:{params.clave()}"
        guardado = await cache.aget(clave)
        if guardado is not None:
            logger.debug("Cache hit %s", clave)
            return guardado
        resultado = await agregador(params)
        await cache.aset(clave, resultado, segundos)
        return resultado

    cacheado.__name__ = f"{_nombre(agregador)}_cacheado"
    return cacheado
